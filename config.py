"""
Configuration settings for pdf-formkit.
Consolidates all constants and configuration in one place.
"""
import os


# Geometry
# Placeholder rectangle (x0, y0, x1, y1) for fields that carry no /Rect
DEFAULT_RECT = (0.0, 0.0, 100.0, 20.0)

# AcroForm field flag bits (/Ff)
READ_ONLY_FLAG = 0x1
REQUIRED_FLAG = 0x2
MULTILINE_FLAG = 0x1000  # bit 13, text fields
RADIO_FLAG = 0x8000      # bit 16, button fields

# Value tokens
CHECKBOX_TRUE_TOKENS = {"yes", "true", "1"}
CHECKBOX_ON_TOKEN = "/Yes"
CHECKBOX_OFF_TOKEN = "/Off"
CHECKBOX_READ_CHECKED = "Yes"
CHECKBOX_READ_UNCHECKED = "Off"

# Naming
NAME_SEPARATOR = "."
FILLED_SUFFIX = "_filled"

# Logging Configuration
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_LEVEL = os.getenv("PDF_FORMKIT_LOG_LEVEL", "INFO")
# JSON-lines record per fill operation; unset disables it
OPERATION_LOG_FILE = os.getenv("PDF_FORMKIT_OPERATION_LOG") or None

# Error Messages
ERROR_MESSAGES = {
    'missing_file': 'PDF file not found',
    'not_pdf': 'Not a PDF file',
    'encrypted_pdf': 'Encrypted PDF not supported',
    'parse_failed': 'Failed to parse PDF',
    'not_acroform': 'PDF has no AcroForm',
    'no_fields_applied': 'No form fields were modified',
    'fill_failed': 'Failed to fill PDF form',
    'persist_failed': 'Failed to save filled PDF',
}

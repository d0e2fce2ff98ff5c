import json, time, threading, logging
from typing import Dict, Any, Optional

from config import LOG_FORMAT, LOG_LEVEL, OPERATION_LOG_FILE

_LOG_LOCK = threading.Lock()
_CONFIGURED = False


def configure_logging(level: Optional[str] = None) -> logging.Logger:
    """Attach a single formatted stream handler to the package logger."""
    global _CONFIGURED
    logger = logging.getLogger("pdf_formkit")
    with _LOG_LOCK:
        if not _CONFIGURED:
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter(LOG_FORMAT))
            logger.addHandler(handler)
            _CONFIGURED = True
        logger.setLevel((level or LOG_LEVEL).upper())
    return logger


def log_fill_operation(source: str, output: str, strategy: str, summary: Dict[str, Any],
                       started_ts: float, catalog_hash: Optional[str] = None,
                       log_file: Optional[str] = None):
    path = log_file or OPERATION_LOG_FILE
    if not path:
        return
    try:
        rec = {
            "ts": time.time(),
            "duration_ms": round((time.time() - started_ts) * 1000, 2),
            "source": source,
            "output": output,
            "strategy": strategy,
            "summary_meta": {
                "applied_count": len(summary.get("applied", {})) if isinstance(summary, dict) else None,
                "unknown_count": len(summary.get("unknown_fields", [])) if isinstance(summary, dict) else None,
                "failed_count": len(summary.get("failed", {})) if isinstance(summary, dict) else None,
                "catalog_hash": catalog_hash,
            }
        }
        line = json.dumps(rec, ensure_ascii=False)
        with _LOG_LOCK:
            with open(path, "a", encoding="utf-8") as f:
                f.write(line + "\n")
    except Exception:
        pass

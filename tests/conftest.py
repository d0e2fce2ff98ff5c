"""Pytest configuration and shared fixtures.

Form PDFs are assembled in memory from pypdf generic objects; nothing binary
is checked in.
"""
import pytest
from pypdf import PdfWriter
from pypdf.generic import (
    ArrayObject,
    BooleanObject,
    DecodedStreamObject,
    DictionaryObject,
    FloatObject,
    IndirectObject,
    NameObject,
    NumberObject,
    PdfObject,
    TextStringObject,
)

from pdf_formkit.graph import FormGraph, Mode

MULTILINE = 0x1000
RADIO = 0x8000
COMBO = 0x20000


def _key(k):
    return NameObject(k if k.startswith("/") else "/" + k)


def pdf_value(v):
    """Python value -> pypdf object. Strings starting with '/' become names."""
    if isinstance(v, PdfObject):
        return v
    if isinstance(v, bool):
        return BooleanObject(v)
    if isinstance(v, int):
        return NumberObject(v)
    if isinstance(v, float):
        return FloatObject(v)
    if isinstance(v, str):
        return NameObject(v) if v.startswith("/") else TextStringObject(v)
    if isinstance(v, (list, tuple)):
        return ArrayObject([pdf_value(x) for x in v])
    if isinstance(v, dict):
        return DictionaryObject({_key(k): pdf_value(x) for k, x in v.items()})
    raise TypeError(f"unsupported value {v!r}")


class FormBuilder:
    """One-page document with an /AcroForm whose fields are added one at a time."""

    def __init__(self):
        self.writer = PdfWriter()
        self.page = self.writer.add_blank_page(612, 792)
        self.fields = ArrayObject()
        self.annots = ArrayObject()
        self.page[NameObject("/Annots")] = self.annots
        self.acro_form = DictionaryObject({
            NameObject("/Fields"): self.fields,
            NameObject("/DA"): TextStringObject("/Helv 0 Tf 0 g"),
        })
        self.writer._root_object[NameObject("/AcroForm")] = self.acro_form

    def appearance(self, *states):
        normal = DictionaryObject()
        for state in states:
            stream = DecodedStreamObject()
            stream.set_data(b"")
            stream[NameObject("/Type")] = NameObject("/XObject")
            stream[NameObject("/Subtype")] = NameObject("/Form")
            stream[NameObject("/BBox")] = pdf_value([0, 0, 10, 10])
            normal[_key(state)] = self.writer._add_object(stream)
        return DictionaryObject({NameObject("/N"): normal})

    def add(self, parent=None, widget=True, **entries) -> IndirectObject:
        node = DictionaryObject({_key(k): pdf_value(v) for k, v in entries.items()})
        if widget:
            node[NameObject("/Type")] = NameObject("/Annot")
            node[NameObject("/Subtype")] = NameObject("/Widget")
            node[NameObject("/P")] = self.page.indirect_reference
        ref = self.writer._add_object(node)
        if parent is None:
            self.fields.append(ref)
        else:
            node[NameObject("/Parent")] = parent
            container = parent.get_object()
            if "/Kids" not in container:
                container[NameObject("/Kids")] = ArrayObject()
            container["/Kids"].append(ref)
        if widget:
            self.annots.append(ref)
        return ref

    def text(self, name, parent=None, value=None, flags=None, rect=(50, 700, 250, 720)):
        entries = {"T": name, "FT": "/Tx"}
        if rect is not None:
            entries["Rect"] = list(rect)
        if value is not None:
            entries["V"] = value
        if flags is not None:
            entries["Ff"] = flags
        return self.add(parent=parent, **entries)

    def checkbox(self, name, parent=None, value="/Off", on="/Yes", rect=(50, 650, 62, 662)):
        return self.add(parent=parent, T=name, FT="/Btn", V=value, AS=value,
                        Rect=list(rect), AP=self.appearance(on, "/Off"))

    def combo(self, name, options, parent=None, value=None, rect=(50, 600, 250, 620)):
        entries = {"T": name, "FT": "/Ch", "Ff": COMBO, "Opt": options, "Rect": list(rect)}
        if value is not None:
            entries["V"] = value
        return self.add(parent=parent, **entries)

    def radio_group(self, name, states, parent=None, value=None):
        group = self.add(parent=parent, widget=False, T=name, FT="/Btn", Ff=RADIO)
        if value is not None:
            group.get_object()[NameObject("/V")] = NameObject(value)
        for i, state in enumerate(states):
            x = 50 + 20 * i
            self.add(parent=group, Rect=[x, 550, x + 12, 562],
                     AS=state if value == state else "/Off",
                     AP=self.appearance(state, "/Off"))
        return group

    def container(self, name, parent=None):
        return self.add(parent=parent, widget=False, T=name)

    def graph(self) -> FormGraph:
        return FormGraph(self.writer, Mode.MUTATE)

    def save(self, path) -> str:
        self.writer.write(str(path))
        return str(path)


@pytest.fixture
def builder():
    return FormBuilder()


@pytest.fixture
def scenario_pdf(tmp_path):
    """Name / Agree / Color form."""
    b = FormBuilder()
    b.text("Name")
    b.checkbox("Agree")
    b.combo("Color", ["Red", "Blue"])
    return b.save(tmp_path / "scenario.pdf")


@pytest.fixture
def mixed_pdf(tmp_path):
    """Every supported kind, one container with two children, one radio group."""
    b = FormBuilder()
    b.text("Name", value="Jane")
    b.text("Comments", flags=MULTILINE, rect=(50, 400, 300, 500), value="line one\nline two")
    b.checkbox("Agree", value="/Yes")
    b.combo("Sex", [["M", "Male"], ["F", "Female"]])
    applicant = b.container("Applicant")
    b.text("First", parent=applicant, rect=(50, 300, 150, 320))
    b.text("Last", parent=applicant, rect=(160, 300, 260, 320))
    b.radio_group("Size", ["/S", "/M", "/L"], value="/M")
    return b.save(tmp_path / "mixed.pdf")

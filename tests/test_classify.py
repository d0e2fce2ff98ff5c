import pytest
from pypdf.generic import DictionaryObject, FloatObject, IndirectObject, NameObject, NumberObject, TextStringObject

from pdf_formkit.classify import (
    ClassHint,
    cached_class_hints,
    choice_options,
    classify,
    field_flags,
    load_class_hints,
)
from pdf_formkit.schema import FieldKind

from conftest import COMBO, MULTILINE, RADIO


@pytest.mark.parametrize("raw, expected", [
    (lambda w: NumberObject(4096), 4096),
    (lambda w: FloatObject(4096.0), 4096),
    (lambda w: TextStringObject(" 4096 "), 4096),
    (lambda w: w._add_object(NumberObject(32768)), 32768),
    (lambda w: TextStringObject("junk"), 0),
    (lambda w: IndirectObject(999, 0, w), 0),
])
def test_field_flags_coercion(builder, raw, expected):
    node = DictionaryObject({NameObject("/Ff"): raw(builder.writer)})
    assert field_flags(builder.graph(), node) == expected


def test_field_flags_absent_and_inherited(builder):
    parent = builder.add(widget=False, T="Group", FT="/Tx", Ff=MULTILINE)
    child = builder.add(parent=parent, T="Notes")
    graph = builder.graph()
    assert field_flags(graph, DictionaryObject()) == 0
    assert field_flags(graph, child.get_object()) == MULTILINE


@pytest.mark.parametrize("entries, expected", [
    ({"FT": "/Tx"}, FieldKind.TEXT),
    ({"FT": "/Tx", "Ff": MULTILINE}, FieldKind.MULTILINE_TEXT),
    ({"FT": "/Btn"}, FieldKind.CHECKBOX),
    ({"FT": "/Btn", "Ff": RADIO}, FieldKind.RADIO_BUTTON),
    ({"FT": "/Ch", "Ff": COMBO}, FieldKind.COMBOBOX),
    ({"FT": "/Sig"}, FieldKind.UNKNOWN),
    ({}, FieldKind.UNKNOWN),
])
def test_classify_from_flags(builder, entries, expected):
    ref = builder.add(T="Field", **entries)
    assert classify(builder.graph(), ref.get_object()) is expected


def test_classify_inherits_type_from_parent(builder):
    parent = builder.add(widget=False, T="Group", FT="/Tx", Ff=MULTILINE)
    child = builder.add(parent=parent, T="Notes")
    assert classify(builder.graph(), child.get_object()) is FieldKind.MULTILINE_TEXT


def test_hint_wins_over_flags(builder):
    ref = builder.text("Field")
    graph = builder.graph()
    assert classify(graph, ref.get_object(), ClassHint(FieldKind.CHECKBOX)) is FieldKind.CHECKBOX
    assert classify(graph, ref.get_object(), ClassHint(FieldKind.TEXT, multiline=True)) is FieldKind.MULTILINE_TEXT


def test_choice_options_shapes(builder):
    ref = builder.combo("Pick", ["A", ["b", "Bee"], ["c"], 5])
    assert choice_options(builder.graph(), ref.get_object()) == [("A", "A"), ("b", "Bee"), ("c", "c")]


def test_choice_options_missing(builder):
    ref = builder.text("Plain")
    assert choice_options(builder.graph(), ref.get_object()) == []


def test_load_class_hints_from_widgets(mixed_pdf):
    hints = load_class_hints(mixed_pdf)
    assert hints["Name"] == ClassHint(FieldKind.TEXT, False)
    assert hints["Comments"] == ClassHint(FieldKind.TEXT, True)
    assert hints["Agree"].kind is FieldKind.CHECKBOX
    assert hints["Sex"].kind is FieldKind.COMBOBOX
    assert hints["Size"].kind is FieldKind.RADIO_BUTTON
    assert "Applicant.First" in hints


def test_load_class_hints_unreadable(tmp_path):
    path = tmp_path / "broken.pdf"
    path.write_bytes(b"not a pdf at all")
    assert load_class_hints(str(path)) == {}


def test_cached_class_hints_loads_once(mixed_pdf, tmp_path):
    assert cached_class_hints(mixed_pdf) is cached_class_hints(mixed_pdf)
    assert cached_class_hints(str(tmp_path / "absent.pdf")) == {}

import pytest
from pypdf.generic import DictionaryObject

from pdf_formkit.extract import FieldEntry
from pdf_formkit.name_index import NameIndex, last_segment, normalize_name
from pdf_formkit.schema import FieldDescriptor


def _entry(name):
    return FieldEntry(FieldDescriptor(name=name), DictionaryObject())


@pytest.fixture
def index():
    names = ["Name", "name", "Applicant.First_Name", "Spouse.First_Name", "Date of Birth"]
    return NameIndex.build([_entry(n) for n in names])


def _resolved(index, query):
    entry, tier = index.lookup_with_tier(query)
    return (entry.descriptor.name if entry else None), tier


@pytest.mark.parametrize("query, expected", [
    ("Name", ("Name", "exact")),
    ("name", ("name", "exact")),
    ("NAME", ("Name", "casefold")),
    ("applicant first name", ("Applicant.First_Name", "normalized")),
    ("date_of_birth", ("Date of Birth", "normalized")),
    ("FIRST_NAME", ("Applicant.First_Name", "segment")),
    ("Missing", (None, None)),
    ("", (None, None)),
])
def test_lookup_tiers(index, query, expected):
    assert _resolved(index, query) == expected


def test_first_entry_wins_on_collision():
    index = NameIndex.build([_entry("Name"), _entry("Name_2"), _entry("NAME")])
    assert index.lookup("name").descriptor.name == "Name"
    assert len(index) == 3


def test_contains(index):
    assert "applicant.first_name" in index
    assert "nothing here" not in index


def test_helpers():
    assert normalize_name("Date of-Birth_1") == "dateofbirth1"
    assert last_segment("a.b.c") == "c"
    assert last_segment("plain") == "plain"

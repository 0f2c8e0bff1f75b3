import pytest

from mdb_to_sql.encoding import EncodingSpec, available_encodings, encoding_by_name
from mdb_to_sql.errors import ConfigurationError
from mdb_to_sql.models import LegacyType


def test_available_encodings():
    names = available_encodings()
    assert names == sorted(names)
    assert {"cp1252", "cp850", "koi8-r", "utf-8", "iso8859-1"} <= set(names)
    assert "base64" not in names
    assert "zlib" not in names


@pytest.mark.parametrize("name, expected", [
    ("CP1252", "cp1252"),
    ("windows-1252", "cp1252"),
    ("Latin-1", "iso8859-1"),
    ("UTF8", "utf-8"),
    ("koi8_r", "koi8-r"),
    (" iso 8859 15 ", "iso8859-15"),
])
def test_encoding_by_name(name, expected):
    assert encoding_by_name(name) == expected


@pytest.mark.parametrize("name", ["klingon", "base64", "hex"])
def test_encoding_by_name_rejects(name):
    with pytest.raises(ConfigurationError):
        encoding_by_name(name)


def test_spec_enabled():
    assert not EncodingSpec().enabled
    assert EncodingSpec(text="cp1252").enabled
    assert EncodingSpec(blob="cp1252").enabled


def test_apply_only_touches_configured_columns():
    spec = EncodingSpec(text="cp1252")
    assert spec.apply(LegacyType.LONG_TEXT, "\x80") == "€"
    assert spec.apply(LegacyType.BINARY, b"\x80") == b"\x80"
    assert spec.apply(LegacyType.LONG_INT, 128) == 128
    assert spec.apply("Attachment", "\x80") == "\x80"
    assert spec.apply(LegacyType.TEXT, None) is None

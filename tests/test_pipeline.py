import pytest
from conftest import PEOPLE, FakeReader, make_table

from mdb_to_sql.encoding import EncodingSpec
from mdb_to_sql.errors import RowError
from mdb_to_sql.models import LegacyType
from mdb_to_sql.pipeline import copy_rows, decode_row

MIXED = make_table(
    "mixed",
    ("id", LegacyType.LONG_INT),
    ("label", LegacyType.TEXT),
    ("payload", LegacyType.LONG_BINARY),
)


class RecordingSpec(EncodingSpec):
    """Garde la trace des valeurs passées au décodeur."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        object.__setattr__(self, "seen", [])

    def apply(self, column_type, value):
        self.seen.append(value)
        return super().apply(column_type, value)


def test_decode_row_without_encoding_returns_copy():
    row = [1, "abc", b"\x00"]
    decoded = decode_row(MIXED, row, EncodingSpec())
    assert decoded == row
    assert decoded is not row


def test_decode_row_text_codec():
    spec = EncodingSpec(text="cp1252")
    # Octets cp1252 restitués un par un par le pilote ; 0x80 et 0x93 diffèrent de latin-1
    assert decode_row(MIXED, [1, "\x93\x80 5\x94", None], spec) == [1, "\u201c\u20ac 5\u201d", None]


def test_decode_row_raw_type_tags():
    table = make_table("t", ("label", "Text"), ("memo", "LongText"), ("payload", "LongBinary"))
    spec = EncodingSpec(text="cp1252", blob="koi8-r")
    assert decode_row(table, ["\x80", "\x93", b"\xc1"], spec) == ["\u20ac", "\u201c", "а".encode("utf-8")]


def test_decode_row_text_from_bytes():
    spec = EncodingSpec(text="cp850")
    assert decode_row(MIXED, [1, b"\x82", None], spec) == [1, "é", None]


def test_decode_row_blob_uses_blob_codec():
    spec = EncodingSpec(text="cp1252", blob="koi8-r")
    assert decode_row(MIXED, [1, "\xe9", b"\xc1"], spec) == [1, "é", "а".encode("utf-8")]


def test_decode_row_leaves_non_text_columns():
    spec = EncodingSpec(text="cp1252", blob="cp1252")
    assert decode_row(MIXED, [42, None, None], spec) == [42, None, None]


def test_decode_row_never_decodes_null():
    spec = RecordingSpec(text="cp1252", blob="koi8-r")
    decode_row(MIXED, [None, None, None], spec)
    assert spec.seen == []
    decode_row(MIXED, [7, None, b"\xc1"], spec)
    assert spec.seen == [7, b"\xc1"]


def test_decode_row_failure_names_column():
    spec = EncodingSpec(text="utf-8")
    with pytest.raises(RowError) as excinfo:
        decode_row(MIXED, [1, b"\xff\xfe\xfa", None], spec, row_number=3)
    assert excinfo.value.column == "label"
    assert excinfo.value.row == 3
    assert "'label'" in str(excinfo.value)


def test_decode_row_length_mismatch():
    with pytest.raises(RowError) as excinfo:
        decode_row(MIXED, [1, "x"], EncodingSpec(), row_number=5)
    assert excinfo.value.table == "mixed"
    assert excinfo.value.row == 5


def _create(session, table):
    columns = ", ".join(f'"{name}"' for name in table.column_names)
    session.execute(f'CREATE TABLE "{table.name}" ({columns})')


def test_copy_rows_inserts_every_row(session, make_options, inspect_db):
    rows = [(1, "Ada"), (2, "Grace"), (3, None)]
    reader = FakeReader({"a.mdb": [(PEOPLE, rows)]})
    _create(session, PEOPLE)

    with reader.open("a.mdb") as handle:
        count = copy_rows(session, make_options(), reader, handle, PEOPLE)

    assert count == 3
    assert inspect_db()["people"] == rows


def test_copy_rows_empty_table(session, make_options, inspect_db):
    reader = FakeReader({"a.mdb": [(PEOPLE, [])]})
    _create(session, PEOPLE)

    with reader.open("a.mdb") as handle:
        assert copy_rows(session, make_options(), reader, handle, PEOPLE) == 0
    assert inspect_db()["people"] == []


def test_copy_rows_read_failure_reports_row(session, make_options):
    reader = FakeReader({"a.mdb": [(PEOPLE, [(1, "Ada"), OSError("page corrompue")])]})
    _create(session, PEOPLE)

    with reader.open("a.mdb") as handle:
        with pytest.raises(RowError) as excinfo:
            copy_rows(session, make_options(), reader, handle, PEOPLE)
    assert excinfo.value.row == 2
    assert "page corrompue" in str(excinfo.value)


def test_copy_rows_insert_failure(session, make_options):
    reader = FakeReader({"a.mdb": [(PEOPLE, [(1, "Ada")])]})

    with reader.open("a.mdb") as handle:
        with pytest.raises(RowError) as excinfo:
            copy_rows(session, make_options(), reader, handle, PEOPLE)
    assert excinfo.value.table == "people"
    assert excinfo.value.row == 1


class CountingReader(FakeReader):
    """Vérifie, avant chaque ligne, que les précédentes sont déjà insérées."""

    def __init__(self, files, session):
        super().__init__(files)
        self.session = session
        self.seen_counts = []

    def rows(self, handle, table):
        for i, row in enumerate(super().rows(handle, table)):
            count = self.session.connection.execute(
                f'SELECT count(*) FROM "{table.name}"'
            ).fetchone()[0]
            self.seen_counts.append(count)
            assert count == i
            yield row


def test_copy_rows_inserts_each_row_before_reading_the_next(session, make_options, inspect_db):
    rows = [(i, f"name {i}") for i in range(5)]
    reader = CountingReader({"a.mdb": [(PEOPLE, rows)]}, session)
    _create(session, PEOPLE)

    with reader.open("a.mdb") as handle:
        assert copy_rows(session, make_options(), reader, handle, PEOPLE) == 5

    assert reader.seen_counts == [0, 1, 2, 3, 4]
    assert inspect_db()["people"] == rows

from conftest import make_table

from mdb_to_sql.dialects import Backend, get_dialect
from mdb_to_sql.models import LegacyType, Table
from mdb_to_sql.pipeline import build_insert
from mdb_to_sql.schema import build_create_table

ORDERS = make_table(
    "Order Details",
    ("OrderID", LegacyType.LONG_INT),
    ("Price", LegacyType.MONEY),
    ("Note", LegacyType.LONG_TEXT),
    ("Key", LegacyType.GUID),
)


def test_create_table_postgres():
    ddl = build_create_table(get_dialect(Backend.POSTGRES), ORDERS)
    assert ddl == (
        'CREATE TABLE "Order Details" '
        '("OrderID" INTEGER, "Price" MONEY, "Note" TEXT, "Key" UUID)'
    )


def test_create_table_mysql_with_check():
    ddl = build_create_table(get_dialect(Backend.MYSQL), ORDERS, check=True)
    assert ddl == (
        "CREATE TABLE IF NOT EXISTS `Order Details` "
        "(`OrderID` INTEGER, `Price` NUMERIC, `Note` TEXT, `Key` TEXT)"
    )


def test_create_table_unknown_type_leaves_empty_token():
    table = make_table("t", ("a", LegacyType.BYTE), ("b", "Attachment"))
    ddl = build_create_table(get_dialect(Backend.SQLITE), table)
    assert ddl == 'CREATE TABLE "t" ("a" BYTE, "b" )'


def test_create_table_without_columns():
    ddl = build_create_table(get_dialect(Backend.SQLITE), Table("empty"))
    assert ddl == 'CREATE TABLE "empty" ()'


def test_insert_and_create_share_column_order():
    dialect = get_dialect(Backend.SQLITE)
    ddl = build_create_table(dialect, ORDERS)
    insert = build_insert(dialect, ORDERS)
    ddl_columns = [part.split(" ")[0] for part in ddl[ddl.index("(") + 1:-1].split(", ")]
    insert_columns = insert[insert.index("(") + 1:insert.index(")")].split(", ")
    assert ddl_columns == insert_columns == ['"OrderID"', '"Price"', '"Note"', '"Key"']


def test_insert_postgres_numbered_placeholders():
    assert build_insert(get_dialect(Backend.POSTGRES), ORDERS) == (
        'INSERT INTO "Order Details" ("OrderID", "Price", "Note", "Key") '
        'VALUES ($1, $2, $3, $4)'
    )


def test_insert_mysql_repeated_placeholder():
    table = make_table("we`ird", ("a`b", LegacyType.TEXT), ("c", LegacyType.INT))
    assert build_insert(get_dialect(Backend.MYSQL), table) == (
        "INSERT INTO `we``ird` (`a``b`, `c`) VALUES (?, ?)"
    )

import os
import sqlite3
from contextlib import contextmanager

import pytest

from mdb_to_sql.config import CopyOptions
from mdb_to_sql.database import connect, uri_to_dsn
from mdb_to_sql.encoding import EncodingSpec
from mdb_to_sql.models import Column, LegacyType, Table, TransactionScope


class FakeReader:
    """
    Lecteur en mémoire.

    `files` associe un chemin à une liste de (Table, lignes). Une exception
    placée dans les lignes est levée au moment où elle est lue.
    """

    def __init__(self, files):
        self.files = files
        self.opened = []
        self.read = []

    @contextmanager
    def open(self, path):
        self.opened.append(path)
        yield self.files[path]

    def list_tables(self, handle):
        return [table for table, _ in handle]

    def rows(self, handle, table):
        self.read.append(table.name)
        for table_, rows in handle:
            if table_.name != table.name:
                continue
            for row in rows:
                if isinstance(row, Exception):
                    raise row
                yield list(row)


def make_table(name, *columns, system=False):
    return Table(name, tuple(Column(n, t) for n, t in columns), system=system)


PEOPLE = make_table("people", ("id", LegacyType.LONG_INT), ("name", LegacyType.TEXT))


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "out.db")


@pytest.fixture
def make_options(db_path):
    def factory(scope=TransactionScope.FULL, files=("a.mdb",), encoding=EncodingSpec(), check_table=False):
        uri = f"sqlite3://{db_path}"
        backend, dsn = uri_to_dsn(uri)
        return CopyOptions(
            database_uri=uri,
            files=tuple(files),
            backend=backend,
            dsn=dsn,
            transaction=scope,
            encoding=encoding,
            check_table=check_table,
        )
    return factory


@pytest.fixture
def session(make_options):
    options = make_options()
    session = connect(options.backend, options.dsn)
    yield session
    session.close()


@pytest.fixture
def inspect_db(db_path):
    """Retourne {table: lignes} pour la base SQLite produite."""
    def inspect():
        if not os.path.exists(db_path):
            return {}
        conn = sqlite3.connect(db_path)
        try:
            names = [row[0] for row in conn.execute(
                "SELECT name FROM sqlite_master WHERE type = 'table' ORDER BY name"
            )]
            return {
                name: conn.execute(f'SELECT * FROM "{name}" ORDER BY rowid').fetchall()
                for name in names
            }
        finally:
            conn.close()
    return inspect

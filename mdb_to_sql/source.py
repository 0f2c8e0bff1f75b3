"""
Lecture des fichiers Access source.

Le moteur de copie ne dépend que du protocole SourceReader ; AccessReader
l'implémente au-dessus d'un pilote ODBC Access via pyodbc.
"""

import logging
import os
from contextlib import contextmanager
from typing import Any, Iterator, List, Protocol

from .errors import SourceError
from .models import Column, ColumnType, LegacyType, Table

logger = logging.getLogger(__name__)

DEFAULT_ODBC_DRIVER = "Microsoft Access Driver (*.mdb, *.accdb)"

# Noms de types renvoyés par SQLColumns pour le pilote Access
ODBC_TYPES = {
    "BIT": LegacyType.BOOL,
    "BYTE": LegacyType.BYTE,
    "SMALLINT": LegacyType.INT,
    "INTEGER": LegacyType.LONG_INT,
    "COUNTER": LegacyType.LONG_INT,
    "CURRENCY": LegacyType.MONEY,
    "REAL": LegacyType.FLOAT,
    "DOUBLE": LegacyType.DOUBLE,
    "DATETIME": LegacyType.DATETIME,
    "BINARY": LegacyType.BINARY,
    "VARBINARY": LegacyType.BINARY,
    "CHAR": LegacyType.TEXT,
    "VARCHAR": LegacyType.TEXT,
    "LONGBINARY": LegacyType.LONG_BINARY,
    "LONGCHAR": LegacyType.LONG_TEXT,
    "GUID": LegacyType.GUID,
    "DECIMAL": LegacyType.NUMERIC,
    "NUMERIC": LegacyType.NUMERIC,
}


class SourceReader(Protocol):
    """Interface attendue par le moteur de copie pour lire un fichier source."""

    def open(self, path: str):
        """Context manager qui fournit un handle sur le fichier."""

    def list_tables(self, handle) -> List[Table]:
        """Tables du fichier, dans l'ordre du fichier, tables système comprises."""

    def rows(self, handle, table: Table) -> Iterator[List[Any]]:
        """Itérateur paresseux, à passage unique, sur les lignes d'une table."""


def legacy_type(odbc_type_name: str) -> ColumnType:
    """Convertit un nom de type ODBC ; un type inconnu est conservé tel quel."""
    return ODBC_TYPES.get(odbc_type_name.upper(), odbc_type_name)


def quote_access(identifier: str) -> str:
    return "[" + identifier.replace("]", "]]") + "]"


class AccessReader:
    """Lecteur de fichiers .mdb / .accdb via pyodbc."""

    def __init__(self, driver: str = DEFAULT_ODBC_DRIVER):
        self.driver = driver

    def connection_string(self, path: str) -> str:
        return f"DRIVER={{{self.driver}}};DBQ={os.path.abspath(path)};"

    @contextmanager
    def open(self, path: str):
        if not os.path.isfile(path):
            raise SourceError(f"le fichier {path!r} n'existe pas")
        try:
            import pyodbc
        except ImportError as e:
            raise SourceError(f"pyodbc indisponible: {e}") from e
        try:
            conn = pyodbc.connect(self.connection_string(path), readonly=True)
        except pyodbc.Error as e:
            raise SourceError(f"impossible d'ouvrir {path!r}: {e}") from e
        try:
            yield conn
        finally:
            conn.close()

    def list_tables(self, handle) -> List[Table]:
        cursor = handle.cursor()
        try:
            # Lister d'abord les noms : cursor.columns() interrompt l'itération de cursor.tables()
            entries = [
                (row.table_name, row.table_type)
                for row in cursor.tables()
                if row.table_type in ("TABLE", "SYSTEM TABLE")
            ]
            tables = []
            for name, table_type in entries:
                columns = sorted(cursor.columns(table=name), key=lambda row: row.ordinal_position)
                tables.append(Table(
                    name=name,
                    columns=tuple(Column(row.column_name, legacy_type(row.type_name)) for row in columns),
                    system=table_type == "SYSTEM TABLE" or name.startswith("MSys"),
                ))
        except Exception as e:
            raise SourceError(f"impossible de lister les tables: {e}") from e
        finally:
            cursor.close()
        logger.debug(f"{len(tables)} tables trouvées")
        return tables

    def rows(self, handle, table: Table) -> Iterator[List[Any]]:
        if not table.columns:
            return
        columns = ", ".join(quote_access(name) for name in table.column_names)
        cursor = handle.cursor()
        try:
            cursor.execute(f"SELECT {columns} FROM {quote_access(table.name)}")
            for row in cursor:
                yield list(row)
        finally:
            cursor.close()

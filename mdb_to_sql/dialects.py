"""
Syntaxe SQL propre à chaque base de destination.

Chaque backend a son propre objet Dialect, choisi une fois au démarrage à
partir de l'URI de destination puis transmis aux modules qui génèrent du SQL.
"""

from enum import Enum
from types import MappingProxyType
from typing import Mapping

from .models import ColumnType, LegacyType


class Backend(str, Enum):
    """Familles de bases de données de destination."""

    POSTGRES = "postgres"
    SQLITE = "sqlite3"
    MYSQL = "mysql"


T = LegacyType

TYPE_MAP: Mapping[Backend, Mapping[LegacyType, str]] = MappingProxyType({
    Backend.POSTGRES: MappingProxyType({
        T.BOOL: "BOOL",
        T.BYTE: "SMALLINT",
        T.INT: "INTEGER",
        T.LONG_INT: "INTEGER",
        T.MONEY: "MONEY",
        T.FLOAT: "REAL",
        T.DOUBLE: "DOUBLE",
        T.DATETIME: "TIMESTAMP",
        T.BINARY: "BYTEA",
        T.TEXT: "TEXT",
        T.LONG_BINARY: "BYTEA",
        T.LONG_TEXT: "TEXT",
        T.GUID: "UUID",
        T.NUMERIC: "NUMERIC",
    }),
    Backend.SQLITE: MappingProxyType({
        T.BOOL: "BOOL",
        T.BYTE: "BYTE",
        T.INT: "INTEGER",
        T.LONG_INT: "INTEGER",
        T.MONEY: "NUMERIC",
        T.FLOAT: "REAL",
        T.DOUBLE: "REAL",
        T.DATETIME: "DATETIME",
        T.BINARY: "BLOB",
        T.TEXT: "TEXT",
        T.LONG_BINARY: "BLOB",
        T.LONG_TEXT: "TEXT",
        T.GUID: "TEXT",
        T.NUMERIC: "NUMERIC",
    }),
    Backend.MYSQL: MappingProxyType({
        T.BOOL: "BOOL",
        T.BYTE: "TINYINT",
        T.INT: "INTEGER",
        T.LONG_INT: "INTEGER",
        T.MONEY: "NUMERIC",
        T.FLOAT: "FLOAT",
        T.DOUBLE: "DOUBLE",
        T.DATETIME: "DATETIME",
        T.BINARY: "BLOB",
        T.TEXT: "TEXT",
        T.LONG_BINARY: "BLOB",
        T.LONG_TEXT: "TEXT",
        T.GUID: "TEXT",
        T.NUMERIC: "NUMERIC",
    }),
})

del T


class Dialect:
    """Règles de quoting, de types et de paramètres d'un backend."""

    backend: Backend
    quote_char = '"'

    def quote(self, identifier: str) -> str:
        q = self.quote_char
        return q + identifier.replace(q, q + q) + q

    def type_name(self, legacy_type: ColumnType) -> str:
        """
        Retourne le type SQL correspondant à un type Access.

        Un type absent de la table de correspondance donne une chaîne vide ;
        c'est la base de destination qui décide alors du sort du CREATE TABLE.
        """
        try:
            legacy_type = LegacyType(legacy_type)
        except ValueError:
            return ""
        return TYPE_MAP[self.backend].get(legacy_type, "")

    def placeholder(self, ordinal: int) -> str:
        return "?"


class PostgresDialect(Dialect):
    backend = Backend.POSTGRES

    def placeholder(self, ordinal: int) -> str:
        return f"${ordinal}"


class SQLiteDialect(Dialect):
    backend = Backend.SQLITE


class MySQLDialect(Dialect):
    backend = Backend.MYSQL
    quote_char = "`"


_DIALECTS = MappingProxyType({
    Backend.POSTGRES: PostgresDialect(),
    Backend.SQLITE: SQLiteDialect(),
    Backend.MYSQL: MySQLDialect(),
})


def get_dialect(backend: Backend) -> Dialect:
    return _DIALECTS[Backend(backend)]


def quote(backend: Backend, identifier: str) -> str:
    return get_dialect(backend).quote(identifier)


def type_name(backend: Backend, legacy_type: ColumnType) -> str:
    return get_dialect(backend).type_name(legacy_type)


def placeholder(backend: Backend, ordinal: int) -> str:
    return get_dialect(backend).placeholder(ordinal)

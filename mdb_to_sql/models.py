"""
Structures de données décrivant le contenu d'un fichier source.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Tuple, Union


class LegacyType(str, Enum):
    """Types de colonnes d'un fichier Access."""

    BOOL = "Bool"
    BYTE = "Byte"
    INT = "Int"
    LONG_INT = "LongInt"
    MONEY = "Money"
    FLOAT = "Float"
    DOUBLE = "Double"
    DATETIME = "DateTime"
    BINARY = "Binary"
    TEXT = "Text"
    LONG_BINARY = "LongBinary"
    LONG_TEXT = "LongText"
    GUID = "GUID"
    NUMERIC = "Numeric"

    @property
    def is_text(self) -> bool:
        return self in (LegacyType.TEXT, LegacyType.LONG_TEXT)

    @property
    def is_binary(self) -> bool:
        return self in (LegacyType.BINARY, LegacyType.LONG_BINARY)


class TransactionScope(str, Enum):
    """Granularité des transactions pour une exécution."""

    FULL = "full"
    FILE = "file"
    TABLE = "table"


# Un type inconnu du lecteur est conservé tel quel sous forme de chaîne
ColumnType = Union[LegacyType, str]


@dataclass(frozen=True)
class Column:
    name: str
    type: ColumnType


@dataclass(frozen=True)
class Table:
    """
    Table d'un fichier source.

    L'ordre de `columns` est celui du fichier et sert à la fois pour le
    CREATE TABLE et pour l'INSERT.
    """

    name: str
    columns: Tuple[Column, ...] = ()
    system: bool = False

    @property
    def column_names(self) -> Tuple[str, ...]:
        return tuple(column.name for column in self.columns)

"""
Exceptions levées par le moteur de copie.

Toutes dérivent de MigrationError, ce qui permet à la ligne de commande de
distinguer une erreur attendue (message d'une ligne, code de sortie 1) d'un
bug (trace complète).
"""

from typing import Optional


class MigrationError(Exception):
    """Erreur de base de mdb-to-sql."""


class ConfigurationError(MigrationError):
    """Arguments, URI de destination ou encodage invalides."""


class DatabaseConnectionError(MigrationError):
    """Impossible d'ouvrir ou de vérifier la connexion de destination."""


class SourceError(MigrationError):
    """Impossible d'ouvrir ou de lire un fichier source."""


class TransactionScopeError(MigrationError):
    """Aucune transaction disponible là où la portée en exige une."""


class CancellationError(MigrationError):
    """La copie a été interrompue par un signal."""


class SchemaError(MigrationError):
    """Échec du CREATE TABLE d'une table."""

    def __init__(self, table: str, message: str):
        super().__init__(f"table {table!r}: {message}")
        self.table = table


class RowError(MigrationError):
    """Échec de lecture, de décodage ou d'insertion d'une ligne."""

    def __init__(self, table: str, message: str, row: Optional[int] = None,
                 column: Optional[str] = None):
        location = f"table {table!r}"
        if row is not None:
            location += f", ligne {row}"
        if column is not None:
            location += f", colonne {column!r}"
        super().__init__(f"{location}: {message}")
        self.table = table
        self.row = row
        self.column = column

"""
MDB to SQL

Un outil pour copier les tables de fichiers Access (.mdb, .accdb) vers
PostgreSQL, SQLite ou MySQL.
"""

import logging

from .rich_logging import setup_logger

__version__ = "1.0.0"

PROG_NAME = "mdb-to-sql"

# Configuration du logger moderne
logger = setup_logger("mdb_to_sql", logging.INFO)

# Import des modules après la configuration du logger
from .cancellation import CancellationSupervisor, CancellationToken
from .config import CopyOptions, build_options, load_config
from .copier import copy_all, copy_file, copy_table
from .database import Session, connect, uri_to_dsn
from .dialects import Backend, get_dialect
from .encoding import EncodingSpec
from .errors import (
    CancellationError,
    ConfigurationError,
    DatabaseConnectionError,
    MigrationError,
    RowError,
    SchemaError,
    SourceError,
    TransactionScopeError,
)
from .models import Column, LegacyType, Table, TransactionScope
from .source import AccessReader, SourceReader

"""
Coordination des transactions pendant la copie.

Trois portées sont possibles :

* full  : une seule transaction pour tous les fichiers ;
* file  : une transaction par fichier source ;
* table : une transaction par table.

Dans tous les cas la première erreur arrête l'exécution complète. Seule la
portée du rollback change : toute l'exécution, le fichier en cours ou la
table en cours. Les fichiers ou tables déjà validés le restent ; aucun
fichier ni aucune table suivants ne sont tentés.
"""

import logging
from typing import Optional

from .config import CopyOptions
from .database import Session, Transaction
from .dialects import get_dialect
from .errors import MigrationError, SchemaError, TransactionScopeError
from .models import Table, TransactionScope
from .pipeline import copy_rows
from .schema import build_create_table
from .source import SourceReader

logger = logging.getLogger(__name__)


def _rollback(transaction: Transaction, label: str) -> None:
    """Annule une transaction sans masquer l'erreur qui a provoqué l'annulation."""
    logger.info(f"rollback {label}")
    try:
        transaction.rollback()
    except Exception as e:
        logger.error(f"Échec du rollback {label}: {e}")


def copy_all(session: Session, options: CopyOptions, reader: SourceReader) -> int:
    """
    Copie tous les fichiers source vers la base de destination.

    Args:
        session: Session de destination
        options: Options de la copie
        reader: Lecteur des fichiers source

    Returns:
        Le nombre total de lignes copiées

    Raises:
        MigrationError: À la première erreur, après le rollback de la portée active
    """
    transaction = None
    if options.transaction is TransactionScope.FULL:
        logger.info("begin")
        transaction = session.begin()

    total = 0
    try:
        for path in options.files:
            total += copy_file(session, transaction, options, reader, path)
        if transaction is not None:
            logger.info("commit")
            transaction.commit()
    except BaseException:
        if transaction is not None and transaction.active:
            _rollback(transaction, "run")
        raise
    return total


def copy_file(session: Session, transaction: Optional[Transaction], options: CopyOptions,
              reader: SourceReader, path: str) -> int:
    """
    Copie les tables non système d'un fichier source.

    En portée `file`, une transaction est ouverte pour le fichier, sauf si une
    transaction englobante est fournie : elle est alors réutilisée telle
    quelle et reste sous la responsabilité de l'appelant.

    Returns:
        Le nombre de lignes copiées depuis ce fichier
    """
    owned = None
    if transaction is None and options.transaction is TransactionScope.FILE:
        logger.info(f"begin {path}")
        transaction = owned = session.begin(path)

    count = 0
    try:
        with reader.open(path) as handle:
            for table in reader.list_tables(handle):
                if table.system:
                    logger.debug(f"{path}@{table.name}: table système ignorée")
                    continue
                count += copy_table(session, transaction, options, reader, handle, path, table)
        if owned is not None:
            logger.info(f"commit {path}")
            owned.commit()
    except BaseException:
        if owned is not None and owned.active:
            _rollback(owned, path)
        raise
    return count


def copy_table(session: Session, transaction: Optional[Transaction], options: CopyOptions,
               reader: SourceReader, handle, path: str, table: Table) -> int:
    """
    Crée une table dans la base de destination puis y copie ses lignes.

    Returns:
        Le nombre de lignes copiées

    Raises:
        TransactionScopeError: Si aucune transaction n'est fournie hors portée `table`
        SchemaError: Si le CREATE TABLE échoue
        RowError: Si une ligne ne peut être copiée
    """
    label = f"{path}@{table.name}"
    owned = None
    if transaction is None:
        if options.transaction is not TransactionScope.TABLE:
            # Inatteignable avec des options valides
            raise TransactionScopeError(f"aucune transaction disponible pour {label}")
        transaction = owned = session.begin(label)
        logger.info(f"begin {label}")

    try:
        ddl = build_create_table(get_dialect(options.backend), table, check=options.check_table)
        if options.log_query:
            logger.info(ddl)
        try:
            session.execute(ddl)
        except MigrationError:
            raise
        except Exception as e:
            raise SchemaError(table.name, str(e)) from e

        count = copy_rows(session, options, reader, handle, table)

        if owned is not None:
            logger.info(f"commit {label}")
            owned.commit()
    except BaseException:
        if owned is not None and owned.active:
            _rollback(owned, label)
        raise

    logger.info(f"{label}: {count} lignes copiées")
    return count

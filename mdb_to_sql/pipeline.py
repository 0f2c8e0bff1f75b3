"""
Copie des lignes d'une table : INSERT préparé, décodage, exécution ligne à ligne.
"""

import logging
from typing import Any, List, Sequence

from .database import Session
from .dialects import Dialect, get_dialect
from .encoding import EncodingSpec
from .errors import MigrationError, RowError
from .models import Table

logger = logging.getLogger(__name__)


def build_insert(dialect: Dialect, table: Table) -> str:
    """
    Construit l'INSERT paramétré d'une table.

    Les colonnes et les paramètres suivent l'ordre des colonnes de la table,
    le même que celui du CREATE TABLE.
    """
    columns = ", ".join(dialect.quote(name) for name in table.column_names)
    placeholders = ", ".join(
        dialect.placeholder(ordinal) for ordinal in range(1, len(table.columns) + 1)
    )
    return f"INSERT INTO {dialect.quote(table.name)} ({columns}) VALUES ({placeholders})"


def decode_row(table: Table, row: Sequence[Any], encoding: EncodingSpec,
               row_number: int = 0) -> List[Any]:
    """
    Applique les codecs configurés aux champs texte et binaires d'une ligne.

    Args:
        table: Table dont provient la ligne
        row: Valeurs alignées sur les colonnes de la table
        encoding: Codecs texte / binaire
        row_number: Numéro de la ligne, pour les messages d'erreur

    Returns:
        Une nouvelle liste de valeurs

    Raises:
        RowError: Si la ligne n'a pas le bon nombre de champs ou si un champ
            ne peut pas être décodé
    """
    if len(row) != len(table.columns):
        raise RowError(
            table.name,
            f"{len(row)} valeurs pour {len(table.columns)} colonnes",
            row=row_number,
        )
    fields = list(row)
    if not encoding.enabled:
        return fields
    for i, column in enumerate(table.columns):
        if fields[i] is None:
            continue
        try:
            fields[i] = encoding.apply(column.type, fields[i])
        except (UnicodeError, LookupError, TypeError, AttributeError) as e:
            raise RowError(table.name, f"décodage impossible: {e}", row=row_number, column=column.name) from e
    return fields


def copy_rows(session: Session, options, reader, handle, table: Table) -> int:
    """
    Copie toutes les lignes d'une table dans la transaction en cours.

    L'INSERT est préparé une seule fois ; les lignes sont lues, décodées et
    insérées une par une, sans jamais charger la table en mémoire.

    Args:
        session: Session de destination
        options: Options de la copie (CopyOptions)
        reader: Lecteur du fichier source
        handle: Handle du fichier ouvert par le lecteur
        table: Table à copier

    Returns:
        Le nombre de lignes insérées

    Raises:
        RowError: Si une ligne ne peut être lue, décodée ou insérée
        CancellationError: Si la copie est annulée
    """
    sql = build_insert(get_dialect(options.backend), table)
    if options.log_query:
        logger.info(sql)

    try:
        statement = session.prepare(sql)
    except MigrationError:
        raise
    except Exception as e:
        raise RowError(table.name, f"préparation de l'INSERT impossible: {e}") from e

    count = 0
    try:
        try:
            rows = iter(reader.rows(handle, table))
        except MigrationError:
            raise
        except Exception as e:
            raise RowError(table.name, f"lecture impossible: {e}") from e

        while True:
            try:
                row = next(rows)
            except StopIteration:
                break
            except MigrationError:
                raise
            except Exception as e:
                raise RowError(table.name, f"lecture impossible: {e}", row=count + 1) from e

            fields = decode_row(table, row, options.encoding, row_number=count + 1)
            try:
                statement.execute(fields)
            except MigrationError:
                raise
            except Exception as e:
                raise RowError(table.name, str(e), row=count + 1) from e
            count += 1
    except BaseException:
        statement.discard()
        raise

    try:
        statement.close()
    except MigrationError:
        raise
    except Exception as e:
        raise RowError(table.name, f"libération de l'INSERT impossible: {e}") from e
    return count

"""
Génération du CREATE TABLE d'une table source.
"""

from .dialects import Dialect
from .models import Table


def build_create_table(dialect: Dialect, table: Table, check: bool = False) -> str:
    """
    Construit l'instruction CREATE TABLE d'une table.

    Args:
        dialect: Dialecte de la base de destination
        table: Table source
        check: Ajouter la clause IF NOT EXISTS

    Returns:
        L'instruction SQL, sans point-virgule final
    """
    columns = ", ".join(
        f"{dialect.quote(column.name)} {dialect.type_name(column.type)}"
        for column in table.columns
    )
    clause = " IF NOT EXISTS" if check else ""
    return f"CREATE TABLE{clause} {dialect.quote(table.name)} ({columns})"

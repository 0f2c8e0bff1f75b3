"""
Module pour configurer un logger moderne avec Rich.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

# Définir une palette de couleurs personnalisée
custom_theme = Theme({
    "info": "bold cyan",
    "warning": "bold yellow",
    "error": "bold red",
    "debug": "bold green",
    "success": "bold green",
    "title": "bold magenta",
    "source": "bold blue",
    "target": "bold yellow",
})

# Les logs et les diagnostics partent sur stderr, stdout reste réservé aux listes
stderr_console = Console(theme=custom_theme, stderr=True)
stdout_console = Console(theme=custom_theme)


def setup_logger(name: str = "mdb_to_sql", level: int = logging.INFO,
                 console: Console = stderr_console) -> logging.Logger:
    """
    Configure et retourne un logger moderne et coloré.

    Args:
        name: Nom du logger
        level: Niveau de logging
        console: Console Rich de sortie

    Returns:
        Un logger configuré
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.propagate = False

    # Supprimer les handlers existants
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    rich_handler = RichHandler(
        console=console,
        show_path=False,
        omit_repeated_times=True,
        rich_tracebacks=True,
        tracebacks_extra_lines=1,
        markup=False,
    )
    rich_handler.setLevel(level)

    # Format simple car Rich s'occupe de la date et du niveau
    rich_handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(rich_handler)

    return logger


def print_success_message(message: str) -> None:
    """
    Affiche un message de succès.

    Args:
        message: Message à afficher
    """
    stderr_console.print(f"✓ {message}", style="success", markup=False)


def print_error_message(message: str) -> None:
    """
    Affiche un message d'erreur sur une ligne.

    Args:
        message: Message à afficher
    """
    stderr_console.print(f"✗ {message}", style="error", markup=False, soft_wrap=True)


def print_warning_message(message: str) -> None:
    stderr_console.print(f"⚠ {message}", style="warning", markup=False)


def print_title(title: str) -> None:
    """
    Affiche un titre de section.

    Args:
        title: Titre à afficher
    """
    stderr_console.print(f"\n{title}", style="title", markup=False)
    stderr_console.print("─" * len(title))

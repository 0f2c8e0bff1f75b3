"""
Module de gestion de la configuration d'une copie.
"""

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Tuple

from dotenv import load_dotenv

from .database import uri_to_dsn
from .dialects import Backend
from .encoding import EncodingSpec, encoding_by_name
from .errors import ConfigurationError
from .models import TransactionScope
from .source import DEFAULT_ODBC_DRIVER

# Configuration par défaut
DEFAULT_CONFIG: Dict[str, Any] = {
    "database_uri": None,
    "transaction": TransactionScope.FULL.value,
    "text_encoding": None,
    "blob_encoding": None,
    "check_table": False,
    "log_query": False,
    "odbc_driver": DEFAULT_ODBC_DRIVER,
}

ENV_PREFIX = "MDB_TO_SQL_"

_BOOLEAN_KEYS = ("check_table", "log_query")
_ENV_NAMES = {
    "database_uri": "DATABASE_URI",
    "transaction": "TRANSACTION",
    "text_encoding": "TEXT_ENCODING",
    "blob_encoding": "BLOB_ENCODING",
    "check_table": "CHECK",
    "log_query": "LOG_QUERY",
    "odbc_driver": "ODBC_DRIVER",
}


@dataclass(frozen=True)
class CopyOptions:
    """Options d'une exécution, construites une fois puis en lecture seule."""

    database_uri: str
    files: Tuple[str, ...]
    backend: Backend
    dsn: str
    transaction: TransactionScope = TransactionScope.FULL
    encoding: EncodingSpec = EncodingSpec()
    check_table: bool = False
    log_query: bool = False
    odbc_driver: str = DEFAULT_ODBC_DRIVER


def load_dotenv_file(env_file: Optional[str] = None) -> bool:
    """
    Charge les variables d'environnement à partir d'un fichier .env

    Args:
        env_file: Chemin vers le fichier .env à charger

    Returns:
        bool: True si un fichier a été chargé

    Raises:
        ConfigurationError: Si le fichier indiqué n'existe pas
    """
    if env_file:
        if not os.path.isfile(env_file):
            raise ConfigurationError(f"fichier .env introuvable: {env_file}")
        return load_dotenv(env_file)

    # Essayer de charger le fichier .env par défaut
    default_env = os.path.join(os.getcwd(), '.env')
    if os.path.isfile(default_env):
        return load_dotenv(default_env)
    return False


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ('true', 'yes', '1', 'on')


def get_config_from_env() -> Dict[str, Any]:
    """
    Charge la configuration depuis les variables d'environnement.

    Les variables cherchées sont MDB_TO_SQL_DATABASE_URI, MDB_TO_SQL_TRANSACTION,
    MDB_TO_SQL_TEXT_ENCODING, MDB_TO_SQL_BLOB_ENCODING, MDB_TO_SQL_CHECK,
    MDB_TO_SQL_LOG_QUERY et MDB_TO_SQL_ODBC_DRIVER.
    """
    config = {}
    for key, suffix in _ENV_NAMES.items():
        value = os.environ.get(ENV_PREFIX + suffix)
        if not value:
            continue
        config[key] = _parse_bool(value) if key in _BOOLEAN_KEYS else value
    return config


def get_config_from_file(config_file: Optional[str] = None) -> Dict[str, Any]:
    """
    Charge la configuration depuis un fichier JSON.

    Args:
        config_file: Chemin vers le fichier (défaut: ~/.mdb_to_sql.json, optionnel)

    Returns:
        Dictionnaire de configuration, vide si le fichier par défaut est absent

    Raises:
        ConfigurationError: Si le fichier indiqué est absent ou invalide
    """
    explicit = config_file is not None
    if not explicit:
        config_file = str(Path.home() / '.mdb_to_sql.json')
        if not os.path.isfile(config_file):
            return {}

    try:
        with open(config_file, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except FileNotFoundError:
        raise ConfigurationError(f"fichier de configuration introuvable: {config_file}") from None
    except (json.JSONDecodeError, PermissionError) as e:
        raise ConfigurationError(f"fichier de configuration invalide {config_file}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"fichier de configuration invalide {config_file}: objet JSON attendu")
    unknown = set(data) - set(DEFAULT_CONFIG)
    if unknown:
        raise ConfigurationError(f"clés inconnues dans {config_file}: {', '.join(sorted(unknown))}")
    return data


def load_config(cli_config: Optional[Dict[str, Any]] = None, config_file: Optional[str] = None,
                env_file: Optional[str] = None) -> Dict[str, Any]:
    """
    Charge la configuration en respectant l'ordre de priorité suivant:
    1. Paramètres de ligne de commande
    2. Variables d'environnement (incluant le fichier .env)
    3. Fichier de configuration JSON
    4. Valeurs par défaut

    Args:
        cli_config: Paramètres passés en ligne de commande (None = non fourni)
        config_file: Chemin vers le fichier de configuration JSON
        env_file: Chemin vers le fichier .env

    Returns:
        Dictionnaire de configuration final
    """
    load_dotenv_file(env_file)

    config = dict(DEFAULT_CONFIG)
    config.update(get_config_from_file(config_file))
    config.update(get_config_from_env())

    if cli_config:
        # Ne mettre à jour que les valeurs fournies
        for key, value in cli_config.items():
            if value is not None:
                config[key] = value

    return config


def build_options(config: Dict[str, Any], files: Sequence[str]) -> CopyOptions:
    """
    Valide la configuration et construit les options de la copie.

    Raises:
        ConfigurationError: Si une valeur est invalide
    """
    if not config.get("database_uri"):
        raise ConfigurationError("l'URI de la base de destination est requise")
    if not files:
        raise ConfigurationError("au moins un fichier mdb est requis")

    try:
        scope = TransactionScope(config["transaction"])
    except ValueError:
        raise ConfigurationError(f"mode de transaction inconnu {config['transaction']!r}") from None

    backend, dsn = uri_to_dsn(config["database_uri"])

    text = config.get("text_encoding")
    blob = config.get("blob_encoding")
    encoding = EncodingSpec(
        text=encoding_by_name(text) if text else None,
        blob=encoding_by_name(blob) if blob else None,
    )

    return CopyOptions(
        database_uri=config["database_uri"],
        files=tuple(files),
        backend=backend,
        dsn=dsn,
        transaction=scope,
        encoding=encoding,
        check_table=bool(config.get("check_table")),
        log_query=bool(config.get("log_query")),
        odbc_driver=config.get("odbc_driver") or DEFAULT_ODBC_DRIVER,
    )

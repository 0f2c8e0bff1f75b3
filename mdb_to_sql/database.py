"""
Connexion à la base de destination.

Ce module traduit l'URI de destination en chaîne de connexion, ouvre la
connexion avec le pilote adapté et fournit une Session dont chaque appel
bloquant respecte le jeton d'annulation. Les connexions sont ouvertes en
autocommit : les transactions sont pilotées explicitement par BEGIN, COMMIT
et ROLLBACK pour que leur portée soit exactement celle choisie par
l'utilisateur.
"""

import itertools
import logging
import sqlite3
from typing import Any, Callable, Dict, Optional, Sequence, Tuple
from urllib.parse import parse_qsl, unquote, urlencode, urlsplit, urlunsplit

from . import PROG_NAME, __version__
from .cancellation import CancellationToken
from .dialects import Backend
from .errors import (
    CancellationError,
    ConfigurationError,
    DatabaseConnectionError,
    TransactionScopeError,
)

logger = logging.getLogger(__name__)

APPLICATION_NAME = f"{PROG_NAME}({__version__})"

_statement_ids = itertools.count(1)


def uri_to_dsn(database_uri: str) -> Tuple[Backend, str]:
    """
    Détermine le backend et la chaîne de connexion à partir d'une URI.

    Args:
        database_uri: URI de destination (pg://, mysql://, sqlite3:///...)

    Returns:
        Tuple contenant (backend, chaîne de connexion du pilote)

    Raises:
        ConfigurationError: Si l'URI est invalide ou le schéma non supporté
    """
    try:
        parts = urlsplit(database_uri)
    except ValueError:
        raise ConfigurationError(f"URI de base de données invalide {database_uri!r}") from None
    if not parts.scheme:
        raise ConfigurationError(f"URI de base de données invalide {database_uri!r}")

    if parts.scheme in ("pg", "postgres", "postgresql"):
        query = [
            (key, value)
            for key, value in parse_qsl(parts.query, keep_blank_values=True)
            if key != "application_name"
        ]
        query.append(("application_name", APPLICATION_NAME))
        dsn = urlunsplit(("postgres", parts.netloc, parts.path, urlencode(query), parts.fragment))
        return Backend.POSTGRES, dsn

    if parts.scheme in ("mysql", "mariadb"):
        dsn = urlunsplit(("", parts.netloc, parts.path, parts.query, parts.fragment))
        if dsn.startswith("//"):
            dsn = dsn[2:]
        return Backend.MYSQL, dsn

    if parts.scheme in ("sqlite", "sqlite3"):
        if not parts.path:
            raise ConfigurationError("sqlite3 : un nom de fichier doit être indiqué")
        dsn = f"file:{parts.path}"
        if parts.query:
            dsn += f"?{parts.query}"
        return Backend.SQLITE, dsn

    raise ConfigurationError(f"{parts.scheme!r} n'est pas un backend de base de données supporté")


def mask_password(database_uri: str) -> str:
    """Remplace le mot de passe d'une URI par des étoiles pour les logs."""
    parts = urlsplit(database_uri)
    if not parts.password:
        return database_uri
    userinfo, _, host = parts.netloc.rpartition("@")
    user = userinfo.split(":", 1)[0]
    return urlunsplit(parts._replace(netloc=f"{user}:*****@{host}"))


def mysql_connect_params(dsn: str) -> Dict[str, Any]:
    """Convertit une chaîne de connexion MySQL en paramètres pour pymysql.connect."""
    parts = urlsplit(f"//{dsn}")
    params: Dict[str, Any] = {"charset": "utf8mb4"}
    if parts.hostname:
        params["host"] = parts.hostname
    if parts.port:
        params["port"] = parts.port
    if parts.username:
        params["user"] = unquote(parts.username)
    if parts.password:
        params["password"] = unquote(parts.password)
    database = parts.path.lstrip("/")
    if database:
        params["database"] = unquote(database)
    for key, value in parse_qsl(parts.query):
        if key == "charset":
            params["charset"] = value
        elif key == "unix_socket":
            params["unix_socket"] = value
        elif key == "connect_timeout":
            params["connect_timeout"] = int(value)
    return params


def connect(backend: Backend, dsn: str, token: Optional[CancellationToken] = None) -> "Session":
    """
    Ouvre et vérifie une connexion vers la base de destination.

    Args:
        backend: Backend de destination
        dsn: Chaîne de connexion produite par uri_to_dsn
        token: Jeton d'annulation observé par la session

    Returns:
        Une Session prête à l'emploi

    Raises:
        DatabaseConnectionError: Si la connexion échoue
        CancellationError: Si une annulation survient pendant la connexion
    """
    token = token or CancellationToken()
    token.raise_if_cancelled()

    interrupt: Optional[Callable[[], None]] = None
    try:
        if backend is Backend.SQLITE:
            connection = sqlite3.connect(dsn, uri=True, isolation_level=None)
            interrupt = connection.interrupt
        elif backend is Backend.POSTGRES:
            import psycopg2
            connection = psycopg2.connect(dsn)
            connection.autocommit = True
            interrupt = connection.cancel
        else:
            import pymysql
            connection = pymysql.connect(autocommit=True, **mysql_connect_params(dsn))
    except ImportError as e:
        raise DatabaseConnectionError(f"pilote {backend.value} non installé: {e}") from e
    except Exception as e:
        if token.cancelled:
            raise CancellationError("connexion annulée") from e
        raise DatabaseConnectionError(f"connexion impossible: {e}") from e

    session = Session(connection, backend, token, interrupt)
    # La connexion n'est réellement établie qu'au premier échange pour certains pilotes
    try:
        session.execute("SELECT 1")
    except CancellationError:
        session.close()
        raise
    except Exception as e:
        session.close()
        raise DatabaseConnectionError(f"connexion impossible: {e}") from e
    return session


class Session:
    """
    Connexion unique partagée par toute l'exécution.

    Au plus une transaction est ouverte à la fois ; chaque appel bloquant
    vérifie le jeton d'annulation avant de partir vers la base.
    """

    def __init__(self, connection, backend: Backend, token: CancellationToken,
                 interrupt: Optional[Callable[[], None]] = None):
        self.connection = connection
        self.backend = backend
        self.token = token
        self.transaction: Optional[Transaction] = None
        self._unregister = token.register(interrupt) if interrupt else None

    def call(self, func: Callable, *args, cancellable: bool = True) -> Any:
        """Exécute un appel du pilote en traduisant les erreurs dues à une annulation."""
        if cancellable:
            self.token.raise_if_cancelled()
        try:
            return func(*args)
        except Exception as e:
            if cancellable and self.token.cancelled:
                raise CancellationError("opération annulée") from e
            raise

    def execute(self, sql: str, params: Optional[Sequence[Any]] = None,
                cancellable: bool = True) -> None:
        cursor = self.connection.cursor()
        try:
            if params is None:
                self.call(cursor.execute, sql, cancellable=cancellable)
            else:
                self.call(cursor.execute, sql, params, cancellable=cancellable)
        finally:
            cursor.close()

    def begin(self, label: str = "") -> "Transaction":
        if self.transaction is not None and self.transaction.active:
            raise TransactionScopeError(
                f"une transaction est déjà ouverte ({self.transaction.label or 'run'})"
            )
        self.execute("BEGIN")
        self.transaction = Transaction(self, label)
        return self.transaction

    def prepare(self, sql: str) -> "PreparedStatement":
        statement_class = _STATEMENTS[self.backend]
        return statement_class(self, sql)

    def close(self) -> None:
        if self._unregister:
            self._unregister()
            self._unregister = None
        self.connection.close()

    def __enter__(self) -> "Session":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class Transaction:
    """Transaction ouverte sur une Session, terminée par commit ou rollback."""

    def __init__(self, session: Session, label: str = ""):
        self.session = session
        self.label = label
        self.active = True

    def _check_active(self) -> None:
        if not self.active:
            raise TransactionScopeError(f"transaction {self.label or 'run'} déjà terminée")

    def commit(self) -> None:
        # En cas d'échec la transaction reste active pour pouvoir être annulée
        self._check_active()
        self.session.execute("COMMIT")
        self.active = False

    def rollback(self) -> None:
        # Pas de vérification du jeton : une annulation doit toujours pouvoir défaire la transaction
        self._check_active()
        self.active = False
        self.session.execute("ROLLBACK", cancellable=False)


class PreparedStatement:
    """Instruction préparée une fois, exécutée pour chaque ligne."""

    def __init__(self, session: Session, sql: str):
        self.session = session
        self.sql = sql

    def execute(self, params: Sequence[Any]) -> None:
        raise NotImplementedError

    def close(self) -> None:
        """Libère l'instruction après une table copiée avec succès."""

    def discard(self) -> None:
        """Abandonne l'instruction après un échec, sans nouvel échange avec la base."""


class SQLiteStatement(PreparedStatement):
    # sqlite3 garde en cache l'instruction compilée d'un curseur réutilisé

    def __init__(self, session: Session, sql: str):
        super().__init__(session, sql)
        self.cursor = session.connection.cursor()

    def execute(self, params: Sequence[Any]) -> None:
        self.session.call(self.cursor.execute, self.sql, tuple(params))

    def close(self) -> None:
        self.cursor.close()

    def discard(self) -> None:
        self.cursor.close()


class PostgresStatement(PreparedStatement):
    """PREPARE / EXECUTE côté serveur, paramètres numérotés $1, $2..."""

    def __init__(self, session: Session, sql: str):
        super().__init__(session, sql)
        self.name = f"mdb_to_sql_{next(_statement_ids)}"
        session.execute(f"PREPARE {self.name} AS {sql}")

    def execute(self, params: Sequence[Any]) -> None:
        if params:
            markers = ", ".join(["%s"] * len(params))
            self.session.execute(f"EXECUTE {self.name} ({markers})", list(params))
        else:
            self.session.execute(f"EXECUTE {self.name}")

    def close(self) -> None:
        self.session.execute(f"DEALLOCATE {self.name}")


class MySQLStatement(PreparedStatement):
    """PREPARE ... FROM côté serveur, valeurs passées par variables de session."""

    def __init__(self, session: Session, sql: str):
        super().__init__(session, sql)
        self.name = f"mdb_to_sql_{next(_statement_ids)}"
        session.execute(f"PREPARE {self.name} FROM %s", [sql])

    def execute(self, params: Sequence[Any]) -> None:
        if not params:
            self.session.execute(f"EXECUTE {self.name}")
            return
        variables = [f"@mdb_to_sql_p{i}" for i in range(1, len(params) + 1)]
        self.session.execute(
            "SET " + ", ".join(f"{variable} = %s" for variable in variables), list(params)
        )
        self.session.execute(f"EXECUTE {self.name} USING {', '.join(variables)}")

    def close(self) -> None:
        self.session.execute(f"DEALLOCATE PREPARE {self.name}")


_STATEMENTS = {
    Backend.POSTGRES: PostgresStatement,
    Backend.SQLITE: SQLiteStatement,
    Backend.MYSQL: MySQLStatement,
}

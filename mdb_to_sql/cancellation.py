"""
Annulation de la copie sur SIGINT / SIGTERM.

Un thread d'écoute attend les signaux et bascule un jeton d'annulation à
usage unique. Le jeton est consulté avant chaque appel bloquant à la base et
interrompt l'appel en cours via les callbacks enregistrés par la session.
"""

import logging
import signal
import threading
from typing import Callable, Dict, List, Optional

from .errors import CancellationError

logger = logging.getLogger(__name__)


class CancellationToken:
    """Jeton d'annulation qui ne peut basculer qu'une seule fois."""

    def __init__(self):
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._callbacks: List[Callable[[], None]] = []

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> bool:
        """
        Annule le jeton et exécute les callbacks enregistrés.

        Returns:
            True pour l'appel qui a effectivement annulé le jeton, False ensuite
        """
        with self._lock:
            if self._event.is_set():
                return False
            self._event.set()
            callbacks = list(self._callbacks)
            self._callbacks.clear()
        for callback in callbacks:
            callback()
        return True

    def register(self, callback: Callable[[], None]) -> Callable[[], None]:
        """
        Enregistre un callback appelé à l'annulation.

        Si le jeton est déjà annulé, le callback est appelé immédiatement.

        Returns:
            Une fonction qui désenregistre le callback
        """
        with self._lock:
            if not self._event.is_set():
                self._callbacks.append(callback)
                return lambda: self._unregister(callback)
        callback()
        return lambda: None

    def _unregister(self, callback: Callable[[], None]) -> None:
        with self._lock:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise CancellationError("opération annulée")

    def wait(self, timeout: Optional[float] = None) -> bool:
        return self._event.wait(timeout)


class CancellationSupervisor:
    """
    Installe l'écoute de SIGINT et SIGTERM pour la durée d'un bloc `with`.

    Sous POSIX les signaux sont bloqués dans le thread principal et consommés
    par un thread démon via signal.sigwait ; ailleurs un gestionnaire
    signal.signal est installé.
    """

    SIGNALS = (signal.SIGINT, signal.SIGTERM)

    def __init__(self, token: Optional[CancellationToken] = None):
        self.token = token or CancellationToken()
        self._thread: Optional[threading.Thread] = None
        self._previous_mask = None
        self._previous_handlers: Dict[int, object] = {}
        self._stopping = threading.Event()

    def handle_signal(self, signum: int) -> None:
        if self.token.cancel():
            logger.warning(f"signal {signal.Signals(signum).name} reçu, annulation en cours")
        else:
            logger.debug(f"signal {signal.Signals(signum).name} ignoré, annulation déjà demandée")

    def _listen(self) -> None:
        while True:
            signum = signal.sigwait(self.SIGNALS)
            if self._stopping.is_set():
                return
            try:
                self.handle_signal(signum)
            except Exception:
                logger.exception("Erreur lors de l'interruption de la base de données")

    def _on_signal(self, signum, frame) -> None:
        self.handle_signal(signum)

    def start(self) -> CancellationToken:
        if hasattr(signal, "pthread_sigmask"):
            self._stopping.clear()
            self._previous_mask = signal.pthread_sigmask(signal.SIG_BLOCK, self.SIGNALS)
            self._thread = threading.Thread(
                target=self._listen, name="mdb-to-sql-signals", daemon=True
            )
            self._thread.start()
        else:
            for signum in self.SIGNALS:
                self._previous_handlers[signum] = signal.signal(signum, self._on_signal)
        return self.token

    def stop(self) -> None:
        if self._thread is not None:
            # Réveille sigwait pour que le thread ne consomme plus les signaux du processus
            self._stopping.set()
            signal.pthread_kill(self._thread.ident, signal.SIGTERM)
            self._thread.join()
            self._thread = None
        if self._previous_mask is not None:
            signal.pthread_sigmask(signal.SIG_SETMASK, self._previous_mask)
            self._previous_mask = None
        for signum, handler in self._previous_handlers.items():
            signal.signal(signum, handler)
        self._previous_handlers.clear()

    def __enter__(self) -> CancellationToken:
        return self.start()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()

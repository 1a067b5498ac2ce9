"""
Garde "une seule fois" pour les effets de la finalisation.
Empêche deux exécutions concurrentes pour le même jeton dans le process
(double montage de la page de succès, double clic, requêtes parallèles).
"""
from contextlib import contextmanager
from typing import Iterator, Set
import threading


class EffectOnceGuard:
    """Compare-and-set sur un ensemble de clés en cours."""

    def __init__(self):
        self._in_flight: Set[str] = set()
        self._lock = threading.Lock()

    def try_enter(self, key: str) -> bool:
        with self._lock:
            if key in self._in_flight:
                return False
            self._in_flight.add(key)
            return True

    def leave(self, key: str) -> None:
        with self._lock:
            self._in_flight.discard(key)

    def is_in_flight(self, key: str) -> bool:
        with self._lock:
            return key in self._in_flight

    @contextmanager
    def once(self, key: str) -> Iterator[bool]:
        """Produit True si l'appelant détient la clé; la libère en sortie."""
        entered = self.try_enter(key)
        try:
            yield entered
        finally:
            if entered:
                self.leave(key)


# Garde partagée par les vues du process
finalization_guard = EffectOnceGuard()

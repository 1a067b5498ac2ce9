"""
Registre d'idempotence de la finalisation de commande.

Deux effets non idempotents sont protégés par jeton de commande:
- l'écriture de la commande  (has_processed / mark_processed)
- l'envoi de l'email          (has_emailed / mark_emailed)

Implémentations:
- SessionIdempotencyStore: ensembles stockés dans la session navigateur (par défaut)
- RedisIdempotencyStore: clés Redis SET NX avec TTL, partagées entre onglets/process
- InMemoryIdempotencyStore: dictionnaire local (scripts, tests)

La session porte aussi l'instantané d'adresse de livraison, lu après la redirection.
"""
from typing import Any, Dict, MutableMapping, Optional, Protocol, Set
import logging
import threading

from storefront.cart.models import ShippingAddress

logger = logging.getLogger(__name__)

PROCESSED_SESSION_KEY = "processed_orders"
EMAILED_SESSION_KEY = "emailed_orders"
SHIPPING_SESSION_KEY = "shipping_address"


class IdempotencyStore(Protocol):
    def has_processed(self, token: str) -> bool: ...
    def mark_processed(self, token: str) -> None: ...
    def has_emailed(self, token: str) -> bool: ...
    def mark_emailed(self, token: str) -> None: ...


class SessionIdempotencyStore:
    """
    Jetons en session (listes JSON-sérialisables, ordre d'insertion).
    Seuls les max_tokens plus récents sont conservés: la session vit dans un cookie signé.
    """

    def __init__(self, session: MutableMapping[str, Any], max_tokens: Optional[int] = None):
        from storefront import config
        self.session = session
        self.max_tokens = max(1, max_tokens if max_tokens is not None else config.IDEMPOTENCY_SESSION_MAX_TOKENS)

    def _tokens(self, key: str) -> Set[str]:
        return set(self.session.get(key) or [])

    def _add(self, key: str, token: str) -> None:
        tokens = [t for t in (self.session.get(key) or []) if t != token]
        tokens.append(token)
        self.session[key] = tokens[-self.max_tokens:]

    def has_processed(self, token: str) -> bool:
        return token in self._tokens(PROCESSED_SESSION_KEY)

    def mark_processed(self, token: str) -> None:
        self._add(PROCESSED_SESSION_KEY, token)

    def has_emailed(self, token: str) -> bool:
        return token in self._tokens(EMAILED_SESSION_KEY)

    def mark_emailed(self, token: str) -> None:
        self._add(EMAILED_SESSION_KEY, token)


class RedisIdempotencyStore:
    """
    Variante durable: order:<token>:processed / order:<token>:emailed.
    Les erreurs Redis sont journalisées; une lecture en échec vaut "non traité".
    """

    def __init__(self, client, ttl_seconds: int = 7 * 24 * 3600):
        self.client = client
        self.ttl_seconds = ttl_seconds

    @staticmethod
    def _key(token: str, effect: str) -> str:
        return f"order:{token}:{effect}"

    def _exists(self, token: str, effect: str) -> bool:
        try:
            return bool(self.client.exists(self._key(token, effect)))
        except Exception:
            logger.exception("checkout.ledger redis read failed token=%s effect=%s", token, effect)
            return False

    def _mark(self, token: str, effect: str) -> None:
        try:
            self.client.set(self._key(token, effect), "1", nx=True, ex=self.ttl_seconds)
        except Exception:
            logger.exception("checkout.ledger redis write failed token=%s effect=%s", token, effect)

    def has_processed(self, token: str) -> bool:
        return self._exists(token, "processed")

    def mark_processed(self, token: str) -> None:
        self._mark(token, "processed")

    def has_emailed(self, token: str) -> bool:
        return self._exists(token, "emailed")

    def mark_emailed(self, token: str) -> None:
        self._mark(token, "emailed")


class InMemoryIdempotencyStore:
    def __init__(self):
        self._marks: Dict[str, Set[str]] = {"processed": set(), "emailed": set()}
        self._lock = threading.Lock()

    def has_processed(self, token: str) -> bool:
        return token in self._marks["processed"]

    def mark_processed(self, token: str) -> None:
        with self._lock:
            self._marks["processed"].add(token)

    def has_emailed(self, token: str) -> bool:
        return token in self._marks["emailed"]

    def mark_emailed(self, token: str) -> None:
        with self._lock:
            self._marks["emailed"].add(token)


_redis_client = None


def _get_redis_client():
    global _redis_client
    if _redis_client is None:
        import redis
        from storefront import config
        _redis_client = redis.Redis.from_url(config.IDEMPOTENCY_REDIS_URL, decode_responses=True)
    return _redis_client


def get_idempotency_store(session: MutableMapping[str, Any]) -> IdempotencyStore:
    """Sélectionne le registre selon IDEMPOTENCY_BACKEND ("session" par défaut)."""
    from storefront import config
    if config.IDEMPOTENCY_BACKEND == "redis":
        return RedisIdempotencyStore(_get_redis_client(), ttl_seconds=config.IDEMPOTENCY_TTL_SECONDS)
    return SessionIdempotencyStore(session)


def save_shipping_snapshot(session: MutableMapping[str, Any], address: ShippingAddress) -> None:
    session[SHIPPING_SESSION_KEY] = address.snapshot()


def load_shipping_snapshot(session: MutableMapping[str, Any]) -> Optional[ShippingAddress]:
    raw = session.get(SHIPPING_SESSION_KEY)
    if not raw:
        return None
    try:
        return ShippingAddress.model_validate(raw)
    except ValueError:
        logger.warning("checkout.ledger invalid shipping snapshot discarded")
        return None


def clear_shipping_snapshot(session: MutableMapping[str, Any]) -> None:
    session.pop(SHIPPING_SESSION_KEY, None)

"""
Module 'checkout' (feature-first): finalisation après paiement,
registre d'idempotence et garde anti-doublon.
"""

from .finalizer import FinalizationContext, FinalizationResult, finalize_order, generate_order_number
from .guards import EffectOnceGuard, finalization_guard
from .ledger import (
    IdempotencyStore,
    InMemoryIdempotencyStore,
    RedisIdempotencyStore,
    SessionIdempotencyStore,
    get_idempotency_store,
)

__all__ = [
    "FinalizationContext",
    "FinalizationResult",
    "finalize_order",
    "generate_order_number",
    "EffectOnceGuard",
    "finalization_guard",
    "IdempotencyStore",
    "InMemoryIdempotencyStore",
    "RedisIdempotencyStore",
    "SessionIdempotencyStore",
    "get_idempotency_store",
]

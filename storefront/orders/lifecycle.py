"""
Cycle de vie du statut de commande.

    pending -> confirmed -> processing -> shipped -> delivered
    cancelled est atteignable depuis tout statut non terminal.

Les transitions sont administratives; le client n'a qu'une vue en lecture
(badge de couleur et frise des étapes franchies).
"""
from dataclasses import dataclass, asdict
from typing import Dict, FrozenSet, List, Union

from storefront.errors import InvalidStatusTransitionError

from .models import OrderStatus

PROGRESSION: List[OrderStatus] = [
    OrderStatus.PENDING,
    OrderStatus.CONFIRMED,
    OrderStatus.PROCESSING,
    OrderStatus.SHIPPED,
    OrderStatus.DELIVERED,
]

TERMINAL: FrozenSet[OrderStatus] = frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED})

ALLOWED_TRANSITIONS: Dict[OrderStatus, FrozenSet[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.CONFIRMED, OrderStatus.CANCELLED}),
    OrderStatus.CONFIRMED: frozenset({OrderStatus.PROCESSING, OrderStatus.CANCELLED}),
    OrderStatus.PROCESSING: frozenset({OrderStatus.SHIPPED, OrderStatus.CANCELLED}),
    OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}

BADGE_COLORS: Dict[OrderStatus, str] = {
    OrderStatus.PENDING: "yellow",
    OrderStatus.CONFIRMED: "indigo",
    OrderStatus.PROCESSING: "purple",
    OrderStatus.SHIPPED: "blue",
    OrderStatus.DELIVERED: "green",
    OrderStatus.CANCELLED: "red",
}

StatusLike = Union[str, OrderStatus]


@dataclass(frozen=True)
class TimelineStep:
    status: str
    label: str
    completed: bool
    current: bool


def can_transition(current: StatusLike, new: StatusLike) -> bool:
    return OrderStatus.parse(new) in ALLOWED_TRANSITIONS[OrderStatus.parse(current)]


def assert_transition(current: StatusLike, new: StatusLike) -> OrderStatus:
    """Retourne le nouveau statut normalisé ou lève InvalidStatusTransitionError."""
    cur, nxt = OrderStatus.parse(current), OrderStatus.parse(new)
    if nxt not in ALLOWED_TRANSITIONS[cur]:
        raise InvalidStatusTransitionError(f"Cannot change order status from {cur.value} to {nxt.value}")
    return nxt


def status_badge(status: StatusLike) -> str:
    return BADGE_COLORS[OrderStatus.parse(status)]


def status_timeline(status: StatusLike, reached: StatusLike = OrderStatus.PENDING) -> List[TimelineStep]:
    """
    Frise ordonnée des étapes, complétées jusqu'au statut courant inclus.
    - Pour une commande annulée, `reached` indique la dernière étape atteinte
      avant l'annulation (pending par défaut), suivie d'une étape 'cancelled'.
    """
    current = OrderStatus.parse(status)
    if current is OrderStatus.CANCELLED:
        last = OrderStatus.parse(reached)
        if last is OrderStatus.CANCELLED:
            last = OrderStatus.PENDING
        upto = PROGRESSION.index(last)
        steps = [
            TimelineStep(s.value, s.value.capitalize(), True, False)
            for s in PROGRESSION[: upto + 1]
        ]
        steps.append(TimelineStep(current.value, current.value.capitalize(), True, True))
        return steps

    upto = PROGRESSION.index(current)
    return [
        TimelineStep(s.value, s.value.capitalize(), idx <= upto, idx == upto)
        for idx, s in enumerate(PROGRESSION)
    ]


def status_view(status: StatusLike) -> Dict[str, object]:
    current = OrderStatus.parse(status)
    return {
        "status": current.value,
        "badge": status_badge(current),
        "terminal": current in TERMINAL,
        "timeline": [asdict(step) for step in status_timeline(current)],
    }

"""
Service order state machine.

    NOT_SENT ──send──▶ PENDING ──receive──▶ IN_PROGRESS ──deliver──▶ COMPLETED
        ◀──recall───           ◀──cancel_receive──       ◀──cancel_results──

Every status change, whether requested over HTTP or made by the settlement
engine, goes through apply_transition() so the guards run in one place.
Callers are expected to hold a row lock on the order (select_for_update).
"""

from dataclasses import dataclass
from typing import Callable, Dict, Tuple

import structlog

from apps.core.exceptions import BlockError

from . import workflow
from .models import ServiceOrder, ServiceOrderStatus

logger = structlog.get_logger(__name__)


def _require_details(order: ServiceOrder):
    if not workflow.has_details(order):
        raise BlockError(
            message="Add at least one service before sending the service order.",
            code="ORDER_HAS_NO_DETAILS",
        )


def _require_fully_paid(order: ServiceOrder):
    if workflow.has_unpaid_services(order):
        raise BlockError(
            message="This service order contains unpaid services. "
                    "Please complete payment before receiving.",
            code="ORDER_HAS_UNPAID_SERVICES",
        )


def _require_no_saved_results(order: ServiceOrder):
    if workflow.has_saved_results(order):
        raise BlockError(
            message="Results have already been recorded. Cancel receive is not allowed.",
            code="ORDER_HAS_RESULTS",
        )


def _require_all_results(order: ServiceOrder):
    if not workflow.all_results_completed(order):
        raise BlockError(
            message="Please complete all results before delivering.",
            code="ORDER_RESULTS_INCOMPLETE",
        )


def _always(order: ServiceOrder):
    return None


@dataclass(frozen=True)
class Transition:
    name: str
    source: int
    target: int
    guard: Callable[[ServiceOrder], None]


_S = ServiceOrderStatus

TRANSITIONS: Dict[Tuple[int, int], Transition] = {
    (t.source, t.target): t
    for t in (
        Transition("send", _S.NOT_SENT, _S.PENDING, _require_details),
        Transition("recall", _S.PENDING, _S.NOT_SENT, _always),
        Transition("receive", _S.PENDING, _S.IN_PROGRESS, _require_fully_paid),
        Transition("cancel_receive", _S.IN_PROGRESS, _S.PENDING, _require_no_saved_results),
        Transition("deliver", _S.IN_PROGRESS, _S.COMPLETED, _require_all_results),
        Transition("cancel_results", _S.COMPLETED, _S.IN_PROGRESS, _always),
    )
}


def get_transition(source: int, target: int) -> Transition:
    try:
        return TRANSITIONS[(source, target)]
    except KeyError:
        raise BlockError(
            message=f"Cannot change a service order from "
                    f"{_S(source).label} to {_S(target).label}.",
            code="INVALID_STATUS_TRANSITION",
        )


def check_transition(order: ServiceOrder, target: int) -> Transition:
    """Raise BlockError unless ``order`` may move to ``target`` right now."""
    transition = get_transition(order.status, target)
    transition.guard(order)
    return transition


def can_transition(order: ServiceOrder, target: int) -> bool:
    try:
        check_transition(order, target)
    except BlockError:
        return False
    return True


def apply_transition(order: ServiceOrder, target: int, *, trigger: str = "manual") -> Transition:
    transition = check_transition(order, target)
    order.status = transition.target
    order.save(update_fields=["status"])

    logger.info(
        "service_order_status_changed",
        service_order_id=order.id,
        service_order_code=order.code,
        transition=transition.name,
        from_status=transition.source,
        to_status=transition.target,
        trigger=trigger,
    )
    return transition

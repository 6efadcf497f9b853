# app/services/quotes/status_machine.py
"""
Quote lifecycle rules.

Pure functions only: no I/O, no session, no caching. Write paths call
``is_valid_transition`` before persisting a status change; UI-facing
endpoints use ``valid_transitions`` / ``can_receive_actions`` to decide
which actions to offer.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Optional, Tuple, Union

from app.models.enums.quote_status import QuoteStatus

StatusLike = Union[QuoteStatus, str]

_S = QuoteStatus

# =====================================================
# TRANSITION TABLE
# =====================================================
# Order matters: it is the order of the "next action" menus.
QUOTE_STATUS_TRANSITIONS = MappingProxyType({
    _S.draft: (_S.sent, _S.awaiting_visit, _S.cancelled),
    _S.sent: (_S.receiving, _S.awaiting_visit, _S.cancelled),
    _S.awaiting_visit: (_S.visit_scheduled, _S.cancelled),
    _S.visit_scheduled: (_S.visit_confirmed, _S.visit_overdue, _S.cancelled),
    _S.visit_confirmed: (_S.receiving, _S.cancelled),
    _S.visit_overdue: (_S.visit_scheduled, _S.cancelled),
    _S.receiving: (_S.received, _S.cancelled),
    _S.received: (
        _S.ai_analyzing,
        _S.pending_approval,
        _S.under_review,
        _S.approved,
        _S.rejected,
    ),
    _S.ai_analyzing: (_S.ai_negotiating, _S.pending_approval, _S.rejected),
    _S.ai_negotiating: (_S.awaiting_ai_approval, _S.rejected),
    _S.awaiting_ai_approval: (_S.pending_approval, _S.approved, _S.rejected),
    _S.pending_approval: (_S.approved, _S.rejected),
    _S.under_review: (_S.pending_approval, _S.approved, _S.rejected, _S.receiving),
    _S.approved: (_S.finalized, _S.cancelled),
    _S.rejected: (_S.receiving, _S.cancelled),
    _S.finalized: (),
    _S.cancelled: (),
})

INITIAL_STATUS = _S.draft

TERMINAL_STATUSES = frozenset({_S.finalized, _S.cancelled})

# "received" is deliberately absent: proposals have arrived, nothing is paid.
LOCKED_STATUSES = frozenset({
    _S.approved,
    _S.rejected,
    _S.finalized,
    _S.cancelled,
    _S.trash,
})


@dataclass(frozen=True)
class TransitionContext:
    """External facts supplied by the caller for automatic-transition inference."""

    all_proposals_received: bool = False

    @classmethod
    def from_counts(cls, responses_count: int, expected_count: int) -> "TransitionContext":
        return cls(
            all_proposals_received=expected_count > 0 and responses_count >= expected_count
        )


def coerce_status(value: object) -> Optional[QuoteStatus]:
    """Return the QuoteStatus for ``value`` or None when it is outside the closed set."""
    if isinstance(value, QuoteStatus):
        return value
    try:
        return QuoteStatus(value)
    except (ValueError, TypeError):
        return None


def valid_transitions(current: StatusLike) -> Tuple[QuoteStatus, ...]:
    status = coerce_status(current)
    if status is None:
        return ()
    return QUOTE_STATUS_TRANSITIONS.get(status, ())


def is_valid_transition(current: StatusLike, next_status: StatusLike) -> bool:
    target = coerce_status(next_status)
    if target is None:
        return False
    return target in valid_transitions(current)


def is_terminal(status: StatusLike) -> bool:
    return coerce_status(status) in TERMINAL_STATUSES


def is_locked(status: StatusLike) -> bool:
    """
    True when edit/approval actions are no longer allowed.

    Values outside the closed set are reported as locked. A ``paid`` payment
    is a separate entity: callers check the linked payment themselves.
    """
    resolved = coerce_status(status)
    if resolved is None:
        return True
    return resolved in LOCKED_STATUSES


def can_receive_actions(status: StatusLike) -> bool:
    return not is_locked(status)


def next_automatic_status(
    current: StatusLike,
    context: Optional[TransitionContext] = None,
) -> Optional[QuoteStatus]:
    """
    Suggest the status that follows from ``context``, or None.

    Only ``receiving`` + all proposals received is automated, and it suggests
    ``under_review`` directly even though the table routes through
    ``received``. The suggestion is never applied here.
    """
    if context is None:
        return None

    if coerce_status(current) == _S.receiving and context.all_proposals_received:
        return _S.under_review

    return None

# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Project status state machine.

    under_review ─► review_completed ─► review_approved ─► started
        ─► planned ─► in_progress ─► completed
    any non-cancelled status ─► cancelled   (terminal)
"""

from portfolio.models.domain import ProjectStatus
from portfolio.models.errors import InvalidTransitionError

S = ProjectStatus

# Allowed transitions: {current_status: set_of_next_statuses}
ALLOWED_TRANSITIONS: dict[ProjectStatus, frozenset[ProjectStatus]] = {
    S.UNDER_REVIEW:     frozenset({S.REVIEW_COMPLETED, S.CANCELLED}),
    S.REVIEW_COMPLETED: frozenset({S.REVIEW_APPROVED, S.CANCELLED}),
    S.REVIEW_APPROVED:  frozenset({S.STARTED, S.CANCELLED}),
    S.STARTED:          frozenset({S.PLANNED, S.CANCELLED}),
    S.PLANNED:          frozenset({S.IN_PROGRESS, S.CANCELLED}),
    S.IN_PROGRESS:      frozenset({S.COMPLETED, S.CANCELLED}),
    S.COMPLETED:        frozenset({S.CANCELLED}),
    S.CANCELLED:        frozenset(),
}


def can_transition(current: ProjectStatus, target: ProjectStatus) -> bool:
    return target in ALLOWED_TRANSITIONS[current]


def check_transition(current: ProjectStatus, target: ProjectStatus) -> None:
    """Raise InvalidTransitionError unless ``current -> target`` is in the table."""
    if not can_transition(current, target):
        raise InvalidTransitionError(current, target, ALLOWED_TRANSITIONS[current])

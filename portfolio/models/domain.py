# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Domain models: pure data structures, NO FastAPI dependency.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from portfolio.models.errors import InvalidRoleError


class Role(str, Enum):
    MANAGER = "manager"
    STAFF = "staff"

    @classmethod
    def parse(cls, value: str) -> "Role":
        """Case-insensitive lookup; anything else raises InvalidRoleError."""
        normalised = (value or "").strip().lower()
        for role in cls:
            if role.value == normalised:
                return role
        raise InvalidRoleError(value)


class ProjectStatus(str, Enum):
    UNDER_REVIEW = "under_review"
    REVIEW_COMPLETED = "review_completed"
    REVIEW_APPROVED = "review_approved"
    STARTED = "started"
    PLANNED = "planned"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class RiskClassification(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def label(self) -> str:
        return _RISK_LABELS[self]


_RISK_LABELS = {
    RiskClassification.LOW: "Low risk",
    RiskClassification.MEDIUM: "Medium risk",
    RiskClassification.HIGH: "High risk",
}

# Statuses that no longer count against a staff member's allocation.
INACTIVE_STATUSES = frozenset({ProjectStatus.COMPLETED, ProjectStatus.CANCELLED})

# Past these, a general update may not touch the status and deletion is refused.
FROZEN_STATUSES = frozenset({
    ProjectStatus.STARTED,
    ProjectStatus.IN_PROGRESS,
    ProjectStatus.COMPLETED,
})


class Member(BaseModel):
    """A manager or staff member. The role is fixed at creation."""
    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    role: Role
    created_at: Optional[datetime] = None

    @property
    def is_manager(self) -> bool:
        return self.role is Role.MANAGER

    @property
    def is_staff(self) -> bool:
        return self.role is Role.STAFF


class Project(BaseModel):
    """A portfolio project with its manager and staff set."""

    id: Optional[int] = None
    name: str
    start_date: date
    expected_end_date: date
    actual_end_date: Optional[date] = None
    total_budget: Decimal
    description: Optional[str] = None
    status: ProjectStatus = ProjectStatus.UNDER_REVIEW
    risk_classification: Optional[RiskClassification] = None
    manager: Member
    staff: list[Member] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def staff_ids(self) -> list[int]:
        return sorted(m.id for m in self.staff)

    def is_active(self) -> bool:
        return self.status not in INACTIVE_STATUSES

    def can_be_deleted(self) -> bool:
        return self.status not in FROZEN_STATUSES

# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Request / Response schemas: API contract definitions.
Used ONLY at the controller (HTTP) boundary and as service input.
"""
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from portfolio.models.domain import Member, Project, ProjectStatus


def _normalise_status(v):
    if isinstance(v, str):
        return v.strip().lower()
    return v


def _iso(dt: Optional[datetime]) -> Optional[str]:
    return dt.isoformat() if dt else None


# ── Member Schemas ──

class MemberCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    role: str = Field(..., description="'manager' or 'staff'")

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be blank")
        return v


class MemberOut(BaseModel):
    id: int
    name: str
    role: str
    created_at: Optional[str] = None

    @classmethod
    def from_member(cls, member: Member) -> "MemberOut":
        return cls(id=member.id, name=member.name, role=member.role.value,
                   created_at=_iso(member.created_at))


# ── Project Schemas ──

class ProjectRequest(BaseModel):
    """Payload for both create (status ignored) and full update."""
    name: str = Field(..., min_length=1, max_length=255)
    start_date: date
    expected_end_date: date
    actual_end_date: Optional[date] = None
    total_budget: Decimal = Field(..., ge=0, max_digits=15, decimal_places=2)
    description: Optional[str] = Field(None, max_length=5000)
    status: Optional[ProjectStatus] = None
    manager_id: int
    staff_ids: list[int] = Field(default_factory=list)

    @field_validator("status", mode="before")
    @classmethod
    def normalise_status(cls, v):
        return _normalise_status(v)

    @field_validator("staff_ids")
    @classmethod
    def dedupe_staff(cls, v: list[int]) -> list[int]:
        return list(dict.fromkeys(v))


class StatusUpdate(BaseModel):
    status: ProjectStatus

    @field_validator("status", mode="before")
    @classmethod
    def normalise_status(cls, v):
        return _normalise_status(v)


class ProjectOut(BaseModel):
    id: int
    name: str
    start_date: date
    expected_end_date: date
    actual_end_date: Optional[date]
    total_budget: Decimal
    description: Optional[str]
    status: ProjectStatus
    risk_classification: Optional[str]
    risk_label: Optional[str]
    manager_id: int
    manager_name: str
    staff_ids: list[int]
    created_at: Optional[str]
    updated_at: Optional[str]

    @classmethod
    def from_project(cls, project: Project) -> "ProjectOut":
        risk = project.risk_classification
        return cls(
            id=project.id,
            name=project.name,
            start_date=project.start_date,
            expected_end_date=project.expected_end_date,
            actual_end_date=project.actual_end_date,
            total_budget=project.total_budget,
            description=project.description,
            status=project.status,
            risk_classification=risk.value if risk else None,
            risk_label=risk.label if risk else None,
            manager_id=project.manager.id,
            manager_name=project.manager.name,
            staff_ids=project.staff_ids,
            created_at=_iso(project.created_at),
            updated_at=_iso(project.updated_at),
        )


class PaginatedProjects(BaseModel):
    total: int
    page: int
    per_page: int
    projects: list[ProjectOut]


class RiskOut(BaseModel):
    project_id: int
    risk_classification: Optional[str]
    label: Optional[str]


class PortfolioReport(BaseModel):
    projects_by_status: dict[str, int]
    budget_by_status: dict[str, Decimal]
    average_duration_days: float
    unique_staff_count: int
    total_projects: int


class ErrorResponse(BaseModel):
    error: str
    detail: Optional[str] = None
    request_id: Optional[str] = None

# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Business logic for the project lifecycle."""
from contextlib import contextmanager
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Optional

from portfolio.core.logging import get_logger
from portfolio.metrics import PROJECTS_CREATED, PROJECTS_TOTAL, RULE_VIOLATIONS, STATUS_TRANSITIONS
from portfolio.models.domain import FROZEN_STATUSES, Project, ProjectStatus
from portfolio.models.errors import (
    BusinessRuleError, FrozenStatusError, NotDeletableError, ProjectNotFoundError,
)
from portfolio.models.lifecycle import check_transition
from portfolio.repositories.project_repository import ProjectRepository
from portfolio.schemas import ProjectRequest
from portfolio.services.allocation import AllocationValidator
from portfolio.services.risk import classify

logger = get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


@contextmanager
def _rule_guard(operation: str, project_id: Optional[int] = None):
    """Count and log rule violations before letting them propagate."""
    try:
        yield
    except BusinessRuleError as exc:
        RULE_VIOLATIONS.labels(rule=exc.code).inc()
        logger.warning("%s rejected project=%s rule=%s: %s",
                       operation, project_id, exc.code, exc)
        raise


class ProjectService:
    def __init__(self, repo: ProjectRepository, validator: AllocationValidator,
                 today=date.today):
        self._repo = repo
        self._validator = validator
        self._today = today

    def seed_gauges(self):
        with self._repo.connect() as conn:
            counts = self._repo.count_by_status(conn)
        for status in ProjectStatus:
            PROJECTS_TOTAL.labels(status=status.value).set(counts.get(status.value, 0))
        logger.info("Prometheus gauges loaded from DB")

    # ── Commands ──

    def create_project(self, request: ProjectRequest) -> Project:
        with _rule_guard("create"), self._repo.begin() as conn:
            manager, staff = self._validator.validate_request(conn, request)
            now = _utcnow()
            project = Project(
                name=request.name,
                start_date=request.start_date,
                expected_end_date=request.expected_end_date,
                actual_end_date=request.actual_end_date,
                total_budget=request.total_budget,
                description=request.description,
                status=ProjectStatus.UNDER_REVIEW,
                manager=manager,
                staff=staff,
                created_at=now,
                updated_at=now,
            )
            self._stamp_risk(project)
            project.id = self._repo.insert(conn, project)

        PROJECTS_TOTAL.labels(status=project.status.value).inc()
        PROJECTS_CREATED.labels(risk=project.risk_classification.value).inc()
        logger.info("Project created id=%s manager=%s staff=%d risk=%s",
                    project.id, manager.id, len(staff), project.risk_classification.value)
        return project

    def update_project(self, project_id: int, request: ProjectRequest) -> Project:
        with _rule_guard("update", project_id), self._repo.begin() as conn:
            project = self._load(conn, project_id)
            manager, staff = self._validator.validate_request(
                conn, request, existing_project_id=project_id,
            )

            old_status = project.status
            new_status = request.status
            if new_status is not None and new_status != old_status:
                check_transition(old_status, new_status)
                if old_status in FROZEN_STATUSES:
                    raise FrozenStatusError(old_status)

            project.name = request.name
            project.start_date = request.start_date
            project.expected_end_date = request.expected_end_date
            project.total_budget = request.total_budget
            project.description = request.description
            if request.actual_end_date is not None:
                project.actual_end_date = request.actual_end_date
            if new_status is not None and new_status != old_status:
                self._apply_status(project, new_status)
            project.manager = manager
            project.staff = staff
            project.updated_at = _utcnow()
            self._stamp_risk(project)
            self._repo.update(conn, project)

        self._record_transition(old_status, project.status)
        logger.info("Project updated id=%s status=%s risk=%s",
                    project_id, project.status.value, project.risk_classification.value)
        return project

    def update_status(self, project_id: int, new_status: ProjectStatus) -> Project:
        with _rule_guard("status change", project_id), self._repo.begin() as conn:
            project = self._load(conn, project_id)
            old_status = project.status
            check_transition(old_status, new_status)

            self._apply_status(project, new_status)
            project.updated_at = _utcnow()
            self._stamp_risk(project)
            self._repo.update(conn, project)

        self._record_transition(old_status, new_status)
        logger.info("Project status changed id=%s from=%s to=%s",
                    project_id, old_status.value, new_status.value)
        return project

    def delete_project(self, project_id: int) -> None:
        with _rule_guard("delete", project_id), self._repo.begin() as conn:
            project = self._load(conn, project_id)
            if not project.can_be_deleted():
                raise NotDeletableError(project_id, project.status)
            self._repo.delete(conn, project_id)

        PROJECTS_TOTAL.labels(status=project.status.value).dec()
        logger.info("Project deleted id=%s", project_id)

    # ── Queries ──

    def get_project(self, project_id: int) -> Project:
        with self._repo.connect() as conn:
            return self._load(conn, project_id)

    def list_projects(self, name: Optional[str] = None, status: Optional[ProjectStatus] = None,
                      manager_id: Optional[int] = None, member_id: Optional[int] = None,
                      page: int = 1, per_page: int = 20) -> tuple[int, list[Project]]:
        with self._repo.connect() as conn:
            return self._repo.list_projects(conn, name, status, manager_id, member_id,
                                            page, per_page)

    def generate_portfolio_report(self) -> dict[str, Any]:
        with self._repo.connect() as conn:
            counts = self._repo.count_by_status(conn)
            budgets = self._repo.budget_by_status(conn)
            avg_days = self._repo.average_completed_duration_days(conn)
            unique_staff = self._repo.count_distinct_staff(conn)

        return {
            "projects_by_status": {s.value: counts.get(s.value, 0) for s in ProjectStatus},
            "budget_by_status": {s.value: budgets.get(s.value, Decimal("0")) for s in ProjectStatus},
            "average_duration_days": float(avg_days) if avg_days is not None else 0.0,
            "unique_staff_count": unique_staff,
            "total_projects": sum(counts.values()),
        }

    # ── Private ──

    def _load(self, conn, project_id: int) -> Project:
        project = self._repo.get(conn, project_id)
        if project is None:
            raise ProjectNotFoundError(project_id)
        return project

    def _apply_status(self, project: Project, new_status: ProjectStatus) -> None:
        project.status = new_status
        if new_status is ProjectStatus.COMPLETED:
            project.actual_end_date = self._today()

    def _stamp_risk(self, project: Project) -> None:
        project.risk_classification = classify(
            project.total_budget, project.start_date, project.expected_end_date,
        )

    def _record_transition(self, old_status: ProjectStatus, new_status: ProjectStatus) -> None:
        if old_status == new_status:
            return
        PROJECTS_TOTAL.labels(status=old_status.value).dec()
        PROJECTS_TOTAL.labels(status=new_status.value).inc()
        STATUS_TRANSITIONS.labels(from_status=old_status.value, to_status=new_status.value).inc()

# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Data-access layer for projects, their staff links, and portfolio aggregates."""
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy import delete, func, insert, select, text, update
from sqlalchemy.engine import Connection, Engine

from portfolio.core.logging import get_logger
from portfolio.models.domain import (
    INACTIVE_STATUSES, Member, Project, ProjectStatus, RiskClassification, Role,
)
from portfolio.repositories.tables import members, metadata, project_staff, projects

logger = get_logger(__name__)

_manager = members.alias("manager")

PROJECT_COLS = (
    projects.c.id, projects.c.name, projects.c.start_date, projects.c.expected_end_date,
    projects.c.actual_end_date, projects.c.total_budget, projects.c.description,
    projects.c.status, projects.c.risk_classification, projects.c.created_at,
    projects.c.updated_at,
    _manager.c.id, _manager.c.name, _manager.c.role, _manager.c.created_at,
)

_INACTIVE_VALUES = [s.value for s in INACTIVE_STATUSES]


def _row_to_project(row, staff: list[Member]) -> Project:
    return Project(
        id=row[0],
        name=row[1],
        start_date=row[2],
        expected_end_date=row[3],
        actual_end_date=row[4],
        total_budget=Decimal(str(row[5])),
        description=row[6],
        status=ProjectStatus(row[7]),
        risk_classification=RiskClassification(row[8]) if row[8] else None,
        created_at=row[9],
        updated_at=row[10],
        manager=Member(id=row[11], name=row[12], role=Role(row[13]), created_at=row[14]),
        staff=staff,
    )


def _project_values(project: Project) -> dict[str, Any]:
    return {
        "name": project.name,
        "start_date": project.start_date,
        "expected_end_date": project.expected_end_date,
        "actual_end_date": project.actual_end_date,
        "total_budget": project.total_budget,
        "description": project.description,
        "status": project.status.value,
        "risk_classification": (
            project.risk_classification.value if project.risk_classification else None
        ),
        "manager_id": project.manager.id,
        "created_at": project.created_at,
        "updated_at": project.updated_at,
    }


class ProjectRepository:
    def __init__(self, engine: Engine):
        self._engine = engine

    def begin(self):
        """Transaction scope: commits on exit, rolls back on any exception."""
        return self._engine.begin()

    def connect(self):
        return self._engine.connect()

    # ── Write ──────────────────────────────────────────────────────────

    def insert(self, conn: Connection, project: Project) -> int:
        result = conn.execute(insert(projects).values(**_project_values(project)))
        project_id = result.inserted_primary_key[0]
        self._replace_staff(conn, project_id, project.staff_ids)
        return project_id

    def update(self, conn: Connection, project: Project) -> None:
        conn.execute(
            update(projects)
            .where(projects.c.id == project.id)
            .values(**_project_values(project))
        )
        self._replace_staff(conn, project.id, project.staff_ids)

    def delete(self, conn: Connection, project_id: int) -> None:
        conn.execute(delete(project_staff).where(project_staff.c.project_id == project_id))
        conn.execute(delete(projects).where(projects.c.id == project_id))

    # ── Read ───────────────────────────────────────────────────────────

    def get(self, conn: Connection, project_id: int) -> Optional[Project]:
        row = conn.execute(
            self._base_select().where(projects.c.id == project_id)
        ).fetchone()
        if not row:
            return None
        staff = self._staff_for(conn, [project_id])
        return _row_to_project(row, staff.get(project_id, []))

    def list_projects(self, conn: Connection, name: Optional[str] = None,
                      status: Optional[ProjectStatus] = None,
                      manager_id: Optional[int] = None,
                      member_id: Optional[int] = None,
                      page: int = 1, per_page: int = 20) -> tuple[int, list[Project]]:
        conditions = []
        if name:
            conditions.append(projects.c.name.icontains(name, autoescape=True))
        if status is not None:
            conditions.append(projects.c.status == status.value)
        if manager_id is not None:
            conditions.append(projects.c.manager_id == manager_id)
        if member_id is not None:
            conditions.append(projects.c.id.in_(
                select(project_staff.c.project_id).where(project_staff.c.member_id == member_id)
            ))

        total = conn.execute(
            select(func.count()).select_from(projects).where(*conditions)
        ).scalar() or 0
        rows = conn.execute(
            self._base_select()
            .where(*conditions)
            .order_by(projects.c.created_at.desc(), projects.c.id.desc())
            .limit(per_page)
            .offset((page - 1) * per_page)
        ).fetchall()
        staff = self._staff_for(conn, [r[0] for r in rows])
        return total, [_row_to_project(r, staff.get(r[0], [])) for r in rows]

    def staff_ids(self, conn: Connection, project_id: int) -> set[int]:
        rows = conn.execute(
            select(project_staff.c.member_id).where(project_staff.c.project_id == project_id)
        ).fetchall()
        return {r[0] for r in rows}

    def count_active_for_member(self, conn: Connection, member_id: int) -> int:
        return conn.execute(
            select(func.count())
            .select_from(project_staff.join(projects, project_staff.c.project_id == projects.c.id))
            .where(
                project_staff.c.member_id == member_id,
                projects.c.status.not_in(_INACTIVE_VALUES),
            )
        ).scalar() or 0

    # ── Aggregates ─────────────────────────────────────────────────────

    def count_by_status(self, conn: Connection) -> dict[str, int]:
        rows = conn.execute(
            select(projects.c.status, func.count()).group_by(projects.c.status)
        ).fetchall()
        return {r[0]: r[1] for r in rows}

    def budget_by_status(self, conn: Connection) -> dict[str, Decimal]:
        rows = conn.execute(
            select(projects.c.status, func.sum(projects.c.total_budget))
            .group_by(projects.c.status)
        ).fetchall()
        return {r[0]: Decimal(str(r[1])) if r[1] is not None else Decimal("0") for r in rows}

    def average_completed_duration_days(self, conn: Connection) -> Optional[float]:
        # Date arithmetic differs between backends, so the average is taken here.
        rows = conn.execute(
            select(projects.c.start_date, projects.c.actual_end_date).where(
                projects.c.status == ProjectStatus.COMPLETED.value,
                projects.c.actual_end_date.is_not(None),
            )
        ).fetchall()
        if not rows:
            return None
        return sum((end - start).days for start, end in rows) / len(rows)

    def count_distinct_staff(self, conn: Connection) -> int:
        return conn.execute(
            select(func.count(func.distinct(project_staff.c.member_id)))
        ).scalar() or 0

    # ── Schema / health ────────────────────────────────────────────────

    def create_schema(self) -> None:
        metadata.create_all(self._engine)
        logger.info("Database schema ensured")

    def verify_connection(self) -> None:
        with self._engine.connect() as conn:
            conn.execute(text("SELECT 1"))

    def dispose(self) -> None:
        self._engine.dispose()

    # ── Private ────────────────────────────────────────────────────────

    def _base_select(self):
        return select(*PROJECT_COLS).join_from(
            projects, _manager, projects.c.manager_id == _manager.c.id
        )

    def _staff_for(self, conn: Connection, project_ids: list[int]) -> dict[int, list[Member]]:
        if not project_ids:
            return {}
        rows = conn.execute(
            select(project_staff.c.project_id, members.c.id, members.c.name,
                   members.c.role, members.c.created_at)
            .join_from(project_staff, members, project_staff.c.member_id == members.c.id)
            .where(project_staff.c.project_id.in_(project_ids))
            .order_by(members.c.id)
        ).fetchall()
        staff: dict[int, list[Member]] = {}
        for r in rows:
            staff.setdefault(r[0], []).append(
                Member(id=r[1], name=r[2], role=Role(r[3]), created_at=r[4])
            )
        return staff

    def _replace_staff(self, conn: Connection, project_id: int, member_ids: list[int]) -> None:
        conn.execute(delete(project_staff).where(project_staff.c.project_id == project_id))
        if member_ids:
            conn.execute(
                insert(project_staff),
                [{"project_id": project_id, "member_id": mid} for mid in member_ids],
            )

# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Repository: Member data access.
NO business rules here: pure CRUD.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import insert, select
from sqlalchemy.engine import Connection, Engine

from portfolio.models.domain import Member, Role
from portfolio.repositories.tables import members

MEMBER_COLS = (members.c.id, members.c.name, members.c.role, members.c.created_at)


def _row_to_member(row) -> Member:
    return Member(id=row[0], name=row[1], role=Role(row[2]), created_at=row[3])


class MemberRepository:
    def __init__(self, engine: Engine):
        self._engine = engine

    def begin(self):
        return self._engine.begin()

    def connect(self):
        return self._engine.connect()

    # ── Write ──────────────────────────────────────────────────────────

    def insert(self, conn: Connection, name: str, role: Role) -> Member:
        now = datetime.now(timezone.utc).replace(tzinfo=None)
        result = conn.execute(
            insert(members).values(name=name, role=role.value, created_at=now)
        )
        return Member(id=result.inserted_primary_key[0], name=name, role=role, created_at=now)

    # ── Read ───────────────────────────────────────────────────────────

    def get(self, conn: Connection, member_id: int) -> Optional[Member]:
        row = conn.execute(
            select(*MEMBER_COLS).where(members.c.id == member_id)
        ).fetchone()
        return _row_to_member(row) if row else None

    def get_for_update(self, conn: Connection, member_id: int) -> Optional[Member]:
        """Like get, but the row stays locked until the surrounding transaction ends."""
        row = conn.execute(
            select(*MEMBER_COLS).where(members.c.id == member_id).with_for_update()
        ).fetchone()
        return _row_to_member(row) if row else None

    def lock(self, conn: Connection, member_ids: list[int]) -> None:
        """Row-lock several members at once, always in ascending id order."""
        if member_ids:
            conn.execute(
                select(members.c.id)
                .where(members.c.id.in_(member_ids))
                .order_by(members.c.id)
                .with_for_update()
            ).fetchall()

    def exists(self, conn: Connection, name: str, role: Role) -> bool:
        row = conn.execute(
            select(members.c.id).where(members.c.name == name, members.c.role == role.value)
        ).fetchone()
        return row is not None

    def list_members(self, conn: Connection, role: Optional[Role] = None) -> list[Member]:
        stmt = select(*MEMBER_COLS)
        if role is not None:
            stmt = stmt.where(members.c.role == role.value)
        rows = conn.execute(stmt.order_by(members.c.id)).fetchall()
        return [_row_to_member(r) for r in rows]

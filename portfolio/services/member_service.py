# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Member registry: create and look up managers and staff.
"""

from sqlalchemy.exc import IntegrityError

from portfolio.core.logging import get_logger
from portfolio.metrics import MEMBERS_CREATED
from portfolio.models.domain import Member, Role
from portfolio.models.errors import DuplicateMemberError, MemberNotFoundError
from portfolio.repositories.member_repository import MemberRepository

logger = get_logger(__name__)


class MemberService:
    """Business logic for the member registry."""

    def __init__(self, repo: MemberRepository) -> None:
        self._repo = repo

    def create_member(self, name: str, role: str) -> Member:
        """Raises InvalidRoleError / DuplicateMemberError."""
        parsed = Role.parse(role)
        name = name.strip()
        try:
            with self._repo.begin() as conn:
                if self._repo.exists(conn, name, parsed):
                    logger.warning("Duplicate member rejected name=%s role=%s", name, parsed.value)
                    raise DuplicateMemberError(name, parsed.value)
                member = self._repo.insert(conn, name, parsed)
        except IntegrityError:
            # A concurrent create committed the same (name, role) first.
            logger.warning("Duplicate member rejected by constraint name=%s role=%s",
                           name, parsed.value)
            raise DuplicateMemberError(name, parsed.value) from None

        MEMBERS_CREATED.labels(role=parsed.value).inc()
        logger.info("Member created id=%s role=%s", member.id, member.role.value)
        return member

    def get_member(self, member_id: int) -> Member:
        with self._repo.connect() as conn:
            member = self._repo.get(conn, member_id)
        if member is None:
            raise MemberNotFoundError(member_id)
        return member

    def list_members(self) -> list[Member]:
        with self._repo.connect() as conn:
            return self._repo.list_members(conn)

    def list_by_role(self, role: str) -> list[Member]:
        parsed = Role.parse(role)
        with self._repo.connect() as conn:
            return self._repo.list_members(conn, parsed)

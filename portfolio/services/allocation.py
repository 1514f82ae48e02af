# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Allocation validation for project staffing.

Checks manager and staff roles, the per-member active project limit, the
staff set size and the date range. Every check fails fast by raising the
matching BusinessRuleError; nothing is accumulated.

All methods take the caller's open connection so the counts they read and
the write that follows share one transaction. Staff member rows are read
with SELECT ... FOR UPDATE, which serialises concurrent allocations of the
same member at the database.
"""

from typing import Optional

from portfolio.models.domain import Member
from portfolio.models.errors import (
    EmptyStaffSetError, InvalidDateRangeError, MemberNotFoundError, NotManagerError,
    NotStaffError, StaffAtCapacityError, TooManyStaffError,
)
from portfolio.repositories.member_repository import MemberRepository
from portfolio.repositories.project_repository import ProjectRepository
from portfolio.schemas import ProjectRequest

MIN_STAFF = 1
MAX_STAFF = 10
MAX_ACTIVE_PROJECTS = 3


class AllocationValidator:
    def __init__(self, members: MemberRepository, projects: ProjectRepository) -> None:
        self._members = members
        self._projects = projects

    def require_member(self, conn, member_id: int, lock: bool = False) -> Member:
        if lock:
            member = self._members.get_for_update(conn, member_id)
        else:
            member = self._members.get(conn, member_id)
        if member is None:
            raise MemberNotFoundError(member_id)
        return member

    def validate_manager(self, conn, member_id: int) -> Member:
        member = self.require_member(conn, member_id)
        if not member.is_manager:
            raise NotManagerError(member_id)
        return member

    def validate_staff(self, conn, member_id: int) -> Member:
        member = self.require_member(conn, member_id, lock=True)
        if not member.is_staff:
            raise NotStaffError(member_id)
        return member

    def is_available(self, conn, member_id: int) -> bool:
        return self._projects.count_active_for_member(conn, member_id) < MAX_ACTIVE_PROJECTS

    def validate_request(self, conn, request: ProjectRequest,
                         existing_project_id: Optional[int] = None) -> tuple[Member, list[Member]]:
        """Run every rule in order and return the resolved (manager, staff)."""
        manager = self.validate_manager(conn, request.manager_id)

        staff_ids = list(dict.fromkeys(request.staff_ids))
        if len(staff_ids) < MIN_STAFF:
            raise EmptyStaffSetError()
        if len(staff_ids) > MAX_STAFF:
            raise TooManyStaffError(len(staff_ids), MAX_STAFF)

        # Staff rows stay locked until commit, so capacity checks for one member
        # run one transaction at a time.
        self._members.lock(conn, staff_ids)
        current_staff = (
            self._projects.staff_ids(conn, existing_project_id)
            if existing_project_id is not None else set()
        )
        staff: list[Member] = []
        for member_id in staff_ids:
            staff.append(self.validate_staff(conn, member_id))
            # Members already on the project are not counted against themselves.
            if member_id not in current_staff and not self.is_available(conn, member_id):
                raise StaffAtCapacityError(member_id, MAX_ACTIVE_PROJECTS)

        if request.expected_end_date < request.start_date:
            raise InvalidDateRangeError()

        return manager, staff

# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Domain exceptions.

NotFoundError subclasses map to HTTP 404, BusinessRuleError subclasses to
HTTP 400. Each rule violation carries a stable ``code`` used as a metrics
label.
"""


class NotFoundError(LookupError):
    code = "not_found"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class MemberNotFoundError(NotFoundError):
    def __init__(self, member_id: int):
        super().__init__(f"Member {member_id} not found")
        self.member_id = member_id


class ProjectNotFoundError(NotFoundError):
    def __init__(self, project_id: int):
        super().__init__(f"Project {project_id} not found")
        self.project_id = project_id


class BusinessRuleError(ValueError):
    code = "business_rule"


class DuplicateMemberError(BusinessRuleError):
    code = "duplicate_member"

    def __init__(self, name: str, role: str):
        super().__init__(f"A member named '{name}' with role '{role}' already exists")


class InvalidRoleError(BusinessRuleError):
    code = "invalid_role"

    def __init__(self, value):
        super().__init__(f"Invalid role '{value}'. Must be 'manager' or 'staff'")


class EmptyStaffSetError(BusinessRuleError):
    code = "empty_staff_set"

    def __init__(self):
        super().__init__("A project must have at least 1 staff member")


class TooManyStaffError(BusinessRuleError):
    code = "too_many_staff"

    def __init__(self, size: int, limit: int):
        super().__init__(f"A project cannot have more than {limit} staff members (got {size})")


class InvalidDateRangeError(BusinessRuleError):
    code = "invalid_date_range"

    def __init__(self):
        super().__init__("The expected end date cannot be before the start date")


class NotManagerError(BusinessRuleError):
    code = "not_manager"

    def __init__(self, member_id: int):
        super().__init__(f"Member {member_id} is not a manager")


class NotStaffError(BusinessRuleError):
    code = "not_staff"

    def __init__(self, member_id: int):
        super().__init__(f"Member {member_id} is not a staff member")


class StaffAtCapacityError(BusinessRuleError):
    code = "staff_at_capacity"

    def __init__(self, member_id: int, limit: int):
        super().__init__(f"Member {member_id} is already on {limit} active projects")


class InvalidTransitionError(BusinessRuleError):
    code = "invalid_transition"

    def __init__(self, current, target, allowed):
        allowed_txt = sorted(s.value for s in allowed) if allowed else "none (terminal state)"
        super().__init__(
            f"Cannot transition from '{current.value}' to '{target.value}'. "
            f"Allowed: {allowed_txt}"
        )


class FrozenStatusError(BusinessRuleError):
    code = "frozen_status"

    def __init__(self, current):
        super().__init__(
            f"Cannot change the status of a project that is '{current.value}' "
            f"through a general update; use the status endpoint"
        )


class NotDeletableError(BusinessRuleError):
    code = "not_deletable"

    def __init__(self, project_id: int, current):
        super().__init__(
            f"Project {project_id} cannot be deleted while '{current.value}'"
        )

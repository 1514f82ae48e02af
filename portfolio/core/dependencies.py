# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
FastAPI dependency injection: wire repositories and services.
"""

from portfolio.core.database import engine
from portfolio.repositories.member_repository import MemberRepository
from portfolio.repositories.project_repository import ProjectRepository
from portfolio.services.allocation import AllocationValidator
from portfolio.services.member_service import MemberService
from portfolio.services.project_service import ProjectService

# ── Singleton repository instances ──
_member_repo = MemberRepository(engine)
_project_repo = ProjectRepository(engine)

# ── Service instances (with injected dependencies) ──
_validator = AllocationValidator(members=_member_repo, projects=_project_repo)
_member_service = MemberService(_member_repo)
_project_service = ProjectService(_project_repo, _validator)


# ── FastAPI dependency functions ──
def get_member_service() -> MemberService:
    return _member_service


def get_project_service() -> ProjectService:
    return _project_service


def get_project_repo() -> ProjectRepository:
    return _project_repo

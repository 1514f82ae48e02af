# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Repository package: re-exports the member and project repositories."""
from portfolio.repositories.member_repository import MemberRepository
from portfolio.repositories.project_repository import ProjectRepository

__all__ = ["MemberRepository", "ProjectRepository"]

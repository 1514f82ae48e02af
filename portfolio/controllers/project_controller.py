# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Controller: Project CRUD, status transitions, risk, portfolio report."""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from portfolio.core.config import settings
from portfolio.core.dependencies import get_project_service
from portfolio.models.errors import BusinessRuleError, NotFoundError
from portfolio.schemas import (
    PaginatedProjects, PortfolioReport, ProjectOut, ProjectRequest, RiskOut, StatusUpdate,
)
from portfolio.models.domain import ProjectStatus
from portfolio.services.project_service import ProjectService

router = APIRouter(prefix="/api/v1", tags=["Projects"])


@router.post("/projects", status_code=201, response_model=ProjectOut)
def create_project(body: ProjectRequest,
                   service: ProjectService = Depends(get_project_service)):
    try:
        return ProjectOut.from_project(service.create_project(body))
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except BusinessRuleError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@router.get("/projects/report", response_model=PortfolioReport)
def generate_portfolio_report(service: ProjectService = Depends(get_project_service)):
    """Per-status counts and budgets, average completed duration, distinct staff."""
    return service.generate_portfolio_report()


@router.get("/projects", response_model=PaginatedProjects)
def list_projects(
    name: Optional[str] = None,
    status: Optional[str] = None,
    manager_id: Optional[int] = None,
    member_id: Optional[int] = None,
    page: int = Query(default=1, ge=1),
    per_page: int = Query(default=settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    service: ProjectService = Depends(get_project_service),
):
    status_filter = None
    if status:
        try:
            status_filter = ProjectStatus(status.strip().lower())
        except ValueError:
            raise HTTPException(status_code=400, detail=f"Unknown status '{status}'")
    total, projects = service.list_projects(name, status_filter, manager_id, member_id,
                                            page, per_page)
    return PaginatedProjects(
        total=total, page=page, per_page=per_page,
        projects=[ProjectOut.from_project(p) for p in projects],
    )


@router.get("/projects/{project_id}", response_model=ProjectOut)
def get_project(project_id: int,
                service: ProjectService = Depends(get_project_service)):
    try:
        return ProjectOut.from_project(service.get_project(project_id))
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))


@router.put("/projects/{project_id}", response_model=ProjectOut)
def update_project(project_id: int, body: ProjectRequest,
                   service: ProjectService = Depends(get_project_service)):
    try:
        return ProjectOut.from_project(service.update_project(project_id, body))
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except BusinessRuleError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@router.patch("/projects/{project_id}/status", response_model=ProjectOut)
def update_project_status(project_id: int, body: StatusUpdate,
                          service: ProjectService = Depends(get_project_service)):
    try:
        return ProjectOut.from_project(service.update_status(project_id, body.status))
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except BusinessRuleError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@router.delete("/projects/{project_id}", status_code=204)
def delete_project(project_id: int,
                   service: ProjectService = Depends(get_project_service)):
    try:
        service.delete_project(project_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except BusinessRuleError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return Response(status_code=204)


@router.get("/projects/{project_id}/risk", response_model=RiskOut)
def get_project_risk(project_id: int,
                     service: ProjectService = Depends(get_project_service)):
    try:
        project = service.get_project(project_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    risk = project.risk_classification
    return RiskOut(
        project_id=project_id,
        risk_classification=risk.value if risk else None,
        label=risk.label if risk else None,
    )

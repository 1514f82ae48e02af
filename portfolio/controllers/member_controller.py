# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Controller: Member registry endpoints.
Thin HTTP layer: delegates ALL logic to MemberService.
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from portfolio.core.dependencies import get_member_service
from portfolio.models.errors import BusinessRuleError, NotFoundError
from portfolio.schemas import MemberCreate, MemberOut
from portfolio.services.member_service import MemberService

router = APIRouter(prefix="/api/v1", tags=["Members"])


@router.post("/members", status_code=201, response_model=MemberOut)
def create_member(
    payload: MemberCreate,
    service: MemberService = Depends(get_member_service),
):
    """Register a manager or staff member."""
    try:
        return MemberOut.from_member(service.create_member(payload.name, payload.role))
    except BusinessRuleError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/members", response_model=list[MemberOut])
def list_members(
    role: Optional[str] = None,
    service: MemberService = Depends(get_member_service),
):
    """List all members, optionally only one role."""
    try:
        found = service.list_by_role(role) if role else service.list_members()
    except BusinessRuleError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return [MemberOut.from_member(m) for m in found]


@router.get("/members/{member_id}", response_model=MemberOut)
def get_member(
    member_id: int,
    service: MemberService = Depends(get_member_service),
):
    try:
        return MemberOut.from_member(service.get_member(member_id))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

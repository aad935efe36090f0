from typing import Optional

from fastapi import APIRouter, Depends, status, Query

from app.core.errors import MemberNotFoundError, POSError, to_http_exception
from app.db.mongo import get_db
from app.models.member import MemberCreate, MemberUpdate, MemberResponse, MemberInDB
from app.repositories.member_repo import MemberRepository

router = APIRouter(prefix="/members", tags=["members"])


def _to_member_response(member: MemberInDB) -> MemberResponse:
    return MemberResponse(
        id=str(member.id),
        name=member.name,
        address=member.address,
        phone=member.phone,
        email=member.email,
        status=member.status,
        registered_at=member.registered_at,
        created_at=member.created_at,
        updated_at=member.updated_at
    )


@router.post("", response_model=MemberResponse, status_code=status.HTTP_201_CREATED)
async def create_member(member_data: MemberCreate, db = Depends(get_db)):
    """Register a new member."""
    try:
        member = await MemberRepository(db).create_member(member_data)
    except POSError as exc:
        raise to_http_exception(exc)
    return _to_member_response(member)


@router.get("", response_model=list[MemberResponse])
async def list_members(
    status_filter: Optional[str] = Query(None, alias="status", description="active, inactive or all"),
    search: Optional[str] = Query(None, description="Match name, phone or email"),
    db = Depends(get_db)
):
    """List members, newest first."""
    try:
        members = await MemberRepository(db).list_members(status_filter, search)
    except POSError as exc:
        raise to_http_exception(exc)
    return [_to_member_response(member) for member in members]


@router.get("/{member_id}", response_model=MemberResponse)
async def get_member(member_id: str, db = Depends(get_db)):
    try:
        member = await MemberRepository(db).get_member(member_id)
    except POSError as exc:
        raise to_http_exception(exc)
    if not member:
        raise to_http_exception(MemberNotFoundError(member_id))
    return _to_member_response(member)


@router.patch("/{member_id}", response_model=MemberResponse)
async def update_member(member_id: str, member_data: MemberUpdate, db = Depends(get_db)):
    """Update a member."""
    try:
        member = await MemberRepository(db).update_member(member_id, member_data)
    except POSError as exc:
        raise to_http_exception(exc)
    if not member:
        raise to_http_exception(MemberNotFoundError(member_id))
    return _to_member_response(member)


@router.delete("/{member_id}")
async def delete_member(member_id: str, db = Depends(get_db)):
    """Soft delete a member."""
    try:
        deleted = await MemberRepository(db).soft_delete_member(member_id)
    except POSError as exc:
        raise to_http_exception(exc)
    if not deleted:
        raise to_http_exception(MemberNotFoundError(member_id))
    return {"success": True}

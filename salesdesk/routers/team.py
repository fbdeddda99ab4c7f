"""Team accounts and invitations (admin only)."""

from fastapi import APIRouter, Depends, HTTPException

from salesdesk.core.deps import get_backend, require_csrf_header, require_roles
from salesdesk.enums import ROLES_CAN_INVITE
from salesdesk.schemas.auth import Identity
from salesdesk.schemas.invite import InviteCreate, InviteRead, TeamMemberListResponse
from salesdesk.services import team_service
from salesdesk.services.backend_client import BackendClient

router = APIRouter(
    prefix="/api/users",
    tags=["team"],
    dependencies=[Depends(require_roles(list(ROLES_CAN_INVITE)))],
)


@router.get("", response_model=TeamMemberListResponse)
async def list_members(
    backend: BackendClient = Depends(get_backend),
) -> TeamMemberListResponse:
    """Accounts with email, role and status, ordered by email."""
    return TeamMemberListResponse(items=await team_service.list_members(backend))


@router.post(
    "/invite",
    response_model=InviteRead,
    status_code=201,
    dependencies=[Depends(require_csrf_header)],
)
async def invite_member(
    body: InviteCreate,
    identity: Identity = Depends(require_roles(list(ROLES_CAN_INVITE))),
    backend: BackendClient = Depends(get_backend),
) -> InviteRead:
    """Email an invitation carrying the chosen role."""
    try:
        await team_service.invite_member(
            backend, email=body.email, role=body.role, invited_by=identity.email
        )
    except team_service.InviteError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)

    return InviteRead(
        email=body.email.lower(),
        role=body.role,
        message=f"Invitation sent to {body.email.lower()}!",
    )

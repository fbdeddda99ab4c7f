"""Team management: list accounts and send email invitations."""

import logging

from salesdesk.core.config import settings
from salesdesk.enums import Role
from salesdesk.schemas.invite import TeamMemberRead
from salesdesk.schemas.records import Profile
from salesdesk.services.backend_client import BackendClient, BackendError

logger = logging.getLogger(__name__)

DEFAULT_MEMBER_STATUS = "active"


class InviteError(Exception):
    """Invitation could not be sent."""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def validate_email_domain(email: str) -> None:
    """
    Validate email is from an allowed domain.

    Raises:
        ValueError: If domain not in allowlist
    """
    allowed = settings.allowed_domains_list
    if not allowed:
        return  # No restriction configured

    domain = email.split("@")[-1].lower()
    if domain not in allowed:
        raise ValueError(
            f"Email domain '{domain}' not allowed. Allowed: {', '.join(allowed)}"
        )


async def list_members(backend: BackendClient) -> list[TeamMemberRead]:
    """Accounts ordered by email. A failed read is an empty list."""
    try:
        rows = await backend.select(settings.BACKEND_PROFILES_TABLE, order="email.asc")
    except BackendError as e:
        logger.warning(f"Profile fetch failed: {e.message}")
        return []

    members = []
    for row in rows:
        profile = Profile.model_validate(row)
        if not profile.email:
            continue
        members.append(
            TeamMemberRead(
                id=profile.id,
                email=profile.email,
                role=profile.role or Role.SALES.value,
                status=profile.status or DEFAULT_MEMBER_STATUS,
            )
        )
    return members


async def find_member_role(backend: BackendClient, email: str) -> Role | None:
    """Role stored on the account profile, if the profile exists and is readable."""
    try:
        rows = await backend.select(
            settings.BACKEND_PROFILES_TABLE,
            columns="email, role",
            filters={"email": f"eq.{email.lower()}"},
            limit=1,
        )
    except BackendError as e:
        logger.warning(f"Profile lookup failed: {e.message}")
        return None
    if not rows:
        return None
    role = rows[0].get("role")
    return Role(role) if role and Role.has_value(role) else None


async def invite_member(backend: BackendClient, *, email: str, role: Role, invited_by: str) -> None:
    """Send an email invitation carrying the role claim."""
    email = email.lower().strip()
    try:
        validate_email_domain(email)
    except ValueError as e:
        raise InviteError(str(e)) from e

    try:
        await backend.invite_user_by_email(
            email,
            data={"role": role.value},
            redirect_to=settings.FRONTEND_URL,
        )
    except BackendError as e:
        logger.warning(f"Invite failed: {e.message}", extra={"operator": invited_by})
        raise InviteError(e.message, status_code=502) from e

    logger.info("Invitation sent", extra={"operator": invited_by, "role": role.value})

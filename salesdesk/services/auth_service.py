"""Built-in email/password login."""

import logging

from salesdesk.core.config import settings
from salesdesk.core.security import (
    display_name_from_login_email,
    validate_login_email,
    validate_login_password,
)
from salesdesk.enums import Role
from salesdesk.schemas.auth import Identity
from salesdesk.services import team_service
from salesdesk.services.backend_client import BackendClient

logger = logging.getLogger(__name__)


class LoginError(Exception):
    """Login rejected; ``status_code`` is the HTTP status to answer with."""

    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


async def authenticate(backend: BackendClient, email: str | None, password: str | None) -> Identity:
    """
    Check credentials and resolve the operator's identity.

    Role comes from the account profile when one exists, otherwise
    DEFAULT_LOGIN_ROLE.

    Raises:
        LoginError: 400 for missing/malformed input, 401 for a wrong password
    """
    if not email or not password:
        raise LoginError("Email and password are required", 400)

    if not validate_login_email(email):
        raise LoginError(
            f"Invalid email domain or format. Use first.last@{settings.COMPANY_EMAIL_DOMAIN}",
            400,
        )

    if not validate_login_password(email, password):
        logger.info("Login rejected: invalid credentials")
        raise LoginError("Invalid credentials", 401)

    role = await team_service.find_member_role(backend, email) or Role(settings.DEFAULT_LOGIN_ROLE)
    return Identity(
        email=email.lower(),
        name=display_name_from_login_email(email),
        role=role,
    )

"""Authentication-related Pydantic schemas."""

from pydantic import BaseModel

from salesdesk.enums import Role


class Identity(BaseModel):
    """
    The authenticated operator behind a request.

    Built from the session cookie (local login) or from the identity
    provider's token; carried explicitly into every handler that needs it.
    """
    email: str
    name: str
    role: Role


class LoginRequest(BaseModel):
    email: str | None = None
    password: str | None = None


class LoginResponse(BaseModel):
    success: bool = True
    email: str
    name: str
    role: Role


class LogoutResponse(BaseModel):
    success: bool = True
    redirect_url: str | None = None


class MeResponse(BaseModel):
    """Response schema for GET /auth/me endpoint."""
    email: str
    name: str
    role: Role
    provider: str

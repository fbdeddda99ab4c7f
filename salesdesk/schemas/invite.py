"""Invitation and team-member schemas."""

from pydantic import BaseModel, EmailStr

from salesdesk.enums import Role


class InviteCreate(BaseModel):
    email: EmailStr
    role: Role = Role.SALES


class InviteRead(BaseModel):
    email: str
    role: Role
    message: str


class TeamMemberRead(BaseModel):
    id: str | None = None
    email: str
    role: str
    status: str


class TeamMemberListResponse(BaseModel):
    items: list[TeamMemberRead]

"""Pydantic schemas for API request/response models."""

from salesdesk.schemas.auth import Identity, LoginRequest, LoginResponse, MeResponse
from salesdesk.schemas.contact import Contact, ContactListResponse
from salesdesk.schemas.conversation import ConversationPreview, ThreadResponse
from salesdesk.schemas.invite import InviteCreate, InviteRead
from salesdesk.schemas.records import Message, Profile, Ticket

__all__ = [
    "Identity",
    "LoginRequest",
    "LoginResponse",
    "MeResponse",
    "Contact",
    "ContactListResponse",
    "ConversationPreview",
    "ThreadResponse",
    "InviteCreate",
    "InviteRead",
    "Message",
    "Profile",
    "Ticket",
]

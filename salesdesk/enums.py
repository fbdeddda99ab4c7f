"""Enums shared across the API, services and schemas."""

from enum import Enum


class Role(str, Enum):
    """
    Dashboard roles.

    - SALES: Reads conversations and contacts, replies, toggles ticket status
    - ADMIN: Everything SALES can do, plus inviting teammates
    """
    SALES = "sales"
    ADMIN = "admin"

    @classmethod
    def has_value(cls, value: str) -> bool:
        """Check if value is a valid role."""
        return value in cls._value2member_map_


class MessageRole(str, Enum):
    """Author of a chat message."""
    USER = "user"
    ASSISTANT = "assistant"


class TicketStatus(str, Enum):
    OPEN = "open"
    RESOLVED = "resolved"

    def toggled(self) -> "TicketStatus":
        return TicketStatus.OPEN if self == TicketStatus.RESOLVED else TicketStatus.RESOLVED


class ContactProvenance(str, Enum):
    """Whether a contact was first evidenced by a ticket or by chat text."""
    TICKET = "ticket"
    CHAT = "chat"


class ConversationFilter(str, Enum):
    ALL = "all"
    NEW = "new"
    RESOLVED = "resolved"


class AuthProvider(str, Enum):
    """Supported session sources."""
    LOCAL = "local"
    IDENTITY_PROVIDER = "identity_provider"


# Permission sets
ROLES_CAN_INVITE = {Role.ADMIN}

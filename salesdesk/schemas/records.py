"""Pydantic models for rows read from the data backend.

Backend column names differ from the names used in this service
(``user_id`` is the thread id, ``message`` is the text, ``user_email`` is the
customer email); aliases map one onto the other in both directions.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class Message(BaseModel):
    """One chat message; threads are messages sharing a thread id."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: int | str | None = None
    thread_id: str = Field(
        default="",
        validation_alias=AliasChoices("thread_id", "user_id"),
        serialization_alias="user_id",
    )
    role: str | None = None
    text: str = Field(
        default="",
        validation_alias=AliasChoices("text", "message"),
        serialization_alias="message",
    )
    timestamp: datetime | None = Field(
        default=None,
        validation_alias=AliasChoices("timestamp", "created_at"),
        serialization_alias="created_at",
    )

    @field_validator("thread_id", "text", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        return "" if value is None else value


class Ticket(BaseModel):
    """Support ticket row."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    ticket_id: str | None = None
    customer_email: str | None = Field(
        default=None,
        validation_alias=AliasChoices("customer_email", "user_email"),
        serialization_alias="user_email",
    )
    status: str | None = None
    ticket_number: str | None = None


class Profile(BaseModel):
    """Teammate account row."""

    model_config = ConfigDict(extra="ignore")

    id: str | None = None
    email: str | None = None
    role: str | None = None
    status: str | None = None

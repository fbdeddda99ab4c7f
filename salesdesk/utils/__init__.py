"""Utility modules."""

from salesdesk.utils.extraction import (
    extract_emails,
    extract_explicit_name,
    extract_phones,
    name_from_email,
)

__all__ = [
    "extract_emails",
    "extract_explicit_name",
    "extract_phones",
    "name_from_email",
]

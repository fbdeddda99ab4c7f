"""Contact detail extraction from free chat text.

Emails (literal and spoken), phone numbers and customer names. All functions
are pure; callers decide how results are merged.
"""

import itertools
import re
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from salesdesk.enums import MessageRole
from salesdesk.schemas.records import Message


UNKNOWN_NAME = "Unknown"


def _dedupe(values: Iterable[str]) -> list[str]:
    """Drop duplicates, keep first-seen order."""
    return list(dict.fromkeys(values))


# =============================================================================
# Standard emails
# =============================================================================

STANDARD_EMAIL_RE = re.compile(r"[\w.+-]+@[\w-]+(?:\.[\w-]+)*\.[A-Za-z]{2,}")


def extract_standard_emails(text: Optional[str]) -> list[str]:
    """Literal ``local@domain.tld`` tokens, lowercased and de-duplicated."""
    if not text:
        return []
    return _dedupe(match.lower() for match in STANDARD_EMAIL_RE.findall(text))


# =============================================================================
# Phonetic (spoken) emails
# =============================================================================

# "john dot doe" is a spoken local part; "doe" alone is the common case.
_LOCAL = r"\b[\w.]+(?:\s+dot\s+[\w.]+)*"
_AT_RATE = r"\s+at\s+(?:the\s+)?(?:rate|range|red)\s+"
# After an explicit "at the rate" cue, transcripts split words ("g mail").
_SPLIT_DOMAIN = r"[\w.]+(?:\s+(?!dot\b)[\w.]+){0,2}?"


@dataclass(frozen=True)
class PhoneticRule:
    """One row of the spoken-email rule table."""

    name: str
    pattern: re.Pattern[str]
    assemble: Callable[[re.Match[str]], str]


def _collapse(run: str) -> str:
    """Spoken 'dot' becomes '.', then all whitespace is removed."""
    return re.sub(r"\s+", "", re.sub(r"\s+dot\s+", ".", run))


def _local_domain_tld(match: re.Match[str]) -> str:
    local, domain, tld = match.group("local", "domain", "tld")
    return f"{_collapse(local)}@{_collapse(domain)}.{_collapse(tld)}"


def _local_joined_domain(match: re.Match[str]) -> str:
    local, domain = match.group("local", "domain")
    return f"{_collapse(local)}@{_collapse(domain)}"


PHONETIC_EMAIL_RULES: tuple[PhoneticRule, ...] = (
    # "xyz at the rate gmail dot com", "xyz at the range g mail dot com"
    PhoneticRule(
        name="at_rate_spoken_dot",
        pattern=re.compile(
            rf"(?P<local>{_LOCAL}){_AT_RATE}(?P<domain>{_SPLIT_DOMAIN})\s+dot\s+(?P<tld>\w+)",
            re.IGNORECASE,
        ),
        assemble=_local_domain_tld,
    ),
    # "xyz at gmail dot com"
    PhoneticRule(
        name="at_spoken_dot",
        pattern=re.compile(
            rf"(?P<local>{_LOCAL})\s+at\s+(?P<domain>[\w.]+)\s+dot\s+(?P<tld>\w+)",
            re.IGNORECASE,
        ),
        assemble=_local_domain_tld,
    ),
    # "xyz at the rate gmail.com"
    PhoneticRule(
        name="at_rate_joined_domain",
        pattern=re.compile(
            rf"(?P<local>{_LOCAL}){_AT_RATE}(?P<domain>[\w.]+\.\w+)",
            re.IGNORECASE,
        ),
        assemble=_local_joined_domain,
    ),
)


def is_plausible_email(candidate: str) -> bool:
    """Exactly one '@' and a dotted domain."""
    if candidate.count("@") != 1:
        return False
    local, domain = candidate.split("@")
    return bool(local) and "." in domain


def apply_phonetic_rule(rule: PhoneticRule, text: str) -> list[str]:
    """All non-overlapping matches of a single rule, assembled and checked."""
    results = []
    for match in rule.pattern.finditer(text.lower()):
        candidate = rule.assemble(match)
        if is_plausible_email(candidate):
            results.append(candidate)
    return results


def extract_phonetic_emails(
    text: Optional[str],
    rules: Iterable[PhoneticRule] = PHONETIC_EMAIL_RULES,
) -> list[str]:
    """
    Emails spoken as words in a transcript.

    Every rule in the table is applied to the same text, in table order, and
    the results are unioned.

    Note: a single "dot <tld>" group is captured, so "yahoo dot co dot uk"
    yields "yahoo.co".
    """
    if not text:
        return []
    found: list[str] = []
    for rule in rules:
        found.extend(apply_phonetic_rule(rule, text))
    return _dedupe(found)


def extract_emails(text: Optional[str]) -> list[str]:
    """Standard emails first, then spoken ones not already seen."""
    return _dedupe([*extract_standard_emails(text), *extract_phonetic_emails(text)])


# =============================================================================
# Phone numbers
# =============================================================================

# Loose: +91 12345 67890, (123) 456-7890, 1234567890 ...
# The digit count check below is the actual filter.
PHONE_CANDIDATE_RE = re.compile(
    r"(?:\+?\d{1,3}[\s.-]?)?(?:\(?\d{2,5}\)?[\s.-]?)?\d{3,5}[\s.-]?\d{3,5}"
)
PHONE_MIN_DIGITS = 10
PHONE_MAX_DIGITS = 15


def count_digits(value: str) -> int:
    return len(re.sub(r"\D", "", value))


def extract_phones(text: Optional[str]) -> list[str]:
    """
    Phone-number-like runs with 10-15 digits.

    Returned as matched (trimmed, unnormalized) text, de-duplicated on that
    text, so "555-123-4567" and "5551234567" are two entries.
    """
    if not text:
        return []
    phones = []
    for match in PHONE_CANDIDATE_RE.findall(text):
        if PHONE_MIN_DIGITS <= count_digits(match) <= PHONE_MAX_DIGITS:
            phones.append(match.strip())
    return _dedupe(phones)


# =============================================================================
# Names
# =============================================================================

SELF_INTRODUCTION_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"my name is\s+([A-Za-z]+(?:\s+[A-Za-z]+){0,2})", re.IGNORECASE),
    re.compile(r"\bi(?:'m| am)\s+([A-Za-z]+(?:\s+[A-Za-z]+)?)\b", re.IGNORECASE),
    re.compile(r"this is\s+([A-Za-z]+(?:\s+[A-Za-z]+)?)\s+(?:here|speaking|from)", re.IGNORECASE),
    re.compile(r"(?:call me|i go by)\s+([A-Za-z]+(?:\s+[A-Za-z]+)?)", re.IGNORECASE),
)

# Words that follow "I am ..." far more often than a name does.
NAME_STOPWORDS = frozenset({
    "interested", "looking", "calling", "writing", "reaching", "contacting",
    "fine", "good", "okay", "here", "available", "ready", "not", "also",
    "just", "very", "really", "quite", "happy", "glad", "frosty", "bot",
    "your", "the", "from", "using",
    "trying", "going", "sorry", "sure", "still", "new",
})
# A name ends at the first of these ("Arjun Mehta and I need help").
NAME_TERMINATORS = frozenset({"and", "a", "an", "in", "on", "at"})
MIN_NAME_LENGTH = 3


def title_case_word(word: str) -> str:
    return f"{word[:1].upper()}{word[1:].lower()}"


def _accept_name_candidate(candidate: str) -> Optional[str]:
    words = list(itertools.takewhile(lambda w: w.lower() not in NAME_TERMINATORS, candidate.split()))
    name = " ".join(words)
    if any(word.lower() in NAME_STOPWORDS for word in words):
        return None
    if len(name) < MIN_NAME_LENGTH:
        return None
    return " ".join(title_case_word(word) for word in words)


def extract_explicit_name(messages: Iterable[Message]) -> Optional[str]:
    """
    First self-introduction in customer messages, in message order.

    Assistant messages are skipped ("I am Frosty, your assistant"). A rejected
    candidate falls through to the next pattern, then the next message.
    """
    for message in messages:
        if message.role != MessageRole.USER.value or not message.text:
            continue
        for pattern in SELF_INTRODUCTION_PATTERNS:
            match = pattern.search(message.text)
            if not match:
                continue
            name = _accept_name_candidate(match.group(1))
            if name:
                return name
    return None


def name_from_email(email: str) -> str:
    """
    Best-effort display name from an email local part.

    "sam.o_neil-99@acme.com" -> "Sam Neil"; single letters are dropped.
    """
    local = email.split("@")[0]
    spaced = re.sub(r"\d+", " ", re.sub(r"[._-]", " ", local))
    words = [word for word in spaced.split() if len(word) > 1]
    return " ".join(title_case_word(word) for word in words) or UNKNOWN_NAME


def is_placeholder_name(name: Optional[str]) -> bool:
    return not name or name == UNKNOWN_NAME

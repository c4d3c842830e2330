"""
Chirpboard Backend: Entity Validation Rules
===========================================

What:  One pure function per entity returning the list of broken rules as
       (field, message) pairs. An empty list means the entity is valid.
How:   The functions only read attributes, so they work on ORM rows, plain
       objects or SimpleNamespace fixtures alike. `ensure_valid()` turns a
       non-empty list into an EntityValidationError.
Who:   The storage layer (database.py) runs them before every flush; the
       Session-Cookie Gate reuses `is_well_formed_token()`.
"""

import re
from typing import Any, Callable, Dict, List, Tuple

from chirpboard.exceptions import EntityValidationError, ValidationError

Violation = Tuple[str, str]

MAX_MESSAGE_LENGTH = 500
MAX_USERNAME_LENGTH = 30
OBJECT_ID_LENGTH = 24
TOKEN_LENGTH = 64
BCRYPT_MARKER = "$2"

_DIGIT = re.compile(r"\d")
_LETTERS_ONLY = re.compile(r"[A-Za-z]+")
_DIGITS_ONLY = re.compile(r"[0-9]+")


# ══════════════════════════════════════════════════════════════════════════
# Shared rules
# ══════════════════════════════════════════════════════════════════════════

def is_well_formed_token(token: Any) -> bool:
    """
    Shape check for session tokens (not a cryptographic check).

    A token is well formed when it is a non-empty string of exactly 64
    characters with no space that is neither letters-only nor digits-only.
    A real SHA-256 hex digest passes; placeholders such as 64 zeros or 64
    "a" characters do not.
    """
    if not isinstance(token, str) or not token:
        return False
    if len(token) != TOKEN_LENGTH:
        return False
    if " " in token:
        return False
    if _LETTERS_ONLY.fullmatch(token):
        return False
    if _DIGITS_ONLY.fullmatch(token):
        return False
    return True


def split_full_name(full_name: str) -> Tuple[str, str]:
    """
    Split a display name into (first, last).

    The value must be exactly two non-empty parts around a single space.

    Raises:
        ValidationError: for anything else ("Rob", "Rob  Bor", "a b c", " Bor")
    """
    parts = full_name.split(" ") if isinstance(full_name, str) else []
    if len(parts) != 2 or not all(parts):
        raise ValidationError(
            message="Full name must have a space between the first and last name",
            field="full_name",
        )
    return parts[0], parts[1]


def _has_valid_id(value: Any) -> bool:
    return isinstance(value, str) and len(value) == OBJECT_ID_LENGTH


# ══════════════════════════════════════════════════════════════════════════
# Per-entity validators
# ══════════════════════════════════════════════════════════════════════════

def validate_user(user: Any) -> List[Violation]:
    violations: List[Violation] = []

    if user.first_name is not None and _DIGIT.search(user.first_name):
        violations.append(("first_name", "no numbers allowed in first name"))
    if user.last_name is not None and _DIGIT.search(user.last_name):
        violations.append(("last_name", "no numbers allowed in last name"))

    if "@" not in (user.email or ""):
        violations.append(("email", "You need an @ in email"))

    if not user.username:
        violations.append(("username", "username is required"))
    elif len(user.username) >= MAX_USERNAME_LENGTH:
        violations.append(("username", "username needs to be less than 30 characters long"))

    if not (user.password_hash or "").startswith(BCRYPT_MARKER):
        violations.append(("password_hash", "password hash needs to start with $2"))

    return violations


def validate_entry(entry: Any) -> List[Violation]:
    violations: List[Violation] = []

    if len(entry.message or "") >= MAX_MESSAGE_LENGTH:
        violations.append(("message", "message needs to be less than 500 characters"))
    if entry.username is None:
        violations.append(("username", "username is required to not be null or undefined"))
    # None means "not set yet"; the column default (0) applies on insert.
    if entry.likes is not None and entry.likes < 0:
        violations.append(("likes", "likes need to be greater than or equal to 0"))

    return violations


def validate_reply(reply: Any) -> List[Violation]:
    violations: List[Violation] = []

    if len(reply.message or "") >= MAX_MESSAGE_LENGTH:
        violations.append(("message", "message is under 500 characters"))
    if not _has_valid_id(reply.creator_id):
        violations.append(("creator_id", "creatorID is 24 characters"))
    if not _has_valid_id(reply.entry_id):
        violations.append(("entry_id", "entryID is 24 characters"))
    if reply.likes is not None and reply.likes < 0:
        violations.append(("likes", "likes need be greater than or equal to 0"))

    return violations


def validate_session(session: Any) -> List[Violation]:
    violations: List[Violation] = []

    if not is_well_formed_token(session.session_id):
        violations.append(("session_id", "sessionID is not a well-formed token"))
    if not _has_valid_id(session.user_id):
        violations.append(("user_id", "userID is 24 characters"))

    return violations


VALIDATORS: Dict[str, Callable[[Any], List[Violation]]] = {
    "User": validate_user,
    "Entry": validate_entry,
    "Reply": validate_reply,
    "Session": validate_session,
}


def ensure_valid(entity: str, obj: Any) -> None:
    """
    Run the validator registered for `entity` against `obj`.

    Raises:
        EntityValidationError: when at least one rule is broken
        KeyError: when no validator is registered under that name
    """
    violations = VALIDATORS[entity](obj)
    if violations:
        raise EntityValidationError(entity, violations)

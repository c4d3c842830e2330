"""
Chirpboard Backend: Entity Rule Tests
=====================================

What:  The per-entity validators, the token shape rule and full-name
       splitting.
How:   Validators only read attributes, so SimpleNamespace rows stand in for
       ORM objects.
"""

from types import SimpleNamespace

import pytest

from chirpboard.exceptions import EntityValidationError, ValidationError
from chirpboard.validators import (
    ensure_valid,
    is_well_formed_token,
    split_full_name,
    validate_entry,
    validate_reply,
    validate_session,
    validate_user,
)

HEX_TOKEN = "9f86d081884c7d659a2feaa0c55ad015a3bf4f1b2b0b822cd15d6c15b0f00a08"
OBJECT_ID = "5f1d7a2b9c3e4d5f6a7b8c9d"


def make_user(**overrides):
    values = dict(
        first_name="Rob",
        last_name="Bor",
        email="rob@example.com",
        username="rob",
        password_hash="$2b$10$abcdefghijklmnopqrstuv",
    )
    values.update(overrides)
    return SimpleNamespace(**values)


class TestTokenShape:

    def test_sha256_hex_digest_is_well_formed(self):
        assert is_well_formed_token(HEX_TOKEN)

    @pytest.mark.parametrize(
        "token",
        [
            "",
            None,
            12345,
            HEX_TOKEN[:-1],
            HEX_TOKEN + "a",
            "a" * 64,
            "0" * 64,
            HEX_TOKEN[:31] + " " + HEX_TOKEN[32:],
        ],
    )
    def test_rejected_shapes(self, token):
        assert not is_well_formed_token(token)

    def test_mixed_case_letters_only_is_rejected(self):
        assert not is_well_formed_token("aB" * 32)


class TestFullName:

    def test_two_parts(self):
        assert split_full_name("Rob Bor") == ("Rob", "Bor")

    @pytest.mark.parametrize("value", ["Rob", "Rob  Bor", "Rob Bor Jr", " Bor", "Rob ", ""])
    def test_anything_else_is_rejected(self, value):
        with pytest.raises(ValidationError) as exc_info:
            split_full_name(value)
        assert "space between the first and last name" in exc_info.value.message


class TestUserRules:

    def test_valid_user(self):
        assert validate_user(make_user()) == []

    def test_missing_names_are_allowed(self):
        assert validate_user(make_user(first_name=None, last_name=None)) == []

    def test_digits_in_names(self):
        violations = validate_user(make_user(first_name="R0b", last_name="B0r"))
        assert ("first_name", "no numbers allowed in first name") in violations
        assert ("last_name", "no numbers allowed in last name") in violations

    def test_email_needs_at_sign(self):
        assert validate_user(make_user(email="rob.example.com")) == [
            ("email", "You need an @ in email")
        ]

    def test_username_length_limit(self):
        assert validate_user(make_user(username="r" * 29)) == []
        assert validate_user(make_user(username="r" * 30)) == [
            ("username", "username needs to be less than 30 characters long")
        ]

    def test_username_required(self):
        assert validate_user(make_user(username="")) == [("username", "username is required")]

    def test_password_hash_marker(self):
        assert validate_user(make_user(password_hash="hunter22")) == [
            ("password_hash", "password hash needs to start with $2")
        ]


class TestEntryRules:

    def test_message_length_boundary(self):
        ok = SimpleNamespace(message="m" * 499, username="rob", likes=0)
        too_long = SimpleNamespace(message="m" * 500, username="rob", likes=0)
        assert validate_entry(ok) == []
        assert validate_entry(too_long) == [
            ("message", "message needs to be less than 500 characters")
        ]

    def test_author_required(self):
        entry = SimpleNamespace(message="hi", username=None, likes=0)
        assert validate_entry(entry) == [
            ("username", "username is required to not be null or undefined")
        ]

    def test_negative_likes(self):
        entry = SimpleNamespace(message="hi", username="rob", likes=-1)
        assert validate_entry(entry) == [
            ("likes", "likes need to be greater than or equal to 0")
        ]

    def test_ensure_valid_message_format(self):
        entry = SimpleNamespace(message="hi", username="rob", likes=-1)
        with pytest.raises(EntityValidationError) as exc_info:
            ensure_valid("Entry", entry)
        assert exc_info.value.message == (
            "Entry validation failed: likes: likes need to be greater than or equal to 0"
        )


class TestReplyRules:

    def test_valid_reply(self):
        reply = SimpleNamespace(message="hi", creator_id=OBJECT_ID, entry_id=OBJECT_ID, likes=0)
        assert validate_reply(reply) == []

    def test_every_rule_reported(self):
        reply = SimpleNamespace(message="m" * 500, creator_id="short", entry_id="x" * 25, likes=-3)
        fields = [field for field, _ in validate_reply(reply)]
        assert fields == ["message", "creator_id", "entry_id", "likes"]

    def test_ensure_valid_joins_violations(self):
        reply = SimpleNamespace(message="hi", creator_id=OBJECT_ID, entry_id="abc", likes=-1)
        with pytest.raises(EntityValidationError) as exc_info:
            ensure_valid("Reply", reply)
        assert exc_info.value.message == (
            "Reply validation failed: entry_id: entryID is 24 characters, "
            "likes: likes need be greater than or equal to 0"
        )


class TestSessionRules:

    def test_valid_session(self):
        assert validate_session(SimpleNamespace(session_id=HEX_TOKEN, user_id=OBJECT_ID)) == []

    def test_bad_token_and_user_id(self):
        violations = validate_session(SimpleNamespace(session_id="0" * 64, user_id="abc"))
        assert violations == [
            ("session_id", "sessionID is not a well-formed token"),
            ("user_id", "userID is 24 characters"),
        ]

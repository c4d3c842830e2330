"""
Chirpboard Backend: Field-Shape Validator ("strong params")
===========================================================

What:  Checks a JSON request body against a declared map of
       field name → primitive kind before any business logic runs.
How:   `check_field_shapes()` is the pure check; `strong_params()` wraps it
       in a FastAPI dependency that reads the body, runs the check, stores
       the sanitized copy on `request.state.strong_params` and returns it.
Who:   Every route that accepts a JSON body, and the live channel.

Rules:
    - The body must be a JSON object.
    - Every declared field must be present with exactly the declared kind.
      STRING accepts only str; NUMBER accepts int/float but never bool;
      BOOLEAN accepts only bool. Objects, arrays and null always fail,
      so `{"password": {"$ne": ""}}` is rejected before it can reach a
      query.
    - Empty strings pass. Each route decides whether a value may be empty.
    - Undeclared fields are dropped from the sanitized copy.
    - After the check the original payload dict is cleared, whatever the
      outcome, so only the sanitized copy remains readable.

Failure → BadTypeError ("Bad type") → 400 via the handler in main.py.
"""

import logging
import math
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Mapping, Union

from fastapi import Request

from chirpboard.exceptions import BadTypeError

logger = logging.getLogger(__name__)


class FieldKind(str, Enum):
    """Primitive kinds a declared field may have."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"


def matches_kind(value: Any, kind: FieldKind) -> bool:
    """
    Exact runtime kind check.

    `type(...) is` rather than isinstance: bool is a subclass of int and
    str subclasses must not slip through either.
    """
    if kind is FieldKind.STRING:
        return type(value) is str
    if kind is FieldKind.NUMBER:
        if type(value) is int:
            return True
        return type(value) is float and math.isfinite(value)
    if kind is FieldKind.BOOLEAN:
        return type(value) is bool
    return False


def check_field_shapes(
    declared: Mapping[str, FieldKind],
    payload: Any,
) -> Dict[str, Any]:
    """
    Validate `payload` against `declared` and return the sanitized copy.

    Args:
        declared: field name → expected kind
        payload:  the decoded request body (mutated: cleared on return)

    Returns:
        A new dict holding exactly the declared fields.

    Raises:
        BadTypeError: body is not an object, or any declared field is
                      missing or has the wrong kind
    """
    if not isinstance(payload, dict):
        if hasattr(payload, "clear"):
            payload.clear()
        raise BadTypeError(fields=list(declared))

    bad_fields = [
        name
        for name, kind in declared.items()
        if name not in payload or not matches_kind(payload[name], kind)
    ]

    sanitized = {} if bad_fields else {name: payload[name] for name in declared}
    payload.clear()

    if bad_fields:
        raise BadTypeError(fields=bad_fields)
    return sanitized


def strong_params(
    declared: Mapping[str, Union[FieldKind, str]],
) -> Callable[[Request], Awaitable[Dict[str, Any]]]:
    """
    Build a FastAPI dependency enforcing `declared` on the JSON body.

    Usage:
        @router.post("/entry")
        async def post_entry(
            params: dict = Depends(strong_params({"message": "string", "username": "string"})),
        ): ...

    Kinds may be given as FieldKind members or their string values.
    """
    schema = {name: FieldKind(kind) for name, kind in declared.items()}

    async def dependency(request: Request) -> Dict[str, Any]:
        try:
            payload = await request.json()
        except ValueError:
            # empty body, invalid JSON or invalid UTF-8
            payload = None

        try:
            params = check_field_shapes(schema, payload)
        except BadTypeError as exc:
            logger.warning(
                "%s %s rejected: %s (fields: %s)",
                request.method,
                request.url.path,
                exc.message,
                ", ".join(exc.fields),
            )
            raise

        request.state.strong_params = params
        return params

    return dependency

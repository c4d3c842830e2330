"""
Chirpboard Backend: Custom Exception Hierarchy
==============================================

What:  Application-specific exceptions for each failure class of the board.
How:   Each exception carries a user-facing message and an optional context
       dict. Handlers registered in main.py turn them into JSON responses
       with the matching HTTP status.
Who:   Raised by the gates, services and the storage layer.

Exception Hierarchy:
    ChirpboardError (base)
    ├── ValidationError              → 400 Bad Request
    │   ├── BadTypeError             → 400 ("Bad type", strong params)
    │   └── EntityValidationError    → 400 (entity rule broken at the store)
    ├── MissingSessionCookieError    → 403 Forbidden
    ├── NotFoundError                → 404 Not Found
    ├── DatabaseError                → 500 Internal Server Error
    └── RateLimitExceededError       → 429 Too Many Requests
"""

from typing import Any, Dict, List, Optional, Tuple

BAD_TYPE_MESSAGE = "Bad type"
MISSING_COOKIE_MESSAGE = "Cookie was required for request but no cookie was found"


class ChirpboardError(Exception):
    """
    Base exception for all Chirpboard application errors.

    Attributes:
        message:  User-facing error description (safe to return in a response)
        context:  Additional debug info (logged, returned only where a handler
                  chooses to expose it)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(ChirpboardError):
    """
    Raised when client input breaks a business rule.

    When:  Empty required value, duplicate handle or email, failed login.
    HTTP:  400 Bad Request
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class BadTypeError(ValidationError):
    """
    Raised by the Field-Shape Validator when a declared field is missing or
    does not have exactly the declared primitive kind.

    The message is always "Bad type"; the offending field names are kept in
    `context["fields"]` for logging.
    """

    def __init__(self, fields: Optional[List[str]] = None):
        super().__init__(message=BAD_TYPE_MESSAGE, context={"fields": list(fields or [])})
        self.fields = list(fields or [])


class EntityValidationError(ValidationError):
    """
    Raised when an entity about to be stored violates one of its rules.

    Message format: "<Entity> validation failed: <field>: <message>", with
    several violations joined by ", ".

    Example:
        Entry validation failed: likes: likes need to be greater than or equal to 0
    """

    def __init__(self, entity: str, violations: List[Tuple[str, str]]):
        details = ", ".join(f"{field}: {message}" for field, message in violations)
        super().__init__(
            message=f"{entity} validation failed: {details}",
            context={
                "entity": entity,
                "violations": [{"field": f, "message": m} for f, m in violations],
            },
        )
        self.entity = entity
        self.violations = list(violations)


class MissingSessionCookieError(ChirpboardError):
    """
    Raised by the Session-Cookie Gate when the signed `sessionID` cookie is
    absent, carries a bad signature, or fails the token shape rule.

    HTTP:  403 Forbidden
    """

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(message=MISSING_COOKIE_MESSAGE, context=context)


class NotFoundError(ChirpboardError):
    """
    Raised when a referenced account or entry does not exist.

    HTTP:  404 Not Found
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class DatabaseError(ChirpboardError):
    """
    Raised when a store operation fails unexpectedly.

    HTTP:  500 Internal Server Error. The response message is always generic;
    details stay in the server log.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(ChirpboardError):
    """
    Raised when a client exceeds the per-IP limit on credential endpoints.

    HTTP:  429 Too Many Requests, with a Retry-After header.
    """

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Rate limit exceeded. Please wait {retry_after} seconds before making more requests."
        )
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after

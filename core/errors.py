"""
core/errors.py -- Error taxonomy shared by the auth, users, and jobs layers.

Every service operation either returns a value or raises exactly one of the
JoblyError subclasses below for an expected condition. Anything else (e.g. a
lost database connection) is an unclassified failure that the API layer
renders as a generic 500.

Each class carries the HTTP status and machine-readable code the API layer
uses, so api/main.py needs a single exception handler for the whole family.

Layer rule: no imports from api/, auth/, users/, or jobs/.
"""

from __future__ import annotations


class JoblyError(Exception):
    """Base class for expected, client-facing failures."""

    status_code: int = 400
    code: str = "bad_request"
    default_message: str = "Bad request."

    def __init__(self, message: str | None = None, detail: str | None = None) -> None:
        self.message = message or self.default_message
        self.detail = detail
        super().__init__(self.message)


class AuthenticationError(JoblyError):
    """No credential, or the credential could not be verified."""

    status_code = 401
    code = "unauthorized"
    default_message = "Unauthorized"


class AuthorizationError(JoblyError):
    """Valid identity without the privilege the operation requires.

    The message names the tier that was violated. The status stays 401 to keep
    the wire behaviour clients already rely on.
    """

    status_code = 401
    code = "forbidden"
    default_message = "Forbidden"


class ValidationError(JoblyError):
    """A payload field is missing, has the wrong type, or is malformed."""

    status_code = 400
    code = "validation_error"
    default_message = "Request validation failed."


class NotFoundError(JoblyError):
    """The referenced user or job does not exist."""

    status_code = 404
    code = "not_found"
    default_message = "Not found."


class ConflictError(JoblyError):
    """A uniqueness rule was violated (duplicate username or application)."""

    status_code = 400
    code = "conflict"
    default_message = "Conflict."

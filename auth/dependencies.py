"""
auth/dependencies.py -- FastAPI Depends() helper that resolves the caller.

Only the Authorization: Bearer <token> header is consulted. A missing header,
a non-Bearer scheme, or a token that fails verification all yield None --
"no identity" as far as the policy engine is concerned.

The dependency never raises. Whether an anonymous caller may proceed is an
access-policy decision made by auth.policy inside each service operation, so
the tier check always runs before payload validation.

Layer rule: no imports from users/ or jobs/.
  auth/dependencies.py may import from fastapi (for Request) because this
  module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

from fastapi import Request

from auth.models import CallerIdentity
from auth.tokens import decode_access_token


def get_caller(request: Request) -> CallerIdentity | None:
    """Return the caller identity from the bearer token, or None.

    Use as a FastAPI dependency:
        @router.get("/users")
        def route(caller: CallerIdentity | None = Depends(get_caller)): ...
    """
    auth_header = request.headers.get("Authorization", "")
    scheme, _, token = auth_header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return decode_access_token(token.strip())

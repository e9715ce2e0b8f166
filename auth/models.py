"""
auth/models.py -- Domain dataclass for the authenticated caller.

Pattern: Data class (pure data container, zero logic). Mirrors users/models.py
-- dataclasses own domain shape; policy and services do the work.

Layer rule: no imports from api/, users/, or jobs/.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class CallerIdentity:
    """The principal behind a request, decoded from a verified bearer token.

    Ephemeral: built per request and discarded once the authorization decision
    is made. It is never written to the database.
    """

    username: str
    is_admin: bool = False

"""
users/models.py -- Domain dataclasses for user accounts and job applications.

These are pure data containers. Validation lives in users/validation.py,
persistence in users/store.py, and the access rules in users/directory.py and
users/tracker.py.

PublicUser is the only shape that leaves the users/ package: it is the User
record minus hashed_password, optionally carrying the user's applied job ids.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class User:
    """A stored user account.

    username is the primary key and is immutable once created.
    hashed_password is a bcrypt hash and never leaves the store/directory.
    """

    username: str
    first_name: str
    last_name: str
    email: str
    hashed_password: str
    is_admin: bool = False
    created_at: str = ""  # ISO 8601, set by store on insert


@dataclass
class JobApplication:
    """One user's application to one job. (username, job_id) is unique."""

    username: str
    job_id: int
    applied_at: str = ""  # ISO 8601, set by store on insert
    id: Optional[int] = None


@dataclass(frozen=True)
class PublicUser:
    """Outward projection of a User -- never carries a password or its hash.

    jobs is None for list/create/update results and a list of job ids for the
    single-user detail view.
    """

    username: str
    first_name: str
    last_name: str
    email: str
    is_admin: bool
    jobs: Optional[list[int]] = field(default=None)

    @classmethod
    def from_user(cls, user: User, jobs: Optional[list[int]] = None) -> "PublicUser":
        return cls(
            username=user.username,
            first_name=user.first_name,
            last_name=user.last_name,
            email=user.email,
            is_admin=user.is_admin,
            jobs=jobs,
        )

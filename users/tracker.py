"""
users/tracker.py -- Application tracker: records which users applied to which jobs.

Each (username, job_id) pair moves from absent to applied exactly once; there
is no withdraw. apply() is not idempotent: a repeat raises ConflictError.

The has_application() pre-check gives the common case a clean error without
relying on the database raising. The UNIQUE(username, job_id) constraint in
users/store.py is what actually prevents duplicates under concurrency; its
IntegrityError is translated to the same ConflictError.
"""

from __future__ import annotations

import logging
import re

from sqlalchemy.exc import IntegrityError

from auth.models import CallerIdentity
from auth.policy import Tier, requires
from core.errors import ConflictError, NotFoundError, ValidationError
from jobs.catalog import JobLookup
from users.store import UserStore

logger = logging.getLogger("jobly.users.applications")

DUPLICATE_APPLICATION = "bad request, cannot apply twice"

# Job ids are SQLite INTEGER primary keys: positive and signed 64-bit.
MAX_JOB_ID = 2**63 - 1
_JOB_ID_PATTERN = re.compile(r"[0-9]+")


def _parse_job_id(job_id) -> int:
    """Accept a positive int or ASCII decimal string within SQLite's INTEGER range."""
    parsed = None
    if isinstance(job_id, int) and not isinstance(job_id, bool):
        parsed = job_id
    elif isinstance(job_id, str) and _JOB_ID_PATTERN.fullmatch(job_id.strip()):
        parsed = int(job_id.strip())
    if parsed is None or not 1 <= parsed <= MAX_JOB_ID:
        raise ValidationError("Invalid job id.", detail=f"job_id: {job_id!r}")
    return parsed


class ApplicationTracker:
    """Owns writes to the user <-> job application relation."""

    def __init__(self, store: UserStore, catalog: JobLookup) -> None:
        self._store = store
        self._catalog = catalog

    @requires(Tier.SELF_OR_ADMIN, target="username")
    def apply(self, username: str, job_id, caller: CallerIdentity | None = None) -> int:
        """Record that username applied to job_id and return the job id.

        Admins may apply on behalf of any user; everyone else only for themselves.

        Raises:
            ValidationError: job_id is not an integer.
            NotFoundError:   the user or the job does not exist.
            ConflictError:   the user already applied to this job.
        """
        job_id = _parse_job_id(job_id)
        if self._store.get_by_username(username) is None:
            raise NotFoundError(f"No user: {username}")
        if not self._catalog.job_exists(job_id):
            raise NotFoundError(f"No job: {job_id}")
        if self._store.has_application(username, job_id):
            raise ConflictError(DUPLICATE_APPLICATION, detail=f"{username} -> job {job_id}")

        try:
            self._store.create_application(username, job_id)
        except IntegrityError as exc:
            # Lost a race: either a concurrent apply or a concurrent delete of the user.
            if self._store.get_by_username(username) is None:
                raise NotFoundError(f"No user: {username}") from exc
            raise ConflictError(DUPLICATE_APPLICATION, detail=f"{username} -> job {job_id}") from exc

        logger.info("%s applied to job %d (by %s)", username, job_id, caller.username)
        return job_id

    def jobs_for(self, username: str) -> list[int]:
        """Job ids username has applied to, ascending."""
        return [app.job_id for app in self._store.get_applications(username)]

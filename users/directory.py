"""
users/directory.py -- User directory: account create, read, update, delete.

Every public method declares its access tier with @requires, so the order of
checks is always:
  1. access tier (AuthenticationError / AuthorizationError)
  2. payload validation (ValidationError)
  3. storage lookups (NotFoundError / ConflictError)

An anonymous caller with a malformed payload therefore sees "Unauthorized",
and an authorized caller with a malformed payload sees a 400, never a 500.

Outputs are PublicUser projections; hashed_password never leaves this module.

Open decision: a non-admin updating their own record cannot change isAdmin.
The field is dropped from the patch rather than rejected.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.exc import IntegrityError

from auth.models import CallerIdentity
from auth.policy import Tier, requires
from auth.tokens import create_access_token, hash_password
from core.errors import ConflictError, NotFoundError
from users.models import PublicUser, User
from users.store import UserStore
from users.tracker import ApplicationTracker
from users.validation import validate_new_user, validate_patch, validate_registration

logger = logging.getLogger("jobly.users")


class UserDirectory:
    """Service layer over UserStore enforcing access tiers and validation.

    Usage:
        directory = UserDirectory(store, tracker)
        user, token = directory.create_user(payload, caller=admin)
        directory.get_user("u1", caller=CallerIdentity("u1"))
    """

    def __init__(self, store: UserStore, tracker: ApplicationTracker) -> None:
        self._store = store
        self._tracker = tracker

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    @requires(Tier.ADMIN)
    def create_user(self, payload: Any, caller: CallerIdentity | None = None) -> tuple[PublicUser, str]:
        """Create an account (admin only). Returns the projection and a token for the new user."""
        fields = validate_new_user(payload)
        user, token = self._insert(fields)
        logger.info("User %s created by %s (is_admin=%s)", user.username, caller.username, user.is_admin)
        return user, token

    @requires(Tier.PUBLIC)
    def register_user(self, payload: Any, caller: CallerIdentity | None = None) -> tuple[PublicUser, str]:
        """Self-service signup. Never creates an admin."""
        fields = validate_registration(payload)
        user, token = self._insert(fields)
        logger.info("User %s registered", user.username)
        return user, token

    def _insert(self, fields: dict) -> tuple[PublicUser, str]:
        username = fields["username"]
        if self._store.get_by_username(username) is not None:
            raise ConflictError(f"Duplicate username: {username}")

        user = User(
            username=username,
            first_name=fields["first_name"],
            last_name=fields["last_name"],
            email=fields["email"],
            hashed_password=hash_password(fields["password"]),
            is_admin=fields["is_admin"],
        )
        try:
            self._store.create_user(user)
        except IntegrityError as exc:
            raise ConflictError(f"Duplicate username: {username}") from exc

        token = create_access_token(CallerIdentity(username=user.username, is_admin=user.is_admin))
        return PublicUser.from_user(user), token

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    @requires(Tier.ADMIN)
    def list_users(self, caller: CallerIdentity | None = None) -> list[PublicUser]:
        """All users ordered by username (admin only)."""
        return [PublicUser.from_user(u) for u in self._store.list_users()]

    @requires(Tier.SELF_OR_ADMIN, target="username")
    def get_user(self, username: str, caller: CallerIdentity | None = None) -> PublicUser:
        """One user with the ids of the jobs they applied to."""
        user = self._store.get_by_username(username)
        if user is None:
            raise NotFoundError(f"No user: {username}")
        return PublicUser.from_user(user, jobs=self._tracker.jobs_for(username))

    # ------------------------------------------------------------------
    # Update / delete
    # ------------------------------------------------------------------

    @requires(Tier.SELF_OR_ADMIN, target="username")
    def update_user(self, username: str, payload: Any, caller: CallerIdentity | None = None) -> PublicUser:
        """Apply a partial update. A new password is re-hashed; no token is issued."""
        fields = validate_patch(payload)
        if "is_admin" in fields and not caller.is_admin:
            logger.info("Ignoring isAdmin in self-update from non-admin %s", caller.username)
            del fields["is_admin"]
        if "password" in fields:
            fields["hashed_password"] = hash_password(fields.pop("password"))

        if self._store.get_by_username(username) is None:
            raise NotFoundError(f"No user: {username}")
        if fields and not self._store.update_user(username, **fields):
            raise NotFoundError(f"No user: {username}")

        updated = self._store.get_by_username(username)
        if updated is None:
            raise NotFoundError(f"No user: {username}")
        logger.info("User %s updated by %s (%s)", username, caller.username, ", ".join(sorted(fields)) or "no changes")
        return PublicUser.from_user(updated)

    @requires(Tier.SELF_OR_ADMIN, target="username")
    def remove_user(self, username: str, caller: CallerIdentity | None = None) -> str:
        """Delete a user and their applications. Returns the deleted username."""
        if not self._store.delete_user(username):
            raise NotFoundError(f"No user: {username}")
        logger.info("User %s deleted by %s", username, caller.username)
        return username

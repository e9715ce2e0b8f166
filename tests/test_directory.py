"""Unit tests for users/directory.py -- the user directory service.

Exercised directly (no HTTP) against the seeded in-memory store from
conftest.py. Covers tier-before-validation ordering, uniqueness, the
storage-level duplicate guard, password re-hashing, isAdmin stripping for
non-admin self-updates, and the delete cascade.
"""

import pytest

from auth.models import CallerIdentity
from auth.tokens import authenticate_user, decode_access_token
from core.errors import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from users.models import PublicUser

ADMIN = CallerIdentity(username="u2", is_admin=True)
U1 = CallerIdentity(username="u1", is_admin=False)

NEW_USER = {
    "username": "u-new",
    "firstName": "First",
    "lastName": "Last",
    "password": "password-new",
    "email": "new@email.com",
}


class TestCreate:
    def test_admin_creates_user_and_gets_token(self, directory) -> None:
        user, token = directory.create_user({**NEW_USER, "isAdmin": True}, caller=ADMIN)
        assert user == PublicUser("u-new", "First", "Last", "new@email.com", is_admin=True)
        assert decode_access_token(token) == CallerIdentity("u-new", is_admin=True)

    def test_password_is_stored_hashed(self, directory, env) -> None:
        directory.create_user(NEW_USER, caller=ADMIN)
        stored = env.user_store.get_by_username("u-new")
        assert stored.hashed_password != "password-new"
        assert authenticate_user(env.user_store, "u-new", "password-new") is not None

    def test_non_admin_denied_regardless_of_payload(self, directory) -> None:
        for payload in (NEW_USER, {"username": 1}, None):
            with pytest.raises(AuthorizationError):
                directory.create_user(payload, caller=U1)

    def test_anonymous_denied(self, directory) -> None:
        with pytest.raises(AuthenticationError):
            directory.create_user({"bad": "payload"})

    def test_duplicate_username(self, directory) -> None:
        with pytest.raises(ConflictError):
            directory.create_user({**NEW_USER, "username": "u1"}, caller=ADMIN)

    def test_storage_constraint_catches_duplicates_missed_by_precheck(self, directory, env, monkeypatch) -> None:
        directory.create_user(NEW_USER, caller=ADMIN)
        monkeypatch.setattr(env.user_store, "get_by_username", lambda username: None)
        with pytest.raises(ConflictError):
            directory.create_user(NEW_USER, caller=ADMIN)

    @pytest.mark.parametrize(
        "override",
        [
            {"email": "not-an-email"},
            {"firstName": 42},
            {"password": "abc"},
            {"username": ""},
            {"isAdmin": "yes"},
            {"favoriteColor": "blue"},
        ],
    )
    def test_invalid_payload(self, directory, override) -> None:
        with pytest.raises(ValidationError):
            directory.create_user({**NEW_USER, **override}, caller=ADMIN)

    def test_missing_fields(self, directory) -> None:
        with pytest.raises(ValidationError) as exc_info:
            directory.create_user({"username": "u-new"}, caller=ADMIN)
        assert "firstName" in exc_info.value.detail


class TestRegister:
    def test_register_is_public_and_never_admin(self, directory) -> None:
        user, token = directory.register_user(NEW_USER)
        assert user.is_admin is False
        assert decode_access_token(token) == CallerIdentity("u-new", is_admin=False)

    def test_register_rejects_is_admin(self, directory) -> None:
        with pytest.raises(ValidationError):
            directory.register_user({**NEW_USER, "isAdmin": True})


class TestRead:
    def test_list_is_admin_only_and_sorted(self, directory) -> None:
        users = directory.list_users(caller=ADMIN)
        assert [u.username for u in users] == ["u1", "u2", "u3"]
        assert all(u.jobs is None for u in users)
        with pytest.raises(AuthorizationError):
            directory.list_users(caller=U1)

    def test_get_includes_jobs_ascending(self, directory, env) -> None:
        user = directory.get_user("u1", caller=U1)
        assert user.jobs == sorted(env.job_ids[:2])

    def test_get_is_repeatable(self, directory) -> None:
        assert directory.get_user("u1", caller=ADMIN) == directory.get_user("u1", caller=ADMIN)

    def test_get_missing(self, directory) -> None:
        with pytest.raises(NotFoundError):
            directory.get_user("nope", caller=ADMIN)

    def test_get_other_user_denied_before_lookup(self, directory) -> None:
        with pytest.raises(AuthorizationError):
            directory.get_user("nope", caller=U1)


class TestUpdate:
    def test_self_update(self, directory) -> None:
        user = directory.update_user("u1", {"firstName": "New", "email": "new1@user.com"}, caller=U1)
        assert (user.first_name, user.email, user.last_name) == ("New", "new1@user.com", "U1L")

    def test_password_round_trip(self, directory, env) -> None:
        directory.update_user("u1", {"password": "new-password"}, caller=U1)
        assert authenticate_user(env.user_store, "u1", "new-password") is not None

    def test_password_whitespace_is_preserved(self, directory, env) -> None:
        directory.update_user("u1", {"password": " secret1 "}, caller=U1)
        assert authenticate_user(env.user_store, "u1", " secret1 ") is not None
        assert authenticate_user(env.user_store, "u1", "secret1") is None

    def test_names_are_still_trimmed(self, directory) -> None:
        user = directory.update_user("u1", {"firstName": "  Ann  "}, caller=U1)
        assert user.first_name == "Ann"

    def test_non_admin_is_admin_is_ignored(self, directory) -> None:
        user = directory.update_user("u1", {"isAdmin": True}, caller=U1)
        assert user.is_admin is False

    def test_admin_can_set_is_admin(self, directory) -> None:
        assert directory.update_user("u3", {"isAdmin": True}, caller=ADMIN).is_admin is True

    @pytest.mark.parametrize(
        "patch",
        [{}, {"firstName": 42}, {"firstName": None}, {"username": "x"}, {"email": "nope"}, ["firstName"]],
    )
    def test_invalid_patch(self, directory, patch) -> None:
        with pytest.raises(ValidationError):
            directory.update_user("u1", patch, caller=U1)

    def test_validation_runs_before_lookup(self, directory) -> None:
        with pytest.raises(ValidationError):
            directory.update_user("nope", {"firstName": 42}, caller=ADMIN)

    def test_missing_user(self, directory) -> None:
        with pytest.raises(NotFoundError):
            directory.update_user("nope", {"firstName": "X"}, caller=ADMIN)

    def test_other_user_denied(self, directory) -> None:
        with pytest.raises(AuthorizationError):
            directory.update_user("u3", {"firstName": "X"}, caller=U1)


class TestRemove:
    def test_remove_cascades_applications(self, directory, env) -> None:
        assert directory.remove_user("u1", caller=U1) == "u1"
        assert env.user_store.get_by_username("u1") is None
        assert env.user_store.get_applications("u1") == []
        with pytest.raises(NotFoundError):
            directory.get_user("u1", caller=ADMIN)

    def test_remove_missing(self, directory) -> None:
        with pytest.raises(NotFoundError):
            directory.remove_user("nope", caller=ADMIN)

    def test_remove_other_user_denied(self, directory) -> None:
        with pytest.raises(AuthorizationError):
            directory.remove_user("u3", caller=U1)

"""Unit tests for users/tracker.py -- job applications.

Covers:
- admin may apply for anyone, a user only for themselves
- second apply of the same pair is a ConflictError and adds no row
- the UNIQUE(username, job_id) constraint still guards when the pre-check is bypassed
- missing user / missing job / malformed job id
"""

import pytest

from auth.models import CallerIdentity
from core.errors import AuthenticationError, AuthorizationError, ConflictError, NotFoundError, ValidationError
from users.tracker import DUPLICATE_APPLICATION

ADMIN = CallerIdentity(username="u2", is_admin=True)
U3 = CallerIdentity(username="u3", is_admin=False)


def test_admin_applies_for_user(tracker, env) -> None:
    job_id = env.job_ids[2]
    assert tracker.apply("u3", job_id, caller=ADMIN) == job_id
    assert tracker.jobs_for("u3") == [job_id]


def test_user_applies_for_self_with_string_id(tracker, env) -> None:
    assert tracker.apply("u3", str(env.job_ids[0]), caller=U3) == env.job_ids[0]


def test_apply_twice_conflicts(tracker, env) -> None:
    job_id = env.job_ids[0]
    tracker.apply("u3", job_id, caller=U3)
    with pytest.raises(ConflictError) as exc_info:
        tracker.apply("u3", job_id, caller=U3)
    assert exc_info.value.message == DUPLICATE_APPLICATION
    assert tracker.jobs_for("u3") == [job_id]


def test_storage_constraint_is_the_final_guard(tracker, env, monkeypatch) -> None:
    job_id = env.job_ids[0]
    monkeypatch.setattr(env.user_store, "has_application", lambda username, job_id: False)
    with pytest.raises(ConflictError):
        tracker.apply("u1", job_id, caller=ADMIN)
    assert tracker.jobs_for("u1") == sorted(env.job_ids[:2])


def test_other_user_denied(tracker, env) -> None:
    with pytest.raises(AuthorizationError):
        tracker.apply("u1", env.job_ids[2], caller=U3)


def test_anonymous_denied(tracker, env) -> None:
    with pytest.raises(AuthenticationError):
        tracker.apply("u1", env.job_ids[2])


def test_missing_job(tracker) -> None:
    with pytest.raises(NotFoundError):
        tracker.apply("u3", 99999, caller=U3)


def test_missing_user(tracker, env) -> None:
    with pytest.raises(NotFoundError):
        tracker.apply("ghost", env.job_ids[0], caller=ADMIN)


@pytest.mark.parametrize(
    "job_id",
    ["abc", "1.5", True, None, -1.0, "\u00b2", "\u0661", "0", 0, -3, "99999999999999999999999", 2**63],
)
def test_malformed_job_id(tracker, job_id) -> None:
    with pytest.raises(ValidationError):
        tracker.apply("u3", job_id, caller=U3)


def test_largest_job_id_is_not_found(tracker) -> None:
    with pytest.raises(NotFoundError):
        tracker.apply("u3", str(2**63 - 1), caller=U3)

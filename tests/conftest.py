"""
tests/conftest.py -- Shared test fixtures for Jobly unit and integration tests.

This module provides:
  - _make_test_stores(): isolated in-memory DB for users, applications, jobs
  - _patch_lifespan(): wires test stores into app.state, bypassing real startup
  - env: seeded stores plus tokens for u1 (user), u2 (admin), u3 (user)
  - directory / tracker: services built on the seeded stores
  - client: TestClient over the real app using the seeded stores

Seed data (fresh for every test):
  u1  U1F U1L  user1@user.com  not admin   password "password1"  applied to jobs[0], jobs[1]
  u2  U2F U2L  user2@user.com  admin       password "password2"
  u3  U3F U3L  user3@user.com  not admin   password "password3"
  three jobs in the catalog

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs sync route handlers in a thread pool. Plain :memory:
DBs are per-connection and would present a blank schema to each worker
thread. Each test gets its own uuid-named database so mutations never leak.

DEBUG and BCRYPT_ROUNDS must be set before any auth/core import so
get_settings() auto-generates SECRET_KEY and hashing stays fast.
"""

from __future__ import annotations

import os
import uuid
from collections.abc import Generator
from contextlib import asynccontextmanager
from dataclasses import dataclass

# CRITICAL: Set before any auth/core import -- get_settings() is cached on first call.
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from api.main import app, build_services
from auth.models import CallerIdentity
from auth.tokens import create_access_token, hash_password
from jobs.catalog import JobCatalog
from jobs.models import Job
from users.directory import UserDirectory
from users.models import User
from users.store import UserStore
from users.tracker import ApplicationTracker

# ---------------------------------------------------------------------------
# Store helpers
# ---------------------------------------------------------------------------


def _make_test_stores() -> tuple[UserStore, JobCatalog]:
    """Create stores on a fresh named shared-memory SQLite database."""
    db_url = f"sqlite:///file:jobly_{uuid.uuid4().hex}?mode=memory&cache=shared&uri=true"
    return UserStore(db_url), JobCatalog(db_url)


def _patch_lifespan(user_store: UserStore, catalog: JobCatalog):
    """Return an async context manager that replaces the real lifespan."""

    @asynccontextmanager
    async def test_lifespan(app):
        build_services(app, user_store, catalog)
        yield

    return test_lifespan


@dataclass
class SeededEnv:
    user_store: UserStore
    catalog: JobCatalog
    job_ids: list[int]
    u1_token: str
    u2_admin_token: str
    u3_token: str


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def env() -> Generator[SeededEnv, None, None]:
    """Seeded stores and tokens, rebuilt for every test."""
    user_store, catalog = _make_test_stores()

    for n, is_admin in ((1, False), (2, True), (3, False)):
        user_store.create_user(
            User(
                username=f"u{n}",
                first_name=f"U{n}F",
                last_name=f"U{n}L",
                email=f"user{n}@user.com",
                hashed_password=hash_password(f"password{n}"),
                is_admin=is_admin,
            )
        )

    job_ids = [
        catalog.create_job(Job(title="J1", company_handle="c1", salary=1, equity="0.1")),
        catalog.create_job(Job(title="J2", company_handle="c1", salary=2, equity="0.2")),
        catalog.create_job(Job(title="J3", company_handle="c1", salary=3, equity="0")),
    ]
    user_store.create_application("u1", job_ids[0])
    user_store.create_application("u1", job_ids[1])

    yield SeededEnv(
        user_store=user_store,
        catalog=catalog,
        job_ids=job_ids,
        u1_token=create_access_token(CallerIdentity(username="u1", is_admin=False)),
        u2_admin_token=create_access_token(CallerIdentity(username="u2", is_admin=True)),
        u3_token=create_access_token(CallerIdentity(username="u3", is_admin=False)),
    )

    user_store.close()
    catalog.close()


@pytest.fixture
def tracker(env: SeededEnv) -> ApplicationTracker:
    return ApplicationTracker(env.user_store, env.catalog)


@pytest.fixture
def directory(env: SeededEnv, tracker: ApplicationTracker) -> UserDirectory:
    return UserDirectory(env.user_store, tracker)


@pytest.fixture
def patched_app(env: SeededEnv) -> FastAPI:
    """The real app with its lifespan replaced to use the seeded stores."""
    app.router.lifespan_context = _patch_lifespan(env.user_store, env.catalog)
    return app


@pytest.fixture
def client(patched_app: FastAPI) -> Generator[TestClient, None, None]:
    """TestClient on the real app with the seeded stores wired into app.state."""
    with TestClient(patched_app, raise_server_exceptions=True) as test_client:
        yield test_client

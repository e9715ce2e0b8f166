"""
api/routes/v1/users.py -- User account and job application REST endpoints.

Routes:
  POST   /users                          -- create user (admin)
  GET    /users                          -- list users (admin)
  GET    /users/{username}               -- user detail + applied job ids (self or admin)
  PATCH  /users/{username}               -- partial update (self or admin)
  DELETE /users/{username}               -- delete user + applications (self or admin)
  POST   /users/{username}/jobs/{job_id} -- apply to a job (self or admin)

Access tiers are declared on the service methods in users/directory.py and
users/tracker.py, not here. Handlers only resolve the caller (never raising)
and hand the raw body to the service, so an anonymous request with a bad body
is still answered with 401 rather than 400.

Errors raised by the services (core/errors.py) are rendered by the JoblyError
handler in api/main.py.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, Request

from api.models import (
    AppliedResponse,
    DeletedResponse,
    UserCreatedResponse,
    UserDetailOut,
    UserDetailResponse,
    UserListResponse,
    UserOut,
    UserResponse,
)
from auth.dependencies import get_caller
from auth.models import CallerIdentity
from users.directory import UserDirectory
from users.tracker import ApplicationTracker

router = APIRouter()


@router.post("/users", response_model=UserCreatedResponse, status_code=201)
def create_user(
    request: Request,
    payload: Any = Body(default=None),
    caller: CallerIdentity | None = Depends(get_caller),
) -> UserCreatedResponse:
    """Create a user account. Admin only; the new user may itself be an admin.

    Returns a token for the new user so admins can hand it over directly.
    """
    directory: UserDirectory = request.app.state.directory
    user, token = directory.create_user(payload, caller=caller)
    return UserCreatedResponse(user=UserOut.from_public(user), token=token)


@router.get("/users", response_model=UserListResponse)
def list_users(
    request: Request,
    caller: CallerIdentity | None = Depends(get_caller),
) -> UserListResponse:
    """List all users ordered by username. Admin only."""
    directory: UserDirectory = request.app.state.directory
    users = directory.list_users(caller=caller)
    return UserListResponse(users=[UserOut.from_public(u) for u in users])


@router.get("/users/{username}", response_model=UserDetailResponse)
def get_user(
    request: Request,
    username: str,
    caller: CallerIdentity | None = Depends(get_caller),
) -> UserDetailResponse:
    directory: UserDirectory = request.app.state.directory
    user = directory.get_user(username, caller=caller)
    return UserDetailResponse(user=UserDetailOut.from_public(user))


@router.patch("/users/{username}", response_model=UserResponse)
def update_user(
    request: Request,
    username: str,
    payload: Any = Body(default=None),
    caller: CallerIdentity | None = Depends(get_caller),
) -> UserResponse:
    """Update firstName, lastName, email, password, or isAdmin.

    isAdmin is honoured only when the caller is an admin.
    """
    directory: UserDirectory = request.app.state.directory
    user = directory.update_user(username, payload, caller=caller)
    return UserResponse(user=UserOut.from_public(user))


@router.delete("/users/{username}", response_model=DeletedResponse)
def delete_user(
    request: Request,
    username: str,
    caller: CallerIdentity | None = Depends(get_caller),
) -> DeletedResponse:
    directory: UserDirectory = request.app.state.directory
    return DeletedResponse(deleted=directory.remove_user(username, caller=caller))


@router.post("/users/{username}/jobs/{job_id}", response_model=AppliedResponse)
def apply_to_job(
    request: Request,
    username: str,
    job_id: str,
    caller: CallerIdentity | None = Depends(get_caller),
) -> AppliedResponse:
    """Apply username to job_id. Applying twice is a 400.

    job_id is taken as a string and parsed by the tracker so that the access
    check runs before the id is validated.
    """
    tracker: ApplicationTracker = request.app.state.tracker
    return AppliedResponse(applied=tracker.apply(username, job_id, caller=caller))

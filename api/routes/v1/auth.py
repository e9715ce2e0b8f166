"""
api/routes/v1/auth.py -- Token issuing endpoints.

Routes:
  POST /api/v1/auth/token     -- username/password login; returns a JWT
  POST /api/v1/auth/register  -- self-service signup (never admin); returns a JWT

Security:
  authenticate_user() provides timing equalization -- use it, never inline
  get_by_username() + verify_password().
  Cache-Control: no-store on every response that carries a token.
  The same generic error is returned for wrong username and wrong password.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Request
from fastapi.responses import JSONResponse

from api.models import ErrorDetail, ErrorResponse, LoginRequest, TokenResponse
from auth.tokens import authenticate_user, create_access_token
from users.directory import UserDirectory
from users.store import UserStore

# Auth policy:
# - POST /api/v1/auth/token:    public -- login endpoint must be unauthenticated
# - POST /api/v1/auth/register: public -- signup creates non-admin accounts only
router = APIRouter()


@router.post("/auth/token", response_model=TokenResponse)
def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Exchange a username and password for a bearer token."""
    user_store: UserStore = request.app.state.user_store
    identity = authenticate_user(user_store, body.username, body.password)
    if identity is None:
        resp = JSONResponse(
            status_code=401,
            content=ErrorResponse(
                error=ErrorDetail(code="bad_credentials", message="Invalid username/password.")
            ).model_dump(),
        )
        resp.headers["Cache-Control"] = "no-store"
        return resp

    resp = JSONResponse(status_code=200, content=TokenResponse(token=create_access_token(identity)).model_dump())
    resp.headers["Cache-Control"] = "no-store"
    return resp


@router.post("/auth/register", response_model=TokenResponse, status_code=201)
def register(request: Request, payload: Any = Body(default=None)) -> JSONResponse:
    """Create a non-admin account and return a token for it."""
    directory: UserDirectory = request.app.state.directory
    _user, token = directory.register_user(payload)
    resp = JSONResponse(status_code=201, content=TokenResponse(token=token).model_dump())
    resp.headers["Cache-Control"] = "no-store"
    return resp

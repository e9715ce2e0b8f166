"""
API request and response models for the Jobly REST endpoints.

These Pydantic v2 models define the HTTP transport contract. They are
intentionally separate from the dataclasses in users/models.py, which own the
internal domain representation. Route handlers map between the two.

User payloads use camelCase on the wire (firstName, isAdmin) and snake_case
in Python; FastAPI serializes response models by alias.

User write payloads (create, register, patch) are NOT modelled here: the
routes pass the raw JSON body to users/directory.py so the access tier is
checked before the payload is validated (see users/validation.py).
"""

from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field, StringConstraints

from users.models import PublicUser

# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class LoginRequest(BaseModel):
    """Request body for POST /api/v1/auth/token."""

    username: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=25)]
    # Not stripped: must match the password exactly as it was set.
    password: str = Field(min_length=1, max_length=255)


# ---------------------------------------------------------------------------
# Response models -- users
# ---------------------------------------------------------------------------


class UserOut(BaseModel):
    """Public projection of a user. There is no password field by construction."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    username: str
    first_name: str = Field(alias="firstName")
    last_name: str = Field(alias="lastName")
    email: str
    is_admin: bool = Field(alias="isAdmin")

    @classmethod
    def from_public(cls, user: PublicUser) -> "UserOut":
        """Factory Method -- the domain-to-wire mapping lives beside the wire model."""
        return cls(
            username=user.username,
            first_name=user.first_name,
            last_name=user.last_name,
            email=user.email,
            is_admin=user.is_admin,
        )


class UserDetailOut(UserOut):
    """A single user plus the ids of the jobs they applied to."""

    jobs: list[int] = Field(default_factory=list)

    @classmethod
    def from_public(cls, user: PublicUser) -> "UserDetailOut":
        return cls(
            username=user.username,
            first_name=user.first_name,
            last_name=user.last_name,
            email=user.email,
            is_admin=user.is_admin,
            jobs=list(user.jobs or []),
        )


class UserCreatedResponse(BaseModel):
    """Response for POST /api/v1/users."""

    model_config = ConfigDict(frozen=True)

    user: UserOut
    token: str


class UserResponse(BaseModel):
    """Response for PATCH /api/v1/users/{username}."""

    model_config = ConfigDict(frozen=True)

    user: UserOut


class UserDetailResponse(BaseModel):
    """Response for GET /api/v1/users/{username}."""

    model_config = ConfigDict(frozen=True)

    user: UserDetailOut


class UserListResponse(BaseModel):
    """Response for GET /api/v1/users."""

    model_config = ConfigDict(frozen=True)

    users: list[UserOut]


class DeletedResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    deleted: str


class AppliedResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    applied: int


# ---------------------------------------------------------------------------
# Response models -- auth
# ---------------------------------------------------------------------------


class TokenResponse(BaseModel):
    """Response for POST /auth/token and POST /auth/register."""

    model_config = ConfigDict(frozen=True)

    token: str


# ---------------------------------------------------------------------------
# Errors and health
# ---------------------------------------------------------------------------


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /api/v1/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str] = Field(default_factory=dict)

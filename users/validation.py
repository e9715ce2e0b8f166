"""
users/validation.py -- Payload validation for user create, register, and update.

The directory receives raw JSON-decoded payloads (dicts with camelCase keys)
so that access-tier checks run before any payload is interpreted. These
Pydantic v2 models then enforce presence, types, lengths, and email format.

strict=True means no coercion: {"firstName": 42} is rejected rather than
turned into "42". extra="forbid" rejects keys outside the allowed set, which
is how "patch fields are a subset of ..." is enforced.

Every pydantic.ValidationError is translated into core.errors.ValidationError
with a detail string naming the offending fields.
"""

from __future__ import annotations

from typing import Annotated, Any, Optional

import pydantic
from pydantic import BaseModel, ConfigDict, Field, StringConstraints, model_validator

from core.errors import ValidationError

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"

# Identity fields are trimmed; passwords are hashed exactly as sent.
_Username = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=25)]
_Name = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=30)]
_Email = Annotated[str, StringConstraints(strip_whitespace=True, min_length=6, max_length=60, pattern=EMAIL_PATTERN)]
_Password = Annotated[str, StringConstraints(min_length=5, max_length=20)]


class _Registration(BaseModel):
    """Fields every new account must supply."""

    model_config = ConfigDict(extra="forbid", strict=True)

    username: _Username
    password: _Password
    first_name: _Name = Field(alias="firstName")
    last_name: _Name = Field(alias="lastName")
    email: _Email


class _NewUser(_Registration):
    """Admin-created account; may set the admin flag."""

    is_admin: bool = Field(default=False, alias="isAdmin")


class _UserPatch(BaseModel):
    """Partial update. Every field is optional but none may be null."""

    model_config = ConfigDict(extra="forbid", strict=True)

    password: Optional[_Password] = None
    first_name: Optional[_Name] = Field(default=None, alias="firstName")
    last_name: Optional[_Name] = Field(default=None, alias="lastName")
    email: Optional[_Email] = None
    is_admin: Optional[bool] = Field(default=None, alias="isAdmin")

    @model_validator(mode="after")
    def reject_nulls(self) -> "_UserPatch":
        nulls = sorted(
            type(self).model_fields[name].alias or name
            for name in self.model_fields_set
            if getattr(self, name) is None
        )
        if nulls:
            raise ValueError(f"null is not allowed for: {', '.join(nulls)}")
        return self


# ---------------------------------------------------------------------------
# Public helpers
# ---------------------------------------------------------------------------


def _describe(exc: pydantic.ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err["loc"]) or "body"
        parts.append(f"{loc}: {err['msg']}")
    return "; ".join(parts)


def _validate(model: type[BaseModel], payload: Any) -> BaseModel:
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object.")
    try:
        return model.model_validate(payload)
    except pydantic.ValidationError as exc:
        raise ValidationError("Invalid user data.", detail=_describe(exc)) from exc


def validate_new_user(payload: Any) -> dict:
    """Validate an admin create payload. Returns snake_case fields."""
    return _validate(_NewUser, payload).model_dump()


def validate_registration(payload: Any) -> dict:
    """Validate a self-registration payload. isAdmin is not accepted."""
    fields = _validate(_Registration, payload).model_dump()
    fields["is_admin"] = False
    return fields


def validate_patch(payload: Any) -> dict:
    """Validate a partial update. Returns only the fields the caller sent."""
    if isinstance(payload, dict) and not payload:
        raise ValidationError("No data to update.")
    return _validate(_UserPatch, payload).model_dump(exclude_unset=True)

"""
auth/policy.py -- Access policy engine: who may call which operation.

Three pure decision functions, one per access tier, each returning a Decision
(ALLOW or DENY with a reason string). They never raise and never touch storage.

authorize() is the single dispatcher. For every non-public tier it checks
authentication first, so a missing or invalid token always produces the
generic "Unauthorized" outcome before any tier-specific message is considered.

requires() turns the dispatcher into a decorator: a service method declares
its tier as data and the check runs before the method body:

    @requires(Tier.SELF_OR_ADMIN, target="username")
    def get(self, username: str, caller: CallerIdentity | None = None): ...

Layer rule: no imports from api/, users/, or jobs/.
"""

from __future__ import annotations

import functools
import inspect
import logging
from dataclasses import dataclass
from enum import Enum

from auth.models import CallerIdentity
from core.errors import AuthenticationError, AuthorizationError

logger = logging.getLogger("jobly.auth.policy")

UNAUTHORIZED = "Unauthorized"
ADMIN_REQUIRED = "Must be Admin to access!"
SELF_OR_ADMIN_REQUIRED = "Must be current user or admin to access!"


class Tier(str, Enum):
    PUBLIC = "public"
    AUTHENTICATED = "authenticated"
    ADMIN = "admin"
    SELF_OR_ADMIN = "self_or_admin"


@dataclass(frozen=True)
class Decision:
    """Outcome of a single policy check. reason is None when allowed."""

    allowed: bool
    reason: str | None = None

    @classmethod
    def allow(cls) -> "Decision":
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: str) -> "Decision":
        return cls(allowed=False, reason=reason)


# ---------------------------------------------------------------------------
# Decision functions
# ---------------------------------------------------------------------------


def require_authenticated(caller: CallerIdentity | None) -> Decision:
    if caller is None:
        return Decision.deny(UNAUTHORIZED)
    return Decision.allow()


def require_admin(caller: CallerIdentity | None) -> Decision:
    if caller is None or not caller.is_admin:
        return Decision.deny(ADMIN_REQUIRED)
    return Decision.allow()


def require_self_or_admin(caller: CallerIdentity | None, target_username: str | None) -> Decision:
    if caller is None:
        return Decision.deny(SELF_OR_ADMIN_REQUIRED)
    if caller.is_admin or caller.username == target_username:
        return Decision.allow()
    return Decision.deny(SELF_OR_ADMIN_REQUIRED)


def evaluate(tier: Tier, caller: CallerIdentity | None, target: str | None = None) -> Decision:
    """Return the tier predicate's decision, ignoring authentication ordering."""
    if tier is Tier.PUBLIC:
        return Decision.allow()
    if tier is Tier.AUTHENTICATED:
        return require_authenticated(caller)
    if tier is Tier.ADMIN:
        return require_admin(caller)
    if tier is Tier.SELF_OR_ADMIN:
        return require_self_or_admin(caller, target)
    raise ValueError(f"Unknown tier: {tier!r}")


# ---------------------------------------------------------------------------
# Dispatcher
# ---------------------------------------------------------------------------


def authorize(tier: Tier, caller: CallerIdentity | None, target: str | None = None) -> None:
    """Raise unless caller satisfies tier.

    Raises:
        AuthenticationError: tier is not public and there is no caller.
        AuthorizationError:  caller is present but the tier predicate denies.
    """
    if tier is Tier.PUBLIC:
        return
    authenticated = require_authenticated(caller)
    if not authenticated.allowed:
        logger.info("Denied %s access: no valid credential", tier.value)
        raise AuthenticationError(authenticated.reason)
    decision = evaluate(tier, caller, target)
    if not decision.allowed:
        logger.info("Denied %s access to %s for %s", tier.value, target or "-", caller.username)
        raise AuthorizationError(decision.reason)


def requires(tier: Tier, target: str | None = None):
    """Decorate a service method with its access tier.

    The wrapped function must accept a ``caller`` argument. When target is
    given it names the argument holding the username the tier is checked
    against (SELF_OR_ADMIN).
    """

    def decorator(func):
        signature = inspect.signature(func)
        if "caller" not in signature.parameters:
            raise TypeError(f"{func.__qualname__} must accept a 'caller' argument")
        if target is not None and target not in signature.parameters:
            raise TypeError(f"{func.__qualname__} has no argument named {target!r}")

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            bound = signature.bind(*args, **kwargs)
            bound.apply_defaults()
            caller = bound.arguments["caller"]
            authorize(tier, caller, bound.arguments[target] if target else None)
            return func(*args, **kwargs)

        wrapper.required_tier = tier
        return wrapper

    return decorator

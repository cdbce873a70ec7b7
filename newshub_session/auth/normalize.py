"""
Normalization of identity-service responses into a User.

The service may return the identity nested under ``user`` or as top-level
fields. Each field is resolved in this order:

1. ``body["user"][field]``
2. ``body[field]``
3. the caller-supplied default

Missing keys, ``null`` and empty strings fall through to the next source.
Values of any other non-string type are rejected rather than coerced.
"""

import secrets
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from ..models.user import Role, User
from ..utils.exceptions import MalformedResponseError

VALID_ROLES = ("admin", "user")


def generate_user_id() -> str:
    """Fallback id: user_<epoch millis>_<random hex>"""
    return f"user_{int(time.time() * 1000)}_{secrets.token_hex(3)}"


def email_local_part(email: str) -> str:
    return email.split("@", 1)[0]


@dataclass(frozen=True)
class NormalizedIdentity:
    user: User
    token: Optional[str] = None


def _is_missing(value: Any) -> bool:
    return value is None or value == ""


def _resolve(body: Dict[str, Any], nested: Dict[str, Any], field: str, default: Callable[[], str]) -> str:
    for source in (nested, body):
        value = source.get(field)
        if _is_missing(value):
            continue
        if not isinstance(value, str):
            raise MalformedResponseError(
                f"Field '{field}' must be a string, got {type(value).__name__}"
            )
        return value
    return default()


def _normalize(
    body: Any,
    default_email: str,
    default_name: Callable[[], str],
    default_role: Role,
    id_factory: Callable[[], str],
) -> NormalizedIdentity:
    if not isinstance(body, dict):
        raise MalformedResponseError(f"Response body must be an object, got {type(body).__name__}")

    nested = body.get("user")
    if nested is None:
        nested = {}
    elif not isinstance(nested, dict):
        raise MalformedResponseError("Field 'user' must be an object")

    user_id = _resolve(body, nested, "id", id_factory)
    email = _resolve(body, nested, "email", lambda: default_email)
    name = _resolve(body, nested, "name", default_name)
    role = _resolve(body, nested, "role", lambda: default_role)
    if role not in VALID_ROLES:
        raise MalformedResponseError(f"Unknown role '{role}'")

    token = body.get("token")
    if _is_missing(token):
        token = None
    elif not isinstance(token, str):
        raise MalformedResponseError(f"Field 'token' must be a string, got {type(token).__name__}")

    return NormalizedIdentity(
        user=User(id=user_id, email=email, name=name, role=role),
        token=token,
    )


def normalize_login_response(
    body: Any,
    email: str,
    id_factory: Callable[[], str] = generate_user_id,
) -> NormalizedIdentity:
    """
    Build the session identity from a login response.

    Defaults: generated id, the submitted email, the local part of the
    email as name, role "user".

    Raises:
        MalformedResponseError: Body is not a usable identity
    """
    return _normalize(
        body,
        default_email=email,
        default_name=lambda: email_local_part(email),
        default_role="user",
        id_factory=id_factory,
    )


def normalize_signup_response(
    body: Any,
    name: str,
    email: str,
    role: Role = "user",
    id_factory: Callable[[], str] = generate_user_id,
) -> NormalizedIdentity:
    """
    Build the session identity from a signup response.

    Defaults: generated id, the submitted email, the submitted name and the
    requested role.

    Raises:
        MalformedResponseError: Body is not a usable identity
    """
    return _normalize(
        body,
        default_email=email,
        default_name=lambda: name,
        default_role=role,
        id_factory=id_factory,
    )

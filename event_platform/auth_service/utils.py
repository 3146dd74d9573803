"""
Shared authentication helpers.
Provides token creation, request authentication, and role enforcement.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional

import jwt
from flask import current_app, request

from event_platform.errors import InsufficientPrivileges, InvalidToken, MissingToken, ValidationError

JWT_ALGORITHM = "HS256"
TOKEN_TTL = timedelta(hours=1)
ADMIN = True
MEMBER = False


@dataclass(frozen=True)
class Identity:
    """Authenticated caller, decoded from a verified token."""

    subject_id: int
    is_admin: bool


# --- JWT CREATION ---
def create_token(
    user_id: int,
    is_admin: bool,
    secret: str,
    expires_in: timedelta = TOKEN_TTL,
    now: Optional[datetime] = None,
) -> str:
    """
    Generates a new JWT for a given user.

    Args:
        user_id (int): The unique ID of the user.
        is_admin (bool): The role of the user.
        secret (str): Signing secret.
        expires_in (timedelta): Lifetime of the token.
        now (datetime, optional): Issue time, defaults to the current UTC time.

    Returns:
        str: Encoded JWT string.
    """
    issued_at = now or datetime.now(timezone.utc)

    payload = {
        "sub": str(user_id),
        "role": bool(is_admin),
        "iat": issued_at,
        "exp": issued_at + expires_in,
    }

    return jwt.encode(payload, secret, algorithm=JWT_ALGORITHM)


# --- JWT VALIDATION ---
def authenticate(raw_header: Optional[str], secret: str) -> Identity:
    """
    Verify a "Bearer <token>" Authorization header.

    Raises:
        MissingToken: No header, or no token after the Bearer scheme.
        InvalidToken: Bad signature, expired, or malformed claims.
    """
    if not raw_header or not raw_header.startswith("Bearer "):
        raise MissingToken()

    token = raw_header.split(" ", 1)[1].strip()
    if not token:
        raise MissingToken()

    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[JWT_ALGORITHM],
            options={"require": ["sub", "exp", "iat"]},
        )
    except jwt.ExpiredSignatureError:
        logging.warning("[Auth] Rejected expired token")
        raise InvalidToken("token expired")
    except jwt.InvalidTokenError:
        logging.warning("[Auth] Rejected invalid token")
        raise InvalidToken()

    role = payload.get("role")
    try:
        subject_id = int(payload["sub"])
    except (TypeError, ValueError):
        raise InvalidToken()
    if not isinstance(role, bool):
        raise InvalidToken()

    return Identity(subject_id=subject_id, is_admin=role)


def authorize(required_role: bool) -> Callable[[Identity], Identity]:
    """
    Build a check that only lets through identities whose role is exactly
    required_role. Roles are a flag, not a hierarchy: authorize(False)
    rejects admins too.
    """

    def check(identity: Identity) -> Identity:
        if identity.is_admin != required_role:
            raise InsufficientPrivileges()
        return identity

    return check


# --- FLASK HELPERS ---
def verify_token_from_request(required_role: Optional[bool] = None) -> Identity:
    """
    Authenticate the current request and optionally enforce a role.

    Args:
        required_role (bool, optional): Role the caller must hold.

    Returns:
        Identity: The verified caller.
    """
    identity = authenticate(
        request.headers.get("Authorization"), current_app.config["JWT_SECRET"]
    )
    if required_role is not None:
        authorize(required_role)(identity)
    return identity


def optional_viewer_id() -> Optional[int]:
    """
    User id of the caller if a valid token was sent, None otherwise.
    Public routes use this; a bad token just means an anonymous viewer.
    """
    if not request.headers.get("Authorization"):
        return None
    try:
        return verify_token_from_request().subject_id
    except (MissingToken, InvalidToken):
        return None


def json_body() -> Dict[str, Any]:
    """
    JSON object sent with the current request; {} when there is no body.

    Raises:
        ValidationError: The body parsed to a list or scalar.
    """
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from event_platform.auth_service.utils import (
    ADMIN,
    MEMBER,
    Identity,
    authenticate,
    authorize,
    create_token,
    optional_viewer_id,
    verify_token_from_request,
)
from event_platform.errors import InsufficientPrivileges, InvalidToken, MissingToken

SECRET = "test_secret"


def test_create_token():
    token = create_token(123, True, SECRET)

    assert isinstance(token, str)

    # Decode to verify contents using the same secret
    payload = jwt.decode(token, SECRET, algorithms=["HS256"])
    assert payload["sub"] == "123"
    assert payload["role"] is True
    assert payload["exp"] - payload["iat"] == 3600


def test_authenticate_valid():
    token = create_token(456, False, SECRET)

    identity = authenticate(f"Bearer {token}", SECRET)
    assert identity == Identity(subject_id=456, is_admin=False)


@pytest.mark.parametrize("header", [None, "", "InvalidFormat", "Bearer ", "Basic abc"])
def test_authenticate_missing_token(header):
    with pytest.raises(MissingToken):
        authenticate(header, SECRET)


def test_authenticate_garbage_token():
    with pytest.raises(InvalidToken):
        authenticate("Bearer invalid.token.here", SECRET)


def test_authenticate_expired_token():
    issued = datetime.now(timezone.utc) - timedelta(hours=2)
    token = create_token(1, False, SECRET, now=issued)

    with pytest.raises(InvalidToken) as exc:
        authenticate(f"Bearer {token}", SECRET)
    assert exc.value.message == "token expired"


def test_authenticate_just_before_expiry():
    issued = datetime.now(timezone.utc) - timedelta(minutes=59)
    token = create_token(1, False, SECRET, now=issued)

    assert authenticate(f"Bearer {token}", SECRET).subject_id == 1


def test_authenticate_tampered_signature():
    token = create_token(1, False, SECRET)
    header, payload, signature = token.split(".")
    flipped = ("A" if signature[0] != "A" else "B") + signature[1:]

    with pytest.raises(InvalidToken):
        authenticate(f"Bearer {header}.{payload}.{flipped}", SECRET)


def test_authenticate_tampered_payload():
    # Forge an admin claim signed with another key
    forged = create_token(1, True, "not_the_secret")
    with pytest.raises(InvalidToken):
        authenticate(f"Bearer {forged}", SECRET)


def test_authenticate_rejects_non_boolean_role():
    now = datetime.now(timezone.utc)
    token = jwt.encode(
        {"sub": "1", "role": "admin", "iat": now, "exp": now + timedelta(hours=1)},
        SECRET,
        algorithm="HS256",
    )
    with pytest.raises(InvalidToken):
        authenticate(f"Bearer {token}", SECRET)


@pytest.mark.parametrize(
    "required, is_admin, allowed",
    [
        (ADMIN, True, True),
        (ADMIN, False, False),
        (MEMBER, False, True),
        (MEMBER, True, False),
    ],
)
def test_authorize_exact_match(required, is_admin, allowed):
    check = authorize(required)
    identity = Identity(subject_id=7, is_admin=is_admin)

    if allowed:
        assert check(identity) is identity
    else:
        with pytest.raises(InsufficientPrivileges):
            check(identity)


def test_verify_token_from_request_valid(app):
    token = create_token(789, False, SECRET)

    with app.test_request_context(headers={"Authorization": f"Bearer {token}"}):
        identity = verify_token_from_request()
        assert identity.subject_id == 789
        assert identity.is_admin is False


def test_verify_token_from_request_missing_header(app):
    with app.test_request_context():
        with pytest.raises(MissingToken):
            verify_token_from_request()


def test_verify_token_from_request_wrong_role(app):
    token = create_token(111, False, SECRET)

    with app.test_request_context(headers={"Authorization": f"Bearer {token}"}):
        with pytest.raises(InsufficientPrivileges):
            verify_token_from_request(required_role=ADMIN)


def test_optional_viewer_id(app):
    token = create_token(5, False, SECRET)

    with app.test_request_context(headers={"Authorization": f"Bearer {token}"}):
        assert optional_viewer_id() == 5

    with app.test_request_context(headers={"Authorization": "Bearer junk"}):
        assert optional_viewer_id() is None

    with app.test_request_context():
        assert optional_viewer_id() is None

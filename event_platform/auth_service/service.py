"""
Credential & session authority.

Registration, login, password rotation and profile maintenance for user
accounts. Every persistence or hashing fault is logged here and surfaced as
a typed DomainError; callers never see a driver exception.
"""

import logging
from datetime import timedelta
from typing import Any, Dict, Optional

import psycopg2
import psycopg2.errors
from argon2 import PasswordHasher
from argon2.exceptions import HashingError, InvalidHashError, VerificationError, VerifyMismatchError

from event_platform.auth_service.utils import TOKEN_TTL, Identity, authenticate, create_token
from event_platform.auth_service.validators import (
    require_fields,
    validate_email,
    validate_name,
    validate_password,
)
from event_platform.database.db_connection import ConnectionPool
from event_platform.errors import (
    DuplicateIdentity,
    InternalFailure,
    InvalidCredentials,
    NotFound,
    ValidationError,
)

# Columns a caller may change through update_profile. Anything else in the
# payload (is_admin, password_hash, user_id...) is dropped.
PROFILE_FIELDS = ("first_name", "last_name", "email")

PROFILE_COLUMNS = "user_id, first_name, last_name, email, is_admin, created_at, updated_at"

# Verified against on unknown-email logins so both rejections cost one
# argon2 check.
DUMMY_HASH = PasswordHasher().hash("event-platform-unused-password")


class CredentialAuthority:
    """
    Owns every operation that reads or writes account credentials.

    Args:
        pool (ConnectionPool): Shared database pool.
        secret (str): Token signing secret, loaded once at boot.
        hasher (PasswordHasher, optional): Argon2 hasher; the default one
            uses argon2-cffi's recommended parameters.
        token_ttl (timedelta): Lifetime of issued tokens.
    """

    def __init__(
        self,
        pool: ConnectionPool,
        secret: str,
        hasher: Optional[PasswordHasher] = None,
        token_ttl: timedelta = TOKEN_TTL,
    ):
        self.pool = pool
        self.secret = secret
        self.hasher = hasher or PasswordHasher()
        self.token_ttl = token_ttl

    # --- REGISTER ---
    def register(self, first_name: str, last_name: str, email: str, password: str) -> int:
        """
        Create a non-admin account and return its id.

        Raises:
            ValidationError: A field is empty or malformed.
            DuplicateIdentity: The email is already taken.
            InternalFailure: Hashing or database error.
        """
        require_fields(first_name=first_name, last_name=last_name, email=email, password=password)
        first_name = validate_name(first_name)
        last_name = validate_name(last_name)
        email = validate_email(email)
        validate_password(password)

        pw_hash = self._hash(password, "Registration failed. Please try again later.")

        # is_admin is a literal: nothing the caller sends can set it
        sql = """
            INSERT INTO users (first_name, last_name, email, password_hash, is_admin)
            VALUES (%s, %s, %s, %s, FALSE)
            RETURNING user_id;
        """

        try:
            with self.pool.connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(sql, (first_name, last_name, email, pw_hash))
                    user = cur.fetchone()
                conn.commit()
        except psycopg2.errors.UniqueViolation:
            raise DuplicateIdentity()
        except psycopg2.Error:
            logging.exception("[Auth] Error registering user")
            raise InternalFailure("Registration failed. Please try again later.")

        logging.info(f"[Auth] Registered user {user['user_id']}")
        return user["user_id"]

    # --- LOGIN ---
    def login(self, email: str, password: str) -> Dict[str, Any]:
        """
        Verify credentials and issue a token.

        Unknown email and wrong password produce the same InvalidCredentials
        so the response does not reveal which accounts exist.

        Returns:
            dict: user_id, is_admin and token.
        """
        if not isinstance(email, str) or not isinstance(password, str) or not email or not password:
            raise ValidationError("Email and password are required")

        sql = "SELECT user_id, password_hash, is_admin FROM users WHERE email = %s;"

        try:
            with self.pool.connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(sql, (email.strip().lower(),))
                    user = cur.fetchone()
        except psycopg2.Error:
            logging.exception("[Auth] Error logging in user")
            raise InternalFailure("Login failed. Please try again later.")

        if not user:
            self._verify(DUMMY_HASH, password, "Login failed. Please try again later.")
            logging.warning("[Auth] Login rejected")
            raise InvalidCredentials()

        if not self._verify(user["password_hash"], password, "Login failed. Please try again later."):
            logging.warning(f"[Auth] Login rejected for user {user['user_id']}")
            raise InvalidCredentials()

        is_admin = bool(user["is_admin"])
        token = create_token(user["user_id"], is_admin, self.secret, expires_in=self.token_ttl)

        return {"user_id": user["user_id"], "is_admin": is_admin, "token": token}

    # --- CHANGE PASSWORD ---
    def change_password(self, subject_id: int, current_password: str, new_password: str) -> None:
        """
        Replace the stored hash after re-verifying the current password.

        subject_id must come from a verified token, never from a request body.

        Raises:
            ValidationError: Missing field or weak new password.
            NotFound: The account no longer exists.
            InvalidCredentials: current_password does not match.
        """
        require_fields(current_password=current_password, new_password=new_password)
        validate_password(new_password)

        try:
            with self.pool.connection() as conn:
                with conn.cursor() as cur:
                    cur.execute("SELECT password_hash FROM users WHERE user_id = %s;", (subject_id,))
                    user = cur.fetchone()
        except psycopg2.Error:
            logging.exception("[Auth] Error loading user for password change")
            raise InternalFailure("Failed to change password. Please try again later.")

        if not user:
            raise NotFound("User not found")

        if not self._verify(user["password_hash"], current_password, "Failed to change password. Please try again later."):
            logging.warning(f"[Auth] Password change rejected for user {subject_id}")
            raise InvalidCredentials("Current password is incorrect")

        new_hash = self._hash(new_password, "Failed to change password. Please try again later.")

        sql = """
            UPDATE users
            SET password_hash = %s, updated_at = CURRENT_TIMESTAMP
            WHERE user_id = %s;
        """

        try:
            with self.pool.connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(sql, (new_hash, subject_id))
                    updated = cur.rowcount
                conn.commit()
        except psycopg2.Error:
            logging.exception("[Auth] Error updating password")
            raise InternalFailure("Failed to change password. Please try again later.")

        if not updated:
            raise NotFound("User not found")

        logging.info(f"[Auth] Password changed for user {subject_id}")

    # --- PROFILE ---
    def get_profile(self, subject_id: int) -> Dict[str, Any]:
        sql = f"SELECT {PROFILE_COLUMNS} FROM users WHERE user_id = %s;"

        try:
            with self.pool.connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(sql, (subject_id,))
                    user = cur.fetchone()
        except psycopg2.Error:
            logging.exception("[Auth] Error retrieving user")
            raise InternalFailure("Could not retrieve user")

        if not user:
            raise NotFound("User not found")

        return _serialize_profile(user)

    def update_profile(self, subject_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Update the caller's own profile.

        Only PROFILE_FIELDS are written; every other key in data is ignored.

        Raises:
            ValidationError: No allowed field present, or a value is malformed.
            DuplicateIdentity: The new email belongs to another account.
            NotFound: The account no longer exists.
        """
        if not isinstance(data, dict):
            raise ValidationError("Request body must be a JSON object")

        fields = {k: data[k] for k in PROFILE_FIELDS if k in data}

        if not fields:
            raise ValidationError("No valid fields provided")

        for key, value in fields.items():
            if not isinstance(value, str) or not value.strip():
                raise ValidationError(f"{key} must be a non-empty string")
            fields[key] = validate_email(value) if key == "email" else validate_name(value)

        set_clause = ", ".join(f"{k} = %s" for k in fields)
        set_clause += ", updated_at = CURRENT_TIMESTAMP"

        values = list(fields.values()) + [subject_id]

        sql = f"UPDATE users SET {set_clause} WHERE user_id = %s RETURNING {PROFILE_COLUMNS};"

        try:
            with self.pool.connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(sql, values)
                    updated_user = cur.fetchone()
                conn.commit()
        except psycopg2.errors.UniqueViolation:
            raise DuplicateIdentity()
        except psycopg2.Error:
            logging.exception("[Auth] Error updating user")
            raise InternalFailure("Update failed")

        if not updated_user:
            raise NotFound("User not found")

        return _serialize_profile(updated_user)

    # --- TOKENS ---
    def authenticate(self, raw_header: Optional[str]) -> Identity:
        return authenticate(raw_header, self.secret)

    # --- HASHING ---
    def _hash(self, password: str, failure_message: str) -> str:
        try:
            return self.hasher.hash(password)
        except HashingError:
            logging.exception("[Auth] Password hashing failed")
            raise InternalFailure(failure_message)

    def _verify(self, stored_hash: str, password: str, failure_message: str) -> bool:
        try:
            return self.hasher.verify(stored_hash, password)
        except VerifyMismatchError:
            return False
        except (InvalidHashError, VerificationError):
            logging.exception("[Auth] Password verification failed")
            raise InternalFailure(failure_message)


def _serialize_profile(row) -> Dict[str, Any]:
    user = dict(row)
    # Convert timestamps to ISO string for JSON serialization
    for key in ("created_at", "updated_at"):
        if user.get(key):
            user[key] = user[key].isoformat()
    return user

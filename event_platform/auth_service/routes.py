"""
Authentication service route handlers.

Provides routes for:
- User registration
- User login
- Password change
- Profile retrieval (/me)
- Profile update (/me PUT)

Credential logic lives in `auth_service.service.CredentialAuthority`;
token checks in `auth_service.utils`.
"""

import logging
from typing import Any, Dict, Tuple

from flask import Blueprint, Response, current_app, jsonify, request

from event_platform.auth_service.service import CredentialAuthority
from event_platform.auth_service.utils import json_body, verify_token_from_request

auth_bp = Blueprint("auth", __name__)


def get_authority() -> CredentialAuthority:
    return current_app.extensions["credential_authority"]


# --- REQUEST LOGGING ---
@auth_bp.before_request
def before_request() -> None:
    """
    Log every incoming request method and path to the authentication service.
    """
    logging.info(f"[Auth] Incoming {request.method} {request.path}")


@auth_bp.after_request
def after_request(response: Response) -> Response:
    logging.info(f"[Auth] Response {response.status}")
    return response


# --- REGISTER ---
@auth_bp.route("/register", methods=["POST"])
def register() -> Tuple[Response, int]:
    """
    Register a new user in the system.

    Expects a JSON body with:
    - first_name (str)
    - last_name (str)
    - email (str): Unique email address.
    - password (str): 8+ characters, mixed case, a digit and a symbol.

    Any is_admin flag in the body is ignored; new accounts are never admins.

    Returns:
        201: JSON with user_id.
        400: Missing or invalid fields.
        409: Email already in use.
        500: Server-side error (hashing or database).
    """
    data: Dict[str, Any] = json_body()

    user_id = get_authority().register(
        data.get("first_name"),
        data.get("last_name"),
        data.get("email"),
        data.get("password"),
    )

    return jsonify({"message": "User registered successfully", "user_id": user_id}), 201


# --- LOGIN ---
@auth_bp.route("/login", methods=["POST"])
def login() -> Tuple[Response, int]:
    """
    Authenticate a user and return a JWT.

    Expects a JSON body with:
    - email (str)
    - password (str)

    Returns:
        200: JSON with user_id, is_admin, and JWT token.
        400: Missing credentials.
        401: Invalid credentials (wrong password or unknown email).
        500: Database error.
    """
    data: Dict[str, Any] = json_body()

    result = get_authority().login(data.get("email"), data.get("password"))

    return jsonify({"message": "Login successful", **result}), 200


# --- CHANGE PASSWORD ---
@auth_bp.route("/change-password", methods=["PUT"])
def change_password() -> Tuple[Response, int]:
    """
    Change the authenticated user's password.

    Requires Authorization header: Bearer <token>
    Expects JSON: { "current_password": str, "new_password": str }

    Returns:
        200: Password changed.
        400: Missing fields or weak new password.
        401: Authentication failure or wrong current password.
        404: User no longer exists.
    """
    identity = verify_token_from_request()

    data: Dict[str, Any] = json_body()

    get_authority().change_password(
        identity.subject_id,
        data.get("current_password"),
        data.get("new_password"),
    )

    return jsonify({"message": "Password changed successfully"}), 200


# --- GET CURRENT USER ---
@auth_bp.route("/me", methods=["GET"])
def get_current_user() -> Tuple[Response, int]:
    """
    Retrieve the current user's profile.

    Requires Authorization header: Bearer <token>
    """
    identity = verify_token_from_request()
    return jsonify(get_authority().get_profile(identity.subject_id)), 200


# --- UPDATE CURRENT USER ---
@auth_bp.route("/me", methods=["PUT"])
def update_current_user() -> Tuple[Response, int]:
    """
    Update specific fields of the current user's profile.

    Allowed fields:
    - first_name, last_name
    - email

    Requires Authorization header: Bearer <token>

    Returns:
        200: Updated user object.
        400: No valid fields provided.
        401: Authentication failure.
        409: Email already in use.
    """
    identity = verify_token_from_request()
    data: Dict[str, Any] = json_body()
    return jsonify(get_authority().update_profile(identity.subject_id, data)), 200

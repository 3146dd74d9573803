"""
Registrations service routes: join and leave events, list seats held.
The acting user always comes from the bearer token, never from the body.
"""

import logging
from typing import Any, Dict, Tuple

from flask import Blueprint, Response, current_app, jsonify, request

from event_platform.auth_service.utils import ADMIN, json_body, verify_token_from_request
from event_platform.errors import ValidationError
from event_platform.registrations_service.service import RegistrationService

registrations_bp = Blueprint("registrations", __name__)


def get_registrations() -> RegistrationService:
    return current_app.extensions["registrations"]


@registrations_bp.before_request
def before_request() -> None:
    logging.info(f"[Registrations] Incoming {request.method} {request.path}")


@registrations_bp.after_request
def after_request(response: Response) -> Response:
    logging.info(f"[Registrations] Response {response.status}")
    return response


@registrations_bp.route("/", methods=["POST"])
def create_registration() -> Tuple[Response, int]:
    """
    Register the caller for an event.

    Expects JSON: { "event_id": int }

    Returns:
        201: Registration with the seats left after it.
        400: Missing or invalid event_id.
        404: Event not found.
        409: Already registered, or no seats left.
    """
    identity = verify_token_from_request()
    data: Dict[str, Any] = json_body()

    event_id = data.get("event_id")
    if isinstance(event_id, bool) or not isinstance(event_id, int):
        raise ValidationError("event_id must be an integer")

    registration = get_registrations().register(identity.subject_id, event_id)
    return jsonify(registration), 201


@registrations_bp.route("/<int:event_id>", methods=["DELETE"])
def delete_registration(event_id: int) -> Tuple[Response, int]:
    """Cancel the caller's own registration."""
    identity = verify_token_from_request()
    get_registrations().unregister(identity.subject_id, event_id)
    return jsonify({"status": "deleted"}), 200


@registrations_bp.route("/me", methods=["GET"])
def list_my_registrations() -> Tuple[Response, int]:
    identity = verify_token_from_request()
    return jsonify(get_registrations().list_for_user(identity.subject_id)), 200


@registrations_bp.route("/events/<int:event_id>", methods=["GET"])
def list_event_registrations(event_id: int) -> Tuple[Response, int]:
    """
    Admin-only: attendees of an event.

    Returns:
        200: List of registrations with attendee names and emails.
        401/403: Unauthorized.
    """
    verify_token_from_request(required_role=ADMIN)
    return jsonify(get_registrations().list_for_event(event_id)), 200

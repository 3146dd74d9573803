"""
Events service routes: public event catalog with seat availability.
"""

import logging
from typing import Tuple

from flask import Blueprint, Response, current_app, jsonify, request

from event_platform.auth_service.utils import optional_viewer_id
from event_platform.events_service.availability import SeatAvailabilityAggregator

events_bp = Blueprint("events", __name__)


def get_aggregator() -> SeatAvailabilityAggregator:
    return current_app.extensions["seat_availability"]


@events_bp.before_request
def before_request() -> None:
    logging.info(f"[Events] Incoming {request.method} {request.path}")


@events_bp.after_request
def after_request(response: Response) -> Response:
    logging.info(f"[Events] Response {response.status}")
    return response


@events_bp.route("/", methods=["GET"])
def list_events() -> Tuple[Response, int]:
    """
    Return all events with location, organizers and remaining seats.

    Public. If a valid bearer token is sent, each event also carries
    is_viewer_registered for the caller.

    Returns:
        200: List of event objects ordered by start_date.
        500: Database error.
    """
    views = get_aggregator().list_events(viewer_id=optional_viewer_id())
    return jsonify([v.to_dict() for v in views]), 200


@events_bp.route("/<int:event_id>", methods=["GET"])
def get_event(event_id: int) -> Tuple[Response, int]:
    """
    Get a single event by ID.

    Returns:
        200: Event object.
        404: Event not found.
    """
    view = get_aggregator().get_event(event_id, viewer_id=optional_viewer_id())
    return jsonify(view.to_dict()), 200

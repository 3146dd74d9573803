"""
Typed failures shared by every service.

Services raise these; the gateway turns them into JSON error bodies so no
driver or runtime exception ever reaches the client unhandled.
"""

import json
import logging
from typing import Optional, Tuple

from flask import Flask, jsonify, Response
from werkzeug.exceptions import HTTPException


class DomainError(Exception):
    status_code = 400

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)


class ValidationError(DomainError):
    status_code = 400


class InvalidCredentials(DomainError):
    status_code = 401

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message)


class MissingToken(DomainError):
    status_code = 401

    def __init__(self, message: str = "missing token"):
        super().__init__(message)


class InvalidToken(DomainError):
    status_code = 401

    def __init__(self, message: str = "invalid token"):
        super().__init__(message)


class InsufficientPrivileges(DomainError):
    status_code = 403

    def __init__(self, message: str = "permission denied"):
        super().__init__(message)


class NotFound(DomainError):
    status_code = 404


class DuplicateIdentity(DomainError):
    status_code = 409

    def __init__(self, message: str = "Email already in use"):
        super().__init__(message)


class AlreadyRegistered(DomainError):
    status_code = 409

    def __init__(self, message: str = "Already registered for this event"):
        super().__init__(message)


class EventFull(DomainError):
    status_code = 409

    def __init__(self, message: str = "No seats remaining for this event"):
        super().__init__(message)


class InternalFailure(DomainError):
    """Opaque server-side fault. The real cause is logged, never returned."""

    status_code = 500


def handle_domain_error(exc: DomainError) -> Tuple[Response, int]:
    if exc.status_code >= 500:
        logging.error(f"[Gateway] Internal failure: {exc.message}")
    else:
        logging.info(f"[Gateway] Rejected request: {exc.status_code} {exc.message}")
    return jsonify({"error": exc.message}), exc.status_code


def handle_http_exception(exc: HTTPException) -> Response:
    # Routing errors (404 unknown URL, 405) keep their status and headers
    response = exc.get_response()
    response.data = json.dumps({"error": exc.description})
    response.content_type = "application/json"
    return response


def handle_unexpected_error(exc: Exception) -> Tuple[Response, int]:
    logging.exception("[Gateway] Unhandled exception")
    return jsonify({"error": "Internal server error"}), 500


def register_error_handlers(app: Flask) -> None:
    """Attach the DomainError -> JSON mapping to a Flask app."""
    app.register_error_handler(DomainError, handle_domain_error)
    app.register_error_handler(HTTPException, handle_http_exception)
    app.register_error_handler(Exception, handle_unexpected_error)

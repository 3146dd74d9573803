"""
API gateway: builds the shared dependencies and combines the auth, events,
and registrations blueprints.
This is the local entrypoint for development.
"""

import logging
from datetime import timedelta
from typing import Optional

from flask import Flask, jsonify
from flask_cors import CORS

from event_platform.auth_service.routes import auth_bp
from event_platform.auth_service.service import CredentialAuthority
from event_platform.config import Settings
from event_platform.database.db_connection import ConnectionPool
from event_platform.errors import register_error_handlers
from event_platform.events_service.availability import SeatAvailabilityAggregator
from event_platform.events_service.routes import events_bp
from event_platform.registrations_service.routes import registrations_bp
from event_platform.registrations_service.service import RegistrationService

# Basic console logging during API requests
logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(asctime)s - %(message)s")


def create_app(settings: Optional[Settings] = None, pool: Optional[ConnectionPool] = None) -> Flask:
    """
    Application factory for creating the Flask app.

    Args:
        settings (Settings, optional): Defaults to Settings.from_env().
        pool (ConnectionPool, optional): Defaults to a pool on settings.database_url.

    Returns:
        Flask: The configured Flask application.
    """
    settings = settings or Settings.from_env()
    if pool is None:
        pool = ConnectionPool(settings.database_url, settings.db_pool_min, settings.db_pool_max)

    app = Flask(__name__)
    app.config["JWT_SECRET"] = settings.jwt_secret

    CORS(app, resources={
        r"/*": {
            "origins": list(settings.cors_origins),
            "methods": ["GET", "POST", "PUT", "DELETE", "OPTIONS"],
            "allow_headers": ["Content-Type", "Authorization"],
            "expose_headers": ["Content-Type", "Authorization"],
            "supports_credentials": True
        }
    })

    # --- SERVICES ---
    # Built once per process; routes reach them through app.extensions.
    app.extensions["credential_authority"] = CredentialAuthority(
        pool,
        settings.jwt_secret,
        token_ttl=timedelta(minutes=settings.token_expiration_minutes),
    )
    app.extensions["seat_availability"] = SeatAvailabilityAggregator(pool)
    app.extensions["registrations"] = RegistrationService(pool)

    # --- REGISTER BLUEPRINTS ---
    app.register_blueprint(auth_bp, url_prefix="/auth")
    app.register_blueprint(events_bp, url_prefix="/events")
    app.register_blueprint(registrations_bp, url_prefix="/registrations")
    register_error_handlers(app)

    logging.info("All blueprints registered successfully.")

    # --- BASIC HEALTH CHECKPOINTS ---
    @app.route("/")
    def ping():
        """
        Root URL for simple 'online' check.
        """
        return jsonify({"status": "gateway_ok"}), 200

    @app.route("/health")
    def health():
        """
        Health check endpoint.
        """
        return jsonify({"status": "ok"}), 200

    return app


if __name__ == "__main__":
    settings = Settings.from_env()
    app = create_app(settings)
    app.run(host="0.0.0.0", port=settings.gateway_port, debug=True)

"""
Process configuration.
Loaded once at boot from the environment (and the project .env file),
then handed to the gateway which injects it into every service.
"""

import os
from dataclasses import dataclass, field
from typing import Tuple

from dotenv import load_dotenv

DEFAULT_CORS_ORIGINS = (
    "http://localhost:5500",
    "http://localhost:5050",
    "http://localhost:8080",
)


@dataclass(frozen=True)
class Settings:
    """
    Immutable settings for one process.

    Attributes:
        jwt_secret (str): Secret used to sign and verify bearer tokens.
        database_url (str): PostgreSQL DSN.
        db_pool_min (int): Connections opened eagerly by the pool.
        db_pool_max (int): Hard cap on concurrent connections.
        token_expiration_minutes (int): Token lifetime (default 1 hour).
        cors_origins (tuple): Origins allowed by the gateway.
        gateway_port (int): Port used by the development server.
    """

    jwt_secret: str
    database_url: str
    db_pool_min: int = 1
    db_pool_max: int = 10
    token_expiration_minutes: int = 60
    cors_origins: Tuple[str, ...] = field(default=DEFAULT_CORS_ORIGINS)
    gateway_port: int = 5050

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Build settings from environment variables.

        Raises:
            RuntimeError: If JWT_SECRET or DATABASE_URL is missing.
        """
        load_dotenv()

        jwt_secret = os.getenv("JWT_SECRET")
        if not jwt_secret:
            raise RuntimeError("JWT_SECRET is missing. Set it in .env")

        database_url = os.getenv("DATABASE_URL")
        if not database_url:
            raise RuntimeError("DATABASE_URL is not set. Please set the environment variable.")

        origins = os.getenv("CORS_ORIGINS")
        cors_origins = (
            tuple(o.strip() for o in origins.split(",") if o.strip())
            if origins
            else DEFAULT_CORS_ORIGINS
        )

        return cls(
            jwt_secret=jwt_secret,
            database_url=database_url,
            db_pool_min=int(os.getenv("DB_POOL_MIN", 1)),
            db_pool_max=int(os.getenv("DB_POOL_MAX", 10)),
            token_expiration_minutes=int(os.getenv("TOKEN_EXPIRATION_MINUTES", 60)),
            cors_origins=cors_origins,
            gateway_port=int(os.getenv("GATEWAY_PORT", 5050)),
        )

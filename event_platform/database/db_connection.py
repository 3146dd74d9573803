"""
PostgreSQL connection pool.
Provides ConnectionPool.connection() for use by services.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Iterator

import psycopg2
from psycopg2.extras import DictCursor
from psycopg2.pool import ThreadedConnectionPool


class ConnectionPool:
    """
    Bounded pool of psycopg2 connections shared by every service.

    ThreadedConnectionPool raises PoolError once maxconn connections are
    checked out, so a semaphore with the same number of slots sits in front
    of it: callers beyond the limit wait for a connection to come back
    instead of failing. The wait queue is unbounded and has no timeout.
    """

    def __init__(self, dsn: str, minconn: int = 1, maxconn: int = 10):
        self.maxconn = maxconn
        self._slots = threading.BoundedSemaphore(maxconn)
        try:
            # Every cursor returns rows with dictionary-based access
            # (e.g., {"user_id": 1, "email": "..."})
            self._pool = ThreadedConnectionPool(
                minconn, maxconn, dsn, cursor_factory=DictCursor
            )
        except psycopg2.Error:
            logging.exception("[Database] Error connecting to database")
            raise

    @contextmanager
    def connection(self) -> Iterator["psycopg2.extensions.connection"]:
        """
        Borrow a connection for the duration of a with-block.

        Usage:
            with pool.connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(...)
                conn.commit()

        The open transaction is rolled back if the block raises; the
        connection always goes back to the pool.
        """
        with self._slots:
            conn = self._pool.getconn()
            try:
                yield conn
            except Exception:
                if not conn.closed:
                    conn.rollback()
                raise
            finally:
                self._pool.putconn(conn)

    def close(self) -> None:
        self._pool.closeall()

"""
Event registrations: sign a user up for an event, cancel, and list.
"""

import logging
from typing import Any, Dict, List

import psycopg2
import psycopg2.errors

from event_platform.database.db_connection import ConnectionPool
from event_platform.errors import AlreadyRegistered, EventFull, InternalFailure, NotFound


def _serialize(row) -> Dict[str, Any]:
    item = dict(row)
    for key in ("start_date", "registered_at"):
        if item.get(key):
            item[key] = item[key].isoformat()
    return item


class RegistrationService:
    def __init__(self, pool: ConnectionPool):
        self.pool = pool

    def register(self, user_id: int, event_id: int) -> Dict[str, Any]:
        """
        Register user_id for event_id if a seat is left.

        The event row is locked (FOR UPDATE) for the whole transaction, so
        concurrent registrations for one event are serialized and the seat
        check cannot be raced into over-subscription.

        Raises:
            NotFound: Unknown event or user.
            EventFull: Every seat is taken.
            AlreadyRegistered: The user already holds a seat.
        """
        try:
            with self.pool.connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(
                        "SELECT seat_capacity FROM events WHERE event_id = %s FOR UPDATE;",
                        (event_id,),
                    )
                    event = cur.fetchone()
                    if not event:
                        raise NotFound("Event not found")

                    cur.execute(
                        "SELECT COUNT(*) AS registered_count FROM register WHERE event_id = %s;",
                        (event_id,),
                    )
                    registered_count = cur.fetchone()["registered_count"]
                    if registered_count >= event["seat_capacity"]:
                        raise EventFull()

                    cur.execute(
                        """
                        INSERT INTO register (user_id, event_id)
                        VALUES (%s, %s)
                        RETURNING register_id;
                        """,
                        (user_id, event_id),
                    )
                    registration = cur.fetchone()
                conn.commit()
        except psycopg2.errors.UniqueViolation:
            raise AlreadyRegistered()
        except psycopg2.errors.ForeignKeyViolation:
            raise NotFound("User not found")
        except psycopg2.Error:
            logging.exception("[Registrations] Error creating registration")
            raise InternalFailure("Failed to register for event")

        logging.info(f"[Registrations] User {user_id} registered for event {event_id}")

        return {
            "register_id": registration["register_id"],
            "user_id": user_id,
            "event_id": event_id,
            "remaining_seats": event["seat_capacity"] - registered_count - 1,
        }

    def unregister(self, user_id: int, event_id: int) -> None:
        try:
            with self.pool.connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(
                        "DELETE FROM register WHERE user_id = %s AND event_id = %s;",
                        (user_id, event_id),
                    )
                    deleted = cur.rowcount
                conn.commit()
        except psycopg2.Error:
            logging.exception("[Registrations] Error deleting registration")
            raise InternalFailure("Failed to cancel registration")

        if not deleted:
            raise NotFound("Registration not found")

        logging.info(f"[Registrations] User {user_id} unregistered from event {event_id}")

    def list_for_user(self, user_id: int) -> List[Dict[str, Any]]:
        """Events the user holds a seat for, soonest first."""
        sql = """
            SELECT reg.register_id, reg.event_id, e.name, e.start_date, reg.registered_at
            FROM register reg
            JOIN events e ON reg.event_id = e.event_id
            WHERE reg.user_id = %s
            ORDER BY e.start_date, reg.event_id;
        """
        try:
            with self.pool.connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(sql, (user_id,))
                    rows = cur.fetchall()
        except psycopg2.Error:
            logging.exception("[Registrations] Error retrieving user registrations")
            raise InternalFailure("Failed to retrieve registrations")

        return [_serialize(r) for r in rows]

    def list_for_event(self, event_id: int) -> List[Dict[str, Any]]:
        """Attendees of an event in registration order."""
        sql = """
            SELECT reg.register_id, reg.user_id, u.first_name, u.last_name, u.email, reg.registered_at
            FROM register reg
            JOIN users u ON reg.user_id = u.user_id
            WHERE reg.event_id = %s
            ORDER BY reg.registered_at, reg.register_id;
        """
        try:
            with self.pool.connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(sql, (event_id,))
                    rows = cur.fetchall()
        except psycopg2.Error:
            logging.exception("[Registrations] Error retrieving event registrations")
            raise InternalFailure("Failed to retrieve registrations")

        return [_serialize(r) for r in rows]

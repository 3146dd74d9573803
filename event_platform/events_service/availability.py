"""
Seat availability aggregator.

Builds denormalized event rows (location, postal code, city, organizers)
with the number of seats left. Remaining seats are recomputed from the
register table on every read; there is no counter column to drift out of
sync with registrations.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

import psycopg2

from event_platform.database.db_connection import ConnectionPool
from event_platform.errors import InternalFailure, NotFound

BASE_SELECT = """
    SELECT
        e.event_id, e.name, e.start_date, e.end_date,
        e.description, e.thumbnail, e.seat_capacity,
        COALESCE(r.registered_count, 0) AS registered_count,
        l.location_name,
        pc.postal_code_number AS postal_code,
        c.city_name,
        (SELECT string_agg(o.organizer_name, ', ' ORDER BY o.organizer_name)
           FROM organize org
           JOIN organizers o ON org.organizer_id = o.organizer_id
          WHERE org.event_id = e.event_id) AS organizer_name
"""

VIEWER_SELECT = """,
        EXISTS (
            SELECT 1 FROM register reg
            WHERE reg.event_id = e.event_id
            AND reg.user_id = %s
        ) AS is_viewer_registered
"""

# Events with zero registrations get no row from the subquery, hence the
# LEFT JOIN + COALESCE above.
BASE_FROM = """
    FROM events e
    JOIN locations l ON e.location_id = l.location_id
    JOIN postal_codes pc ON l.postal_code_id = pc.postal_code_id
    JOIN cities c ON l.city_id = c.city_id
    LEFT JOIN (
        SELECT event_id, COUNT(*) AS registered_count
        FROM register
        GROUP BY event_id
    ) r ON e.event_id = r.event_id
"""


@dataclass(frozen=True)
class EventView:
    event_id: int
    name: str
    start_date: Optional[datetime]
    end_date: Optional[datetime]
    description: Optional[str]
    thumbnail: Optional[str]
    location_name: str
    postal_code: str
    city_name: str
    organizer_name: Optional[str]
    seat_capacity: int
    registered_count: int
    is_viewer_registered: Optional[bool] = None

    @property
    def remaining_seats(self) -> int:
        return self.seat_capacity - self.registered_count

    @classmethod
    def from_row(cls, row) -> "EventView":
        data = dict(row)
        viewer = data.get("is_viewer_registered")
        return cls(
            event_id=data["event_id"],
            name=data["name"],
            start_date=data.get("start_date"),
            end_date=data.get("end_date"),
            description=data.get("description"),
            thumbnail=data.get("thumbnail"),
            location_name=data["location_name"],
            postal_code=data["postal_code"],
            city_name=data["city_name"],
            organizer_name=data.get("organizer_name"),
            seat_capacity=int(data["seat_capacity"]),
            registered_count=int(data.get("registered_count") or 0),
            is_viewer_registered=None if viewer is None else bool(viewer),
        )

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready projection; dates as ISO-8601 strings."""
        out = {
            "event_id": self.event_id,
            "name": self.name,
            "start_date": self.start_date.isoformat() if self.start_date else None,
            "end_date": self.end_date.isoformat() if self.end_date else None,
            "description": self.description,
            "thumbnail": self.thumbnail,
            "location_name": self.location_name,
            "postal_code": self.postal_code,
            "city_name": self.city_name,
            "organizer_name": self.organizer_name,
            "seat_capacity": self.seat_capacity,
            "registered_count": self.registered_count,
            "remaining_seats": self.remaining_seats,
        }
        if self.is_viewer_registered is not None:
            out["is_viewer_registered"] = self.is_viewer_registered
        return out


class SeatAvailabilityAggregator:
    """
    Read side of the event catalog.

    The figures are a point-in-time snapshot: a registration committed right
    after the query is not reflected until the next read.
    """

    def __init__(self, pool: ConnectionPool):
        self.pool = pool

    def _build_query(self, viewer_id: Optional[int]):
        sql = BASE_SELECT
        params: List[Any] = []
        if viewer_id is not None:
            sql += VIEWER_SELECT
            params.append(viewer_id)
        sql += BASE_FROM
        return sql, params

    def list_events(self, viewer_id: Optional[int] = None) -> List[EventView]:
        """
        All events ordered by start date (event id breaks ties).

        Args:
            viewer_id (int, optional): When given, each view carries
                is_viewer_registered for that user.
        """
        sql, params = self._build_query(viewer_id)
        sql += " ORDER BY e.start_date, e.event_id;"

        try:
            with self.pool.connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(sql, params)
                    rows = cur.fetchall()
        except psycopg2.Error:
            logging.exception("[Events] Database error listing events")
            raise InternalFailure("Failed to retrieve events")

        return [EventView.from_row(row) for row in rows]

    def get_event(self, event_id: int, viewer_id: Optional[int] = None) -> EventView:
        """
        Raises:
            NotFound: No event with this id.
        """
        sql, params = self._build_query(viewer_id)
        sql += " WHERE e.event_id = %s;"
        params.append(event_id)

        try:
            with self.pool.connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(sql, params)
                    row = cur.fetchone()
        except psycopg2.Error:
            logging.exception("[Events] Database error getting event")
            raise InternalFailure("Failed to retrieve event")

        if not row:
            raise NotFound("Event not found")

        return EventView.from_row(row)

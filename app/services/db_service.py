import asyncio
import logging
import os
import sqlite3
from datetime import datetime
from typing import List, Optional

from app.core.config import settings
from app.models.booking import Booking

logger = logging.getLogger("app")

SCHEMA = """
CREATE TABLE IF NOT EXISTS bookings (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    firstName TEXT NOT NULL,
    lastName TEXT NOT NULL,
    email TEXT NOT NULL,
    phone TEXT NOT NULL,
    services TEXT NOT NULL,
    date TEXT NOT NULL,
    time TEXT NOT NULL,
    location TEXT NOT NULL,
    message TEXT,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    UNIQUE (date, time)
)
"""

# Tables created before the UNIQUE clause existed get the constraint as an index
SLOT_INDEX = "CREATE UNIQUE INDEX IF NOT EXISTS idx_bookings_slot ON bookings (date, time)"


class SlotAlreadyBookedError(Exception):
    def __init__(self, date: str, time: str):
        super().__init__(f"Slot {date} {time} is already booked")
        self.date = date
        self.time = time


class DBService:
    """SQLite booking store. Blocking calls run in a worker thread."""

    def __init__(self, db_path: Optional[str] = None):
        self._db_path = db_path
        self._initialized_for = None

    @property
    def db_path(self) -> str:
        return self._db_path or settings.DATABASE_PATH

    @db_path.setter
    def db_path(self, value: str):
        self._db_path = value
        self._initialized_for = None

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path, timeout=10, isolation_level=None)
        conn.row_factory = sqlite3.Row
        if self._initialized_for != self.db_path:
            self._create_schema(conn)
            self._initialized_for = self.db_path
        return conn

    def _create_schema(self, conn: sqlite3.Connection):
        conn.execute(SCHEMA)
        try:
            conn.execute(SLOT_INDEX)
        except sqlite3.IntegrityError as e:
            logger.warning(f"⚠️ Existing duplicate bookings prevent the unique slot index: {e}")
        logger.info(f"✅ Database initialized at {self.db_path}")

    def init_db(self):
        directory = os.path.dirname(os.path.abspath(self.db_path))
        os.makedirs(directory, exist_ok=True)
        self._initialized_for = None
        conn = self._connect()
        conn.close()

    # --- Queries ---

    def _get_booked_times(self, date: str) -> List[str]:
        conn = self._connect()
        try:
            rows = conn.execute(
                "SELECT time FROM bookings WHERE date = ? ORDER BY time", (date,)
            ).fetchall()
            return [row["time"] for row in rows]
        finally:
            conn.close()

    async def get_booked_times(self, date: str) -> List[str]:
        """
        Returns the HH:MM times already booked on the given date.
        """
        return await asyncio.to_thread(self._get_booked_times, date)

    def _reserve(self, booking: Booking) -> Booking:
        conn = self._connect()
        try:
            # Check and insert inside one write transaction
            conn.execute("BEGIN IMMEDIATE")
            existing = conn.execute(
                "SELECT id FROM bookings WHERE date = ? AND time = ?",
                (booking.date, booking.time),
            ).fetchone()
            if existing:
                conn.execute("ROLLBACK")
                raise SlotAlreadyBookedError(booking.date, booking.time)

            try:
                cursor = conn.execute(
                    """INSERT INTO bookings (firstName, lastName, email, phone, services, date, time, location, message)
                       VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                    (
                        booking.firstName,
                        booking.lastName,
                        booking.email,
                        booking.phone,
                        booking.services,
                        booking.date,
                        booking.time,
                        booking.location,
                        booking.message or "",
                    ),
                )
            except sqlite3.IntegrityError:
                conn.execute("ROLLBACK")
                raise SlotAlreadyBookedError(booking.date, booking.time)

            conn.execute("COMMIT")
            return booking.model_copy(update={"id": cursor.lastrowid})
        except sqlite3.Error:
            if conn.in_transaction:
                conn.execute("ROLLBACK")
            raise
        finally:
            conn.close()

    async def reserve(self, booking: Booking) -> Booking:
        """
        Persists a booking unless its (date, time) slot is taken.
        Raises SlotAlreadyBookedError on conflict.
        """
        stored = await asyncio.to_thread(self._reserve, booking)
        logger.info(f"📝 Booking {stored.id} stored for {stored.date} {stored.time}")
        return stored

    def _list_bookings(self, limit: int) -> List[Booking]:
        conn = self._connect()
        try:
            rows = conn.execute(
                "SELECT * FROM bookings ORDER BY id DESC LIMIT ?", (limit,)
            ).fetchall()
        finally:
            conn.close()
        return [_row_to_booking(row) for row in rows]

    async def list_bookings(self, limit: int = 100) -> List[Booking]:
        """Newest bookings first."""
        return await asyncio.to_thread(self._list_bookings, limit)


def _row_to_booking(row: sqlite3.Row) -> Booking:
    created_at = row["created_at"]
    try:
        created = datetime.fromisoformat(created_at) if created_at else datetime.now()
    except ValueError:
        created = datetime.now()
    return Booking(
        id=row["id"],
        firstName=row["firstName"],
        lastName=row["lastName"],
        email=row["email"],
        phone=row["phone"],
        services=row["services"],
        date=row["date"],
        time=row["time"],
        location=row["location"],
        message=row["message"] or "",
        createdAt=created,
    )


db_service = DBService()

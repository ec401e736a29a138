"""Reservation booking transaction.

The allocation pre-check avoids obvious clashes and gives a friendly
``NoAvailabilityError``; it can be stale by the time the row is written. The
storage-level overlap constraint is the final arbiter, and losing to it is an
expected outcome reported as ``ConflictError``.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from ..errors import ConflictError, InternalError, NotFoundError, ValidationError
from ..models import OVERLAP_CONSTRAINT, Client, Reservation, Table
from ..utils.time import db_utc_naive, parse_iso, utcnow
from .clients import NewClient
from .schedule import check_window

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BookingRequest:
    restaurant_id: int
    start_time: datetime | str
    guests: int
    client_id: int | None = None
    client: NewClient | None = None
    notes: str | None = None


@dataclass(frozen=True)
class Booked:
    reservation: Reservation
    table: Table
    client: Client


class BookingService:
    def __init__(self, store, resolver, allocator, clients, min_guests=1, max_guests=20, clock=utcnow):
        self.store = store
        self.resolver = resolver
        self.allocator = allocator
        self.clients = clients
        self.min_guests = min_guests
        self.max_guests = max_guests
        self.clock = clock

    def validate(self, request: BookingRequest) -> datetime:
        """Check guests, start time and client reference; return the naive UTC start."""
        reasons = []

        guests = request.guests
        if not isinstance(guests, int) or isinstance(guests, bool):
            reasons.append("Guest count must be a whole number")
        elif guests < self.min_guests:
            reasons.append(f"Guest count must be at least {self.min_guests}")
        elif guests > self.max_guests:
            reasons.append(f"Guest count cannot exceed {self.max_guests}")

        start = None
        try:
            raw = request.start_time
            start = db_utc_naive(parse_iso(raw) if isinstance(raw, str) else raw)
        except (TypeError, ValueError, AttributeError):
            reasons.append("Invalid start_time format")
        if start is not None and start <= self.clock():
            reasons.append("Reservation start_time must be in the future")

        if request.client_id is None and request.client is None:
            reasons.append("Either client_id or client details are required")
        elif request.client_id is not None and request.client is not None:
            reasons.append("Provide client_id or client details, not both")

        if reasons:
            raise ValidationError(reasons)
        return start

    def book(self, request: BookingRequest) -> Booked:
        start = self.validate(request)

        restaurant = self.store.restaurant(request.restaurant_id)
        if restaurant is None:
            raise NotFoundError(f"Restaurant {request.restaurant_id} not found")

        end = start + timedelta(minutes=restaurant.reservation_duration)
        day = start.date()
        check_window(self.resolver.intervals_for(restaurant.id, day), day, start, end)

        if request.client_id is not None:
            client = self.clients.get(request.client_id)
        else:
            client = self.clients.find_or_create(request.client)

        table = self.allocator.allocate(restaurant, start, end, request.guests)

        reservation = Reservation(
            restaurant_id=restaurant.id,
            table_id=table.id,
            client_id=client.id,
            start_time=start,
            end_time=end,
            blocked_until=end + timedelta(minutes=restaurant.buffer_time),
            guests=request.guests,
            confirmed=True,
            notes=request.notes,
        )
        self._insert(reservation, restaurant.id)
        logger.info(
            "Booked reservation %s: restaurant=%s table=%s client=%s %s-%s guests=%s",
            reservation.id, restaurant.id, table.id, client.id, start, end, request.guests,
        )
        return Booked(reservation=reservation, table=table, client=client)

    def _insert(self, reservation: Reservation, restaurant_id: int) -> None:
        try:
            self.store.insert_reservation(reservation)
        except IntegrityError as e:
            self.store.rollback()
            if OVERLAP_CONSTRAINT in str(e.orig):
                logger.warning(
                    "Lost race for table %s at %s (restaurant %s)",
                    reservation.table_id, reservation.start_time, restaurant_id,
                )
                raise ConflictError(
                    "Table is no longer available for this time. Please try again."
                ) from e
            logger.exception(
                "Integrity error inserting reservation for restaurant %s table %s",
                restaurant_id, reservation.table_id,
            )
            raise InternalError("Unable to create reservation") from e
        except SQLAlchemyError as e:
            self.store.rollback()
            logger.exception(
                "Storage failure inserting reservation for restaurant %s table %s",
                restaurant_id, reservation.table_id,
            )
            raise InternalError("Unable to create reservation") from e

"""Availability queries across every (table, slot) pair of a day."""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta

from ..errors import NotFoundError, ValidationError
from ..utils.time import at, utcnow
from .conflicts import find_conflicts
from .schedule import interval_containing
from .slots import display_slots

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SlotAvailability:
    start: datetime
    free_table_ids: list

    @property
    def tables_available(self) -> int:
        return len(self.free_table_ids)


@dataclass(frozen=True)
class TableGap:
    table_id: int
    start: datetime
    end: datetime


@dataclass
class AvailabilityReport:
    day: date
    guests: int
    total_tables: int
    slots: list = field(default_factory=list)
    requested: SlotAvailability | None = None
    alternatives: list = field(default_factory=list)

    @property
    def available_slots(self) -> list[datetime]:
        return [s.start for s in self.slots if s.free_table_ids]

    @property
    def tables_available(self) -> int:
        return max((s.tables_available for s in self.slots), default=0)


class AvailabilityService:
    def __init__(self, store, resolver, allocator, display_minutes=15, min_guests=1, max_guests=20, clock=utcnow):
        self.store = store
        self.resolver = resolver
        self.allocator = allocator
        self.display_minutes = display_minutes
        self.min_guests = min_guests
        self.max_guests = max_guests
        self.clock = clock

    def check(self, restaurant_id: int, day: date, guests: int, at_time: time | None = None) -> AvailabilityReport:
        if not self.min_guests <= guests <= self.max_guests:
            raise ValidationError(f"guests must be between {self.min_guests} and {self.max_guests}")

        restaurant = self.store.restaurant(restaurant_id)
        if restaurant is None:
            raise NotFoundError(f"Restaurant {restaurant_id} not found")

        now = self.clock()
        duration = timedelta(minutes=restaurant.reservation_duration)
        tables = self.store.tables(restaurant.id, min_capacity=guests)
        intervals = self.resolver.intervals_for(restaurant.id, day)
        # One fetch per request; every slot below reuses these rows.
        booked = self.store.active_reservations([t.id for t in tables], now)

        def free_at(start: datetime) -> list[int]:
            end = start + duration
            return [
                t.id for t in tables
                if not find_conflicts(booked[t.id], start, end, restaurant.buffer_time)
            ]

        slots = display_slots(day, intervals, self.display_minutes, restaurant.reservation_duration)
        report = AvailabilityReport(
            day=day,
            guests=guests,
            total_tables=len(tables),
            slots=[SlotAvailability(s, free_at(s)) for s in slots.after(now)],
        )

        if at_time is not None:
            start = at(day, at_time)
            bookable = start > now and interval_containing(intervals, day, start, start + duration) is not None
            report.requested = SlotAvailability(start, free_at(start) if bookable else [])
            if not report.requested.free_table_ids:
                report.alternatives = self.alternatives(restaurant, tables, day, now)

        logger.debug(
            "Availability restaurant=%s day=%s guests=%s: %d/%d slots open, max %d tables",
            restaurant.id, day, guests, len(report.available_slots), len(report.slots), report.tables_available,
        )
        return report

    def alternatives(self, restaurant, tables, day: date, now: datetime) -> list[TableGap]:
        """Free gaps per table, with any gap already under way starting at the
        next display slot after ``now``."""
        duration = timedelta(minutes=restaurant.reservation_duration)
        earliest = self._next_slot_after(now)
        gaps = []
        for t in tables:
            for g in self.allocator.free_gaps(restaurant, t, day):
                start = g.start if g.start > now else max(g.start, earliest)
                if g.end - start >= duration:
                    gaps.append(TableGap(t.id, start, g.end))
        return sorted(gaps, key=lambda g: (g.start, g.table_id))

    def _next_slot_after(self, instant: datetime) -> datetime:
        step = timedelta(minutes=self.display_minutes)
        midnight = datetime.combine(instant.date(), time())
        return midnight + ((instant - midnight) // step + 1) * step

"""Greedy smallest-fit table allocation."""

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from ..errors import NoAvailabilityError
from ..utils.time import at, utcnow
from .conflicts import find_conflicts
from .schedule import interval_containing

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Gap:
    start: datetime
    end: datetime

    @property
    def minutes(self) -> int:
        return int((self.end - self.start).total_seconds() // 60)


class TableAllocator:
    def __init__(self, store, detector, resolver, clock=utcnow):
        self.store = store
        self.detector = detector
        self.resolver = resolver
        self.clock = clock

    def eligible_tables(self, restaurant_id: int, guests: int):
        return self.store.tables(restaurant_id, min_capacity=guests)

    def allocate(self, restaurant, start: datetime, end: datetime, guests: int):
        """First conflict-free table in (capacity, id) order.

        Raises NoAvailabilityError when every eligible table clashes.
        """
        for table in self.eligible_tables(restaurant.id, guests):
            check = self.detector.check(table.id, start, end, restaurant.buffer_time)
            if check.available:
                return table
            logger.debug(
                "Table %s busy for %s-%s (%d conflicts)",
                table.id, start, end, len(check.conflicts),
            )
        raise NoAvailabilityError(
            f"No table for {guests} guests is free at {start:%Y-%m-%d %H:%M}"
        )

    def available_tables(self, restaurant, start: datetime, end: datetime, guests: int):
        """Every conflict-free eligible table, in allocation order.

        Empty when the window has already started or falls outside the day's
        opening hours.
        """
        if start <= self.clock():
            return []
        day = start.date()
        if interval_containing(self.resolver.intervals_for(restaurant.id, day), day, start, end) is None:
            return []
        tables = self.eligible_tables(restaurant.id, guests)
        booked = self.store.active_reservations([t.id for t in tables], self.clock())
        return [
            t for t in tables
            if not find_conflicts(booked[t.id], start, end, restaurant.buffer_time)
        ]

    def free_gaps(self, restaurant, table, day: date) -> list[Gap]:
        """Stretches of one table's day long enough for a full reservation.

        Within each open interval the gaps run from opening to the first
        reservation (less the buffer), between one reservation's buffered end
        and the next one's start less the buffer, and from the last buffered
        end to closing.
        """
        buffer = timedelta(minutes=restaurant.buffer_time)
        duration = timedelta(minutes=restaurant.reservation_duration)
        intervals = self.resolver.intervals_for(restaurant.id, day)
        if not intervals:
            return []

        day_start = at(day, intervals[0].opens) - buffer
        day_end = at(day, max(iv.closes for iv in intervals)) + buffer
        booked = self.store.table_reservations_between(table.id, day_start, day_end)

        gaps = []
        for iv in intervals:
            opens, closes = iv.bounds(day)
            cursor = opens
            for r in booked:
                if r.end_time + buffer <= opens or r.start_time - buffer >= closes:
                    continue
                gap_end = r.start_time - buffer
                if gap_end > cursor:
                    gaps.append(Gap(cursor, gap_end))
                cursor = max(cursor, r.end_time + buffer)
            if closes > cursor:
                gaps.append(Gap(cursor, closes))

        return sorted((g for g in gaps if g.end - g.start >= duration), key=lambda g: g.start)

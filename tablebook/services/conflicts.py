"""Overlap detection between a candidate window and booked reservations.

The buffer applies on both sides: a candidate ``[start, end)`` clashes with a
reservation ``[rs, re)`` when ``start < re + buffer`` and ``rs < end + buffer``.
Every pair of confirmed reservations on a table therefore keeps at least
``buffer`` minutes apart.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta

from ..utils.time import utcnow


def overlaps(start: datetime, end: datetime, rs: datetime, re: datetime, buffer: timedelta) -> bool:
    return start < re + buffer and rs < end + buffer


def find_conflicts(reservations, start: datetime, end: datetime, buffer_minutes: int) -> list:
    buffer = timedelta(minutes=buffer_minutes)
    return [
        r for r in reservations
        if r.confirmed and overlaps(start, end, r.start_time, r.end_time, buffer)
    ]


@dataclass(frozen=True)
class ConflictCheck:
    available: bool
    conflicts: list = field(default_factory=list)


class ConflictDetector:
    def __init__(self, store, clock=utcnow):
        self.store = store
        self.clock = clock

    def check(self, table_id: int, start: datetime, end: datetime, buffer_minutes: int) -> ConflictCheck:
        booked = self.store.active_reservations([table_id], self.clock())[table_id]
        conflicts = find_conflicts(booked, start, end, buffer_minutes)
        return ConflictCheck(available=not conflicts, conflicts=conflicts)

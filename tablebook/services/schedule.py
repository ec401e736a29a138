"""Opening hours for a restaurant on a given calendar date.

Weekly rows give the regular hours (several rows per weekday form split
shifts). Exception rows for a specific date replace the weekly rows entirely;
an exception without times closes the restaurant for that date.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, time

from ..errors import AfterClosingError, OutsideOpeningHoursError
from ..utils.time import at, weekday_index

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OpenInterval:
    opens: time
    closes: time

    def bounds(self, day: date) -> tuple[datetime, datetime]:
        return at(day, self.opens), at(day, self.closes)

    def holds(self, day: date, start: datetime, end: datetime) -> bool:
        opens, closes = self.bounds(day)
        return opens <= start and end <= closes


def envelope(intervals: list[OpenInterval]) -> tuple[time, time] | None:
    """Earliest opening and latest closing.

    Collapses split-shift gaps, so it only bounds slot windows; never use it to
    decide whether a particular instant is open.
    """
    if not intervals:
        return None
    return min(iv.opens for iv in intervals), max(iv.closes for iv in intervals)


def interval_containing(intervals: list[OpenInterval], day: date, start: datetime, end: datetime) -> OpenInterval | None:
    for iv in intervals:
        if iv.holds(day, start, end):
            return iv
    return None


def check_window(intervals: list[OpenInterval], day: date, start: datetime, end: datetime) -> OpenInterval:
    """Return the interval hosting ``[start, end)`` or raise why none does."""
    if not intervals:
        raise OutsideOpeningHoursError(f"Restaurant is closed on {day.isoformat()}")

    for iv in intervals:
        opens, closes = iv.bounds(day)
        if opens <= start < closes:
            if end > closes:
                raise AfterClosingError(
                    f"Reservation would end at {end:%H:%M}, after closing time {closes:%H:%M}"
                )
            return iv

    _, last_close = envelope(intervals)
    if start >= at(day, last_close):
        raise AfterClosingError(
            f"Reservation starts at {start:%H:%M}, after closing time {last_close:%H:%M}"
        )
    raise OutsideOpeningHoursError(f"Restaurant is not open at {start:%H:%M} on {day.isoformat()}")


class ScheduleResolver:
    def __init__(self, store):
        self.store = store

    def intervals_for(self, restaurant_id: int, day: date) -> list[OpenInterval]:
        exceptions = self.store.schedule_exceptions(restaurant_id, day)
        if exceptions:
            rows = [e for e in exceptions if e.opening_time is not None and e.closing_time is not None]
        else:
            rows = self.store.weekly_schedules(restaurant_id, weekday_index(day))

        intervals = []
        for row in rows:
            if row.closing_time <= row.opening_time:
                logger.warning(
                    "Ignoring schedule row for restaurant %s on %s: closes %s before opening %s",
                    restaurant_id, day, row.closing_time, row.opening_time,
                )
                continue
            intervals.append(OpenInterval(row.opening_time, row.closing_time))
        return sorted(intervals, key=lambda iv: iv.opens)

    def closing_time_for(self, restaurant_id: int, day: date) -> datetime | None:
        bounds = envelope(self.intervals_for(restaurant_id, day))
        return at(day, bounds[1]) if bounds else None

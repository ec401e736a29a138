"""Candidate reservation start times inside open intervals."""

from datetime import date, datetime, timedelta

from .schedule import OpenInterval


class SlotSequence:
    """Slot starts for one date, interval by interval.

    Each interval yields starts from its opening time, stepping forward while
    the slot (``length`` minutes, the step by default) still ends by closing
    time. Iterating again restarts from the first slot.
    """

    def __init__(self, day: date, intervals: list[OpenInterval], step_minutes: int, length_minutes: int | None = None):
        if step_minutes <= 0:
            raise ValueError("step_minutes must be positive")
        self.day = day
        self.intervals = list(intervals)
        self.step = timedelta(minutes=step_minutes)
        self.length = timedelta(minutes=length_minutes if length_minutes is not None else step_minutes)

    def __iter__(self):
        for iv in self.intervals:
            current, closes = iv.bounds(self.day)
            while current + self.length <= closes:
                yield current
                current += self.step

    def after(self, instant: datetime) -> list[datetime]:
        return [s for s in self if s > instant]


def display_slots(day: date, intervals: list[OpenInterval], granularity_minutes: int, duration_minutes: int | None = None) -> SlotSequence:
    return SlotSequence(day, intervals, granularity_minutes, duration_minutes)


def duration_slots(day: date, intervals: list[OpenInterval], duration_minutes: int) -> SlotSequence:
    return SlotSequence(day, intervals, duration_minutes)

from datetime import datetime, time, timedelta

import pytest

from conftest import DAY, NOW
from tablebook.errors import NoAvailabilityError


def _t(hour, minute=0):
    return datetime(2024, 12, 10, hour, minute)


def test_smallest_sufficient_table_wins(services, make_restaurant):
    r = make_restaurant(capacities=(6, 2))

    table = services.allocator.allocate(r, _t(18), _t(19), 2)

    assert table.capacity == 2


def test_ties_broken_by_table_id(services, make_restaurant):
    r = make_restaurant(capacities=(4, 4, 4))
    ids = [t.id for t in services.store.tables(r.id)]

    assert services.allocator.allocate(r, _t(18), _t(19), 3).id == min(ids)


def test_busy_small_table_falls_through_to_next(services, make_restaurant, add_reservation):
    r = make_restaurant(capacities=(2, 6))
    small, large = services.store.tables(r.id)
    add_reservation(r, small.id, _t(18))

    assert services.allocator.allocate(r, _t(18, 30), _t(19, 30), 2).id == large.id


def test_too_many_guests_for_any_table(services, make_restaurant):
    r = make_restaurant(capacities=(2, 4))

    with pytest.raises(NoAvailabilityError):
        services.allocator.allocate(r, _t(18), _t(19), 5)


def test_every_table_busy(services, make_restaurant, add_reservation):
    r = make_restaurant(capacities=(4,))
    add_reservation(r, services.store.tables(r.id)[0].id, _t(18))

    with pytest.raises(NoAvailabilityError):
        services.allocator.allocate(r, _t(19), _t(20), 2)


def test_available_tables_lists_all_free_in_order(services, make_restaurant, add_reservation):
    r = make_restaurant(capacities=(6, 2, 4))
    two, four, six = services.store.tables(r.id)
    add_reservation(r, four.id, _t(18))

    free = services.allocator.available_tables(r, _t(18), _t(19), 2)

    assert [t.id for t in free] == [two.id, six.id]


def test_available_tables_empty_outside_opening_hours(services, make_restaurant):
    r = make_restaurant(hours=((time(18, 0), time(22, 0)),))

    assert services.allocator.available_tables(r, _t(16), _t(17), 2) == []


def test_available_tables_empty_for_past_window(services, make_restaurant):
    r = make_restaurant(hours=((time(8, 0), time(23, 0)),))
    hour = timedelta(hours=1)
    past = datetime(2024, 11, 30, 18, 0)

    assert services.allocator.available_tables(r, past, past + hour, 2) == []
    assert services.allocator.available_tables(r, NOW, NOW + hour, 2) == []
    assert len(services.allocator.available_tables(r, NOW + hour, NOW + 2 * hour, 2)) == 1


class TestFreeGaps:
    def _spans(self, gaps):
        return [(g.start.strftime("%H:%M"), g.end.strftime("%H:%M")) for g in gaps]

    def test_unbooked_table_is_free_all_day(self, services, make_restaurant):
        r = make_restaurant(hours=((time(12, 0), time(15, 0)), (time(18, 0), time(23, 0))))
        table = services.store.tables(r.id)[0]

        gaps = services.allocator.free_gaps(r, table, DAY)

        assert self._spans(gaps) == [("12:00", "15:00"), ("18:00", "23:00")]

    def test_gaps_keep_buffer_on_both_sides(self, services, make_restaurant, add_reservation):
        r = make_restaurant(duration=60, buffer=15)
        table = services.store.tables(r.id)[0]
        add_reservation(r, table.id, _t(14))
        add_reservation(r, table.id, _t(18))

        gaps = services.allocator.free_gaps(r, table, DAY)

        assert self._spans(gaps) == [("12:00", "13:45"), ("15:15", "17:45"), ("19:15", "23:00")]

    def test_short_gaps_are_dropped(self, services, make_restaurant, add_reservation):
        r = make_restaurant(duration=60, buffer=15)
        table = services.store.tables(r.id)[0]
        add_reservation(r, table.id, _t(14))
        add_reservation(r, table.id, _t(16, 15))  # leaves 15:15-16:00, too short

        gaps = services.allocator.free_gaps(r, table, DAY)

        assert self._spans(gaps) == [("12:00", "13:45"), ("17:30", "23:00")]

    def test_every_gap_can_hold_a_booking(self, services, make_restaurant, add_reservation):
        r = make_restaurant(duration=60, buffer=15)
        table = services.store.tables(r.id)[0]
        add_reservation(r, table.id, _t(13))
        add_reservation(r, table.id, _t(20))

        hour = timedelta(hours=1)
        gaps = services.allocator.free_gaps(r, table, DAY)

        assert gaps
        for gap in gaps:
            assert services.detector.check(table.id, gap.start, gap.start + hour, r.buffer_time).available
            assert services.detector.check(table.id, gap.end - hour, gap.end, r.buffer_time).available

    def test_closed_day_has_no_gaps(self, services, make_restaurant, add_exception):
        r = make_restaurant()
        add_exception(r, DAY)

        assert services.allocator.free_gaps(r, services.store.tables(r.id)[0], DAY) == []

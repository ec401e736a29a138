from datetime import date, datetime, time

import pytest

from conftest import DAY
from tablebook.errors import NotFoundError, ValidationError
from tablebook.services.availability import AvailabilityService


def _t(hour, minute=0):
    return datetime(2024, 12, 10, hour, minute)


def _hhmm(instants):
    return [i.strftime("%H:%M") for i in instants]


@pytest.fixture
def evening(make_restaurant):
    """Open 18:00-21:00 with a two-top, a four-top and a six-top."""
    return make_restaurant(duration=60, buffer=15, capacities=(2, 4, 6), hours=((time(18, 0), time(21, 0)),))


def test_empty_evening_offers_every_slot(services, evening):
    report = services.availability.check(evening.id, DAY, 3)

    assert report.total_tables == 2
    assert _hhmm(report.available_slots) == [
        "18:00", "18:15", "18:30", "18:45", "19:00", "19:15", "19:30", "19:45", "20:00",
    ]
    assert report.tables_available == 2
    assert report.requested is None
    assert report.alternatives == []


def test_booked_tables_close_their_slots(services, evening, add_reservation):
    _, four, six = services.store.tables(evening.id)
    add_reservation(evening, four.id, _t(18))
    add_reservation(evening, six.id, _t(18))

    report = services.availability.check(evening.id, DAY, 3)

    assert _hhmm(report.available_slots) == ["19:15", "19:30", "19:45", "20:00"]
    assert report.tables_available == 2
    assert all(s.tables_available in (0, 2) for s in report.slots)


def test_small_table_does_not_count_for_larger_party(services, evening, add_reservation):
    two, four, six = services.store.tables(evening.id)
    add_reservation(evening, four.id, _t(18))

    report = services.availability.check(evening.id, DAY, 3)

    first = report.slots[0]
    assert first.free_table_ids == [six.id]
    assert two.id not in first.free_table_ids


def test_requested_time_free(services, evening):
    report = services.availability.check(evening.id, DAY, 2, at_time=time(19, 0))

    assert report.requested.start == _t(19)
    assert report.requested.tables_available == 3
    assert report.alternatives == []


def test_requested_time_full_suggests_alternatives(services, evening, add_reservation):
    _, four, six = services.store.tables(evening.id)
    add_reservation(evening, four.id, _t(18))
    add_reservation(evening, six.id, _t(18))

    report = services.availability.check(evening.id, DAY, 3, at_time=time(18, 30))

    assert report.requested.tables_available == 0
    assert [(g.table_id, g.start, g.end) for g in report.alternatives] == [
        (four.id, _t(19, 15), _t(21)),
        (six.id, _t(19, 15), _t(21)),
    ]


def test_requested_time_outside_hours(services, evening):
    report = services.availability.check(evening.id, DAY, 2, at_time=time(20, 30))

    # Ends at 21:30, past closing.
    assert report.requested.tables_available == 0
    assert {g.start for g in report.alternatives} == {_t(18)}


def test_closed_day_has_no_slots(services, evening, add_exception):
    add_exception(evening, DAY)

    report = services.availability.check(evening.id, DAY, 2)

    assert report.slots == []
    assert report.tables_available == 0
    assert report.total_tables == 3


def test_day_in_the_past_has_no_slots(services, evening):
    report = services.availability.check(evening.id, date(2024, 11, 20), 2, at_time=time(19, 0))

    assert report.available_slots == []
    assert report.requested.tables_available == 0
    assert report.alternatives == []


def test_exception_hours_replace_weekday_hours(services, evening, add_exception):
    add_exception(evening, DAY, time(12, 0), time(14, 0))

    report = services.availability.check(evening.id, DAY, 2)

    assert _hhmm(report.available_slots)[0] == "12:00"
    assert _hhmm(report.available_slots)[-1] == "13:00"


def test_party_too_large_for_every_table(services, evening):
    report = services.availability.check(evening.id, DAY, 8)

    assert report.total_tables == 0
    assert report.available_slots == []


@pytest.mark.parametrize("guests", [0, 21])
def test_guest_count_out_of_range(services, evening, guests):
    with pytest.raises(ValidationError):
        services.availability.check(evening.id, DAY, guests)


def test_unknown_restaurant(services):
    with pytest.raises(NotFoundError):
        services.availability.check(404, DAY, 2)


class TestAlternativesLaterToday:
    """The clock sits inside the day's first free gap."""

    def _service(self, services, hour, minute=0):
        return AvailabilityService(
            services.store, services.resolver, services.allocator,
            display_minutes=15, clock=lambda: _t(hour, minute),
        )

    def test_open_gap_is_offered_from_the_next_slot(self, services, make_restaurant, add_reservation):
        r = make_restaurant(duration=60, buffer=15)
        table = services.store.tables(r.id)[0]
        add_reservation(r, table.id, _t(18))

        report = self._service(services, 12, 30).check(r.id, DAY, 2, at_time=time(18, 0))

        assert report.requested.tables_available == 0
        assert _hhmm(report.available_slots)[:2] == ["12:45", "13:00"]
        assert [(g.start, g.end) for g in report.alternatives] == [
            (_t(12, 45), _t(17, 45)),
            (_t(19, 15), _t(23)),
        ]

    def test_remainder_too_short_is_dropped(self, services, make_restaurant, add_reservation):
        r = make_restaurant(duration=60, buffer=15)
        table = services.store.tables(r.id)[0]
        add_reservation(r, table.id, _t(18))

        report = self._service(services, 17, 0).check(r.id, DAY, 2, at_time=time(18, 0))

        assert [(g.start, g.end) for g in report.alternatives] == [(_t(19, 15), _t(23))]

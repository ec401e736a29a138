"""Shared test fixtures."""

from datetime import date, datetime, time, timedelta
from types import SimpleNamespace

import pytest

from tablebook.app import create_app
from tablebook.config import TestConfig
from tablebook.extensions import db
from tablebook.models import Client, Reservation, Restaurant, ScheduleException, Table, WeeklySchedule
from tablebook.services.allocation import TableAllocator
from tablebook.services.availability import AvailabilityService
from tablebook.services.booking import BookingService
from tablebook.services.clients import ClientDirectory
from tablebook.services.conflicts import ConflictDetector
from tablebook.services.schedule import ScheduleResolver
from tablebook.store import ReservationStore

# Services under test see this as "now"; every fixture date lies after it.
NOW = datetime(2024, 12, 1, 9, 0)
DAY = date(2024, 12, 10)  # a Tuesday
API_KEY = "test-key-1"


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def store(app):
    return ReservationStore(db.session)


@pytest.fixture
def make_restaurant(app):
    """Creates a restaurant open every day with the given hours and tables."""
    counter = iter(range(1, 1000))

    def _make(duration=60, buffer=15, capacities=(4,), hours=((time(12, 0), time(23, 0)),), api_key=None):
        n = next(counter)
        restaurant = Restaurant(
            name=f"Restaurant {n}",
            api_key=api_key or (API_KEY if n == 1 else f"test-key-{n}"),
            reservation_duration=duration,
            buffer_time=buffer,
        )
        db.session.add(restaurant)
        db.session.flush()
        for capacity in capacities:
            db.session.add(Table(restaurant_id=restaurant.id, capacity=capacity))
        for day in range(7):
            for opens, closes in hours:
                db.session.add(WeeklySchedule(restaurant_id=restaurant.id, day_of_week=day, opening_time=opens, closing_time=closes))
        db.session.commit()
        return restaurant

    return _make


@pytest.fixture
def add_exception(app):
    def _add(restaurant, day, opens=None, closes=None):
        db.session.add(ScheduleException(restaurant_id=restaurant.id, date=day, opening_time=opens, closing_time=closes))
        db.session.commit()

    return _add


@pytest.fixture
def add_reservation(app):
    """Writes a reservation row directly, bypassing allocation."""
    phones = iter(range(5550000, 5559999))

    def _add(restaurant, table_id, start, confirmed=True):
        client = Client(name="Walk In", phone=f"+1{next(phones)}")
        db.session.add(client)
        db.session.flush()
        end = start + timedelta(minutes=restaurant.reservation_duration)
        reservation = Reservation(
            restaurant_id=restaurant.id,
            table_id=table_id,
            client_id=client.id,
            start_time=start,
            end_time=end,
            blocked_until=end + timedelta(minutes=restaurant.buffer_time),
            guests=2,
            confirmed=confirmed,
        )
        db.session.add(reservation)
        db.session.commit()
        return reservation

    return _add


@pytest.fixture
def services(store):
    """Core services wired against the test database with a fixed clock."""
    clock = lambda: NOW  # noqa: E731
    resolver = ScheduleResolver(store)
    detector = ConflictDetector(store, clock=clock)
    allocator = TableAllocator(store, detector, resolver, clock=clock)
    clients = ClientDirectory(store)
    return SimpleNamespace(
        store=store,
        resolver=resolver,
        detector=detector,
        allocator=allocator,
        clients=clients,
        booking=BookingService(store, resolver, allocator, clients, clock=clock),
        availability=AvailabilityService(store, resolver, allocator, display_minutes=15, clock=clock),
    )


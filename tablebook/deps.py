"""Service wiring for request handlers.

The store wraps the process-wide ``db.session`` registry and is created once in
``create_app``; services are cheap and built per call around it.
"""

from flask import current_app

from .services.allocation import TableAllocator
from .services.availability import AvailabilityService
from .services.booking import BookingService
from .services.clients import ClientDirectory
from .services.conflicts import ConflictDetector
from .services.schedule import ScheduleResolver

STORE_KEY = "tablebook.store"


def get_store():
    return current_app.extensions[STORE_KEY]


def _allocator(store) -> TableAllocator:
    return TableAllocator(store, ConflictDetector(store), ScheduleResolver(store))


def client_directory() -> ClientDirectory:
    return ClientDirectory(get_store())


def booking_service() -> BookingService:
    store = get_store()
    return BookingService(
        store,
        ScheduleResolver(store),
        _allocator(store),
        ClientDirectory(store),
        min_guests=current_app.config["MIN_GUESTS"],
        max_guests=current_app.config["MAX_GUESTS"],
    )


def availability_service() -> AvailabilityService:
    store = get_store()
    return AvailabilityService(
        store,
        ScheduleResolver(store),
        _allocator(store),
        display_minutes=current_app.config["DISPLAY_SLOT_MINUTES"],
        min_guests=current_app.config["MIN_GUESTS"],
        max_guests=current_app.config["MAX_GUESTS"],
    )


def table_allocator() -> TableAllocator:
    return _allocator(get_store())

"""Storage collaborator.

The only module that talks to the database. Services receive a
``ReservationStore`` instead of reaching for ``db.session`` themselves, so a
single process-scoped session registry is shared by every request.
"""

from datetime import date, datetime, timedelta

from sqlalchemy import func, select

from .models import Client, Reservation, Restaurant, ScheduleException, Table, WeeklySchedule


class ReservationStore:
    def __init__(self, session):
        self.session = session

    # --- restaurants / catalog ---

    def restaurant(self, restaurant_id: int) -> Restaurant | None:
        return self.session.get(Restaurant, restaurant_id)

    def restaurant_by_api_key(self, api_key: str) -> Restaurant | None:
        return self.session.execute(
            select(Restaurant).where(Restaurant.api_key == api_key)
        ).scalar_one_or_none()

    def tables(self, restaurant_id: int, min_capacity: int | None = None) -> list[Table]:
        """Tables of a restaurant, smallest capacity first, ties by id."""
        q = select(Table).where(Table.restaurant_id == restaurant_id)
        if min_capacity is not None:
            q = q.where(Table.capacity >= min_capacity)
        q = q.order_by(Table.capacity.asc(), Table.id.asc())
        return list(self.session.execute(q).scalars())

    def weekly_schedules(self, restaurant_id: int, day_of_week: int | None = None) -> list[WeeklySchedule]:
        q = select(WeeklySchedule).where(WeeklySchedule.restaurant_id == restaurant_id)
        if day_of_week is not None:
            q = q.where(WeeklySchedule.day_of_week == day_of_week)
        q = q.order_by(WeeklySchedule.day_of_week.asc(), WeeklySchedule.opening_time.asc())
        return list(self.session.execute(q).scalars())

    def schedule_exceptions(self, restaurant_id: int, day: date) -> list[ScheduleException]:
        q = (
            select(ScheduleException)
            .where(ScheduleException.restaurant_id == restaurant_id, ScheduleException.date == day)
            .order_by(ScheduleException.opening_time.asc())
        )
        return list(self.session.execute(q).scalars())

    # --- reservations ---

    def active_reservations(self, table_ids: list[int], since: datetime) -> dict[int, list[Reservation]]:
        """Confirmed reservations per table whose buffered end is still ahead of ``since``."""
        by_table: dict[int, list[Reservation]] = {tid: [] for tid in table_ids}
        if not table_ids:
            return by_table
        q = (
            select(Reservation)
            .where(
                Reservation.table_id.in_(table_ids),
                Reservation.confirmed.is_(True),
                Reservation.blocked_until >= since,
            )
            .order_by(Reservation.table_id.asc(), Reservation.start_time.asc())
        )
        for r in self.session.execute(q).scalars():
            by_table[r.table_id].append(r)
        return by_table

    def table_reservations_between(self, table_id: int, start: datetime, end: datetime) -> list[Reservation]:
        """Confirmed reservations on one table touching ``[start, end)``, by start time."""
        q = (
            select(Reservation)
            .where(
                Reservation.table_id == table_id,
                Reservation.confirmed.is_(True),
                Reservation.start_time < end,
                Reservation.blocked_until > start,
            )
            .order_by(Reservation.start_time.asc())
        )
        return list(self.session.execute(q).scalars())

    def reservations_for_day(self, restaurant_id: int, day: date, page: int, page_size: int):
        start = datetime(day.year, day.month, day.day)
        end = start + timedelta(days=1)
        filters = (
            Reservation.restaurant_id == restaurant_id,
            Reservation.start_time >= start,
            Reservation.start_time < end,
        )
        total = self.session.execute(
            select(func.count()).select_from(Reservation).where(*filters)
        ).scalar_one()
        q = (
            select(Reservation, Client)
            .join(Client, Reservation.client_id == Client.id)
            .where(*filters)
            .order_by(Reservation.start_time.asc(), Reservation.table_id.asc())
            .limit(page_size)
            .offset((page - 1) * page_size)
        )
        return int(total), self.session.execute(q).all()

    def insert_reservation(self, reservation: Reservation) -> Reservation:
        """Insert and commit. Constraint violations propagate as IntegrityError."""
        self.session.add(reservation)
        self.session.commit()
        return reservation

    # --- clients ---

    def client(self, client_id: int) -> Client | None:
        return self.session.get(Client, client_id)

    def client_by_phone(self, phone: str) -> Client | None:
        return self.session.execute(
            select(Client).where(Client.phone == phone)
        ).scalar_one_or_none()

    def client_by_email(self, email: str) -> Client | None:
        """Oldest client registered under ``email``; emails are not unique."""
        return self.session.execute(
            select(Client).where(Client.email == email.strip().lower()).order_by(Client.id.asc())
        ).scalars().first()

    def insert_client(self, client: Client) -> Client:
        self.session.add(client)
        self.session.commit()
        return client

    def rollback(self) -> None:
        self.session.rollback()


from sqlalchemy import DDL, CheckConstraint, Index, event, func
from .extensions import db

# Name shared by the PostgreSQL exclusion constraint and the SQLite trigger, so
# the booking transaction can recognise the rejection in either backend.
OVERLAP_CONSTRAINT = "reservations_no_overlap"


class Restaurant(db.Model):
    __tablename__ = "restaurants"
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    api_key = db.Column(db.String(64), nullable=False, unique=True, index=True)
    reservation_duration = db.Column(db.Integer, nullable=False, default=90)
    buffer_time = db.Column(db.Integer, nullable=False, default=15)

    tables = db.relationship("Table", back_populates="restaurant", order_by="Table.id")

    __table_args__ = (
        CheckConstraint("reservation_duration > 0", name="ck_restaurant_duration_positive"),
        CheckConstraint("buffer_time >= 0", name="ck_restaurant_buffer_non_negative"),
    )


class Zone(db.Model):
    __tablename__ = "zones"
    id = db.Column(db.Integer, primary_key=True)
    restaurant_id = db.Column(db.Integer, db.ForeignKey("restaurants.id", ondelete="CASCADE"), nullable=False, index=True)
    name = db.Column(db.String(80), nullable=False)


class Table(db.Model):
    __tablename__ = "tables"
    id = db.Column(db.Integer, primary_key=True)
    restaurant_id = db.Column(db.Integer, db.ForeignKey("restaurants.id", ondelete="CASCADE"), nullable=False, index=True)
    capacity = db.Column(db.Integer, nullable=False)
    zone_id = db.Column(db.Integer, db.ForeignKey("zones.id", ondelete="SET NULL"))

    restaurant = db.relationship("Restaurant", back_populates="tables")

    __table_args__ = (
        CheckConstraint("capacity >= 1", name="ck_table_capacity_positive"),
    )


class WeeklySchedule(db.Model):
    __tablename__ = "weekly_schedules"
    id = db.Column(db.Integer, primary_key=True)
    restaurant_id = db.Column(db.Integer, db.ForeignKey("restaurants.id", ondelete="CASCADE"), nullable=False)
    day_of_week = db.Column(db.Integer, nullable=False)  # 0 = Sunday
    opening_time = db.Column(db.Time, nullable=False)
    closing_time = db.Column(db.Time, nullable=False)

    __table_args__ = (
        CheckConstraint("day_of_week BETWEEN 0 AND 6", name="ck_schedule_day_of_week"),
        Index("ix_weekly_schedules_restaurant_day", "restaurant_id", "day_of_week"),
    )


class ScheduleException(db.Model):
    __tablename__ = "schedule_exceptions"
    id = db.Column(db.Integer, primary_key=True)
    restaurant_id = db.Column(db.Integer, db.ForeignKey("restaurants.id", ondelete="CASCADE"), nullable=False)
    date = db.Column(db.Date, nullable=False)
    opening_time = db.Column(db.Time)
    closing_time = db.Column(db.Time)
    description = db.Column(db.String(255))

    __table_args__ = (
        Index("ix_schedule_exceptions_restaurant_date", "restaurant_id", "date"),
    )


class Client(db.Model):
    __tablename__ = "clients"
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    phone = db.Column(db.String(32), nullable=False, unique=True, index=True)
    email = db.Column(db.String(255), index=True)
    created_at = db.Column(db.DateTime, nullable=False, server_default=func.now())

    reservations = db.relationship("Reservation", back_populates="client")


class Reservation(db.Model):
    __tablename__ = "reservations"
    id = db.Column(db.Integer, primary_key=True)
    restaurant_id = db.Column(db.Integer, db.ForeignKey("restaurants.id", ondelete="CASCADE"), nullable=False, index=True)
    table_id = db.Column(db.Integer, db.ForeignKey("tables.id", ondelete="CASCADE"), nullable=False)
    client_id = db.Column(db.Integer, db.ForeignKey("clients.id", ondelete="RESTRICT"), nullable=False, index=True)
    # Naive UTC, see utils.time.db_utc_naive.
    start_time = db.Column(db.DateTime, nullable=False)
    end_time = db.Column(db.DateTime, nullable=False)
    blocked_until = db.Column(db.DateTime, nullable=False)  # end_time + restaurant buffer
    guests = db.Column(db.Integer, nullable=False)
    confirmed = db.Column(db.Boolean, nullable=False, default=True)
    notes = db.Column(db.Text)
    created_at = db.Column(db.DateTime, nullable=False, server_default=func.now())

    table = db.relationship("Table")
    client = db.relationship("Client", back_populates="reservations")

    __table_args__ = (
        CheckConstraint("guests >= 1", name="ck_reservation_guests_positive"),
        CheckConstraint("end_time > start_time", name="ck_reservation_window"),
        Index("ix_reservations_table_start", "table_id", "start_time"),
    )


event.listen(
    Reservation.__table__,
    "before_create",
    DDL("CREATE EXTENSION IF NOT EXISTS btree_gist").execute_if(dialect="postgresql"),
)
event.listen(
    Reservation.__table__,
    "after_create",
    DDL(
        f"ALTER TABLE reservations ADD CONSTRAINT {OVERLAP_CONSTRAINT} "
        "EXCLUDE USING gist (table_id WITH =, tsrange(start_time, blocked_until, '[)') WITH &&) "
        "WHERE (confirmed)"
    ).execute_if(dialect="postgresql"),
)
event.listen(
    Reservation.__table__,
    "after_create",
    DDL(
        f"CREATE TRIGGER {OVERLAP_CONSTRAINT} BEFORE INSERT ON reservations "
        "WHEN NEW.confirmed "
        "BEGIN "
        f"SELECT RAISE(ABORT, '{OVERLAP_CONSTRAINT}') "
        "WHERE EXISTS (SELECT 1 FROM reservations r "
        "WHERE r.table_id = NEW.table_id AND r.confirmed "
        "AND r.start_time < NEW.blocked_until AND NEW.start_time < r.blocked_until); "
        "END"
    ).execute_if(dialect="sqlite"),
)

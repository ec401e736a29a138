import logging
from datetime import time

import click
from flask import Flask, current_app, jsonify
from flask.cli import with_appcontext
from flask_cors import CORS
from .extensions import db, migrate
from .config import Config
from .deps import STORE_KEY
from .http import register_error_handlers
from .store import ReservationStore
from .blueprints.availability import bp as availability_bp
from .blueprints.clients import bp as clients_bp
from .blueprints.reservations import bp as reservations_bp
from .blueprints.restaurants import bp as restaurants_bp
from .models import Client, Reservation, Restaurant, ScheduleException, Table, WeeklySchedule, Zone


def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)

    logging.basicConfig(
        level=app.config["LOG_LEVEL"],
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    CORS(app)

    db.init_app(app)
    migrate.init_app(app, db)
    app.extensions[STORE_KEY] = ReservationStore(db.session)

    register_error_handlers(app)

    for bp in (availability_bp, reservations_bp, clients_bp, restaurants_bp):
        app.register_blueprint(bp, url_prefix="/api/restaurants")

    @app.get("/health")
    def health():
        return jsonify(status="ok")

    app.cli.add_command(seed_command)

    return app


@click.command("seed")
@click.option("--duration", default=90, show_default=True, help="Reservation length in minutes.")
@click.option("--buffer", "buffer_time", default=15, show_default=True, help="Minutes kept free between bookings.")
@with_appcontext
def seed_command(duration, buffer_time):
    """Creates a demo restaurant with tables and a weekly schedule."""
    for model in (Reservation, Client, ScheduleException, WeeklySchedule, Table, Zone, Restaurant):
        db.session.query(model).delete()
    db.session.commit()
    print("Cleared existing data.")

    restaurant = Restaurant(
        name="Demo Bistro",
        api_key=current_app.config["DEMO_API_KEY"],
        reservation_duration=duration,
        buffer_time=buffer_time,
    )
    db.session.add(restaurant)
    db.session.flush()

    main_room = Zone(restaurant_id=restaurant.id, name="Main room")
    terrace = Zone(restaurant_id=restaurant.id, name="Terrace")
    db.session.add_all([main_room, terrace])
    db.session.flush()

    capacities = [(2, main_room), (2, main_room), (4, main_room), (4, terrace), (6, terrace), (8, main_room)]
    db.session.add_all(Table(restaurant_id=restaurant.id, capacity=c, zone_id=z.id) for c, z in capacities)

    # Lunch and dinner service, dinner only on Sunday (0).
    for day in range(7):
        if day != 0:
            db.session.add(WeeklySchedule(restaurant_id=restaurant.id, day_of_week=day, opening_time=time(12, 0), closing_time=time(15, 0)))
        db.session.add(WeeklySchedule(restaurant_id=restaurant.id, day_of_week=day, opening_time=time(18, 0), closing_time=time(23, 0)))

    db.session.commit()
    print(f"Created restaurant {restaurant.id} with {len(capacities)} tables.")
    print("Database seeded!")

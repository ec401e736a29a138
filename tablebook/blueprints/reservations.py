from flask import Blueprint, request, jsonify
from pydantic import ValidationError

from ..auth import restaurant_required
from ..deps import booking_service, get_store
from ..http import invalid_input, jerror
from ..schemas import CreateReservationRequest, DayListingQuery
from ..serializers import client_json, reservation_json, table_json
from ..services.booking import BookingRequest
from ..services.clients import NewClient
from ..utils.time import api_iso_z, parse_day

bp = Blueprint("reservations", __name__)


@bp.post("/<int:restaurant_id>/reservations")
@restaurant_required
def create_reservation(restaurant):
    payload = request.get_json(silent=True)
    if not payload:
        return jerror(400, "INVALID_PAYLOAD", "Missing or invalid JSON payload.")

    try:
        data = CreateReservationRequest.model_validate(payload)
    except ValidationError as e:
        return invalid_input(e)

    new_client = None
    if data.client is not None:
        new_client = NewClient(name=data.client.name, phone=data.client.phone, email=data.client.email)

    booked = booking_service().book(
        BookingRequest(
            restaurant_id=restaurant.id,
            start_time=data.start_time,
            guests=data.guests,
            client_id=data.client_id,
            client=new_client,
            notes=data.notes,
        )
    )

    return jsonify(
        reservation=reservation_json(booked.reservation),
        table=table_json(booked.table),
        client=client_json(booked.client),
    ), 201


@bp.get("/<int:restaurant_id>/reservations")
@restaurant_required
def list_reservations(restaurant):
    """
    Reservations for a single day with pagination.
    Query: ?date=YYYY-MM-DD&page=1&page_size=20
    """
    try:
        query = DayListingQuery.model_validate(request.args.to_dict())
        day = parse_day(query.date)
    except ValidationError as e:
        return invalid_input(e)
    except ValueError as e:
        return jerror(400, "BAD_DATE", "Invalid date. Use YYYY-MM-DD.", str(e))

    total, rows = get_store().reservations_for_day(restaurant.id, day, query.page, query.page_size)

    data = []
    for reservation, client in rows:
        data.append({
            "id": reservation.id,
            "startTime": api_iso_z(reservation.start_time),
            "endTime": api_iso_z(reservation.end_time),
            "tableId": reservation.table_id,
            "guests": reservation.guests,
            "confirmed": reservation.confirmed,
            "client": client_json(client),
        })

    return jsonify(page=query.page, pageSize=query.page_size, total=total, reservations=data)

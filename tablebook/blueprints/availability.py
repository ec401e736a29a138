from datetime import timedelta

from flask import Blueprint, current_app, request, jsonify
from pydantic import ValidationError

from ..auth import restaurant_required
from ..deps import availability_service, table_allocator
from ..errors import ValidationError as RequestError
from ..http import invalid_input, jerror
from ..schemas import AvailabilityQuery, AvailableTablesQuery
from ..serializers import restaurant_json, table_json
from ..utils.time import api_iso_z, at, db_utc_naive, parse_day, parse_hhmm, parse_iso

bp = Blueprint("availability", __name__)


@bp.get("/<int:restaurant_id>/availability")
@restaurant_required
def availability(restaurant):
    try:
        query = AvailabilityQuery.model_validate(request.args.to_dict())
    except ValidationError as e:
        return invalid_input(e)

    raw = query.datetime.strip()
    try:
        if len(raw) == 10:
            day, at_time = parse_day(raw), None
        else:
            ts = db_utc_naive(parse_iso(raw))
            day, at_time = ts.date(), ts.time()
    except ValueError as e:
        return jerror(400, "BAD_DATETIME", "Invalid datetime, expected YYYY-MM-DD or ISO 8601.", str(e))

    report = availability_service().check(restaurant.id, day, query.guests, at_time)

    body = {
        "date": day.isoformat(),
        "guests": query.guests,
        "availableSlots": [api_iso_z(s) for s in report.available_slots],
        "tablesAvailable": report.tables_available,
        "totalTables": report.total_tables,
        "restaurant": restaurant_json(restaurant),
    }
    if report.requested is not None:
        body["requested"] = {
            "startTime": api_iso_z(report.requested.start),
            "available": report.requested.tables_available > 0,
            "tablesAvailable": report.requested.tables_available,
        }
        if report.alternatives:
            body["alternatives"] = [
                {"tableId": g.table_id, "startTime": api_iso_z(g.start), "endTime": api_iso_z(g.end)}
                for g in report.alternatives
            ]
    return jsonify(body)


@bp.get("/<int:restaurant_id>/available-tables")
@restaurant_required
def available_tables(restaurant):
    try:
        query = AvailableTablesQuery.model_validate(request.args.to_dict())
        day, slot_time = parse_day(query.date), parse_hhmm(query.time)
    except ValidationError as e:
        return invalid_input(e)
    except ValueError as e:
        return jerror(400, "BAD_DATETIME", "Invalid date or time.", str(e))

    lo, hi = current_app.config["MIN_GUESTS"], current_app.config["MAX_GUESTS"]
    if not lo <= query.guests <= hi:
        raise RequestError(f"guests must be between {lo} and {hi}")

    start = at(day, slot_time)
    end = start + timedelta(minutes=restaurant.reservation_duration)
    tables = table_allocator().available_tables(restaurant, start, end, query.guests)

    return jsonify(
        date=query.date,
        time=query.time,
        guests=query.guests,
        availableTables=[table_json(t) for t in tables],
        totalAvailable=len(tables),
        restaurant=restaurant_json(restaurant),
    )

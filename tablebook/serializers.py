from .utils.time import api_iso_z


def restaurant_json(r):
    return {
        "id": r.id,
        "name": r.name,
        "reservationDuration": r.reservation_duration,
        "bufferTime": r.buffer_time,
    }


def table_json(t):
    return {"id": t.id, "capacity": t.capacity, "zoneId": t.zone_id}


def schedule_json(s):
    return {
        "id": s.id,
        "dayOfWeek": s.day_of_week,
        "openingTime": s.opening_time.strftime("%H:%M"),
        "closingTime": s.closing_time.strftime("%H:%M"),
    }


def client_json(c):
    return {"id": c.id, "name": c.name, "phone": c.phone, "email": c.email}


def reservation_json(r):
    return {
        "id": r.id,
        "restaurantId": r.restaurant_id,
        "tableId": r.table_id,
        "clientId": r.client_id,
        "startTime": api_iso_z(r.start_time),
        "endTime": api_iso_z(r.end_time),
        "guests": r.guests,
        "confirmed": r.confirmed,
        "notes": r.notes,
    }

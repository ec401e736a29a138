from flask import Blueprint, jsonify

from ..auth import restaurant_required
from ..deps import get_store
from ..serializers import restaurant_json, schedule_json, table_json

bp = Blueprint("restaurants", __name__)


@bp.get("/<int:restaurant_id>/config")
@restaurant_required
def config(restaurant):
    store = get_store()
    tables = store.tables(restaurant.id)
    return jsonify(
        restaurant=restaurant_json(restaurant),
        schedules=[schedule_json(s) for s in store.weekly_schedules(restaurant.id)],
        tables=[table_json(t) for t in tables],
        totalTables=len(tables),
        maxCapacity=max((t.capacity for t in tables), default=0),
    )

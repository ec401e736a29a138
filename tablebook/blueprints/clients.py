from flask import Blueprint, request, jsonify
from pydantic import ValidationError

from ..auth import restaurant_required
from ..deps import client_directory
from ..http import invalid_input, jerror
from ..schemas import ClientPayload
from ..serializers import client_json
from ..services.clients import NewClient

bp = Blueprint("clients", __name__)


@bp.post("/<int:restaurant_id>/clients")
@restaurant_required
def create_client(restaurant):
    payload = request.get_json(silent=True)
    if not payload:
        return jerror(400, "INVALID_PAYLOAD", "Missing or invalid JSON payload.")

    try:
        data = ClientPayload.model_validate(payload)
    except ValidationError as e:
        return invalid_input(e)

    client = client_directory().create(NewClient(name=data.name, phone=data.phone, email=data.email))
    return jsonify(client=client_json(client)), 201


@bp.get("/<int:restaurant_id>/clients/<int:client_id>")
@restaurant_required
def get_client(restaurant, client_id: int):
    return jsonify(client=client_json(client_directory().get(client_id)))

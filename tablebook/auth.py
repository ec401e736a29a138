from functools import wraps

from flask import request

from .deps import get_store
from .http import jerror


def _provided_api_key() -> str | None:
    auth_header = request.headers.get("Authorization", "").strip()
    if auth_header.lower().startswith("bearer "):
        token = auth_header[7:].strip()
        if token:
            return token
    token = request.args.get("api_key", "").strip()
    return token or None


def authenticate_restaurant():
    """
    Resolves the bearer API key (or ``api_key`` query parameter) to a restaurant.
    """
    api_key = _provided_api_key()
    if not api_key:
        return None
    return get_store().restaurant_by_api_key(api_key)


def restaurant_required(view):
    """Rejects callers whose API key does not belong to the restaurant in the URL."""

    @wraps(view)
    def wrapper(restaurant_id: int, *args, **kwargs):
        restaurant = authenticate_restaurant()
        if restaurant is None:
            return jerror(401, "UNAUTHORIZED", "Valid API key required.")
        if restaurant.id != restaurant_id:
            return jerror(403, "FORBIDDEN", "Restaurant ID does not match API key.")
        return view(restaurant, *args, **kwargs)

    return wrapper

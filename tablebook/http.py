import logging

from flask import jsonify
from werkzeug.exceptions import HTTPException

from .errors import TablebookError

logger = logging.getLogger(__name__)


def jerror(status: int, error: str, message: str, details=None):
    payload = {"error": error, "message": message}
    if details:
        payload["details"] = details
    return jsonify(payload), status


def invalid_input(e):
    """Envelope for a pydantic ValidationError raised while parsing a request."""
    errors = e.errors(include_url=False, include_context=False, include_input=False)
    return jerror(400, "VALIDATION_ERROR", "Invalid input.", details=errors)


def register_error_handlers(app):
    @app.errorhandler(TablebookError)
    def handle_tablebook_error(e: TablebookError):
        details = e.details
        if details is None and len(getattr(e, "reasons", [])) > 1:
            details = {"reasons": e.reasons}
        return jerror(e.status, e.code, e.message, details)

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        return jerror(e.code or 500, e.name.upper().replace(" ", "_"), e.description or e.name)

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        logger.exception("Unhandled error")
        return jerror(500, "INTERNAL_ERROR", "Internal server error")

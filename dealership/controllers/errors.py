import logging

from flask import Blueprint, jsonify
from werkzeug.exceptions import HTTPException

from ..exceptions import DealershipError, ValidationError

logger = logging.getLogger(__name__)

bp = Blueprint("errors", __name__)


@bp.app_errorhandler(DealershipError)
def handle_app_error(err: DealershipError):
    body = {"error": err.message}
    if isinstance(err, ValidationError) and err.fields:
        body["fields"] = err.fields
    if err.status_code >= 500:
        logger.error("Request failed: %s", err.message)
    return jsonify(body), err.status_code


@bp.app_errorhandler(HTTPException)
def handle_http_error(err: HTTPException):
    return jsonify({"error": err.description or err.name}), err.code


@bp.app_errorhandler(Exception)
def handle_unexpected(err: Exception):
    logger.exception("Unhandled error")
    return jsonify({"error": f"Internal server error: {err}"}), 500

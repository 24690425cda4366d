from __future__ import annotations

import logging
from functools import wraps

from flask import jsonify, session

from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DomainError,
    DuplicateAttendanceError,
    NotFoundError,
    StorageError,
    ValidationError,
)

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (DuplicateAttendanceError, 409),
    (StorageError, 500),
)


def status_for(error: DomainError) -> int:
    for error_type, status in _STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return status
    return 400


def error_response(error: Exception, *, debug: bool = False):
    """Map an exception raised by a service to a JSON error response."""
    if isinstance(error, DomainError):
        status = status_for(error)
        if status >= 500:
            logger.error("Storage failure: %s", error)
            message = f"Server error: {error}" if debug else "Server error"
        else:
            message = str(error)
        body = {"success": False, "message": message}
        if isinstance(error, DuplicateAttendanceError) and error.student_ids:
            body["duplicates"] = error.student_ids
        return jsonify(body), status

    logger.exception("Unhandled error")
    message = f"Server error: {error}" if debug else "Server error"
    return jsonify({"success": False, "message": message}), 500


def login_required(view):
    """JSON variant of the session check: 401 instead of a redirect."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"success": False, "message": "Please log in to continue"}), 401
        return view(*args, **kwargs)

    return wrapper

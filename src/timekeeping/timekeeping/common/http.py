from __future__ import annotations

import logging
from functools import wraps

from flask import jsonify

from ..core.exceptions import NotFoundError, ValidationError

logger = logging.getLogger(__name__)


def json_api(view):
    """Map domain errors onto JSON error responses for API routes."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            return view(*args, **kwargs)
        except ValidationError as e:
            return jsonify({"success": False, "message": str(e)}), 400
        except NotFoundError as e:
            return jsonify({"success": False, "message": str(e)}), 404
        except Exception:
            logger.exception("Unhandled error in %s", view.__name__)
            return jsonify({"success": False, "message": "Internal error"}), 500

    return wrapper


def int_arg(value, field_name: str, default=None):
    if value is None or value == "":
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer")

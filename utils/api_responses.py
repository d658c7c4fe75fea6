"""
JSON envelopes for the tag API.

Successful handlers return plain dicts and api_handler adds "success": true.
Failures go through error_response() so every error body has the same shape:

    {"success": false, "error": "size must not be negative"}
"""

import traceback
from quart import jsonify, Response
from typing import Any, Dict, Iterable, List, Optional, Tuple

from database import Tag


def error_response(error: str, status_code: int = 400,
                   data: Optional[Dict[str, Any]] = None) -> Tuple[Response, int]:
    """Error envelope with optional extra fields merged in."""
    body = {"success": False, "error": str(error)}
    if data:
        body.update(data)
    return jsonify(body), status_code


def unauthorized_response() -> Tuple[Response, int]:
    """Reload attempted without the right secret."""
    return error_response("Unauthorized", 401)


def server_error_response(error: Exception, include_traceback: bool = False) -> Tuple[Response, int]:
    """
    500 envelope for an unexpected exception.

    include_traceback must be called from inside the except block, since it
    formats the exception currently being handled.
    """
    data = {"traceback": traceback.format_exc()} if include_traceback else None
    return error_response(str(error), 500, data)


def serialize_tags(tags: Iterable[Tag]) -> List[Dict[str, Any]]:
    """Cached tags as JSON-ready dicts, transient fields included."""
    return [tag.to_dict() for tag in tags]

"""JSON envelope and request-body helpers shared by the API blueprints.

Success: {"data": ..., "success": true}
Lists:   {"data": [...], "total": n, "page": p, "success": true}
Errors:  {"error": "...", "code": "...", "success": false}
"""

from flask import jsonify, request

from kanban.services.errors import InvalidInput


def json_success(data, status=200):
    return jsonify({"data": data, "success": True}), status


def json_list(data, total, page=1, status=200):
    return jsonify({"data": data, "total": total, "page": page, "success": True}), status


def json_error(message, status=400, code=None):
    body = {"error": message, "success": False}
    if code:
        body["code"] = code
    return jsonify(body), status


def json_body():
    """The request's JSON object, or INVALID_REQUEST."""
    data = request.get_json(silent=True)
    if data is None and not request.data:
        return {}
    if not isinstance(data, dict):
        raise InvalidInput("Request body must be a JSON object", code="INVALID_REQUEST")
    return data


def require_string(data, key, optional=False, nullable=False):
    """Validate that `data[key]` is a string.

    Content rules (trimming, length) belong to the services. Returns the
    raw value, or None when the key is optional and absent or nullable
    and null.
    """
    if key not in data:
        if optional:
            return None
        raise InvalidInput(f"'{key}' is required", code="INVALID_REQUEST")

    value = data[key]
    if value is None and nullable:
        return None
    if not isinstance(value, str):
        raise InvalidInput(f"'{key}' must be a string", code="INVALID_REQUEST")
    return value


def require_bool(data, key):
    value = data.get(key)
    if not isinstance(value, bool):
        raise InvalidInput(f"'{key}' must be a boolean", code="INVALID_REQUEST")
    return value


def require_string_list(data, key):
    value = data.get(key)
    if (
        not isinstance(value, list)
        or not value
        or not all(isinstance(item, str) and item for item in value)
    ):
        raise InvalidInput(
            f"'{key}' must be a non-empty list of ids", code="INVALID_REQUEST"
        )
    return value


def pick(data, *keys):
    """Sub-dict of the keys actually present, for partial updates."""
    return {key: data[key] for key in keys if key in data}

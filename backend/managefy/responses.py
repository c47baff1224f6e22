# Overview: Uniform response envelope {data, statusCode, message} and request parsing helpers.

from flask import jsonify, request
from werkzeug.exceptions import BadRequest
from werkzeug.routing import IntegerConverter

from .errors import BadRequestError
from .validation import MAX_ID


class IdConverter(IntegerConverter):
    """<id:...> path segment: a non-negative integer that fits a 64-bit column."""

    def to_python(self, value: str) -> int:
        result = super().to_python(value)
        if result > MAX_ID:
            # Raised while routing, so it has to be an HTTPException
            raise BadRequest(f"Path ID must be <= {MAX_ID}")
        return result


def envelope(data=None, status_code: int = 200, message: str = "OK"):
    body = {"data": data, "statusCode": status_code, "message": message}
    return jsonify(body), status_code


def ok(data=None):
    return envelope(data)


def json_body() -> dict:
    """Return the JSON object body or raise BadRequest."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise BadRequestError("A JSON object body is required")
    return data


def required_arg_int(name: str) -> int:
    value = request.args.get(name, type=int)
    if value is None:
        raise BadRequestError(f"Query parameter '{name}' is required and must be an integer")
    if not -MAX_ID <= value <= MAX_ID:
        raise BadRequestError(f"Query parameter '{name}' is out of range")
    return value

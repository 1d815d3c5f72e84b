"""Shared utilities."""

import json
from typing import Any

from flask import Response


def json_response(data: dict[str, Any], status: int = 200) -> Response:
    """Create a Flask JSON response."""
    return Response(json.dumps(data), status=status, mimetype="application/json")


def drop_nulls(value: Any) -> Any:
    """Recursively drop None values from dicts."""
    if isinstance(value, dict):
        return {k: drop_nulls(v) for k, v in value.items() if v is not None}
    if isinstance(value, list):
        return [drop_nulls(v) for v in value]
    return value


def download_response(data: dict[str, Any], filename: str) -> Response:
    """Create an indented JSON attachment."""
    body = json.dumps(drop_nulls(data), indent=2)
    return Response(
        body,
        status=200,
        mimetype="application/json",
        headers={"Content-Disposition": f'attachment; filename="{filename}.json"'},
    )

from __future__ import annotations

import json

from fastapi import Request

from edge_engage.core.errors import invalid_request


async def read_request_params(request: Request) -> dict[str, str]:
    """
    Body parameters from either a JSON object or an HTML/OAuth form post.
    Non-string JSON values are stringified; nested values are rejected.
    """
    content_type = (request.headers.get("content-type") or "").split(";", 1)[0].strip().lower()

    if content_type in {"application/x-www-form-urlencoded", "multipart/form-data"}:
        form = await request.form()
        return {k: v for k, v in form.items() if isinstance(v, str)}

    raw = await request.body()
    if not raw.strip():
        return {}
    try:
        data = json.loads(raw)
    except ValueError:
        raise invalid_request("Request body must be JSON or form-encoded")
    if not isinstance(data, dict):
        raise invalid_request("Request body must be a JSON object")

    params: dict[str, str] = {}
    for key, value in data.items():
        if value is None:
            continue
        if isinstance(value, (dict, list)):
            raise invalid_request(f"Invalid value for {key}")
        params[str(key)] = value if isinstance(value, str) else str(value)
    return params

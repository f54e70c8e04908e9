"""Normalise JSON, multipart and URL-encoded bodies into one flat mapping."""

from __future__ import annotations

import json
from typing import Any
from urllib.parse import parse_qsl

from starlette.datastructures import UploadFile
from starlette.exceptions import HTTPException
from starlette.formparsers import MultiPartException
from starlette.requests import Request

from formrelay.core.constants import RESERVED_FIELD_PREFIX
from formrelay.core.exceptions import MalformedInputError


def _coerce(key: str, value: Any) -> str:
    if isinstance(value, str):
        return value
    if value is None:
        return ""
    # control fields are read as flags, so false and 0 mean unset
    if key.startswith(RESERVED_FIELD_PREFIX) and not value:
        return ""
    return json.dumps(value, ensure_ascii=False)


def parse_json_body(body: bytes) -> dict[str, str]:
    try:
        payload = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise MalformedInputError(f"Invalid JSON body: {exc}") from exc
    if not isinstance(payload, dict):
        raise MalformedInputError("JSON body must be an object")
    return {str(key): _coerce(str(key), value) for key, value in payload.items()}


def parse_urlencoded_body(body: bytes) -> dict[str, str]:
    # dict() keeps the last occurrence of a repeated key
    return dict(parse_qsl(body.decode("utf-8", errors="replace"), keep_blank_values=True))


async def parse_form_data(request: Request) -> dict[str, str]:
    content_type = request.headers.get("content-type", "").lower()

    if "application/json" in content_type:
        return parse_json_body(await request.body())

    if "multipart/form-data" in content_type:
        try:
            async with request.form() as form:
                fields: dict[str, str] = {}
                for key, value in form.multi_items():
                    if isinstance(value, UploadFile):
                        fields[key] = value.filename or ""
                    else:
                        fields[key] = value
                return fields
        except (MultiPartException, HTTPException) as exc:
            detail = getattr(exc, "message", None) or getattr(exc, "detail", str(exc))
            raise MalformedInputError(f"Invalid multipart body: {detail}") from exc

    return parse_urlencoded_body(await request.body())

"""JSON request decoding and response encoding."""

from __future__ import annotations

import json
import re
from collections.abc import Iterable, Mapping
from functools import lru_cache
from typing import Any, Optional

from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError, model_serializer
from pydantic.errors import PydanticUserError
from starlette.requests import Request
from starlette.responses import Response

from toolkit.core.config import ToolkitConfig
from toolkit.core.errors import (
    JSONBodyTooLargeError,
    JSONDecodeFailure,
    JSONEmptyBodyError,
    JSONEncodeError,
    JSONMultipleValuesError,
    JSONSyntaxError,
    JSONTargetError,
    JSONTypeMismatchError,
    JSONUnclassifiedError,
    JSONUnexpectedEndError,
    JSONUnknownFieldError,
)

JSON_CONTENT_TYPE = "application/json"

_decoder = json.JSONDecoder()
_WHITESPACE = re.compile(r"[ \t\n\r]*")


class JSONResponseEnvelope(BaseModel):
    """Wire wrapper shared by success and error responses; `data` is omitted when None."""

    error: bool = False
    message: str = ""
    data: Any = None

    @model_serializer(mode="wrap")
    def _omit_empty_data(self, handler):
        payload = handler(self)
        if self.data is None:
            payload.pop("data", None)
        return payload


async def _read_limited_body(request: Request, limit: int) -> bytes:
    declared = request.headers.get("content-length")
    if declared and declared.isdigit() and int(declared) > limit:
        raise JSONBodyTooLargeError(limit)
    body = bytearray()
    async for chunk in request.stream():
        body.extend(chunk)
        if len(body) > limit:
            raise JSONBodyTooLargeError(limit)
    return bytes(body)


@lru_cache(maxsize=256)
def _adapter_for(target: Any, allow_unknown_fields: bool) -> TypeAdapter:
    if isinstance(target, type) and issubclass(target, BaseModel):
        extra = target.model_config.get("extra") or "ignore"
        wanted = "forbid"
        if allow_unknown_fields:
            wanted = "allow" if extra == "allow" else "ignore"
        if extra != wanted:
            target = type(
                target.__name__,
                (target,),
                {"__module__": target.__module__, "model_config": ConfigDict(extra=wanted)},
            )
    return TypeAdapter(target)


def _field_name(loc: tuple) -> str:
    return ".".join(str(part) for part in loc)


def _accepted_keys(model: type[BaseModel]) -> dict[str, str]:
    """Map every JSON key the model accepts to its field name."""
    keys: dict[str, str] = {}
    for name, info in model.model_fields.items():
        keys[name] = name
        for alias in (info.alias, info.validation_alias):
            if isinstance(alias, str):
                keys[alias] = name
    return keys


def _unknown_key(value: Any, raw: Any, path: tuple = ()) -> Optional[str]:
    """Return the dotted path of the first raw key no nested model declares."""
    if isinstance(value, BaseModel) and isinstance(raw, dict):
        accepted = _accepted_keys(type(value))
        for key, raw_item in raw.items():
            name = accepted.get(key)
            if name is None:
                return _field_name(path + (key,))
            found = _unknown_key(getattr(value, name, None), raw_item, path + (key,))
            if found:
                return found
    elif isinstance(value, (list, tuple)) and isinstance(raw, list):
        for index, (item, raw_item) in enumerate(zip(value, raw)):
            found = _unknown_key(item, raw_item, path + (index,))
            if found:
                return found
    elif isinstance(value, dict) and isinstance(raw, dict):
        for key, raw_item in raw.items():
            if key in value:
                found = _unknown_key(value[key], raw_item, path + (key,))
                if found:
                    return found
    return None


def _classify_validation_error(exc: ValidationError, offset: int) -> JSONDecodeFailure:
    errors = exc.errors()
    for error in errors:
        if error["type"] == "extra_forbidden":
            return JSONUnknownFieldError(_field_name(error["loc"]))
    first = errors[0]
    field = _field_name(first["loc"])
    if first["type"] == "missing":
        return JSONUnclassifiedError(f'body is missing required field "{field}"')
    if first["type"].endswith("_type") or first["type"].endswith("_parsing"):
        return JSONTypeMismatchError(field or None, offset)
    if field:
        return JSONUnclassifiedError(f'body contains invalid value for field "{field}": {first["msg"]}')
    return JSONUnclassifiedError(f"body contains invalid value: {first['msg']}")


async def read_json(
    request: Request,
    target: Any = None,
    *,
    max_bytes: Optional[int] = None,
    allow_unknown_fields: Optional[bool] = None,
    config: Optional[ToolkitConfig] = None,
) -> Any:
    """
    Decode exactly one JSON value from the request body.

    target is a pydantic model or anything TypeAdapter accepts; without a
    target the plain decoded value is returned. Object keys that no model in
    the target declares, at any depth, are rejected unless
    allow_unknown_fields (or the config flag) is set.

    Values are validated strictly ("1" is not an int). Missing fields are not
    zero-filled: a required field absent from the body raises
    JSONUnclassifiedError, so give optional fields a default.

    Every failure raises a JSONDecodeFailure subclass whose message is safe
    to relay to API clients.
    """
    config = config or ToolkitConfig()
    limit = max_bytes or config.effective_max_json_size()
    if allow_unknown_fields is None:
        allow_unknown_fields = config.allow_unknown_fields

    body = await _read_limited_body(request, limit)
    try:
        text = body.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise JSONSyntaxError(exc.start) from exc

    start = _WHITESPACE.match(text).end()
    if start == len(text):
        raise JSONEmptyBodyError()
    try:
        value, end = _decoder.raw_decode(text, start)
    except json.JSONDecodeError as exc:
        if exc.pos >= len(text) or exc.msg.startswith("Unterminated string"):
            raise JSONUnexpectedEndError() from exc
        raise JSONSyntaxError(exc.pos) from exc

    if target is not None:
        try:
            adapter = _adapter_for(target, bool(allow_unknown_fields))
        except (PydanticUserError, TypeError) as exc:
            raise JSONTargetError(str(exc)) from exc
        try:
            parsed = adapter.validate_json(text[start:end], strict=True)
        except ValidationError as exc:
            raise _classify_validation_error(exc, start) from exc
        if not allow_unknown_fields:
            unknown = _unknown_key(parsed, value)
            if unknown:
                raise JSONUnknownFieldError(unknown)
        value = parsed

    if _WHITESPACE.match(text, end).end() != len(text):
        raise JSONMultipleValuesError()
    return value


def write_json(
    payload: Any,
    status_code: int = 200,
    headers: Mapping[str, str] | Iterable[Mapping[str, str]] | None = None,
) -> Response:
    """
    Serialize payload into an application/json Response.

    headers may be one mapping or several; they are applied in order, so a
    later mapping overwrites an earlier header of the same name. Content-Type
    is always application/json.
    """
    try:
        content = json.dumps(
            jsonable_encoder(payload),
            ensure_ascii=False,
            allow_nan=False,
            separators=(",", ":"),
        ).encode("utf-8")
    except (TypeError, ValueError) as exc:
        raise JSONEncodeError(f"could not encode JSON response: {exc}") from exc

    response = Response(content=content, status_code=status_code)
    if isinstance(headers, Mapping):
        headers = [headers]
    for header_set in headers or ():
        for name, value in header_set.items():
            response.headers[name] = value
    response.headers["Content-Type"] = JSON_CONTENT_TYPE
    return response


def error_json(exc: BaseException | str, status_code: int = 400) -> Response:
    """Wrap an error in the {"error": true, "message": ...} envelope."""
    envelope = JSONResponseEnvelope(error=True, message=str(exc))
    return write_json(envelope, status_code=status_code)

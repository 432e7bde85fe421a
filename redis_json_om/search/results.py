"""Decode ``FT.SEARCH`` replies into typed records."""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from redis_json_om.db.client import as_text
from redis_json_om.exceptions import MalformedSearchResponse, SerializationFailure

ModelT = TypeVar("ModelT", bound=BaseModel)

JSON_ROOT = "$"


def search_total(response: Any) -> int:
    """Return the total match count that leads every search reply."""

    if not isinstance(response, (list, tuple)) or not response:
        raise MalformedSearchResponse(f"Expected a non-empty array reply, got {type(response).__name__}")
    try:
        return int(response[0])
    except (TypeError, ValueError) as exc:
        raise MalformedSearchResponse(f"Search reply does not start with a count: {response[0]!r}") from exc


def decode_search_response(model: type[ModelT], response: Any) -> list[ModelT]:
    """Decode ``[total, key, [..., "$", json], key, [...], ...]`` into records.

    A row with no ``$`` entry or with an undecodable document aborts the
    whole result set.
    """

    search_total(response)
    rows = list(response[1:])
    if len(rows) % 2:
        raise MalformedSearchResponse(f"Search reply has a key without fields: {as_text(rows[-1])}")

    records: list[ModelT] = []
    for key, fields in zip(rows[0::2], rows[1::2]):
        payload = _document_payload(as_text(key), fields)
        records.append(decode_document(model, payload, key=as_text(key)))
    return records


def decode_document(model: type[ModelT], payload: str | bytes, *, key: str | None = None) -> ModelT:
    """Validate one serialized document as ``model``."""

    try:
        return model.model_validate_json(payload)
    except ValidationError as exc:
        where = f" at {key}" if key else ""
        raise SerializationFailure(f"Cannot decode {model.__name__}{where}: {exc}") from exc


def _document_payload(key: str, fields: Any) -> str | bytes:
    if not isinstance(fields, (list, tuple)) or len(fields) % 2:
        raise MalformedSearchResponse(f"Fields of {key} are not a flat name/value array")
    for name, value in zip(fields[0::2], fields[1::2]):
        if as_text(name) == JSON_ROOT:
            if not isinstance(value, (str, bytes)):
                raise MalformedSearchResponse(f"Document of {key} is not a string")
            return value
    raise MalformedSearchResponse(f"Search row {key} has no {JSON_ROOT!r} entry")

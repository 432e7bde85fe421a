"""Document persistence services."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, TypeVar

from pydantic_core import PydanticSerializationError

from redis_json_om.config import get_settings
from redis_json_om.db.client import CommandExecutor, as_text
from redis_json_om.exceptions import SerializationFailure
from redis_json_om.search.results import decode_document

if TYPE_CHECKING:
    from redis_json_om.models.base import JsonModel

ModelT = TypeVar("ModelT", bound="JsonModel")


def save(client: CommandExecutor, record: JsonModel) -> str:
    """Write a record under its key with ``JSON.SET`` and return the key."""

    try:
        payload = record.model_dump_json(by_alias=True)
    except PydanticSerializationError as exc:
        raise SerializationFailure(f"Cannot encode {type(record).__name__} {record.primary_key}: {exc}") from exc
    key = record.key
    client.execute_command("JSON.SET", key, "$", payload)
    return key


def get(client: CommandExecutor, model: type[ModelT], record_id: Any) -> ModelT | None:
    """Load one record, or ``None`` when its key is absent."""

    key = model.make_key(record_id)
    payload = client.execute_command("JSON.GET", key)
    if payload is None:
        return None
    return decode_document(model, payload, key=key)


def delete(client: CommandExecutor, model: type[JsonModel], record_id: Any) -> int:
    """Delete one record with ``JSON.DEL``; returns the number of removed paths."""

    return int(client.execute_command("JSON.DEL", model.make_key(record_id)))


def delete_many(client: CommandExecutor, model: type[JsonModel], record_ids: list[Any]) -> int:
    """Delete several records with one ``DEL``."""

    if not record_ids:
        return 0
    keys = [model.make_key(record_id) for record_id in record_ids]
    return int(client.execute_command("DEL", *keys))


def all_ids(client: CommandExecutor, model: type[JsonModel], *, batch_size: int | None = None) -> list[str]:
    """Enumerate record ids under the model's key prefix with ``SCAN``."""

    count = batch_size or get_settings().redis_scan_batch_size
    prefix = f"{model.key_prefix}:"
    ids: list[str] = []
    seen: set[str] = set()
    cursor: Any = 0
    while True:
        cursor, keys = _scan_reply(client.execute_command("SCAN", cursor, "MATCH", f"{prefix}*", "COUNT", count))
        for key in keys:
            record_id = as_text(key).removeprefix(prefix)
            # SCAN may return a key more than once
            if record_id not in seen:
                seen.add(record_id)
                ids.append(record_id)
        if int(cursor) == 0:
            return ids


def _scan_reply(reply: Any) -> tuple[int, list[Any]]:
    cursor, keys = reply
    return int(as_text(cursor)), list(keys or [])

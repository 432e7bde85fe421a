"""Search index inspection services."""

from __future__ import annotations

from typing import Any

import redis

from redis_json_om.db.client import CommandExecutor, as_text
from redis_json_om.exceptions import IndexOperationFailed, MalformedSearchResponse
from redis_json_om.schemas.index_info import IndexAttribute, IndexInfo

# Attribute options that carry a value; every other option is a bare flag
_VALUED_ATTRIBUTE_OPTIONS = frozenset(
    {"identifier", "attribute", "type", "separator", "weight", "phonetic", "algorithm", "data_type", "dim", "distance_metric"}
)


def list_indexes(client: CommandExecutor) -> list[str]:
    """List the names of all search indexes (``FT._LIST``)."""

    try:
        reply = client.execute_command("FT._LIST")
    except redis.RedisError as exc:
        raise IndexOperationFailed("*", "FT._LIST", str(exc)) from exc
    return [as_text(name) for name in reply or []]


def inspect_index(client: CommandExecutor, index_name: str) -> IndexInfo:
    """Read one index definition with ``FT.INFO``."""

    try:
        reply = client.execute_command("FT.INFO", index_name)
    except redis.RedisError as exc:
        raise IndexOperationFailed(index_name, "FT.INFO", str(exc)) from exc

    info = _pairs(reply)
    definition = _pairs(info.get("index_definition", []))
    return IndexInfo(
        index_name=as_text(info.get("index_name", index_name)),
        key_type=as_text(definition["key_type"]) if "key_type" in definition else None,
        prefixes=[as_text(prefix) for prefix in definition.get("prefixes", [])],
        attributes=[_attribute(item) for item in info.get("attributes", [])],
        num_docs=int(float(as_text(info.get("num_docs", 0)))),
    )


def _pairs(reply: Any) -> dict[str, Any]:
    if isinstance(reply, dict):
        return {as_text(key): value for key, value in reply.items()}
    if not isinstance(reply, (list, tuple)) or len(reply) % 2:
        raise MalformedSearchResponse(f"Expected a flat name/value array, got {reply!r}")
    return {as_text(key): value for key, value in zip(reply[0::2], reply[1::2])}


def _attribute(reply: Any) -> IndexAttribute:
    tokens = [as_text(token) for token in reply]
    values: dict[str, str] = {}
    flags: set[str] = set()
    position = 0
    while position < len(tokens):
        name = tokens[position]
        if name.lower() in _VALUED_ATTRIBUTE_OPTIONS and position + 1 < len(tokens):
            values[name.lower()] = tokens[position + 1]
            position += 2
        else:
            flags.add(name.upper())
            position += 1
    return IndexAttribute(
        identifier=values.get("identifier", ""),
        attribute=values.get("attribute", ""),
        type=values.get("type", ""),
        sortable="SORTABLE" in flags,
    )

"""Search index types and inference from Python annotations."""

from __future__ import annotations

import collections.abc
import types
import typing
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from redis_json_om.types import Coordinates


class IndexType(str, Enum):
    """Index categories supported by RediSearch on JSON documents."""

    TAG = "tag"
    TEXT = "text"
    NUMERIC = "numeric"
    GEO = "geo"
    VECTOR = "vector"

    @property
    def keyword(self) -> str:
        """Return the token used in ``FT.CREATE`` schema clauses."""
        return self.value.upper()


_SEQUENCE_ORIGINS = (
    list,
    set,
    frozenset,
    tuple,
    collections.abc.Sequence,
    collections.abc.MutableSequence,
    collections.abc.Set,
)
_MAPPING_ORIGINS = (dict, collections.abc.Mapping, collections.abc.MutableMapping)


def unwrap_optional(annotation: Any) -> Any:
    """Strip ``Annotated`` wrappers and a ``None`` member from unions."""

    while typing.get_origin(annotation) is typing.Annotated:
        annotation = typing.get_args(annotation)[0]
    origin = typing.get_origin(annotation)
    if origin is typing.Union or origin is types.UnionType:
        members = [arg for arg in typing.get_args(annotation) if arg is not type(None)]
        if len(members) == 1:
            return unwrap_optional(members[0])
    return annotation


def sequence_element(annotation: Any) -> Any | None:
    """Return the element type of a homogeneous sequence annotation."""

    origin = typing.get_origin(annotation)
    if origin not in _SEQUENCE_ORIGINS:
        return None
    args = [arg for arg in typing.get_args(annotation) if arg is not Ellipsis]
    if not args:
        return Any
    return unwrap_optional(args[0])


def mapping_value(annotation: Any) -> Any | None:
    """Return the value type of a mapping annotation."""

    if typing.get_origin(annotation) not in _MAPPING_ORIGINS:
        return None
    args = typing.get_args(annotation)
    return unwrap_optional(args[1]) if len(args) == 2 else Any


def infer_index_type(annotation: Any) -> IndexType:
    """Pick an index type for a field that carries no explicit one."""

    annotation = unwrap_optional(annotation)

    element = sequence_element(annotation)
    if element is not None:
        if element is float:
            return IndexType.VECTOR
        return infer_index_type(element)

    value = mapping_value(annotation)
    if value is not None:
        return infer_index_type(value)

    if not isinstance(annotation, type):
        return IndexType.TEXT
    # bool is an int subclass, so it must be checked first
    if issubclass(annotation, bool):
        return IndexType.TAG
    if issubclass(annotation, (int, float, Decimal)):
        return IndexType.NUMERIC
    if issubclass(annotation, str):
        return IndexType.TEXT
    if issubclass(annotation, (datetime, date)):
        return IndexType.NUMERIC
    if issubclass(annotation, Coordinates):
        return IndexType.GEO
    return IndexType.TEXT

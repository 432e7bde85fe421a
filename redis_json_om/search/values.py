"""Render Python values as RediSearch query literals."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any

from redis_json_om.exceptions import InvalidIndexTypeForOperator
from redis_json_om.models.base import to_epoch_seconds
from redis_json_om.schema.index_types import IndexType
from redis_json_om.types import Coordinates

TAG_SPECIAL_CHARACTERS = frozenset('{}[]<>|()"\'@#$%^&*-+=~.,:;')


def escape_tag_value(value: str) -> str:
    """Backslash-escape characters that are reserved inside tag braces.

    >>> escape_tag_value("alice@example.com")
    'alice\\\\@example\\\\.com'
    """

    return "".join(f"\\{char}" if char in TAG_SPECIAL_CHARACTERS else char for char in value)


def format_number(value: int | float | Decimal) -> str:
    if isinstance(value, int):
        return str(value)
    return repr(float(value))


def is_integral(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def numeric_value(value: Any, field_name: str) -> int | float:
    """Return the number a numeric index stores for ``value``."""

    if isinstance(value, Enum):
        value = value.value
    if isinstance(value, bool):
        raise InvalidIndexTypeForOperator(field_name, IndexType.NUMERIC.value, "tag for bool")
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, date):
        return to_epoch_seconds(value)
    raise InvalidIndexTypeForOperator(
        field_name, IndexType.NUMERIC.value, f"numeric value, got {type(value).__name__}"
    )


def render_value(value: Any, index_type: IndexType, field_name: str) -> str:
    """Convert a value into the literal form expected for ``index_type``."""

    if isinstance(value, Enum):
        value = value.value

    if index_type is IndexType.NUMERIC:
        if isinstance(value, str):
            raise InvalidIndexTypeForOperator(field_name, index_type.value, "tag or text for str")
        return format_number(numeric_value(value, field_name))

    if isinstance(value, bool):
        if index_type is not IndexType.TAG:
            raise InvalidIndexTypeForOperator(field_name, index_type.value, "tag for bool")
        return "true" if value else "false"

    if isinstance(value, date):
        raise InvalidIndexTypeForOperator(field_name, index_type.value, "numeric for date")

    if isinstance(value, (int, float, Decimal)):
        text = format_number(value)
    elif isinstance(value, (str, Coordinates)):
        text = str(value)
    else:
        raise InvalidIndexTypeForOperator(
            field_name, index_type.value, f"str, number, bool or date, got {type(value).__name__}"
        )

    if index_type is IndexType.TAG:
        return escape_tag_value(text)
    return text

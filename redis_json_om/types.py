"""Value types shared by records and queries."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic_core import core_schema


@dataclass(frozen=True, slots=True)
class Coordinates:
    """A geographic point, stored in the ``"lon,lat"`` form RediSearch indexes as GEO."""

    longitude: float
    latitude: float

    def __str__(self) -> str:
        return f"{self.longitude},{self.latitude}"

    @classmethod
    def parse(cls, value: Any) -> Coordinates:
        if isinstance(value, Coordinates):
            return value
        if isinstance(value, str):
            parts = value.split(",")
            if len(parts) != 2:
                raise ValueError(f"Expected 'longitude,latitude', got {value!r}")
            return cls(longitude=float(parts[0]), latitude=float(parts[1]))
        if isinstance(value, (list, tuple)) and len(value) == 2:
            return cls(longitude=float(value[0]), latitude=float(value[1]))
        raise ValueError(f"Cannot read coordinates from {value!r}")

    @classmethod
    def __get_pydantic_core_schema__(cls, source: Any, handler: Any) -> core_schema.CoreSchema:
        return core_schema.no_info_plain_validator_function(
            cls.parse,
            serialization=core_schema.plain_serializer_function_ser_schema(str, when_used="json"),
        )


class GeoUnit(str, Enum):
    """Distance units accepted by GEO radius filters."""

    METERS = "m"
    KILOMETERS = "km"
    MILES = "mi"
    FEET = "ft"


@dataclass(frozen=True, slots=True)
class GeoFilter:
    """Radius filter around an origin point."""

    origin: Coordinates
    radius: float
    unit: GeoUnit = GeoUnit.KILOMETERS

"""Record base classes stored as RedisJSON documents."""

from __future__ import annotations

import calendar
import uuid
from datetime import date, datetime, timezone
from typing import TYPE_CHECKING, Annotated, Any, ClassVar, Self

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SerializerFunctionWrapHandler,
    field_serializer,
    field_validator,
)

from redis_json_om.models.annotations import PrimaryKey

if TYPE_CHECKING:
    from redis_json_om.db.client import CommandExecutor
    from redis_json_om.search.field_refs import FieldRefs
    from redis_json_om.search.query import QueryBuilder


def new_id() -> str:
    """Return a fresh record identifier."""

    return uuid.uuid4().hex


def to_epoch_seconds(value: datetime | date) -> float | int:
    """Convert a date or datetime to seconds since the Unix epoch (naive means UTC)."""

    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.timestamp()
    return calendar.timegm(value.timetuple())


class _FieldRefAccessor:
    def __get__(self, instance: Any, owner: type[EmbeddedJsonModel]) -> FieldRefs:
        from redis_json_om.search.field_refs import FieldRefs

        return FieldRefs(owner)


class EmbeddedJsonModel(BaseModel):
    """A record type with a search schema that can be nested in other records.

    Dates and datetimes are written as epoch seconds so that they can be
    indexed as numeric fields.
    """

    model_config = ConfigDict(populate_by_name=True)

    fields: ClassVar[_FieldRefAccessor] = _FieldRefAccessor()

    @field_validator("*", mode="after")
    @classmethod
    def _assume_utc(cls, value: Any) -> Any:
        if isinstance(value, datetime) and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @field_serializer("*", mode="wrap", when_used="json")
    def _serialize_temporal(self, value: Any, handler: SerializerFunctionWrapHandler) -> Any:
        if isinstance(value, date):
            return to_epoch_seconds(value)
        if isinstance(value, (list, tuple)) and value and all(isinstance(item, date) for item in value):
            return [to_epoch_seconds(item) for item in value]
        return handler(value)


class JsonModel(EmbeddedJsonModel):
    """A record persisted under ``<key_prefix>:<id>`` and indexed as ``idx:<ClassName>``."""

    key_prefix: ClassVar[str]
    index_name: ClassVar[str]

    id: Annotated[str, PrimaryKey()] = Field(default_factory=new_id)

    @classmethod
    def __pydantic_init_subclass__(cls, **kwargs: Any) -> None:
        super().__pydantic_init_subclass__(**kwargs)
        if "key_prefix" not in cls.__dict__:
            cls.key_prefix = cls.__name__.lower()
        if "index_name" not in cls.__dict__:
            cls.index_name = f"idx:{cls.__name__}"

    @field_validator("id", mode="before")
    @classmethod
    def _fill_missing_id(cls, value: Any) -> Any:
        if value is None or value == "":
            return new_id()
        return value

    @classmethod
    def primary_key_field(cls) -> str:
        for name, info in cls.model_fields.items():
            if any(isinstance(marker, PrimaryKey) for marker in info.metadata):
                return name
        return "id"

    @classmethod
    def make_key(cls, record_id: Any) -> str:
        return f"{cls.key_prefix}:{record_id}"

    @property
    def primary_key(self) -> str:
        return str(getattr(self, self.primary_key_field()))

    @property
    def key(self) -> str:
        return self.make_key(self.primary_key)

    def save(self, client: CommandExecutor) -> str:
        """Write this record with ``JSON.SET`` and return its key."""

        from redis_json_om.services import documents

        return documents.save(client, self)

    def delete(self, client: CommandExecutor) -> int:
        from redis_json_om.services import documents

        return documents.delete(client, type(self), self.primary_key)

    @classmethod
    def get(cls, client: CommandExecutor, record_id: Any) -> Self | None:
        """Fetch one record by identifier, or ``None`` when the key is absent."""

        from redis_json_om.services import documents

        return documents.get(client, cls, record_id)

    @classmethod
    def delete_many(cls, client: CommandExecutor, record_ids: list[Any]) -> int:
        from redis_json_om.services import documents

        return documents.delete_many(client, cls, record_ids)

    @classmethod
    def all_ids(cls, client: CommandExecutor, *, batch_size: int | None = None) -> list[str]:
        from redis_json_om.services import documents

        return documents.all_ids(client, cls, batch_size=batch_size)

    @classmethod
    def find(cls, client: CommandExecutor) -> QueryBuilder[Self]:
        """Start a search query over this record type."""

        from redis_json_om.search.query import QueryBuilder

        return QueryBuilder(cls, client)

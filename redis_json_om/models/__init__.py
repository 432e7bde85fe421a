"""Record base classes and field markers."""

from redis_json_om.models.annotations import Index, PrimaryKey
from redis_json_om.models.base import EmbeddedJsonModel, JsonModel, new_id, to_epoch_seconds

__all__ = [
    "EmbeddedJsonModel",
    "Index",
    "JsonModel",
    "PrimaryKey",
    "new_id",
    "to_epoch_seconds",
]

"""Typed JSON documents in Redis with RediSearch indexes and a composable query builder."""

from redis_json_om.client import RedisOM
from redis_json_om.config import RedisConnectionConfig, Settings, get_settings
from redis_json_om.exceptions import (
    ConfigurationError,
    CyclicSchemaError,
    DuplicateFieldAlias,
    FieldNotIndexed,
    IndexOperationFailed,
    InvalidIndexTypeForOperator,
    MalformedSearchResponse,
    MigrationFailed,
    PredicateModelMismatch,
    QueryBuilderError,
    QueryExecutionError,
    RedisOMError,
    SchemaError,
    SchemaFlatteningUnsupported,
    SerializationFailure,
)
from redis_json_om.models import EmbeddedJsonModel, Index, JsonModel, PrimaryKey
from redis_json_om.schema import IndexType, compile_schema
from redis_json_om.search import QueryBuilder, and_, not_, or_
from redis_json_om.services.migrator import Migrator
from redis_json_om.types import Coordinates, GeoFilter, GeoUnit

__all__ = [
    "ConfigurationError",
    "Coordinates",
    "CyclicSchemaError",
    "DuplicateFieldAlias",
    "EmbeddedJsonModel",
    "FieldNotIndexed",
    "GeoFilter",
    "GeoUnit",
    "Index",
    "IndexOperationFailed",
    "IndexType",
    "InvalidIndexTypeForOperator",
    "JsonModel",
    "MalformedSearchResponse",
    "MigrationFailed",
    "Migrator",
    "PredicateModelMismatch",
    "PrimaryKey",
    "QueryBuilder",
    "QueryBuilderError",
    "QueryExecutionError",
    "RedisConnectionConfig",
    "RedisOM",
    "RedisOMError",
    "SchemaError",
    "SchemaFlatteningUnsupported",
    "SerializationFailure",
    "Settings",
    "and_",
    "compile_schema",
    "get_settings",
    "not_",
    "or_",
]

"""Error types raised by schema compilation, querying, and index management."""

from __future__ import annotations


class RedisOMError(Exception):
    """Base exception for all redis_json_om errors."""


class ConfigurationError(RedisOMError):
    """Raised when connection settings cannot be used."""


class SchemaError(RedisOMError):
    """Raised when a record type cannot be compiled into a search schema."""


class SchemaFlatteningUnsupported(SchemaError):
    """Raised for indexed fields the store cannot map to one index type."""

    def __init__(self, model_name: str, field_name: str, reason: str) -> None:
        super().__init__(f"Cannot index field {model_name}.{field_name}: {reason}")
        self.model_name = model_name
        self.field_name = field_name


class CyclicSchemaError(SchemaError):
    """Raised when indexed nested records refer back to an enclosing record."""

    def __init__(self, chain: list[str]) -> None:
        super().__init__("Cyclic nested schema: " + " -> ".join(chain))
        self.chain = chain


class DuplicateFieldAlias(SchemaError):
    """Raised when two indexed paths collapse onto the same query alias."""

    def __init__(self, model_name: str, alias: str, paths: tuple[str, str]) -> None:
        super().__init__(
            f"Alias {alias!r} of {model_name} is produced by both {paths[0]} and {paths[1]}"
        )
        self.model_name = model_name
        self.alias = alias
        self.paths = paths


class QueryBuilderError(RedisOMError):
    """Raised when a predicate cannot be rendered into a search query."""


class FieldNotIndexed(QueryBuilderError):
    """Raised when a predicate references a field missing from the schema."""

    def __init__(self, model_name: str, field_name: str) -> None:
        super().__init__(f"Field {field_name!r} is not indexed on {model_name}")
        self.model_name = model_name
        self.field_name = field_name


class InvalidIndexTypeForOperator(QueryBuilderError):
    """Raised when an operator or value does not fit the field's index type."""

    def __init__(self, field_name: str, actual: str, expected: str) -> None:
        super().__init__(f"Invalid index type {actual} for field: {field_name}, expected: {expected}")
        self.field_name = field_name
        self.actual = actual
        self.expected = expected


class PredicateModelMismatch(QueryBuilderError):
    """Raised when predicates bound to different record types are combined."""

    def __init__(self, expected: str, actual: str) -> None:
        super().__init__(f"Predicate for {actual} cannot be applied to {expected}")
        self.expected = expected
        self.actual = actual


class QueryExecutionError(RedisOMError):
    """Raised when the store rejects a search command."""


class SerializationFailure(RedisOMError):
    """Raised when a record cannot be encoded to or decoded from JSON."""


class MalformedSearchResponse(RedisOMError):
    """Raised when a search reply does not have the expected wire shape."""


class IndexOperationFailed(RedisOMError):
    """Raised when the store rejects an index create or drop command."""

    def __init__(self, index_name: str, command: str, detail: str) -> None:
        super().__init__(f"{command} {index_name} failed: {detail}")
        self.index_name = index_name
        self.command = command


class MigrationFailed(RedisOMError):
    """Raised after a migration run in which more than one model failed."""

    def __init__(self, errors: list[RedisOMError]) -> None:
        summary = "; ".join(str(error) for error in errors)
        super().__init__(f"Migration failed for {len(errors)} models: {summary}")
        self.errors = errors

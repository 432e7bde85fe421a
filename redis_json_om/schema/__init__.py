"""Schema compilation for search indexes."""

from redis_json_om.schema.compiler import compile_schema, find_field
from redis_json_om.schema.fields import FieldDescriptor, to_alias
from redis_json_om.schema.index_types import IndexType, infer_index_type

__all__ = [
    "FieldDescriptor",
    "IndexType",
    "compile_schema",
    "find_field",
    "infer_index_type",
    "to_alias",
]

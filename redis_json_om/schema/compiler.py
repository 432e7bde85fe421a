"""Compile record types into flat lists of indexable field descriptors.

Walks the pydantic fields of a record, keeps those marked with ``Index`` or
``PrimaryKey`` and recurses into nested records, arrays of records and maps
of records. Nested paths are flattened into JSONPath selectors:

- single record  -> ``$.address.city``
- array          -> ``$.notes[*].description``
- map            -> ``$.notes.*.description``
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any

from pydantic import BaseModel
from pydantic.fields import FieldInfo

from redis_json_om.exceptions import (
    CyclicSchemaError,
    DuplicateFieldAlias,
    SchemaError,
    SchemaFlatteningUnsupported,
)
from redis_json_om.models.annotations import Index, PrimaryKey
from redis_json_om.models.base import EmbeddedJsonModel
from redis_json_om.schema.fields import ARRAY_WILDCARD, MAP_WILDCARD, ROOT, FieldDescriptor, to_alias
from redis_json_om.schema.index_types import (
    IndexType,
    infer_index_type,
    mapping_value,
    sequence_element,
    unwrap_optional,
)

# Index type used for maps whose value type has no schema of its own
MAP_FALLBACK_INDEX_TYPE = IndexType.TAG


def has_schema(annotation: Any) -> bool:
    """Return whether a type is a record that owns a search schema."""

    return isinstance(annotation, type) and issubclass(annotation, EmbeddedJsonModel)


def _is_record(annotation: Any) -> bool:
    return isinstance(annotation, type) and issubclass(annotation, BaseModel)


@lru_cache(maxsize=None)
def compile_schema(model: type[BaseModel]) -> tuple[FieldDescriptor, ...]:
    """Return the ordered leaf descriptors of a record type.

    Raises:
        SchemaFlatteningUnsupported: An indexed map holds scalar values.
        CyclicSchemaError: Indexed nested records refer back to an enclosing type.
        DuplicateFieldAlias: Two paths produce the same alias.
        SchemaError: An index type is unknown or a vector field has no dimension.
    """

    leaves = _compile(model, (model,))
    seen: dict[str, str] = {}
    for leaf in leaves:
        if leaf.alias in seen:
            raise DuplicateFieldAlias(model.__name__, leaf.alias, (seen[leaf.alias], leaf.query_path))
        seen[leaf.alias] = leaf.query_path
    return tuple(leaves)


def find_field(model: type[BaseModel], name: str) -> FieldDescriptor | None:
    """Look up a leaf by its dotted declared name (``address.city``)."""

    for descriptor in compile_schema(model):
        if descriptor.name == name:
            return descriptor
    return None


def _compile(model: type[BaseModel], stack: tuple[type, ...]) -> list[FieldDescriptor]:
    leaves: list[FieldDescriptor] = []
    for name, info in model.model_fields.items():
        marker = _index_marker(info)
        if marker is None:
            continue
        descriptor = _describe(model, name, info, marker, stack)
        if descriptor is not None:
            leaves.extend(descriptor.flatten())
    return leaves


def _index_marker(info: FieldInfo) -> Index | PrimaryKey | None:
    for item in info.metadata:
        if isinstance(item, (Index, PrimaryKey)):
            return item
    return None


def _explicit_type(model: type[BaseModel], name: str, marker: Index | PrimaryKey) -> IndexType | None:
    if marker.type is None:
        return IndexType.TAG if isinstance(marker, PrimaryKey) else None
    if isinstance(marker.type, IndexType):
        return marker.type
    try:
        return IndexType(str(marker.type).lower())
    except ValueError as exc:
        choices = ", ".join(item.value for item in IndexType)
        raise SchemaError(
            f"Unknown index type {marker.type!r} on {model.__name__}.{name}; expected one of {choices}"
        ) from exc


def _is_integral_type(annotation: Any) -> bool:
    return isinstance(annotation, type) and issubclass(annotation, int) and not issubclass(annotation, bool)


def _describe(
    model: type[BaseModel],
    name: str,
    info: FieldInfo,
    marker: Index | PrimaryKey,
    stack: tuple[type, ...],
) -> FieldDescriptor | None:
    key = info.serialization_alias or info.alias or name
    annotation = unwrap_optional(info.annotation)
    explicit = _explicit_type(model, name, marker)

    element = sequence_element(annotation)
    if element is not None:
        path = f"{ROOT}.{key}{ARRAY_WILDCARD}"
        if _is_record(element):
            return _container(name, path, element, stack)
        index_type = explicit or infer_index_type(annotation)
        # vectors index the whole array as one value
        if index_type is IndexType.VECTOR:
            path = f"{ROOT}.{key}"
        return _leaf(model, name, path, index_type, marker, integral=_is_integral_type(element))

    value = mapping_value(annotation)
    if value is not None:
        if has_schema(value):
            return _container(name, f"{ROOT}.{key}{MAP_WILDCARD}", value, stack)
        if _is_record(value):
            return _leaf(model, name, f"{ROOT}.{key}", explicit or MAP_FALLBACK_INDEX_TYPE, marker)
        raise SchemaFlatteningUnsupported(
            model.__name__,
            name,
            "maps of scalar values have no single index type; use a list or a nested record",
        )

    if _is_record(annotation):
        return _container(name, f"{ROOT}.{key}", annotation, stack)

    index_type = explicit or infer_index_type(annotation)
    return _leaf(model, name, f"{ROOT}.{key}", index_type, marker, integral=_is_integral_type(annotation))


def _container(
    name: str,
    path: str,
    nested_model: type[BaseModel],
    stack: tuple[type, ...],
) -> FieldDescriptor | None:
    if not has_schema(nested_model):
        return None
    if nested_model in stack:
        raise CyclicSchemaError([entry.__name__ for entry in (*stack, nested_model)])
    nested = _compile(nested_model, (*stack, nested_model))
    return FieldDescriptor(
        name=name,
        alias=to_alias(path),
        query_path=path,
        index_type=IndexType.TEXT,
        nested=tuple(nested),
    )


def _leaf(
    model: type[BaseModel],
    name: str,
    path: str,
    index_type: IndexType,
    marker: Index | PrimaryKey,
    *,
    integral: bool = False,
) -> FieldDescriptor:
    options: list[str] = []
    if index_type is IndexType.VECTOR:
        dimension = marker.vector_dim if isinstance(marker, Index) else None
        if dimension is None:
            raise SchemaError(f"Vector field {model.__name__}.{name} needs Index(vector_dim=...)")
        options.extend(
            [
                "FLAT",
                "6",
                "TYPE",
                "FLOAT32",
                "DIM",
                str(dimension),
                "DISTANCE_METRIC",
                marker.distance_metric.upper(),
            ]
        )
    if isinstance(marker, Index) and marker.sortable:
        options.append("SORTABLE")
    return FieldDescriptor(
        name=name,
        alias=to_alias(path),
        query_path=path,
        index_type=index_type,
        options=tuple(options),
        integral=integral and index_type is IndexType.NUMERIC,
    )

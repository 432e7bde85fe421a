"""Field markers read by the schema compiler.

Markers are attached with ``typing.Annotated``::

    class User(JsonModel):
        name: Annotated[str, Index()]
        email: Annotated[str, Index(IndexType.TAG)]
        age: Annotated[int, Index(sortable=True)]

Fields without a marker are stored but not indexed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from redis_json_om.schema.index_types import IndexType


@dataclass(frozen=True, slots=True)
class Index:
    """Marks a field as searchable.

    Attributes:
        type: Explicit index type; inferred from the annotation when omitted.
        sortable: Adds ``SORTABLE`` so the field can be used with ``sort_by``.
        vector_dim: Dimension of a vector field; required for the store to
            accept a vector index.
        distance_metric: Vector distance metric (``COSINE``, ``L2`` or ``IP``).
    """

    type: IndexType | str | None = None
    sortable: bool = False
    vector_dim: int | None = None
    distance_metric: str = "COSINE"


@dataclass(frozen=True, slots=True)
class PrimaryKey:
    """Marks the record identifier; it is always indexed (as a tag by default)."""

    type: IndexType | str | None = None

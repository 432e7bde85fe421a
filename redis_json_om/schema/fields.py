"""Field descriptors emitted by the schema compiler."""

from __future__ import annotations

from dataclasses import dataclass, replace

from redis_json_om.schema.index_types import IndexType

ROOT = "$"
ARRAY_WILDCARD = "[*]"
MAP_WILDCARD = ".*"
ALIAS_SEPARATOR = "__"


def to_alias(query_path: str) -> str:
    """Derive a query-safe attribute name from a JSONPath.

    >>> to_alias("$.address[*].city")
    'address__city'
    >>> to_alias("$.notes.*.description")
    'notes__description'
    """

    relative = query_path.removeprefix(f"{ROOT}.")
    relative = relative.replace(ARRAY_WILDCARD, "").replace(MAP_WILDCARD, "")
    return relative.replace(".", ALIAS_SEPARATOR)


@dataclass(frozen=True, slots=True)
class FieldDescriptor:
    """One indexable path of a record type.

    Container descriptors carry ``nested`` leaves only while the compiler
    flattens them; schemas hold leaves exclusively.
    ``integral`` marks numeric leaves declared as integers, whose strict
    range bounds can move by one.
    """

    name: str
    alias: str
    query_path: str
    index_type: IndexType
    nested: tuple[FieldDescriptor, ...] | None = None
    options: tuple[str, ...] = ()
    integral: bool = False

    @property
    def is_leaf(self) -> bool:
        return self.nested is None

    def schema_clause(self) -> list[str]:
        """Return the ``<path> AS <alias> <TYPE> [options]`` tokens for ``FT.CREATE``."""

        return [self.query_path, "AS", self.alias, self.index_type.keyword, *self.options]

    def flatten(self) -> list[FieldDescriptor]:
        """Re-root nested leaves under this descriptor's path and alias."""

        if self.nested is None:
            return [self]
        leaves = []
        for child in self.nested:
            for leaf in child.flatten():
                relative = leaf.query_path.removeprefix(f"{ROOT}.")
                leaves.append(
                    replace(
                        leaf,
                        name=f"{self.name}.{leaf.name}",
                        alias=f"{self.alias}{ALIAS_SEPARATOR}{leaf.alias}",
                        query_path=f"{self.query_path}.{relative}",
                    )
                )
        return leaves

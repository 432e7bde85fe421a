"""Typed field references and the comparison operators built on them.

``User.fields.age > 40`` builds a :class:`Predicate`; nothing is checked
against the schema until the predicate is rendered, so references can be
created before the record's schema is complete.

Rendering rules by index type:

========  ===============  ================  ==================
op        tag              numeric           text / geo / vector
========  ===============  ================  ==================
``==``    ``(@a:{v})``     ``@a:[v v]``      ``@a:(v)``
``!=``    ``-`` + ``==``   ``-`` + ``==``    ``-`` + ``==``
``in_``   ``@a:{v1|v2}``   OR of ``[v v]``   OR of ``(v)``
========  ===============  ================  ==================

Range operators (``>``, ``>=``, ``<``, ``<=``, ``between``) only apply to
numeric fields. Strict bounds on integer fields move by one; strict bounds on
float and date fields use the exclusive ``(`` form.
"""

from __future__ import annotations

from typing import Any, Callable, Iterable

from pydantic import BaseModel

from redis_json_om.exceptions import FieldNotIndexed, InvalidIndexTypeForOperator
from redis_json_om.schema.compiler import find_field
from redis_json_om.schema.fields import FieldDescriptor
from redis_json_om.schema.index_types import IndexType
from redis_json_om.search.predicates import Predicate
from redis_json_om.search.values import format_number, is_integral, numeric_value, render_value
from redis_json_om.types import GeoFilter


class FieldRef:
    """Reference to a (possibly nested) field of a record type.

    Nested fields whose names clash with attributes of this class (``name``,
    ``path``, ``between``...) are reached with item access: ``ref["name"]``.
    """

    __slots__ = ("model", "path")

    def __init__(self, model: type[BaseModel], path: tuple[str, ...]) -> None:
        self.model = model
        self.path = path

    @property
    def name(self) -> str:
        return ".".join(self.path)

    def __getattr__(self, item: str) -> FieldRef:
        if item.startswith("_"):
            raise AttributeError(item)
        return FieldRef(self.model, (*self.path, item))

    def __getitem__(self, item: str) -> FieldRef:
        return FieldRef(self.model, (*self.path, item))

    def __repr__(self) -> str:
        return f"FieldRef({self.model.__name__}.{self.name})"

    def resolve(self) -> FieldDescriptor:
        """Return the schema leaf this reference points to."""

        descriptor = find_field(self.model, self.name)
        if descriptor is None:
            raise FieldNotIndexed(self.model.__name__, self.name)
        return descriptor

    def _predicate(self, build: Callable[[FieldDescriptor], str]) -> Predicate:
        return Predicate(self.model, lambda: build(self.resolve()))

    def __eq__(self, value: Any) -> Predicate:  # type: ignore[override]
        return self._predicate(lambda field: _equals(field, value))

    def __ne__(self, value: Any) -> Predicate:  # type: ignore[override]
        return self._predicate(lambda field: f"-{_equals(field, value)}")

    __hash__ = None  # type: ignore[assignment]

    def __gt__(self, value: Any) -> Predicate:
        return self._predicate(lambda field: _range(field, _lower(field, value, strict=True), "+inf"))

    def __ge__(self, value: Any) -> Predicate:
        return self._predicate(lambda field: _range(field, _lower(field, value, strict=False), "+inf"))

    def __lt__(self, value: Any) -> Predicate:
        return self._predicate(lambda field: _range(field, "-inf", _upper(field, value, strict=True)))

    def __le__(self, value: Any) -> Predicate:
        return self._predicate(lambda field: _range(field, "-inf", _upper(field, value, strict=False)))

    def between(self, low: Any | None, high: Any | None) -> Predicate:
        """Inclusive numeric range; a ``None`` bound is open-ended."""

        def build(field: FieldDescriptor) -> str:
            lower = "-inf" if low is None else _lower(field, low, strict=False)
            upper = "+inf" if high is None else _upper(field, high, strict=False)
            return _range(field, lower, upper)

        return self._predicate(build)

    def in_(self, values: Iterable[Any]) -> Predicate:
        """Match any of ``values``."""

        options = tuple(values)
        if not options:
            raise ValueError(f"Membership test on {self.name} needs at least one value")

        def build(field: FieldDescriptor) -> str:
            if field.index_type is IndexType.TAG:
                rendered = "|".join(render_value(value, field.index_type, field.alias) for value in options)
                return f"@{field.alias}:{{{rendered}}}"
            terms = [_equals(field, value) for value in options]
            if len(terms) == 1:
                return terms[0]
            return "(" + " | ".join(terms) + ")"

        return self._predicate(build)

    def within(self, geo_filter: GeoFilter) -> Predicate:
        """Match points inside a radius around ``geo_filter.origin``."""

        def build(field: FieldDescriptor) -> str:
            if field.index_type is not IndexType.GEO:
                raise InvalidIndexTypeForOperator(field.alias, field.index_type.value, "geo")
            origin = geo_filter.origin
            return (
                f"@{field.alias}:[{format_number(origin.longitude)} {format_number(origin.latitude)} "
                f"{format_number(geo_filter.radius)} {geo_filter.unit.value}]"
            )

        return self._predicate(build)


class FieldRefs:
    """Attribute-style access to the field references of one record type."""

    __slots__ = ("model",)

    def __init__(self, model: type[BaseModel]) -> None:
        self.model = model

    def __getattr__(self, item: str) -> FieldRef:
        if item.startswith("_"):
            raise AttributeError(item)
        return FieldRef(self.model, (item,))

    def __getitem__(self, item: str) -> FieldRef:
        return FieldRef(self.model, tuple(item.split(".")))

    def __repr__(self) -> str:
        return f"FieldRefs({self.model.__name__})"


def _equals(field: FieldDescriptor, value: Any) -> str:
    rendered = render_value(value, field.index_type, field.alias)
    if field.index_type is IndexType.TAG:
        return f"(@{field.alias}:{{{rendered}}})"
    if field.index_type is IndexType.NUMERIC:
        return f"@{field.alias}:[{rendered} {rendered}]"
    return f"@{field.alias}:({rendered})"


def _range(field: FieldDescriptor, lower: str, upper: str) -> str:
    return f"@{field.alias}:[{lower} {upper}]"


def _require_numeric(field: FieldDescriptor) -> None:
    if field.index_type is not IndexType.NUMERIC:
        raise InvalidIndexTypeForOperator(field.alias, field.index_type.value, "numeric")


def _lower(field: FieldDescriptor, value: Any, *, strict: bool) -> str:
    _require_numeric(field)
    number = numeric_value(value, field.alias)
    if not strict:
        return format_number(number)
    if field.integral and is_integral(number):
        return format_number(number + 1)
    return f"({format_number(number)}"


def _upper(field: FieldDescriptor, value: Any, *, strict: bool) -> str:
    _require_numeric(field)
    number = numeric_value(value, field.alias)
    if not strict:
        return format_number(number)
    if field.integral and is_integral(number):
        return format_number(number - 1)
    return f"({format_number(number)}"

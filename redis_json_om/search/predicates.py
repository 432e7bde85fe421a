"""Deferred, composable query fragments."""

from __future__ import annotations

from typing import Callable

from pydantic import BaseModel

from redis_json_om.exceptions import PredicateModelMismatch


class Predicate:
    """A boolean query fragment bound to one record type.

    Rendering is deferred: schema lookups, and therefore ``FieldNotIndexed``
    or ``InvalidIndexTypeForOperator`` errors, only happen in ``render()``.
    """

    __slots__ = ("model", "_render")

    def __init__(self, model: type[BaseModel], render: Callable[[], str]) -> None:
        self.model = model
        self._render = render

    def render(self) -> str:
        return self._render()

    def __repr__(self) -> str:
        return f"Predicate(model={self.model.__name__})"

    def _check_model(self, other: Predicate) -> None:
        if other.model is not self.model:
            raise PredicateModelMismatch(self.model.__name__, other.model.__name__)

    def and_(self, other: Predicate) -> Predicate:
        self._check_model(other)
        return Predicate(self.model, lambda: f"({self.render()} {other.render()})")

    def or_(self, other: Predicate) -> Predicate:
        self._check_model(other)
        return Predicate(self.model, lambda: f"({self.render()} | {other.render()})")

    def not_(self) -> Predicate:
        return Predicate(self.model, lambda: f"(-{self.render()})")

    __and__ = and_
    __or__ = or_
    __invert__ = not_


def and_(first: Predicate, *others: Predicate) -> Predicate:
    """Conjunction of one or more predicates, nested left to right."""

    combined = first
    for other in others:
        combined = combined.and_(other)
    return combined


def or_(first: Predicate, *others: Predicate) -> Predicate:
    """Disjunction of one or more predicates, nested left to right."""

    combined = first
    for other in others:
        combined = combined.or_(other)
    return combined


def not_(predicate: Predicate) -> Predicate:
    return predicate.not_()

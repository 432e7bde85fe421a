"""Immutable search query builder.

Usage::

    adults = (
        User.find(client)
        .where(User.fields.age >= 18)
        .sort_by(User.fields.age, descending=True)
        .limit(0, 20)
        .execute()
    )
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any, Generic, TypeVar

import redis

from redis_json_om.db.client import CommandExecutor
from redis_json_om.exceptions import PredicateModelMismatch, QueryExecutionError
from redis_json_om.search.field_refs import FieldRef
from redis_json_om.search.predicates import Predicate
from redis_json_om.search.results import decode_search_response, search_total

if TYPE_CHECKING:
    from redis_json_om.models.base import JsonModel

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound="JsonModel")

MATCH_ALL = "*"


@dataclass(frozen=True, slots=True)
class QueryBuilder(Generic[ModelT]):
    """Accumulates a predicate, a result window and a sort order.

    Every method returns a new builder; nothing is rendered or sent until
    ``build_query``, ``execute``, ``count`` or ``first`` is called.
    """

    model: type[ModelT]
    client: CommandExecutor
    predicate: Predicate | None = None
    window: tuple[int, int] | None = None
    sort: tuple[FieldRef, bool] | None = None

    def _checked(self, predicate: Predicate) -> Predicate:
        if predicate.model is not self.model:
            raise PredicateModelMismatch(self.model.__name__, predicate.model.__name__)
        return predicate

    def where(self, predicate: Predicate) -> QueryBuilder[ModelT]:
        """Filter by ``predicate``, replacing any filter already set."""

        return replace(self, predicate=self._checked(predicate))

    def and_(self, predicate: Predicate) -> QueryBuilder[ModelT]:
        predicate = self._checked(predicate)
        if self.predicate is not None:
            predicate = self.predicate.and_(predicate)
        return replace(self, predicate=predicate)

    def or_(self, predicate: Predicate) -> QueryBuilder[ModelT]:
        predicate = self._checked(predicate)
        if self.predicate is not None:
            predicate = self.predicate.or_(predicate)
        return replace(self, predicate=predicate)

    def limit(self, offset: int, count: int) -> QueryBuilder[ModelT]:
        if offset < 0 or count < 0:
            raise ValueError("offset and count must be non-negative")
        return replace(self, window=(offset, count))

    def sort_by(self, field: FieldRef, *, descending: bool = False) -> QueryBuilder[ModelT]:
        """Order results by a sortable field."""

        if field.model is not self.model:
            raise PredicateModelMismatch(self.model.__name__, field.model.__name__)
        return replace(self, sort=(field, descending))

    def build_query(self) -> str:
        """Render the query string; ``*`` when no predicate is set."""

        if self.predicate is None:
            return MATCH_ALL
        return self.predicate.render()

    def build_command(self, *, window: tuple[int, int] | None = None) -> list[Any]:
        """Return the full ``FT.SEARCH`` argument list."""

        args: list[Any] = ["FT.SEARCH", self.model.index_name, self.build_query()]
        window = window if window is not None else self.window
        if window is not None:
            args.extend(["LIMIT", window[0], window[1]])
        if self.sort is not None:
            field, descending = self.sort
            args.extend(["SORTBY", field.resolve().alias, "DESC" if descending else "ASC"])
        return args

    def execute(self) -> list[ModelT]:
        """Run the search and decode every returned document."""

        return decode_search_response(self.model, self._search(self.build_command()))

    def count(self) -> int:
        """Return the number of matching documents without fetching them."""

        return search_total(self._search(self.build_command(window=(0, 0))))

    def first(self) -> ModelT | None:
        offset = self.window[0] if self.window is not None else 0
        records = decode_search_response(self.model, self._search(self.build_command(window=(offset, 1))))
        return records[0] if records else None

    def _search(self, args: list[Any]) -> Any:
        logger.debug("redis_om.search index=%s query=%s", args[1], args[2])
        try:
            return self.client.execute_command(*args)
        except redis.RedisError as exc:
            logger.exception("redis_om.search_failed index=%s query=%s", args[1], args[2])
            raise QueryExecutionError(f"FT.SEARCH {args[1]} failed: {exc}") from exc

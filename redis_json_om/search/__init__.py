"""Predicates, query building and search result decoding."""

from redis_json_om.search.field_refs import FieldRef, FieldRefs
from redis_json_om.search.predicates import Predicate, and_, not_, or_
from redis_json_om.search.query import QueryBuilder
from redis_json_om.search.results import decode_search_response, search_total
from redis_json_om.search.values import escape_tag_value, render_value

__all__ = [
    "FieldRef",
    "FieldRefs",
    "Predicate",
    "QueryBuilder",
    "and_",
    "decode_search_response",
    "escape_tag_value",
    "not_",
    "or_",
    "render_value",
    "search_total",
]

"""Unit tests for schema compilation and alias flattening."""

from __future__ import annotations

import unittest

from sample_models import (
    Address,
    Badge,
    BareVector,
    Clash,
    Embedding,
    Household,
    Misconfigured,
    Node,
    Notebook,
    Profile,
    ScoreBoard,
    Tree,
    User,
)

from redis_json_om.exceptions import CyclicSchemaError, DuplicateFieldAlias, SchemaError, SchemaFlatteningUnsupported
from redis_json_om.schema import IndexType, compile_schema, find_field, to_alias


def _summary(model) -> list[tuple[str, str, str, IndexType]]:
    return [(field.name, field.alias, field.query_path, field.index_type) for field in compile_schema(model)]


class SchemaCompilerTests(unittest.TestCase):
    def test_user_schema_lists_indexed_leaves_in_declaration_order(self) -> None:
        self.assertEqual(
            _summary(User),
            [
                ("id", "id", "$.id", IndexType.TAG),
                ("name", "name", "$.name", IndexType.TEXT),
                ("email", "email", "$.email", IndexType.TAG),
                ("age", "age", "$.age", IndexType.NUMERIC),
                ("score", "score", "$.score", IndexType.NUMERIC),
                ("active", "active", "$.active", IndexType.TAG),
                ("tags", "tags", "$.tags[*]", IndexType.TAG),
                ("address.city", "address__city", "$.address.city", IndexType.TAG),
                ("joined_at", "joined_at", "$.joined_at", IndexType.NUMERIC),
                ("location", "location", "$.location", IndexType.GEO),
                ("plan", "plan", "$.plan", IndexType.TAG),
            ],
        )

    def test_unmarked_fields_are_not_indexed(self) -> None:
        self.assertIsNone(find_field(User, "nickname"))
        self.assertIsNone(find_field(Address, "street"))

    def test_compilation_is_deterministic(self) -> None:
        first = compile_schema(User)
        compile_schema.cache_clear()
        second = compile_schema(User)
        self.assertEqual(first, second)
        self.assertIs(compile_schema(User), second)

    def test_sortable_option_is_emitted_in_schema_clause(self) -> None:
        age = find_field(User, "age")
        self.assertEqual(age.schema_clause(), ["$.age", "AS", "age", "NUMERIC", "SORTABLE"])
        self.assertEqual(find_field(User, "email").schema_clause(), ["$.email", "AS", "email", "TAG"])

    def test_single_nested_record_is_flattened(self) -> None:
        city = find_field(User, "address.city")
        self.assertEqual(city.alias, "address__city")
        self.assertEqual(city.query_path, "$.address.city")
        self.assertEqual(city.index_type, IndexType.TAG)
        self.assertTrue(city.is_leaf)

    def test_array_of_nested_records_uses_array_wildcard(self) -> None:
        self.assertEqual(
            _summary(Household),
            [
                ("id", "id", "$.id", IndexType.TAG),
                ("address.city", "address__city", "$.address[*].city", IndexType.TAG),
            ],
        )

    def test_map_of_records_uses_map_wildcard_and_fallback(self) -> None:
        self.assertEqual(
            _summary(Notebook),
            [
                ("id", "id", "$.id", IndexType.TAG),
                ("title", "title", "$.title", IndexType.TEXT),
                ("notes.description", "notes__description", "$.notes.*.description", IndexType.TEXT),
                ("notes.created_at", "notes__created_at", "$.notes.*.created_at", IndexType.NUMERIC),
                ("attachments", "attachments", "$.attachments", IndexType.TAG),
            ],
        )

    def test_map_of_scalars_is_rejected(self) -> None:
        with self.assertRaises(SchemaFlatteningUnsupported) as ctx:
            compile_schema(ScoreBoard)
        self.assertEqual(ctx.exception.model_name, "ScoreBoard")
        self.assertEqual(ctx.exception.field_name, "scores")
        self.assertIn("ScoreBoard.scores", str(ctx.exception))

    def test_cyclic_nested_records_are_rejected(self) -> None:
        with self.assertRaises(CyclicSchemaError) as ctx:
            compile_schema(Tree)
        self.assertEqual(ctx.exception.chain, ["Tree", "Node", "Node"])

        with self.assertRaises(CyclicSchemaError):
            compile_schema(Node)

    def test_duplicate_aliases_are_rejected(self) -> None:
        with self.assertRaises(DuplicateFieldAlias) as ctx:
            compile_schema(Clash)
        self.assertEqual(ctx.exception.alias, "address__city")
        self.assertEqual(ctx.exception.paths, ("$.address__city", "$.address.city"))

    def test_vector_field_carries_algorithm_options(self) -> None:
        vector = find_field(Embedding, "vector")
        self.assertEqual(vector.query_path, "$.vector")
        self.assertEqual(
            vector.schema_clause(),
            ["$.vector", "AS", "vector", "VECTOR", "FLAT", "6", "TYPE", "FLOAT32", "DIM", "3", "DISTANCE_METRIC", "L2"],
        )

    def test_vector_field_without_dimension_is_rejected(self) -> None:
        with self.assertRaises(SchemaError) as ctx:
            compile_schema(BareVector)
        self.assertIn("BareVector.vector", str(ctx.exception))

    def test_index_type_names_are_case_insensitive(self) -> None:
        self.assertIs(find_field(Badge, "label").index_type, IndexType.TAG)

    def test_unknown_index_type_is_a_schema_error(self) -> None:
        with self.assertRaises(SchemaError) as ctx:
            compile_schema(Misconfigured)
        self.assertIn("'keyword'", str(ctx.exception))
        self.assertIn("Misconfigured.label", str(ctx.exception))

    def test_integer_numeric_fields_are_marked_integral(self) -> None:
        self.assertTrue(find_field(User, "age").integral)
        self.assertFalse(find_field(User, "score").integral)
        self.assertFalse(find_field(User, "joined_at").integral)
        self.assertFalse(find_field(User, "id").integral)

    def test_serialization_alias_drives_the_json_path(self) -> None:
        display = find_field(Profile, "display")
        self.assertEqual(display.query_path, "$.displayName")
        self.assertEqual(display.alias, "displayName")

    def test_to_alias_strips_root_and_wildcards(self) -> None:
        self.assertEqual(to_alias("$.name"), "name")
        self.assertEqual(to_alias("$.address[*].city"), "address__city")
        self.assertEqual(to_alias("$.notes.*.description"), "notes__description")
        self.assertEqual(to_alias("$.a.b.c"), "a__b__c")


if __name__ == "__main__":
    unittest.main()

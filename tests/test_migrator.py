"""Unit tests for search index migration."""

from __future__ import annotations

import unittest

import redis
from fake_redis import FakeRedis
from sample_models import Address, BareVector, Embedding, Household, Notebook, ScoreBoard, Tree, User

from redis_json_om.exceptions import (
    CyclicSchemaError,
    IndexOperationFailed,
    MigrationFailed,
    SchemaError,
    SchemaFlatteningUnsupported,
)
from redis_json_om.services.index_info import inspect_index
from redis_json_om.services.migrator import Migrator, create_index_command


class MigratorTests(unittest.TestCase):
    def setUp(self) -> None:
        self.redis = FakeRedis()
        self.migrator = Migrator(self.redis)

    def test_create_index_command_declares_json_prefix_and_schema(self) -> None:
        self.assertEqual(
            create_index_command(Household),
            [
                "FT.CREATE",
                "idx:Household",
                "ON",
                "JSON",
                "PREFIX",
                1,
                "household:",
                "SCHEMA",
                "$.id",
                "AS",
                "id",
                "TAG",
                "$.address[*].city",
                "AS",
                "address__city",
                "TAG",
            ],
        )
        self.assertEqual(create_index_command(Notebook)[6], "nb:")

    def test_migrate_creates_one_index_per_model(self) -> None:
        created = self.migrator.migrate([User, Household, Embedding])

        self.assertEqual(created, ["idx:User", "idx:Household", "idx:Embedding"])
        info = inspect_index(self.redis, "idx:User")
        self.assertEqual(info.prefixes, ["user:"])
        self.assertEqual(info.key_type, "JSON")
        self.assertEqual(info.attribute("address__city").identifier, "$.address.city")
        self.assertTrue(info.attribute("age").sortable)

    def test_migrate_twice_keeps_schema_and_documents(self) -> None:
        self.migrator.migrate([User])
        first = inspect_index(self.redis, "idx:User")
        user = User(name="Ann", email="ann@example.com", age=41)
        user.save(self.redis)
        documents = dict(self.redis.documents)

        self.migrator.migrate([User])

        self.assertEqual(inspect_index(self.redis, "idx:User").attributes, first.attributes)
        self.assertEqual(self.redis.documents, documents)
        self.assertEqual(User.get(self.redis, user.id), user)
        dropped = [command for command in self.redis.commands if command[0] == "FT.DROPINDEX"]
        self.assertEqual(dropped, [("FT.DROPINDEX", "idx:User")])

    def test_records_without_persistence_are_skipped(self) -> None:
        self.assertEqual(self.migrator.migrate([Address]), [])
        self.assertEqual(self.redis.indexes, {})

    def test_single_failure_is_raised_after_other_models_migrate(self) -> None:
        with self.assertRaises(SchemaFlatteningUnsupported):
            self.migrator.migrate([ScoreBoard, User])
        self.assertIn("idx:User", self.redis.indexes)

    def test_vector_without_dimension_fails_without_blocking_others(self) -> None:
        with self.assertRaises(SchemaError):
            self.migrator.migrate([BareVector, User])
        self.assertNotIn("idx:BareVector", self.redis.indexes)
        self.assertIn("idx:User", self.redis.indexes)

    def test_several_failures_are_aggregated(self) -> None:
        with self.assertRaises(MigrationFailed) as ctx:
            self.migrator.migrate([ScoreBoard, Tree, User])
        errors = ctx.exception.errors
        self.assertEqual(len(errors), 2)
        self.assertIsInstance(errors[0], SchemaFlatteningUnsupported)
        self.assertIsInstance(errors[1], CyclicSchemaError)
        self.assertIn("idx:User", self.redis.indexes)

    def test_store_rejection_becomes_index_operation_failed(self) -> None:
        self.redis.fail("FT.CREATE", redis.ResponseError("Unknown argument"))
        with self.assertRaises(IndexOperationFailed) as ctx:
            self.migrator.migrate([User])
        self.assertEqual(ctx.exception.index_name, "idx:User")
        self.assertEqual(ctx.exception.command, "FT.CREATE")
        self.assertIsInstance(ctx.exception.__cause__, redis.ResponseError)

    def test_drop_keeps_documents(self) -> None:
        self.assertFalse(self.migrator.drop(User))
        self.migrator.migrate([User])
        User(name="Ann", email="ann@example.com", age=41).save(self.redis)

        self.assertTrue(self.migrator.drop(User))
        self.assertNotIn("idx:User", self.redis.indexes)
        self.assertEqual(len(self.redis.documents), 1)


if __name__ == "__main__":
    unittest.main()

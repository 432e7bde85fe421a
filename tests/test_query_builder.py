"""Unit tests for the immutable query builder."""

from __future__ import annotations

import unittest

import redis
from fake_redis import FakeRedis
from sample_models import Address, Household, User

from redis_json_om.exceptions import FieldNotIndexed, PredicateModelMismatch, QueryExecutionError
from redis_json_om.search.query import QueryBuilder
from redis_json_om.services.migrator import Migrator


class QueryBuilderTests(unittest.TestCase):
    def setUp(self) -> None:
        self.redis = FakeRedis()
        Migrator(self.redis).migrate([User])
        self.users = [
            User(id="u1", name="Ann", email="ann@example.com", age=41),
            User(id="u2", name="Bob", email="bob@example.com", age=29, address=Address(city="Oslo")),
            User(id="u3", name="Cid", email="cid@example.com", age=35),
        ]
        for user in self.users:
            user.save(self.redis)

    def test_empty_builder_matches_everything(self) -> None:
        builder = User.find(self.redis)
        self.assertIsInstance(builder, QueryBuilder)
        self.assertEqual(builder.build_query(), "*")
        self.assertEqual(builder.build_command(), ["FT.SEARCH", "idx:User", "*"])

    def test_builder_methods_return_copies(self) -> None:
        base = User.find(self.redis)
        filtered = base.where(User.fields.age > 40)
        windowed = filtered.limit(5, 10)

        self.assertIsNone(base.predicate)
        self.assertIsNone(filtered.window)
        self.assertEqual(filtered.build_query(), "@age:[41 +inf]")
        self.assertEqual(windowed.window, (5, 10))

    def test_where_replaces_and_and_combines(self) -> None:
        replaced = User.find(self.redis).where(User.fields.age > 40).where(User.fields.email == "x")
        self.assertEqual(replaced.build_query(), "(@email:{x})")
        both = User.find(self.redis).where(User.fields.age > 40).and_(User.fields.email == "x")
        self.assertEqual(both.build_query(), "(@age:[41 +inf] (@email:{x}))")
        either = User.find(self.redis).where(User.fields.age > 40).or_(User.fields.age < 30)
        self.assertEqual(either.build_query(), "(@age:[41 +inf] | @age:[-inf 29])")

    def test_and_without_a_filter_sets_it(self) -> None:
        builder = User.find(self.redis).and_(User.fields.age >= 18)
        self.assertEqual(builder.build_query(), "@age:[18 +inf]")

    def test_limit_and_sort_are_added_to_the_command(self) -> None:
        builder = User.find(self.redis).limit(0, 10).sort_by(User.fields.age, descending=True)
        self.assertEqual(
            builder.build_command(),
            ["FT.SEARCH", "idx:User", "*", "LIMIT", 0, 10, "SORTBY", "age", "DESC"],
        )
        ascending = User.find(self.redis).sort_by(User.fields.address.city)
        self.assertEqual(ascending.build_command()[-3:], ["SORTBY", "address__city", "ASC"])

    def test_limit_rejects_negative_window(self) -> None:
        with self.assertRaises(ValueError):
            User.find(self.redis).limit(-1, 5)

    def test_where_rejects_predicates_of_other_models(self) -> None:
        with self.assertRaises(PredicateModelMismatch):
            User.find(self.redis).where(Household.fields.address.city == "Oslo")
        with self.assertRaises(PredicateModelMismatch):
            User.find(self.redis).sort_by(Household.fields.address.city)

    def test_unindexed_field_fails_when_query_is_built(self) -> None:
        builder = User.find(self.redis).where(User.fields.nickname == "x")
        with self.assertRaises(FieldNotIndexed):
            builder.build_query()
        self.assertEqual(self.redis.searches, [])

    def test_execute_decodes_every_returned_document(self) -> None:
        records = User.find(self.redis).where(User.fields.age >= 30).execute()

        self.assertEqual(records, self.users)
        self.assertEqual(self.redis.searches[-1], ("idx:User", "@age:[30 +inf]"))
        self.assertEqual(records[1].address.city, "Oslo")

    def test_execute_applies_result_window(self) -> None:
        records = User.find(self.redis).limit(1, 1).execute()
        self.assertEqual([record.id for record in records], ["u2"])
        self.assertEqual(self.redis.searches[-1], ("idx:User", "*", "LIMIT", 1, 1))

    def test_count_requests_no_documents(self) -> None:
        self.assertEqual(User.find(self.redis).count(), 3)
        self.assertEqual(self.redis.searches[-1], ("idx:User", "*", "LIMIT", 0, 0))

    def test_first_returns_one_record_or_none(self) -> None:
        self.assertEqual(User.find(self.redis).first(), self.users[0])
        self.assertEqual(User.find(self.redis).limit(2, 10).first(), self.users[2])
        self.assertEqual(self.redis.searches[-1], ("idx:User", "*", "LIMIT", 2, 1))
        self.assertIsNone(User.find(self.redis).limit(3, 10).first())

    def test_store_errors_are_wrapped(self) -> None:
        with self.assertRaises(QueryExecutionError) as ctx:
            Household.find(self.redis).execute()
        self.assertIsInstance(ctx.exception.__cause__, redis.ResponseError)

        self.redis.fail("FT.SEARCH", redis.ConnectionError("connection refused"))
        with self.assertRaises(QueryExecutionError):
            User.find(self.redis).count()


if __name__ == "__main__":
    unittest.main()

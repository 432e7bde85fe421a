"""Create and refresh search indexes from compiled record schemas."""

from __future__ import annotations

import logging
from time import perf_counter
from typing import Any, Iterable

import redis

from redis_json_om.db.client import CommandExecutor
from redis_json_om.exceptions import IndexOperationFailed, MigrationFailed, RedisOMError
from redis_json_om.models.base import JsonModel
from redis_json_om.schema.compiler import compile_schema
from redis_json_om.services.index_info import list_indexes

logger = logging.getLogger(__name__)


def create_index_command(model: type[JsonModel]) -> list[Any]:
    """Return the ``FT.CREATE`` arguments for a record type."""

    args: list[Any] = [
        "FT.CREATE",
        model.index_name,
        "ON",
        "JSON",
        "PREFIX",
        1,
        f"{model.key_prefix}:",
        "SCHEMA",
    ]
    for field in compile_schema(model):
        args.extend(field.schema_clause())
    return args


class Migrator:
    """Drops and re-creates one search index per record type.

    Dropping an index never deletes documents, so running ``migrate`` twice
    leaves both the index schema and the stored data unchanged. Between the
    drop and the create there is a short window with no index; direct key
    lookups keep working throughout.
    """

    def __init__(self, client: CommandExecutor) -> None:
        self.client = client

    def migrate(self, models: Iterable[type[JsonModel]]) -> list[str]:
        """Re-create the index of every model and return the created names.

        Every model is attempted. Failures are collected and raised after the
        loop: one failure as itself, several as ``MigrationFailed``.
        """

        created: list[str] = []
        errors: list[RedisOMError] = []
        for model in models:
            try:
                if self._migrate_one(model):
                    created.append(model.index_name)
            except RedisOMError as exc:
                logger.exception("redis_om.migrate.failed model=%s", model.__name__)
                errors.append(exc)

        if len(errors) == 1:
            raise errors[0]
        if errors:
            raise MigrationFailed(errors)
        return created

    def drop(self, model: type[JsonModel]) -> bool:
        """Drop the model's index if present; documents are kept."""

        if model.index_name not in list_indexes(self.client):
            return False
        self._execute(model.index_name, "FT.DROPINDEX", model.index_name)
        logger.info("redis_om.migrate.dropped index=%s", model.index_name)
        return True

    def _migrate_one(self, model: type[JsonModel]) -> bool:
        started = perf_counter()
        if not (isinstance(model, type) and issubclass(model, JsonModel)):
            logger.info("redis_om.migrate.skipped model=%s reason=not_persisted", getattr(model, "__name__", model))
            return False
        schema = compile_schema(model)
        if not schema:
            logger.info("redis_om.migrate.skipped model=%s reason=empty_schema", model.__name__)
            return False

        self.drop(model)
        self._execute(model.index_name, *create_index_command(model))
        logger.info(
            "redis_om.migrate.created index=%s fields=%d elapsed_ms=%.2f",
            model.index_name,
            len(schema),
            (perf_counter() - started) * 1000.0,
        )
        return True

    def _execute(self, index_name: str, *args: Any) -> Any:
        try:
            return self.client.execute_command(*args)
        except redis.RedisError as exc:
            raise IndexOperationFailed(index_name, str(args[0]), str(exc)) from exc

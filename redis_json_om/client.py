"""Client facade wiring a store connection, registered models and the migrator."""

from __future__ import annotations

import logging
from typing import Any, TypeVar

from redis_json_om.config import RedisConnectionConfig, Settings, get_settings
from redis_json_om.db.client import CommandExecutor, create_client
from redis_json_om.models.base import JsonModel
from redis_json_om.search.query import QueryBuilder
from redis_json_om.services.migrator import Migrator

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=JsonModel)


class RedisOM:
    """Holds one client and the record types whose indexes it manages.

    >>> om = RedisOM.from_url("redis://localhost:6379/0")  # doctest: +SKIP
    >>> om.register(User)  # doctest: +SKIP
    >>> om.migrate()  # doctest: +SKIP
    """

    def __init__(self, client: CommandExecutor) -> None:
        self.client = client
        self._models: list[type[JsonModel]] = []

    @classmethod
    def from_url(cls, url: str, *, settings: Settings | None = None) -> RedisOM:
        return cls(create_client(RedisConnectionConfig.from_url(url), settings=settings))

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> RedisOM:
        """Connect using ``REDIS_URL`` and the other environment settings."""

        return cls(create_client(settings=settings or get_settings()))

    @property
    def registered_models(self) -> tuple[type[JsonModel], ...]:
        return tuple(self._models)

    def register(self, *models: type[ModelT]) -> None:
        for model in models:
            if model not in self._models:
                self._models.append(model)

    def migrate(self) -> list[str]:
        """Re-create the search index of every registered model."""

        created = Migrator(self.client).migrate(self._models)
        logger.info("redis_om.migrations_completed models=%d created=%d", len(self._models), len(created))
        return created

    def find(self, model: type[ModelT]) -> QueryBuilder[ModelT]:
        return QueryBuilder(model, self.client)

    def close(self) -> None:
        close = getattr(self.client, "close", None)
        if callable(close):
            close()

    def __enter__(self) -> RedisOM:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

"""Store client construction and reply helpers."""

from __future__ import annotations

from typing import Any, Protocol

import redis

from redis_json_om.config import RedisConnectionConfig, Settings, get_settings


class CommandExecutor(Protocol):
    """The slice of a Redis client this package relies on.

    ``redis.Redis`` satisfies it as-is; replies are expected in RESP2 shape.
    """

    def execute_command(self, *args: Any, **options: Any) -> Any:
        """Send one command and return its parsed reply."""


def create_client(
    config: RedisConnectionConfig | None = None,
    *,
    settings: Settings | None = None,
) -> redis.Redis:
    """Build a redis-py client from explicit config or environment settings."""

    active_settings = settings or get_settings()
    if config is None:
        config = RedisConnectionConfig.from_url(active_settings.redis_url)
    return redis.Redis(
        host=config.host,
        port=config.port,
        db=config.database or 0,
        username=config.username,
        password=config.password,
        ssl=config.use_tls,
        socket_timeout=active_settings.redis_socket_timeout_seconds,
        decode_responses=True,
    )


def as_text(value: Any) -> str:
    """Return a reply element as ``str`` whether or not responses are decoded."""

    if isinstance(value, bytes):
        return value.decode("utf-8")
    return str(value)

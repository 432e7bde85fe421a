"""Connection configuration."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from urllib.parse import unquote, urlsplit

from pydantic_settings import BaseSettings, SettingsConfigDict

from redis_json_om.exceptions import ConfigurationError

DEFAULT_REDIS_PORT = 6379
_SUPPORTED_SCHEMES = ("redis", "rediss")


class Settings(BaseSettings):
    """Runtime settings loaded from environment variables."""

    redis_url: str = "redis://localhost:6379"
    redis_scan_batch_size: int = 100
    redis_socket_timeout_seconds: float | None = None

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""

    return Settings()


@dataclass(frozen=True, slots=True)
class RedisConnectionConfig:
    """Parsed form of a ``redis://`` or ``rediss://`` URL."""

    host: str
    port: int = DEFAULT_REDIS_PORT
    username: str | None = None
    password: str | None = None
    database: int | None = None
    use_tls: bool = False

    @classmethod
    def from_url(cls, url: str) -> RedisConnectionConfig:
        """Validate a connection URL and split it into its parts.

        The path segment, when present, selects the numeric database.
        """

        parts = urlsplit(url.strip())
        if not parts.scheme:
            raise ConfigurationError(f"Missing URL scheme in Redis URL: {url!r}")
        if parts.scheme not in _SUPPORTED_SCHEMES:
            raise ConfigurationError(f"Invalid URL scheme {parts.scheme!r}; expected redis or rediss")
        if not parts.hostname:
            raise ConfigurationError(f"Missing host in Redis URL: {url!r}")
        try:
            port = parts.port or DEFAULT_REDIS_PORT
        except ValueError as exc:
            raise ConfigurationError(f"Invalid port in Redis URL: {url!r}") from exc

        return cls(
            host=parts.hostname,
            port=port,
            username=unquote(parts.username) if parts.username else None,
            password=unquote(parts.password) if parts.password else None,
            database=_parse_database(parts.path, url),
            use_tls=parts.scheme == "rediss",
        )


def _parse_database(path: str, url: str) -> int | None:
    segment = path.strip("/")
    if not segment:
        return None
    if not segment.isdigit():
        raise ConfigurationError(f"Database selector must be a non-negative integer in {url!r}")
    return int(segment)

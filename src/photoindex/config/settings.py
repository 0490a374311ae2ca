"""Application settings — Pydantic-based configuration with YAML and env var support.

Configuration is loaded from (in order of precedence):
  1. YAML config file (when loaded via ``Settings.from_yaml``)
  2. Environment variables (PHOTOINDEX_ prefix)
  3. Default values
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings


class IndexSettings(BaseModel):
    """Search engine connection and schema configuration."""

    hosts: list[str] = Field(default_factory=lambda: ["http://localhost:9200"], description="Search engine node URLs")
    prefix: str = Field(default="photoindex", description="Prefix for every index name")
    username: str | None = Field(default=None, description="HTTP basic-auth username")
    password: str | None = Field(default=None, description="HTTP basic-auth password")
    verify_certs: bool = Field(default=True, description="Verify TLS certificates")
    synonyms_path: Path | None = Field(
        default=None,
        description="Synonym file for the english analyzer (None = bundled list)",
    )

    @field_validator("hosts", mode="before")
    @classmethod
    def _parse_hosts(cls, v: Any) -> list[str]:
        """Parse hosts from JSON string (env var) or list."""
        if isinstance(v, str):
            import json

            try:
                parsed = json.loads(v)
                if isinstance(parsed, list):
                    return [str(h) for h in parsed]
            except (json.JSONDecodeError, TypeError):
                pass
            # Single host as plain string
            return [v] if v else []
        return list(v)


class InstagramSettings(BaseModel):
    access_token: str = Field(default="", description="Instagram API access token")
    base_url: str = Field(default="https://api.instagram.com/v1", description="Instagram API base URL")


class FlickrSettings(BaseModel):
    api_key: str = Field(default="", description="Flickr API key")
    base_url: str = Field(default="https://api.flickr.com/services/rest", description="Flickr REST endpoint")


class SourceSettings(BaseModel):
    """Upstream photo API configuration."""

    instagram: InstagramSettings = Field(default_factory=InstagramSettings)
    flickr: FlickrSettings = Field(default_factory=FlickrSettings)
    timeout: float = Field(default=30.0, gt=0, description="HTTP timeout for upstream calls in seconds")


class QueueSettings(BaseModel):
    """Job queue configuration.

    ``max_tries`` bounds how often a single import job is attempted when its
    upstream fetch fails transiently. Retries back off exponentially from
    ``backoff_base`` seconds, capped at ``backoff_max``.
    """

    redis_url: str = Field(default="redis://localhost:6379/0", description="Redis URL for the job queue")
    max_tries: int = Field(default=5, ge=1, description="Attempts per import job")
    backoff_base: float = Field(default=30.0, gt=0, description="First retry delay in seconds")
    backoff_max: float = Field(default=3600.0, gt=0, description="Upper bound for a retry delay in seconds")
    job_timeout: int = Field(default=600, gt=0, description="Hard timeout per job in seconds")
    refresh_hours: set[int] = Field(default_factory=lambda: {0, 12}, description="Hours (UTC) at which sweeps run")


class ObservabilitySettings(BaseModel):
    """Observability configuration."""

    log_level: str = Field(default="info", description="Log level: debug, info, warning, error")
    log_format: str = Field(default="json", description="Log format: json, console")


class Settings(BaseSettings):
    """Root application settings.

    Configuration is loaded from environment variables with the PHOTOINDEX_ prefix.
    Nested settings use double underscores: PHOTOINDEX_QUEUE__MAX_TRIES=3

    Example:
        PHOTOINDEX_INDEX__HOSTS='["http://es1:9200", "http://es2:9200"]'
        PHOTOINDEX_SOURCES__FLICKR__API_KEY=abc123
        PHOTOINDEX_OBSERVABILITY__LOG_FORMAT=console
    """

    model_config = {
        "env_prefix": "PHOTOINDEX_",
        "env_nested_delimiter": "__",
        "case_sensitive": False,
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }

    app_name: str = Field(default="photoindex", description="Application name")
    debug: bool = Field(default=False, description="Debug mode")

    index: IndexSettings = Field(default_factory=IndexSettings)
    sources: SourceSettings = Field(default_factory=SourceSettings)
    queue: QueueSettings = Field(default_factory=QueueSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)

    @classmethod
    def from_yaml(cls, path: str | Path) -> Settings:
        """Load settings from a YAML configuration file.

        Values from the YAML file are passed as init arguments, so they win
        over environment variables for the keys they set.

        Args:
            path: Path to the YAML config file.

        Returns:
            Populated Settings instance.
        """
        import yaml  # type: ignore[import-untyped]

        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path) as f:
            data = yaml.safe_load(f) or {}

        return cls(**data)

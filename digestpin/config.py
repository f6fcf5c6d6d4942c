import logging
import os
import sys
from collections.abc import Mapping
from contextvars import ContextVar
from pathlib import Path
from typing import Any

import logfire
import yaml
from pydantic import BaseModel, Field, ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from digestpin.domain.shared.error import ConfigurationError

CONFIG_FILE_ENV = "DIGESTPIN_CONFIG_FILE"

# Config file chosen by Config.load, taking precedence over CONFIG_FILE_ENV
_config_file: ContextVar[Path | None] = ContextVar("digestpin_config_file", default=None)


# =============================================================================
# Registry / Resolver Configuration
# =============================================================================


class RegistryConfig(BaseModel):
    """How registry manifest lookups are made."""

    timeout_seconds: float = 10.0  # httpx connect/read/write/pool timeout
    retries: int = Field(default=2, ge=0)  # extra attempts on transient failures
    backoff_seconds: float = Field(default=0.2, ge=0)  # doubled after every attempt
    insecure_hosts: list[str] = []  # registries reached over plain http
    user_agent: str = "digestpin"


class ResolverConfig(BaseModel):
    """How images across a resource collection are resolved."""

    max_concurrency: int = Field(default=16, ge=1)  # simultaneous registry lookups
    lookup_timeout_seconds: float | None = 30.0  # deadline per lookup, retries included
    include_init_containers: bool = True
    fail_on_error: bool = False  # report failures as errors and exit non-zero


# Keys accepted in a ConfigMap functionConfig, mapped onto ResolverConfig
FUNCTION_CONFIG_KEYS = {
    "maxConcurrency": "max_concurrency",
    "lookupTimeoutSeconds": "lookup_timeout_seconds",
    "includeInitContainers": "include_init_containers",
    "failOnError": "fail_on_error",
}


# =============================================================================
# Application Configuration
# =============================================================================


class YamlConfigSettingsSource(PydanticBaseSettingsSource):
    """Load settings from the YAML file given to Config.load or named by DIGESTPIN_CONFIG_FILE."""

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        yaml_data = self._load_yaml_config()
        return yaml_data.get(field_name), field_name, False

    def __call__(self) -> dict[str, Any]:
        return self._load_yaml_config()

    def _load_yaml_config(self) -> dict[str, Any]:
        config_file = _config_file.get() or os.environ.get(CONFIG_FILE_ENV)
        if not config_file:
            return {}
        path = Path(config_file).expanduser()
        if not path.exists():
            raise ConfigurationError(f"Config file not found: {path}")
        data = yaml.safe_load(path.read_text()) or {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file {path} must contain a mapping")
        return data


class LoggingConfig(BaseModel):
    level: str = "WARNING"  # stdout carries the ResourceList, so keep stderr quiet
    format: str = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"
    logfire: bool = True  # spans are only exported when a Logfire token is present


class Config(BaseSettings):
    registry: RegistryConfig = RegistryConfig()
    resolver: ResolverConfig = ResolverConfig()
    logging: LoggingConfig = LoggingConfig()

    model_config = SettingsConfigDict(
        env_prefix="DIGESTPIN_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",  # Allows DIGESTPIN_RESOLVER__MAX_CONCURRENCY override
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customize settings sources to include YAML config.

        Priority (highest to lowest):
        1. init_settings - values passed to Config()
        2. env_settings - environment variables
        3. dotenv_settings - .env file
        4. yaml_settings - DIGESTPIN_CONFIG_FILE yaml
        5. file_secret_settings - secrets from files
        """
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )

    @classmethod
    def load(cls, config_file: Path | None = None) -> "Config":
        """Build Config, reading YAML from ``config_file`` instead of DIGESTPIN_CONFIG_FILE."""
        token = _config_file.set(config_file)
        try:
            return cls()
        finally:
            _config_file.reset(token)

    def with_function_config(self, data: Mapping[str, Any]) -> "Config":
        """Return a copy with resolver settings overridden by functionConfig data.

        Unknown keys are ignored. Values arrive as strings from a ConfigMap
        and are validated by ResolverConfig.
        """
        overrides = {FUNCTION_CONFIG_KEYS[k]: v for k, v in data.items() if k in FUNCTION_CONFIG_KEYS}
        if not overrides:
            return self
        try:
            resolver = ResolverConfig.model_validate({**self.resolver.model_dump(), **overrides})
        except ValidationError as e:
            raise ConfigurationError(f"Invalid functionConfig: {e}") from e
        return self.model_copy(update={"resolver": resolver})


def configure_logging(config: LoggingConfig) -> None:
    """Configure Python logging and logfire based on config.

    Log output always goes to stderr; stdout is reserved for the
    function's ResourceList.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(config.level)

    # Remove existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(config.level)
    handler.setFormatter(logging.Formatter(config.format, datefmt=config.date_format))
    root_logger.addHandler(handler)

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    if config.logfire:
        logfire.configure(send_to_logfire="if-token-present", console=False)
        logfire.instrument_httpx()

    logging.debug("Logging configured: level=%s, logfire=%s", config.level, config.logfire)

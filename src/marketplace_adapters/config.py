"""Configuration for batch execution and API version negotiation.

Values come from keyword arguments, or from the environment (and an optional
``.env`` file) through the ``from_env`` constructors.
"""

import os
import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional

from dotenv import load_dotenv

from .constants import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_CONTINUE_ON_ERROR,
    DEFAULT_DELAY_BETWEEN_BATCHES_MS,
    DEFAULT_INITIAL_RETRY_DELAY_MS,
    DEFAULT_MAX_CONCURRENT_BATCHES,
    DEFAULT_MAX_RETRIES,
    DEFAULT_USE_EXPONENTIAL_BACKOFF,
    SP_API_MODULES,
)
from .utils.backoff import RetryPolicy

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer, got {value!r}") from e


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean, got {value!r}")


@dataclass(frozen=True)
class BatchConfig:
    """Options for one ``BatchExecutor`` run."""

    batch_size: int = DEFAULT_BATCH_SIZE
    delay_between_batches_ms: int = DEFAULT_DELAY_BETWEEN_BATCHES_MS
    max_concurrent_batches: int = DEFAULT_MAX_CONCURRENT_BATCHES
    continue_on_error: bool = DEFAULT_CONTINUE_ON_ERROR
    max_retries: int = DEFAULT_MAX_RETRIES
    initial_retry_delay_ms: int = DEFAULT_INITIAL_RETRY_DELAY_MS
    use_exponential_backoff: bool = DEFAULT_USE_EXPONENTIAL_BACKOFF

    def __post_init__(self) -> None:
        if self.batch_size <= 0:
            raise ValueError(f"batch_size must be positive, got {self.batch_size}")
        if self.max_concurrent_batches <= 0:
            raise ValueError(f"max_concurrent_batches must be positive, got {self.max_concurrent_batches}")
        if self.delay_between_batches_ms < 0:
            raise ValueError(f"delay_between_batches_ms cannot be negative, got {self.delay_between_batches_ms}")

    @classmethod
    def from_env(cls, prefix: str = "MARKETPLACE_BATCH_", dotenv_path: Optional[str] = None) -> "BatchConfig":
        """Read batch settings from the environment.

        Recognized variables (with the default prefix): ``MARKETPLACE_BATCH_SIZE``,
        ``MARKETPLACE_BATCH_DELAY_MS``, ``MARKETPLACE_BATCH_MAX_CONCURRENT``,
        ``MARKETPLACE_BATCH_CONTINUE_ON_ERROR``, ``MARKETPLACE_BATCH_MAX_RETRIES``,
        ``MARKETPLACE_BATCH_INITIAL_RETRY_DELAY_MS`` and
        ``MARKETPLACE_BATCH_EXPONENTIAL_BACKOFF``.
        """
        load_dotenv(dotenv_path)
        return cls(
            batch_size=_env_int(f"{prefix}SIZE", DEFAULT_BATCH_SIZE),
            delay_between_batches_ms=_env_int(f"{prefix}DELAY_MS", DEFAULT_DELAY_BETWEEN_BATCHES_MS),
            max_concurrent_batches=_env_int(f"{prefix}MAX_CONCURRENT", DEFAULT_MAX_CONCURRENT_BATCHES),
            continue_on_error=_env_bool(f"{prefix}CONTINUE_ON_ERROR", DEFAULT_CONTINUE_ON_ERROR),
            max_retries=_env_int(f"{prefix}MAX_RETRIES", DEFAULT_MAX_RETRIES),
            initial_retry_delay_ms=_env_int(f"{prefix}INITIAL_RETRY_DELAY_MS", DEFAULT_INITIAL_RETRY_DELAY_MS),
            use_exponential_backoff=_env_bool(f"{prefix}EXPONENTIAL_BACKOFF", DEFAULT_USE_EXPONENTIAL_BACKOFF),
        )

    def to_policy(self) -> RetryPolicy:
        return RetryPolicy.from_config(self)


def _env_suffix(capability: str) -> str:
    # easyShip -> EASY_SHIP
    return re.sub(r"(?<!^)(?=[A-Z])", "_", capability).upper()


@dataclass(frozen=True)
class VersionConfig:
    """Default API version per capability, injected into a ModuleRegistry.

    Each registry gets its own instance so one tenant's overrides never leak
    into another connection.
    """

    defaults: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "defaults", MappingProxyType(dict(self.defaults)))

    def default_for(self, capability: str) -> Optional[str]:
        return self.defaults.get(capability)

    def with_overrides(self, overrides: Mapping[str, str]) -> "VersionConfig":
        merged = dict(self.defaults)
        merged.update(overrides)
        return VersionConfig(merged)

    @classmethod
    def from_module_definitions(cls, overrides: Optional[Mapping[str, str]] = None) -> "VersionConfig":
        defaults = {name: definition["default_version"] for name, definition in SP_API_MODULES.items()}
        if overrides:
            defaults.update(overrides)
        return cls(defaults)

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None) -> "VersionConfig":
        """Module definition defaults overridden by ``SPAPI_VERSION_<CAPABILITY>``.

        For example ``SPAPI_VERSION_EASY_SHIP=2022-03-23``.
        """
        load_dotenv(dotenv_path)
        overrides = {}
        for name in SP_API_MODULES:
            value = os.getenv(f"SPAPI_VERSION_{_env_suffix(name)}")
            if value:
                overrides[name] = value.strip()
        return cls.from_module_definitions(overrides)

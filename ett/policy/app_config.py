"""Application configuration provider.

The application configuration is mostly comprised of numeric values that
indicate durations after which certain events may occur as per business
rules. Values come either from a `ConfigRepository` (storage) or from a static
list, which defaults to the durations declared in `Settings`.
"""

from __future__ import annotations

import logging
import re
from typing import List, Optional, Protocol, Sequence

from ett.core.config import get_settings
from ett.core.exceptions import ConfigurationError
from ett.models.config import Config, ConfigNames, ConfigTypes, DurationUnit

logger = logging.getLogger(__name__)

_LEADING_INTEGER = re.compile(r"\s*([+-]?\d+)")


class ConfigRepository(Protocol):
    async def get_config(self, name: ConfigNames) -> Optional[Config]: ...

    async def get_configs(self) -> Sequence[Config]: ...


class DurationPolicy(Protocol):
    def get_duration(self, unit: DurationUnit = DurationUnit.SECOND) -> float: ...


def parse_seconds(config: Config) -> int:
    """Read the leading integer of a stored value, so "2592000.0" and "60s" are accepted."""

    match = _LEADING_INTEGER.match(config.value)
    if match is None:
        raise ConfigurationError(
            error_code="CONFIG_VALUE_INVALID",
            message=f"Config {config.name.value} has a non-numeric value",
            details={"name": config.name.value, "value": config.value},
        )
    return int(match.group(1))


class AppConfig:
    """Decorator for a `Config` record that interprets its value."""

    def __init__(self, config: Optional[Config] = None) -> None:
        self.config = config

    @property
    def name(self) -> Optional[ConfigNames]:
        return self.config.name if self.config else None

    def get_duration(self, unit: DurationUnit = DurationUnit.SECOND) -> float:
        """Return the stored duration (seconds) expressed in ``unit``; 0 for non-duration values."""

        config = self.config
        if config is None or config.config_type != ConfigTypes.DURATION:
            return 0
        seconds = parse_seconds(config)
        if unit == DurationUnit.SECOND:
            return seconds
        return seconds / int(unit)

    def get_duration_millis(self) -> int:
        return int(self.get_duration(DurationUnit.SECOND) * 1000)

    def __repr__(self) -> str:
        return f"AppConfig({self.config!r})"


class Configurations:
    """Config provider backed by a repository when given one, else by a static list."""

    def __init__(
        self,
        configs: Optional[Sequence[Config]] = None,
        *,
        repository: Optional[ConfigRepository] = None,
    ) -> None:
        self.repository = repository
        if configs is None and repository is None:
            configs = get_settings().default_configs()
        self.configs: List[Config] = list(configs or [])

    async def get_app_configs(self) -> List[AppConfig]:
        if self.repository is not None:
            configs = list(await self.repository.get_configs())
        else:
            configs = self.configs
        return [AppConfig(config) for config in configs]

    async def get_app_config(self, name: ConfigNames) -> AppConfig:
        config: Optional[Config]
        if self.repository is not None:
            config = await self.repository.get_config(name)
        else:
            config = next((item for item in self.configs if item.name == name), None)
        if config is None:
            logger.warning("No application config named %s; durations will read as 0", name.value)
        return AppConfig(config)


class InMemoryConfigRepository:
    """Repository holding config records in a dict, for tests and local runs."""

    def __init__(self, configs: Sequence[Config] = ()) -> None:
        self._configs = {config.name: config for config in configs}

    async def get_config(self, name: ConfigNames) -> Optional[Config]:
        return self._configs.get(name)

    async def get_configs(self) -> Sequence[Config]:
        return list(self._configs.values())

    async def put_config(self, config: Config) -> None:
        self._configs[config.name] = config


def duration_config(name: ConfigNames, seconds: int, description: str = "") -> Config:
    return Config(name=name, value=str(seconds), config_type=ConfigTypes.DURATION, description=description)


__all__ = [
    "AppConfig",
    "ConfigRepository",
    "Configurations",
    "DurationPolicy",
    "InMemoryConfigRepository",
    "duration_config",
]

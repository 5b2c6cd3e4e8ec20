"""Configuration loading from YAML with environment overrides."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Mapping, Optional

import yaml

from history_compactor.context.compactor import (
    DEFAULT_RECENT_BUDGET,
    DEFAULT_TRIGGER_BUDGET,
)
from history_compactor.context.token_counter import DEFAULT_ENCODING

LOGGER = logging.getLogger(__name__)

# Environment variable -> AgentSettings attribute
ENV_OVERRIDES = {
    "COMPACTOR_API_KEY": "api_key",
    "COMPACTOR_BASE_URL": "base_url",
    "COMPACTOR_MODEL": "model",
}


class ConfigError(Exception):
    """Configuration file is malformed."""


@dataclass
class AgentSettings:
    base_url: str = "http://localhost:8080"
    api_key: Optional[str] = None
    model: Optional[str] = None
    timeout: int = 120
    temperature: float = 0.4
    max_tokens: int = 1024


@dataclass
class CompactionSettings:
    trigger_budget: int = DEFAULT_TRIGGER_BUDGET
    recent_budget: int = DEFAULT_RECENT_BUDGET
    encoding: str = DEFAULT_ENCODING
    summary_max_tokens: int = 1024
    summary_temperature: float = 0.3
    system_prompt: Optional[str] = None


@dataclass
class AppConfig:
    agent: AgentSettings = field(default_factory=AgentSettings)
    compaction: CompactionSettings = field(default_factory=CompactionSettings)


def _build(cls, data: Optional[Mapping], section: str):
    if data is None:
        return cls()
    if not isinstance(data, Mapping):
        raise ConfigError(f"Section '{section}' must be a mapping")
    known = {f.name for f in fields(cls)}
    unknown = set(data) - known
    if unknown:
        raise ConfigError(
            f"Unknown keys in '{section}': {', '.join(sorted(unknown))}"
        )
    return cls(**data)


def load_config(
    path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> AppConfig:
    """
    Load configuration.

    Args:
        path: Optional YAML file with ``agent`` and ``compaction`` sections.
        environ: Environment mapping for overrides (defaults to os.environ).

    Returns:
        AppConfig with file values, then environment overrides applied.

    Raises:
        ConfigError: File unreadable, not a mapping, or has unknown keys.
    """
    data: Mapping = {}
    if path is not None:
        try:
            data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
        except (OSError, yaml.YAMLError) as exc:
            raise ConfigError(f"Cannot read config {path}: {exc}") from exc
        if not isinstance(data, Mapping):
            raise ConfigError(f"Config {path} must be a mapping")
        unknown = set(data) - {"agent", "compaction"}
        if unknown:
            raise ConfigError(f"Unknown sections: {', '.join(sorted(unknown))}")

    config = AppConfig(
        agent=_build(AgentSettings, data.get("agent"), "agent"),
        compaction=_build(CompactionSettings, data.get("compaction"), "compaction"),
    )

    env = os.environ if environ is None else environ
    for var, attr in ENV_OVERRIDES.items():
        value = env.get(var)
        if value:
            LOGGER.debug("Config override from %s", var)
            setattr(config.agent, attr, value)

    return config

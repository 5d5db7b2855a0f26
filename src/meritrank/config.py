"""Unified configuration for MeritRank.

MeritRankConfig provides a clean way to configure all components:
- Random walk sampling (restart probability, maximum walk length)
- Walk cache bounds
- Default iteration count and random seed
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from meritrank.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "MERITRANK_CONFIG"


@dataclass
class WalkConfig:
    """Configuration for the random walk sampler."""

    # Chance of ending the walk after each hop (1 - damping factor)
    restart_probability: float = 0.15

    # Hard ceiling on nodes per walk, ego included
    max_walk_length: int = 10_000


@dataclass
class CacheConfig:
    """Configuration for the walk cache."""

    # Maximum number of egos with cached walks; None means unbounded
    max_egos: int | None = None


@dataclass
class MeritRankConfig:
    """Main configuration for meritrank.

    Create from environment variables:
        config = MeritRankConfig.from_env()

    Or specify directly:
        config = MeritRankConfig(
            walk=WalkConfig(restart_probability=0.2),
            seed=42,
        )
    """

    walk: WalkConfig = field(default_factory=WalkConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    default_iterations: int = 1000
    seed: int | None = None

    @classmethod
    def from_env(cls) -> "MeritRankConfig":
        """Load configuration from environment variables.

        Environment variables:
        - MERITRANK_RESTART_PROBABILITY: float in (0, 1]
        - MERITRANK_MAX_WALK_LENGTH: positive integer
        - MERITRANK_MAX_EGOS: positive integer, empty for unbounded
        - MERITRANK_DEFAULT_ITERATIONS: non-negative integer
        - MERITRANK_SEED: integer seed for reproducible sampling
        """
        walk = WalkConfig(
            restart_probability=_env_float("MERITRANK_RESTART_PROBABILITY", 0.15),
            max_walk_length=_env_int("MERITRANK_MAX_WALK_LENGTH", 10_000),
        )
        cache = CacheConfig(max_egos=_env_int("MERITRANK_MAX_EGOS", None))

        config = cls(
            walk=walk,
            cache=cache,
            default_iterations=_env_int("MERITRANK_DEFAULT_ITERATIONS", 1000),
            seed=_env_int("MERITRANK_SEED", None),
        )
        config.validate()
        return config

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "MeritRankConfig":
        """Build configuration from a parsed mapping.

        Expected layout (every key optional):

            walk:
              restart_probability: 0.15
              max_walk_length: 10000
            cache:
              max_egos: 512
            default_iterations: 1000
            seed: 7
        """
        if not isinstance(raw, dict):
            raise ConfigurationError(f"Config root must be a mapping, got {type(raw).__name__}")

        walk_raw = raw.get("walk") or {}
        cache_raw = raw.get("cache") or {}
        try:
            config = cls(
                walk=WalkConfig(**walk_raw),
                cache=CacheConfig(**cache_raw),
                default_iterations=raw.get("default_iterations", 1000),
                seed=raw.get("seed"),
            )
        except TypeError as e:
            raise ConfigurationError("Unknown configuration key", cause=e) from e

        config.validate()
        return config

    def validate(self) -> None:
        """Check value ranges.

        Raises:
            ConfigurationError: If any setting is out of range.
        """
        p = self.walk.restart_probability
        if isinstance(p, bool) or not isinstance(p, (int, float)) or not 0.0 < p <= 1.0:
            raise ConfigurationError(f"restart_probability must be in (0, 1], got {p!r}")
        if not _is_int(self.walk.max_walk_length) or self.walk.max_walk_length < 1:
            raise ConfigurationError(
                f"max_walk_length must be a positive integer, got {self.walk.max_walk_length!r}"
            )
        if self.cache.max_egos is not None and (
            not _is_int(self.cache.max_egos) or self.cache.max_egos < 1
        ):
            raise ConfigurationError(
                f"max_egos must be a positive integer or None, got {self.cache.max_egos!r}"
            )
        if not _is_int(self.default_iterations) or self.default_iterations < 0:
            raise ConfigurationError(
                f"default_iterations must be a non-negative integer, got {self.default_iterations!r}"
            )
        if self.seed is not None and not _is_int(self.seed):
            raise ConfigurationError(f"seed must be an integer or None, got {self.seed!r}")


def load_config(path: str | Path | None = None) -> MeritRankConfig:
    """Load configuration from a YAML file.

    Args:
        path: Explicit config path. Falls back to $MERITRANK_CONFIG, then
            to defaults when neither is set.

    Returns:
        Parsed and validated configuration.

    Raises:
        ConfigurationError: If the file is missing, unreadable, or invalid.
    """
    if path is None:
        env_path = os.getenv(CONFIG_ENV_VAR)
        if not env_path:
            logger.debug("No config file given, using defaults")
            return MeritRankConfig()
        path = env_path

    config_path = Path(path)
    try:
        with open(config_path) as f:
            raw = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.error(f"Failed to load config file {config_path}: {e}")
        raise ConfigurationError(f"Cannot load config file {config_path}", cause=e) from e

    logger.debug(f"Loaded config file: {config_path}")
    return MeritRankConfig.from_dict(raw)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        return float(value)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number, got {value!r}", cause=e) from e


def _env_int(name: str, default: int | None) -> int | None:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        return int(value)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}", cause=e) from e

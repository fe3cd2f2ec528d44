"""Configuration loading and validation."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

LOGGER = logging.getLogger(__name__)

CONFIG_ENV_VAR = "TEXTLEARN_CONFIG"
DEFAULT_CONFIG_PATH = Path("~/.config/textlearn/config.yaml")
DEFAULT_ROOT_DIR = Path("~/.local/lib/textlearn")
DEFAULT_LOG_LEVEL = "info"
DEFAULT_LEARNING_RATE = 0.1
DEFAULT_EPOCHS = 500
DEFAULT_MIN_COUNT = 1


class ConfigError(ValueError):
    """Raised when configuration is invalid or missing."""


@dataclass(frozen=True)
class LoggingConfig:
    """Logging-related configuration."""

    level: str = DEFAULT_LOG_LEVEL
    debug_file: bool = False


@dataclass(frozen=True)
class OptimizerConfig:
    """Hyperparameters shared by the gradient descent optimisers."""

    learning_rate: float = DEFAULT_LEARNING_RATE
    epochs: int = DEFAULT_EPOCHS
    l2_lambda: float = 0.0
    batch_size: int | None = None
    tolerance: float | None = None
    verbose: bool = False
    parallel: bool = False
    workers: int | None = None
    seed: int | None = None


@dataclass(frozen=True)
class NaiveBayesConfig:
    min_count: int = DEFAULT_MIN_COUNT


@dataclass(frozen=True)
class Config:
    """Fully parsed configuration."""

    root_dir: Path = field(default_factory=lambda: DEFAULT_ROOT_DIR.expanduser())
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    optimizer: OptimizerConfig = field(default_factory=OptimizerConfig)
    naive_bayes: NaiveBayesConfig = field(default_factory=NaiveBayesConfig)


def load_config(path: Path | str | None = None) -> Config:
    """Load and validate configuration from YAML.

    An explicitly requested file (argument or ``$TEXTLEARN_CONFIG``) must
    exist; a missing default file yields the built-in defaults.
    """

    config_path, explicit = _resolve_config_path(path)
    if not config_path.exists():
        if explicit:
            raise ConfigError(f"Config file not found: {config_path}")
        LOGGER.debug("No config file at %s, using defaults", config_path)
        return Config()

    try:
        with config_path.open("r", encoding="utf-8") as handle:
            raw = yaml.safe_load(handle) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {config_path}: {exc}") from exc

    if not isinstance(raw, dict):
        raise ConfigError("Configuration root must be a mapping.")

    return _parse_config(raw)


def _resolve_config_path(explicit: Path | str | None) -> tuple[Path, bool]:
    if explicit:
        return Path(explicit).expanduser(), True
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser(), True
    return DEFAULT_CONFIG_PATH.expanduser(), False


def _parse_config(raw: dict[str, Any]) -> Config:
    root_dir = Path(raw.get("rootdir") or raw.get("root_dir") or DEFAULT_ROOT_DIR).expanduser()
    return Config(
        root_dir=root_dir,
        logging=_parse_logging(raw.get("logging")),
        optimizer=_parse_optimizer(raw.get("optimizer")),
        naive_bayes=_parse_naive_bayes(raw.get("naive_bayes")),
    )


def _parse_logging(value: Any) -> LoggingConfig:
    if value is None:
        return LoggingConfig()
    if not isinstance(value, dict):
        raise ConfigError("logging must be a mapping.")
    level = str(value.get("level", DEFAULT_LOG_LEVEL)).lower()
    debug_file = bool(value.get("debug_file", False))
    return LoggingConfig(level=level, debug_file=debug_file)


def _parse_optimizer(value: Any) -> OptimizerConfig:
    if value is None:
        return OptimizerConfig()
    if not isinstance(value, dict):
        raise ConfigError("optimizer must be a mapping.")

    learning_rate = _number(value, "learning_rate", DEFAULT_LEARNING_RATE)
    if learning_rate <= 0:
        raise ConfigError("optimizer.learning_rate must be positive.")
    epochs = _integer(value, "epochs", DEFAULT_EPOCHS)
    if epochs is None or epochs < 1:
        raise ConfigError("optimizer.epochs must be at least 1.")
    l2_lambda = _number(value, "l2_lambda", 0.0)
    if l2_lambda < 0:
        raise ConfigError("optimizer.l2_lambda must not be negative.")
    batch_size = _integer(value, "batch_size", None)
    if batch_size is not None and batch_size < 1:
        raise ConfigError("optimizer.batch_size must be positive.")
    tolerance = value.get("tolerance")
    if tolerance is not None:
        tolerance = _number(value, "tolerance", 0.0)
        if tolerance <= 0:
            raise ConfigError("optimizer.tolerance must be positive.")
    workers = _integer(value, "workers", None)
    if workers is not None and workers < 1:
        raise ConfigError("optimizer.workers must be positive.")

    return OptimizerConfig(
        learning_rate=learning_rate,
        epochs=epochs,
        l2_lambda=l2_lambda,
        batch_size=batch_size,
        tolerance=tolerance,
        verbose=bool(value.get("verbose", False)),
        parallel=bool(value.get("parallel", False)),
        workers=workers,
        seed=_integer(value, "seed", None),
    )


def _parse_naive_bayes(value: Any) -> NaiveBayesConfig:
    if value is None:
        return NaiveBayesConfig()
    if not isinstance(value, dict):
        raise ConfigError("naive_bayes must be a mapping.")
    min_count = _integer(value, "min_count", DEFAULT_MIN_COUNT)
    if min_count is None or min_count < 1:
        raise ConfigError("naive_bayes.min_count must be at least 1.")
    return NaiveBayesConfig(min_count=min_count)


def _number(section: dict[str, Any], key: str, default: float) -> float:
    value = section.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"{key} must be a number.")
    return float(value)


def _integer(section: dict[str, Any], key: str, default: int | None) -> int | None:
    value = section.get(key, default)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"{key} must be an integer.")
    return value


__all__ = [
    "CONFIG_ENV_VAR",
    "Config",
    "ConfigError",
    "LoggingConfig",
    "NaiveBayesConfig",
    "OptimizerConfig",
    "load_config",
]

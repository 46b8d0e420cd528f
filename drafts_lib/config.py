"""Draft store configuration loaded from a YAML file.

The file is optional: when it does not exist a default one is written so
operators have something to edit. Unknown keys are ignored and values of the
wrong type fall back to the defaults with a warning, so a bad edit never
stops the app from starting.
"""
from __future__ import annotations
import logging
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Optional

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("data/config/drafts_config.yml")


@dataclass
class DraftsConfig:
    data_dir: str = "data/drafts"
    storage_backend: str = "file"
    ttl_hours: float = 24.0
    activity_ttl_hours: float = 1.0
    debounce_delay: float = 1.0
    autosave_interval: float = 3.0
    total_steps: int = 8
    log_level: str = "WARNING"


_POSITIVE = {"ttl_hours", "activity_ttl_hours", "total_steps"}
_NON_NEGATIVE = {"debounce_delay", "autosave_interval"}


def _coerce(name: str, value: Any, default: Any) -> Any:
    try:
        if isinstance(value, bool) or value is None:
            raise TypeError(f"unsupported value {value!r}")
        coerced: Any = type(default)(value)
    except (TypeError, ValueError):
        logger.warning("Invalid value %r for %s; using default %r", value, name, default)
        return default
    if name in _POSITIVE and coerced <= 0:
        logger.warning("%s must be > 0, got %r; using default %r", name, value, default)
        return default
    if name in _NON_NEGATIVE and coerced < 0:
        logger.warning("%s must be >= 0, got %r; using default %r", name, value, default)
        return default
    return coerced


def config_from_dict(raw: dict) -> DraftsConfig:
    defaults = DraftsConfig()
    values = {}
    for f in fields(DraftsConfig):
        default = getattr(defaults, f.name)
        values[f.name] = _coerce(f.name, raw[f.name], default) if f.name in raw else default
    cfg = DraftsConfig(**values)
    if cfg.storage_backend not in ("file", "memory"):
        logger.warning("Unknown storage_backend %r; using 'file'", cfg.storage_backend)
        cfg.storage_backend = "file"
    return cfg


def write_default_config(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        yaml.safe_dump(asdict(DraftsConfig()), f, sort_keys=False)


def load_config(config_path: Optional[Path] = None, *, create: bool = True) -> DraftsConfig:
    """Load `DraftsConfig` from YAML, writing the defaults first if missing."""
    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
    if not path.exists():
        if create:
            logger.info("%s missing; creating default drafts config", path)
            try:
                write_default_config(path)
            except OSError:
                logger.exception("Failed to write default drafts config to %s", path)
        return DraftsConfig()
    try:
        with path.open("r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError):
        logger.exception("Failed to load drafts config from %s; using defaults", path)
        return DraftsConfig()
    if not isinstance(raw, dict):
        logger.warning("Drafts config %s is not a mapping; using defaults", path)
        return DraftsConfig()
    return config_from_dict(raw)

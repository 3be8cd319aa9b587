"""
Layout and tiering configuration.

``MapConfig`` carries every constant the layout engine uses, so that a saved
JSON config reproduces a map exactly.  Defaults give the standard
left-to-right learning map:

    base_x = x_start + x_span * tier_index / max(1, tiers - 1)
    base_y = y_start + y_span * index / (count - 1)
    y      = clamp(base_y + y_jitter * sin(id * y_jitter_freq), *y_clamp)
    x      = clamp(base_x + x_jitter * cos(id * x_jitter_freq), *x_clamp)
"""

import json
import logging
import os
from typing import Literal, Optional, Tuple

from pydantic import BaseModel, ValidationError, model_validator

logger = logging.getLogger(__name__)

TierMode = Literal["declared", "depth"]


class ConfigLoadError(Exception):
    """Raised when a config file cannot be read or validated.

    Attributes:
        path: The file that failed to load.
        original: The underlying exception.
    """

    def __init__(self, path: str, original: Optional[Exception] = None) -> None:
        self.path = path
        self.original = original
        super().__init__(f"cannot load config {path}: {original}")


class MapConfig(BaseModel):
    """Tunable layout constants and tier mode."""

    tier_mode: TierMode = "declared"
    strict_ids: bool = False

    x_start: float = 10.0
    x_span: float = 80.0
    x_jitter: float = 8.0
    x_jitter_freq: float = 7.3
    x_clamp: Tuple[float, float] = (5.0, 95.0)

    y_single: float = 50.0
    y_start: float = 20.0
    y_span: float = 60.0
    y_jitter: float = 10.0
    y_jitter_freq: float = 13.7
    y_clamp: Tuple[float, float] = (15.0, 85.0)

    @model_validator(mode="after")
    def _check_clamps(self) -> "MapConfig":
        for name in ("x_clamp", "y_clamp"):
            lo, hi = getattr(self, name)
            if lo > hi:
                raise ValueError(f"{name} lower bound {lo} exceeds upper bound {hi}")
        return self


def load_config(path: str) -> MapConfig:
    """Read a ``MapConfig`` from a JSON file. Missing keys keep defaults.

    Raises:
        ConfigLoadError: If the file is unreadable, not JSON, or fails
            validation.
    """
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = json.load(fh)
        config = MapConfig.model_validate(data)
    except (OSError, ValueError, ValidationError) as exc:
        logger.error("Failed to load config %s: %s", path, exc)
        raise ConfigLoadError(path, exc) from exc

    logger.info("Config loaded from %s (tier_mode=%s).", path, config.tier_mode)
    return config


def save_config(config: MapConfig, path: str) -> None:
    """Write *config* to *path* as indented JSON."""
    os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
    with open(path, "w", encoding="utf-8") as fh:
        fh.write(config.model_dump_json(indent=2))
    logger.info("Config saved → %s", path)

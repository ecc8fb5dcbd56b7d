"""
Panel Configuration

Validated numeric parameters for the animating tile panel. Values are
range-checked once when the configuration is built; the panel reads them
freely afterwards.

Configuration can also be loaded from YAML (panel_config.yaml ships the
defaults).
"""

import dataclasses
import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent / "panel_config.yaml"

# field -> (low, low inclusive, high, high inclusive)
_RANGES = {
    "item_width": (0.0, False, math.inf, False),
    "item_height": (0.0, False, math.inf, False),
    "attraction": (0.0, False, math.inf, False),
    "dampening": (0.0, False, 1.0, False),
    "variation": (0.0, True, 1.0, True),
}

_ALIASES = {
    "itemWidth": "item_width",
    "itemHeight": "item_height",
}


def _check_range(name: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{name} must be a number, got {value!r}")
    value = float(value)
    low, low_inclusive, high, high_inclusive = _RANGES[name]

    ok = not math.isnan(value)
    ok = ok and (value >= low if low_inclusive else value > low)
    ok = ok and (value <= high if high_inclusive else value < high)
    if not ok:
        interval = "{}{}, {}{}".format(
            "[" if low_inclusive else "(", low,
            high, "]" if high_inclusive else ")",
        )
        raise ValueError(f"{name} must be in {interval}, got {value}")
    return value


@dataclass(frozen=True)
class PanelConfig:
    """Parameters of the animating tile panel."""
    # Cell size
    item_width: float = 50.0
    item_height: float = 50.0

    # Motion
    attraction: float = 2.0  # spring stiffness, scaled by 0.01 per tick
    dampening: float = 0.2  # fraction of velocity lost per tick
    variation: float = 1.0  # per-item jitter applied to attraction

    def __post_init__(self):
        for name in _RANGES:
            object.__setattr__(self, name, _check_range(name, getattr(self, name)))

    def replace(self, **changes) -> "PanelConfig":
        """Return a validated copy with ``changes`` applied."""
        return dataclasses.replace(self, **changes)

    def to_dict(self) -> Dict[str, float]:
        return dataclasses.asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PanelConfig":
        """Build a config from a mapping, accepting camelCase cell-size keys.

        Raises:
            ValueError: On unknown keys or out-of-range values
        """
        values = {}
        for key, value in data.items():
            name = _ALIASES.get(key, key)
            if name not in _RANGES:
                raise ValueError(f"Unknown panel option: {key}")
            values[name] = value
        return cls(**values)


def load_config(path: Optional[Union[str, Path]] = None) -> PanelConfig:
    """Load a PanelConfig from a YAML file.

    Args:
        path: YAML file to read. Uses the packaged defaults if None.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file is a symlink, is not a mapping, or holds
            unknown/out-of-range options
    """
    config_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH

    if not config_path.exists():
        raise FileNotFoundError(f"Panel configuration file not found: {config_path}")

    if config_path.is_symlink():
        raise ValueError(f"Panel configuration file cannot be a symlink: {config_path}")

    with open(config_path, "r") as f:
        data = yaml.safe_load(f)

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError(f"Panel configuration must be a mapping: {config_path}")

    config = PanelConfig.from_dict(data)
    logger.debug("Loaded panel configuration from %s: %s", config_path, config)
    return config

"""
Configuration management for AutoDeck.

Loads and validates TOML config against strict bounds.
All tunable parameters are bounded and validated at startup, so the
engine never sees an invalid value mid-run.
"""

import copy
import math
import os
from pathlib import Path
from typing import Dict, Any, Optional
import toml
import logging

from .mixing.styles import MixStyle, get_style
from .mixing.transitions import BLEND_START, PREPARE_START

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Raised when config validation fails."""
    pass


class Config:
    """Configuration loader and validator."""

    PARAM_BOUNDS = {
        "mix": {
            "style": None,  # String type, checked against the style registry
        },
        "engine": {
            "fast_tick_ms": (10, 1000),
            "slow_tick_ms": (50, 5000),
            "completion_delay_ms": (0, 10000),
        },
    }

    # Per-style override bounds. transition_seconds is clamped, not rejected.
    STYLE_BOUNDS = {
        "blend_bars": (1, 64),
        "eq_intensity": (0, 10),
    }

    DEFAULT_CONFIG = {
        "config_version": "1.0",
        "mix": {
            "style": "club",
        },
        "engine": {
            "fast_tick_ms": 50,
            "slow_tick_ms": 200,
            "completion_delay_ms": 1500,
        },
        "styles": {},
    }

    def __init__(self, config_dict: Dict[str, Any]):
        """Initialize config from dictionary."""
        self.data = config_dict
        self._validate()

    @classmethod
    def defaults(cls) -> "Config":
        """Config built purely from DEFAULT_CONFIG."""
        return cls(copy.deepcopy(cls.DEFAULT_CONFIG))

    @classmethod
    def load(cls, config_path: Optional[str] = None) -> "Config":
        """
        Load config from TOML file.

        Args:
            config_path: Path to autodeck.toml. If None, uses AUTODECK_CONFIG_PATH env var
                        or defaults to configs/autodeck.toml.

        Returns:
            Config instance.

        Raises:
            ConfigError: If config is invalid or unreadable.
        """
        if config_path is None:
            config_path = os.getenv("AUTODECK_CONFIG_PATH", "configs/autodeck.toml")

        config_path = Path(config_path)

        if not config_path.exists():
            logger.warning(f"Config file not found: {config_path}. Using defaults.")
            return cls.defaults()

        try:
            config_dict = toml.load(config_path)
        except (OSError, toml.TomlDecodeError) as e:
            raise ConfigError(f"Failed to load config from {config_path}: {e}")

        logger.info(f"Loaded config from {config_path}")
        return cls(config_dict)

    def _validate(self) -> None:
        """
        Validate all config parameters against PARAM_BOUNDS.

        Raises:
            ConfigError: If any parameter is out of bounds.
        """
        for section, params in self.PARAM_BOUNDS.items():
            if section not in self.data:
                logger.warning(f"Missing config section: {section}. Using defaults.")
                self.data[section] = copy.deepcopy(self.DEFAULT_CONFIG.get(section, {}))
                continue

            section_data = self.data[section]

            for param, bounds in params.items():
                if param not in section_data:
                    default_val = self.DEFAULT_CONFIG.get(section, {}).get(param)
                    if default_val is not None:
                        logger.warning(f"Missing param {section}.{param}. Using default: {default_val}")
                        section_data[param] = default_val
                    continue

                value = section_data[param]

                if bounds is None:
                    continue

                if isinstance(bounds, tuple) and len(bounds) == 2:
                    self._check_range(f"{section}.{param}", value, bounds)

        style_name = str(self.data["mix"]["style"]).strip().lower()
        if style_name not in MixStyle.names():
            raise ConfigError(
                f"Parameter mix.style={self.data['mix']['style']!r} is not one of {MixStyle.names()}"
            )
        self.data["mix"]["style"] = style_name

        self._validate_style_overrides(MixStyle.names())
        self._validate_phase_windows()

        logger.info("✅ Config validation passed")

    def _validate_style_overrides(self, known_styles) -> None:
        """Check [styles.<name>] tables; clamp transition_seconds to at least 1."""
        styles = self.data.setdefault("styles", {})
        if not isinstance(styles, dict):
            raise ConfigError("Section styles must be a table")

        normalized = {}
        for raw_name, overrides in styles.items():
            name = str(raw_name).strip().lower()
            if name not in known_styles:
                raise ConfigError(f"Unknown mix style in [styles.{raw_name}]")
            if not isinstance(overrides, dict):
                raise ConfigError(f"Section styles.{raw_name} must be a table")
            if name in normalized:
                raise ConfigError(f"Duplicate mix style table [styles.{raw_name}]")
            normalized[name] = overrides

            unknown = set(overrides) - set(self.STYLE_BOUNDS) - {"transition_seconds"}
            if unknown:
                raise ConfigError(f"Unknown parameters in [styles.{name}]: {sorted(unknown)}")

            for param, bounds in self.STYLE_BOUNDS.items():
                if param in overrides:
                    self._check_range(f"styles.{name}.{param}", overrides[param], bounds)

            if "transition_seconds" in overrides:
                seconds = overrides["transition_seconds"]
                if (
                    not isinstance(seconds, (int, float))
                    or isinstance(seconds, bool)
                    or not math.isfinite(seconds)
                ):
                    raise ConfigError(
                        f"Parameter styles.{name}.transition_seconds={seconds!r} is not a number"
                    )
                if seconds < 1:
                    logger.warning(
                        f"styles.{name}.transition_seconds={seconds} below minimum; clamping to 1"
                    )
                    overrides["transition_seconds"] = 1
                else:
                    overrides["transition_seconds"] = int(seconds)

        self.data["styles"] = normalized

    def _validate_phase_windows(self) -> None:
        """
        Check that the slow tick samples every phase of every style.

        The preparing window is the narrowest one. A slow tick period at or
        above its length can step over it, so the machine would fall back
        to stable without ever blending.

        Raises:
            ConfigError: If any style's preparing window is too short.
        """
        slow_tick_ms = self.data["engine"]["slow_tick_ms"]
        for style in MixStyle:
            seconds = get_style(style, self.style_overrides(style.value)).transition_seconds
            window_ms = round((BLEND_START - PREPARE_START) * seconds * 1000.0, 6)
            if window_ms <= slow_tick_ms:
                raise ConfigError(
                    f"Style {style.value}: transition_seconds={seconds} gives a "
                    f"{window_ms:.0f}ms preparing window, not longer than "
                    f"engine.slow_tick_ms={slow_tick_ms}"
                )

    @staticmethod
    def _check_range(name: str, value: Any, bounds: tuple) -> None:
        min_val, max_val = bounds
        if not isinstance(value, (int, float)) or isinstance(value, bool):
            raise ConfigError(f"Parameter {name}={value!r} is not a number")
        if not (min_val <= value <= max_val):
            raise ConfigError(
                f"Parameter {name}={value} out of bounds "
                f"[{min_val}, {max_val}]"
            )

    def get(self, section: str, param: str, default: Any = None) -> Any:
        """Get a config parameter safely."""
        return self.data.get(section, {}).get(param, default)

    def style_overrides(self, style_name: str) -> Dict[str, Any]:
        """Overrides from [styles.<style_name>], or an empty dict."""
        return dict(self.data.get("styles", {}).get(style_name, {}))

    def __getitem__(self, section: str) -> Dict[str, Any]:
        """Allow dict-like access: config["engine"]"""
        return self.data.get(section, {})

    def __repr__(self) -> str:
        version = self.data.get('config_version', 'unknown')
        style = self.get("mix", "style")
        return f"Config(version={version}, style={style})"

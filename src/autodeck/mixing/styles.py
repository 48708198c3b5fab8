"""
Mix Style Registry: static blend/EQ/timing configuration per mix style.

Each style fixes how long the blend is (in bars), how hard the EQs are
swept during a transition (0-10), and the length of one full transition
cycle in seconds.
"""

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, Optional, Tuple, Union

logger = logging.getLogger(__name__)


class UnknownMixStyleError(ValueError):
    """Raised when a style name is not in the registry."""
    pass


class MixStyle(Enum):
    SMOOTH = "smooth"
    CLUB = "club"
    HYPNOTIC = "hypnotic"
    AGGRESSIVE = "aggressive"

    @classmethod
    def names(cls) -> Tuple[str, ...]:
        return tuple(style.value for style in cls)


@dataclass(frozen=True)
class MixStyleConfig:
    """Immutable timing and EQ profile for one mix style."""

    blend_bars: int
    eq_intensity: int
    transition_seconds: int

    @property
    def blend_type(self) -> str:
        """Human-readable blend length used in status messages."""
        if self.blend_bars == 32:
            return "long blend"
        if self.blend_bars == 16:
            return "standard blend"
        return "quick blend"

    @property
    def eq_action(self) -> str:
        """Human-readable EQ treatment used in status messages."""
        if self.eq_intensity > 6:
            return "EQ sweep"
        if self.eq_intensity > 3:
            return "EQ fade"
        return "minimal EQ"


MIX_STYLES: Dict[MixStyle, MixStyleConfig] = {
    MixStyle.SMOOTH: MixStyleConfig(blend_bars=32, eq_intensity=3, transition_seconds=30),
    MixStyle.CLUB: MixStyleConfig(blend_bars=16, eq_intensity=6, transition_seconds=22),
    MixStyle.HYPNOTIC: MixStyleConfig(blend_bars=32, eq_intensity=2, transition_seconds=35),
    MixStyle.AGGRESSIVE: MixStyleConfig(blend_bars=8, eq_intensity=8, transition_seconds=18),
}

DEFAULT_STYLE = MixStyle.CLUB


def parse_style(style: Union[MixStyle, str]) -> MixStyle:
    """
    Resolve a style enum from an enum member or its name.

    Args:
        style: MixStyle member or name such as "club" (case-insensitive)

    Returns:
        MixStyle member

    Raises:
        UnknownMixStyleError: If the name is not a known style
    """
    if isinstance(style, MixStyle):
        return style
    try:
        return MixStyle(str(style).strip().lower())
    except ValueError:
        raise UnknownMixStyleError(
            f"Unknown mix style {style!r}; expected one of {MixStyle.names()}"
        )


def get_style(
    style: Union[MixStyle, str],
    overrides: Optional[Dict[str, int]] = None,
) -> MixStyleConfig:
    """
    Look up the configuration for a mix style.

    Args:
        style: MixStyle member or name
        overrides: Optional field overrides (already validated by Config)

    Returns:
        MixStyleConfig, with transition_seconds never below 1
    """
    config = MIX_STYLES[parse_style(style)]

    if overrides:
        config = replace(config, **overrides)
        logger.debug(f"Style {parse_style(style).value} overridden: {config}")

    if config.transition_seconds < 1:
        config = replace(config, transition_seconds=1)

    return config

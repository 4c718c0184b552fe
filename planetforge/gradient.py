"""Color ramps: map normalized noise values to RGBA colors."""

from dataclasses import dataclass
from numbers import Integral

import numpy as np
from PIL import ImageColor

from .errors import InvalidParameterError

RAMP_MODES = ("blend", "fixed")


def to_rgba(color):
    """Normalize a color to an RGBA tuple of floats in [0, 1].

    Accepts any Pillow color string ("#1d4e89", "rgb(10, 20, 30)", "white"),
    a tuple of ints in 0-255, or a tuple of floats in 0-1. RGB input gets
    an opaque alpha.
    """
    if isinstance(color, str):
        try:
            color = ImageColor.getrgb(color)
        except ValueError as exc:
            raise InvalidParameterError("color", str(exc)) from exc

    channels = tuple(color)
    if len(channels) not in (3, 4):
        raise InvalidParameterError(
            "color", f"expected 3 or 4 channels, got {len(channels)}")

    if all(isinstance(c, Integral) for c in channels):
        channels = tuple(c / 255.0 for c in channels)
    else:
        channels = tuple(float(c) for c in channels)

    if len(channels) == 3:
        channels = channels + (1.0,)
    if any(not 0.0 <= c <= 1.0 for c in channels):
        raise InvalidParameterError(
            "color", f"channels out of range: {color!r}")
    return channels


@dataclass(frozen=True)
class ColorStop:
    """A single (position, RGBA color) stop on a ramp."""
    position: float
    color: tuple


@dataclass(frozen=True)
class ColorRamp:
    """Ordered color stops evaluated as a piecewise-linear gradient.

    ``"blend"`` mode interpolates each channel between the bracketing
    stops; ``"fixed"`` mode returns the color of the first stop whose
    position is >= t. Outside the stop range the boundary color is
    returned unchanged.
    """
    stops: tuple
    mode: str = "blend"

    def __post_init__(self):
        stops = tuple(self.stops)
        object.__setattr__(self, "stops", stops)
        if not stops:
            raise InvalidParameterError(
                "color_ramp", "needs at least one stop")
        if self.mode not in RAMP_MODES:
            raise InvalidParameterError(
                "color_ramp", f"unknown mode {self.mode!r}, "
                f"expected one of {', '.join(RAMP_MODES)}")
        positions = [s.position for s in stops]
        if not np.all(np.isfinite(positions)):
            raise InvalidParameterError(
                "color_ramp", f"stop positions must be finite, got {positions}")
        if any(b < a for a, b in zip(positions, positions[1:])):
            raise InvalidParameterError(
                "color_ramp", f"stop positions must be non-decreasing, "
                f"got {positions}")

    @classmethod
    def from_pairs(cls, pairs, mode="blend"):
        """Build a ramp from ``(position, color)`` pairs.

        Colors go through :func:`to_rgba`, so hex strings, color names and
        int or float tuples are all accepted.
        """
        stops = tuple(ColorStop(float(pos), to_rgba(color))
                      for pos, color in pairs)
        return cls(stops, mode=mode)

    def evaluate(self, t):
        """Color at normalized position ``t``.

        ``t`` is clamped to [0, 1] first; accumulated noise can drift a
        hair outside that range.

        Args:
            t: Scalar or array of values.

        Returns:
            RGBA tuple for scalar input, otherwise an array with a trailing
            axis of 4 channels.
        """
        t = np.clip(np.asarray(t, dtype=np.float64), 0.0, 1.0)
        positions = np.array([s.position for s in self.stops],
                             dtype=np.float64)
        colors = np.array([s.color for s in self.stops], dtype=np.float64)

        if self.mode == "fixed":
            idx = np.searchsorted(positions, t, side="left")
            out = colors[np.minimum(idx, len(positions) - 1)]
        else:
            out = np.stack([np.interp(t, positions, colors[:, c])
                            for c in range(4)], axis=-1)

        if out.ndim == 1:
            return tuple(float(c) for c in out)
        return out


def parse_stop(text):
    """Parse a ``"POSITION:COLOR"`` string, e.g. ``"0.5:#d8c690"``."""
    pos, sep, color = text.partition(":")
    if not sep or not color:
        raise InvalidParameterError(
            "color_ramp", f"expected POSITION:COLOR, got {text!r}")
    try:
        position = float(pos)
    except ValueError as exc:
        raise InvalidParameterError(
            "color_ramp", f"bad stop position {pos!r}") from exc
    return position, color.strip()


PRESETS = {
    "grayscale": [
        (0.0, "#000000"),
        (1.0, "#ffffff"),
    ],
    "planet": [
        (0.0, "#0b1f4b"),   # deep ocean
        (0.40, "#1d4e89"),
        (0.47, "#3f8fc4"),  # shallows
        (0.50, "#d8c690"),  # beach
        (0.55, "#4f8a3a"),
        (0.68, "#2e5a2a"),  # forest
        (0.80, "#7a6a58"),  # rock
        (0.90, "#f2f2f2"),  # snow
        (1.0, "#ffffff"),
    ],
    "lava": [
        (0.0, "#1a0a05"),
        (0.45, "#3b1208"),
        (0.55, "#b3260b"),
        (0.70, "#f26b1d"),
        (1.0, "#ffe27a"),
    ],
    "ice": [
        (0.0, "#0d2b45"),
        (0.35, "#4a7fa7"),
        (0.60, "#b7d8ec"),
        (1.0, "#ffffff"),
    ],
}


def preset(name, mode="blend"):
    """Build one of the named ramps in ``PRESETS``."""
    try:
        pairs = PRESETS[name]
    except KeyError:
        raise InvalidParameterError(
            "color_ramp", f"unknown preset {name!r}, "
            f"available: {', '.join(sorted(PRESETS))}") from None
    return ColorRamp.from_pairs(pairs, mode=mode)

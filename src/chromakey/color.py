"""
Color parsing and per-pixel similarity scoring.

Every scoring function accepts an ``(..., 3)`` or ``(..., 4)`` uint8 array of
pixels and returns an array of the leading shape, so mattes can score a whole
image at once. Tolerances passed here are fractions in [0, 1].
"""

from __future__ import annotations

import enum
import logging
import re
from dataclasses import dataclass
from typing import Dict, Optional, Tuple, Union

import numpy as np

from .errors import InvalidColorFormat

RGB = Tuple[int, int, int]

# sqrt(3 * 255**2) rounded up, the largest distance two RGB colors can have.
MAX_RGB_DISTANCE = 442.0

GREEN_SCREEN_HEX = "#00ff00"
GREEN_HUE_RANGE = (60.0, 180.0)
FALLBACK_RGB: RGB = (0, 0, 0)

_HEX_PATTERN = re.compile(r"#?([0-9a-f]{2})([0-9a-f]{2})([0-9a-f]{2})", re.IGNORECASE)


class KeyMode(str, enum.Enum):
    SOFT = "soft"
    HARD = "hard"


# (saturation, value) floors before tolerance relaxes them.
HSV_FLOORS: Dict[KeyMode, Tuple[float, float]] = {
    KeyMode.HARD: (0.5, 0.5),
    KeyMode.SOFT: (0.25, 0.35),
}


def hex_to_rgb(value: str) -> Optional[RGB]:
    if not isinstance(value, str):
        return None
    match = _HEX_PATTERN.fullmatch(value)
    if match is None:
        return None
    r, g, b = (int(part, 16) for part in match.groups())
    return r, g, b


def is_green_screen(value: str) -> bool:
    return isinstance(value, str) and value.lower() == GREEN_SCREEN_HEX


def _channels(pixels: np.ndarray) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    pixels = np.asarray(pixels)
    if pixels.shape[-1] not in (3, 4):
        raise ValueError(f"Expected RGB or RGBA pixels, got shape {pixels.shape}")
    rgb = pixels[..., :3].astype(np.float64)
    return rgb[..., 0], rgb[..., 1], rgb[..., 2]


def rgb_distance(pixels: np.ndarray, target: RGB) -> np.ndarray:
    r, g, b = _channels(pixels)
    tr, tg, tb = target
    return np.sqrt((r - tr) ** 2 + (g - tg) ** 2 + (b - tb) ** 2)


def rgb_similarity(pixels: np.ndarray, target: RGB) -> np.ndarray:
    """
    Map Euclidean RGB distance onto [0, 1]; 1.0 means identical color.
    """
    similarity = 1.0 - rgb_distance(pixels, target) / MAX_RGB_DISTANCE
    return np.clip(similarity, 0.0, 1.0)


def rgb_to_hsv(pixels: np.ndarray) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Return ``(hue, saturation, value)`` with hue in degrees [0, 360) and the
    other two in [0, 1]. Achromatic pixels get hue 0.
    """
    r, g, b = _channels(pixels)
    cmax = np.maximum(np.maximum(r, g), b)
    cmin = np.minimum(np.minimum(r, g), b)
    delta = cmax - cmin
    safe_delta = np.where(delta == 0, 1.0, delta)

    hue = np.select(
        [delta == 0, cmax == g, cmax == r],
        [
            0.0,
            60.0 * ((b - r) / safe_delta + 2.0),
            60.0 * np.mod((g - b) / safe_delta, 6.0),
        ],
        default=60.0 * ((r - g) / safe_delta + 4.0),
    )
    hue = np.mod(hue, 360.0)
    saturation = np.where(cmax == 0, 0.0, delta / np.where(cmax == 0, 1.0, cmax))
    value = cmax / 255.0
    return hue, saturation, value


def hsv_floors(tolerance: float, mode: KeyMode) -> Tuple[float, float]:
    base_sat, base_val = HSV_FLOORS[KeyMode(mode)]
    relax = 1.0 - tolerance * 0.5
    return base_sat * relax, base_val * relax


def _dominant_green(pixels: np.ndarray) -> np.ndarray:
    r, g, b = _channels(pixels)
    return (g > r + 30) & (g > b + 30) & (g > 80)


def green_screen_is_background(
    pixels: np.ndarray,
    tolerance: float,
    mode: KeyMode = KeyMode.HARD,
) -> np.ndarray:
    dominant = _dominant_green(pixels)
    if dominant.all():
        return dominant

    hue, saturation, value = rgb_to_hsv(pixels)
    min_sat, min_val = hsv_floors(tolerance, mode)
    in_gate = (hue >= GREEN_HUE_RANGE[0]) & (hue <= GREEN_HUE_RANGE[1])
    return dominant | (in_gate & (saturation > min_sat) & (value > min_val))


def green_screen_similarity(
    pixels: np.ndarray,
    tolerance: float = 1.0,
    mode: KeyMode = KeyMode.SOFT,
) -> np.ndarray:
    """
    Continuous green-screen score: dominant green scores 1.0, pixels inside
    the hue gate that clear the saturation/value floors score their
    saturation, everything else scores 0.0.
    """
    hue, saturation, value = rgb_to_hsv(pixels)
    min_sat, min_val = hsv_floors(tolerance, mode)
    in_gate = (hue >= GREEN_HUE_RANGE[0]) & (hue <= GREEN_HUE_RANGE[1])
    keyed = in_gate & (saturation > min_sat) & (value > min_val)
    score = np.where(keyed, saturation, 0.0)
    score = np.where(_dominant_green(pixels), 1.0, score)
    return np.clip(score, 0.0, 1.0)


@dataclass(frozen=True)
class RGBDistance:
    target: RGB

    def similarity(self, pixels: np.ndarray) -> np.ndarray:
        return rgb_similarity(pixels, self.target)

    def is_background(self, pixels: np.ndarray, tolerance: float) -> np.ndarray:
        return rgb_distance(pixels, self.target) <= tolerance * MAX_RGB_DISTANCE


@dataclass(frozen=True)
class GreenScreenHSV:
    mode: KeyMode = KeyMode.HARD

    def similarity(self, pixels: np.ndarray) -> np.ndarray:
        # The feathered ramp already consumes the tolerance as its edge, so
        # the floors stay fully relaxed here.
        return green_screen_similarity(pixels, 1.0, self.mode)

    def is_background(self, pixels: np.ndarray, tolerance: float) -> np.ndarray:
        return green_screen_is_background(pixels, tolerance, self.mode)


ColorModel = Union[RGBDistance, GreenScreenHSV]


@dataclass(frozen=True)
class ColorKey:
    hex: str

    @property
    def is_green_screen(self) -> bool:
        return is_green_screen(self.hex)

    def rgb(self, strict: bool = False) -> RGB:
        parsed = hex_to_rgb(self.hex)
        if parsed is not None:
            return parsed
        if strict:
            raise InvalidColorFormat(self.hex)
        logging.warning("Unparseable key color %r; falling back to black.", self.hex)
        return FALLBACK_RGB

    def color_model(self, mode: KeyMode, strict: bool = False) -> ColorModel:
        if self.is_green_screen:
            return GreenScreenHSV(KeyMode(mode))
        return RGBDistance(self.rgb(strict=strict))

from __future__ import annotations

from typing import Tuple

import numpy as np

from ..color import ColorKey, KeyMode
from .base import Matte

__all__ = ["GlobalMatte", "feather_alpha"]


def feather_alpha(similarity: np.ndarray, edge_start: float, edge_end: float) -> np.ndarray:
    """
    Three-zone alpha rule: transparent at or above ``edge_start``, opaque at or
    below ``edge_end`` and a linear ramp in between.
    """
    similarity = np.clip(np.asarray(similarity, dtype=np.float64), 0.0, 1.0)
    span = edge_start - edge_end

    with np.errstate(divide="ignore", invalid="ignore"):
        ramp = 255.0 * (1.0 - (similarity - edge_end) / span)
    # Half-up rounding so 127.5 lands on 128.
    ramp = np.floor(np.nan_to_num(ramp, nan=255.0) + 0.5)

    alpha = np.where(similarity > edge_end, ramp, 255.0)
    alpha = np.where(similarity >= edge_start, 0.0, alpha)
    return np.clip(alpha, 0, 255).astype(np.uint8)


class GlobalMatte(Matte):
    """
    Classifies every pixel on its own, feathering the cut-off over a band of
    ``smoothness`` percent below the tolerance.
    """

    MODE_NAME = "global"
    KEY_MODE = KeyMode.SOFT

    def __init__(
        self,
        key: ColorKey,
        tolerance: float,
        smoothness: float = 0.0,
        strict_color: bool = False,
    ) -> None:
        super().__init__(key, tolerance, strict_color=strict_color)
        self.smoothness = smoothness

    @property
    def edges(self) -> Tuple[float, float]:
        edge_start = self.edge_start
        edge_end = max(0.0, edge_start - self.smoothness / 100.0)
        return edge_start, edge_end

    def apply(self, rgba: np.ndarray) -> None:
        if rgba.size == 0:
            return
        similarity = self.color_model.similarity(rgba)
        edge_start, edge_end = self.edges
        rgba[..., 3] = feather_alpha(similarity, edge_start, edge_end)

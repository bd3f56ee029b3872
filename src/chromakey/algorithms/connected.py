from __future__ import annotations

from typing import List, Tuple

import cv2
import numpy as np

from ..color import KeyMode
from .base import Matte

__all__ = ["ConnectedMatte", "clear_border_connected", "flood_clear"]

# (dx, dy) axis neighbours, in push order.
AXIS_NEIGHBORS: Tuple[Tuple[int, int], ...] = ((1, 0), (-1, 0), (0, 1), (0, -1))


def corner_seeds(width: int, height: int) -> List[int]:
    if width <= 0 or height <= 0:
        return []
    last_row = (height - 1) * width
    return [0, width - 1, last_row, last_row + width - 1]


def flood_clear(
    alpha: np.ndarray,
    background: np.ndarray,
    neighbors: Tuple[Tuple[int, int], ...] = AXIS_NEIGHBORS,
) -> int:
    """
    Clear ``alpha`` for every background pixel 4-connected to an image corner.

    ``background`` is the hard hit-test for each pixel. Pixels that fail it
    stop the fill and keep their alpha. Returns the number of cleared pixels.
    """
    height, width = background.shape
    hits = background.reshape(-1).tolist()
    visited = bytearray(width * height)
    cleared: List[int] = []

    stack = corner_seeds(width, height)
    while stack:
        offset = stack.pop()
        if visited[offset]:
            continue
        visited[offset] = 1
        if not hits[offset]:
            continue

        cleared.append(offset)
        x = offset % width
        for dx, dy in neighbors:
            nx = x + dx
            if nx < 0 or nx >= width:
                continue
            neighbor = offset + dy * width + dx
            if 0 <= neighbor < width * height and not visited[neighbor]:
                stack.append(neighbor)

    if cleared:
        index = np.asarray(cleared, dtype=np.intp)
        rows, cols = np.divmod(index, width)
        alpha[rows, cols] = 0
    return len(cleared)


def clear_border_connected(alpha: np.ndarray, background: np.ndarray) -> int:
    """
    Label 4-connected background regions and clear the ones holding a corner.

    Produces the same alpha plane as :func:`flood_clear` without visiting
    pixels one at a time. Returns the number of cleared pixels.
    """
    height, width = background.shape
    if height == 0 or width == 0:
        return 0

    _num_labels, labels = cv2.connectedComponents(background.astype(np.uint8), connectivity=4)
    corners = labels[[0, 0, height - 1, height - 1], [0, width - 1, 0, width - 1]]
    seeds = np.unique(corners[corners != 0])
    if seeds.size == 0:
        return 0

    reached = np.isin(labels, seeds)
    alpha[reached] = 0
    return int(reached.sum())


class ConnectedMatte(Matte):
    """
    Hard-edged keying that only removes background reachable from the image
    border, so enclosed regions of the key color inside the subject survive.
    """

    MODE_NAME = "flood"
    KEY_MODE = KeyMode.HARD

    def background_mask(self, rgba: np.ndarray) -> np.ndarray:
        return self.color_model.is_background(rgba, self.edge_start)

    def apply(self, rgba: np.ndarray) -> None:
        if rgba.size == 0:
            return
        clear_border_connected(rgba[..., 3], self.background_mask(rgba))

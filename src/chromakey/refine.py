from __future__ import annotations

import numpy as np

__all__ = ["erode_alpha"]


def erode_alpha(alpha: np.ndarray, strength: int) -> np.ndarray:
    """
    Shrink the opaque region of a 2D uint8 alpha plane in place.

    Each iteration clears interior pixels with nonzero alpha that touch a
    fully transparent axis neighbour. Decisions within one iteration read a
    snapshot taken before it, and the outermost rows and columns are never
    modified.
    """
    if alpha.ndim != 2:
        raise ValueError(f"Expected 2D alpha plane, got shape={alpha.shape}")

    strength = int(strength)
    height, width = alpha.shape
    if strength <= 0 or height < 3 or width < 3:
        return alpha

    snapshot = np.empty_like(alpha)
    interior = alpha[1:-1, 1:-1]

    for _ in range(strength):
        np.copyto(snapshot, alpha)
        transparent = snapshot == 0
        touches_clear = (
            transparent[1:-1, :-2]
            | transparent[1:-1, 2:]
            | transparent[:-2, 1:-1]
            | transparent[2:, 1:-1]
        )
        erode = ~transparent[1:-1, 1:-1] & touches_clear
        if not erode.any():
            break
        interior[erode] = 0

    return alpha

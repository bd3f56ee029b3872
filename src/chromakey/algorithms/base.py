from __future__ import annotations

import abc
from typing import ClassVar

import numpy as np

from ..color import ColorKey, ColorModel, KeyMode


class Matte(abc.ABC):
    """
    Abstract base class for background classification strategies.

    A matte writes the alpha channel of an ``(h, w, 4)`` uint8 array in place
    and never touches the color channels.
    """

    MODE_NAME: ClassVar[str]
    KEY_MODE: ClassVar[KeyMode]

    def __init__(
        self,
        key: ColorKey,
        tolerance: float,
        strict_color: bool = False,
    ) -> None:
        self.key = key
        self.tolerance = tolerance
        self.color_model: ColorModel = key.color_model(self.KEY_MODE, strict=strict_color)

    @property
    def edge_start(self) -> float:
        return self.tolerance / 100.0

    def __call__(self, rgba: np.ndarray) -> np.ndarray:
        self._validate(rgba)
        self.apply(rgba)
        return rgba

    @abc.abstractmethod
    def apply(self, rgba: np.ndarray) -> None:
        ...

    @staticmethod
    def _validate(rgba: np.ndarray) -> None:
        if not isinstance(rgba, np.ndarray):
            raise TypeError(f"Expected np.ndarray, got {type(rgba)}")
        if rgba.ndim != 3 or rgba.shape[2] != 4:
            raise ValueError(f"Expected (H, W, 4) array, got shape {rgba.shape}")
        if rgba.dtype != np.uint8:
            raise ValueError(f"Expected uint8 dtype, got {rgba.dtype}")
        if not rgba.flags.writeable:
            raise ValueError("Matte output array is read-only.")

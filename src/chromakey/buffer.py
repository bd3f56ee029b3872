from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Union

import numpy as np

from .errors import BufferNotWritable, BufferSizeMismatch, UnsupportedPixelType

__all__ = ["RawImageData", "CHANNELS"]

CHANNELS = 4

Storage = Union[bytearray, memoryview, np.ndarray]


@dataclass
class RawImageData:
    """
    Row-major RGBA8 pixels with the origin at the top-left corner.

    ``data`` is the caller's storage; keying writes into it directly and hands
    the very same object back, so no second copy of the image is made.
    """

    width: int
    height: int
    data: Storage

    @property
    def nbytes(self) -> int:
        return memoryview(self.data).nbytes

    @property
    def pixel_count(self) -> int:
        return self.width * self.height

    def validate(self) -> None:
        if self.width < 0 or self.height < 0:
            raise BufferSizeMismatch(self.width, self.height, self.nbytes)
        if self.nbytes != self.pixel_count * CHANNELS:
            raise BufferSizeMismatch(self.width, self.height, self.nbytes)
        view = memoryview(self.data)
        if view.format != "B":
            raise UnsupportedPixelType(
                f"Pixel storage must hold unsigned bytes, got format {view.format!r}."
            )
        if view.readonly:
            raise BufferNotWritable(
                f"Pixel storage of type {type(self.data).__name__} is read-only; "
                "pass a bytearray or a writable numpy array."
            )

    def rgba(self) -> np.ndarray:
        """
        Return an ``(height, width, 4)`` uint8 view sharing memory with ``data``.
        """
        self.validate()
        flat = np.frombuffer(self.data, dtype=np.uint8)
        return flat.reshape(self.height, self.width, CHANNELS)

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "RawImageData":
        return cls(
            width=int(payload["width"]),
            height=int(payload["height"]),
            data=payload["data"],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"width": self.width, "height": self.height, "data": self.data}

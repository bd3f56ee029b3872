from __future__ import annotations

__all__ = [
    "ChromaKeyError",
    "BufferSizeMismatch",
    "BufferNotWritable",
    "InvalidColorFormat",
    "UnsupportedPixelType",
]


class ChromaKeyError(Exception):
    """
    Base class for precondition failures raised before any pixel is touched.
    """


class BufferSizeMismatch(ChromaKeyError, ValueError):
    def __init__(self, width: int, height: int, nbytes: int) -> None:
        self.width = width
        self.height = height
        self.nbytes = nbytes
        super().__init__(
            f"Pixel buffer holds {nbytes} bytes but a {width}x{height} RGBA image "
            f"needs {max(0, width) * max(0, height) * 4}."
        )


class BufferNotWritable(ChromaKeyError, TypeError):
    pass


class UnsupportedPixelType(ChromaKeyError, TypeError):
    pass


class InvalidColorFormat(ChromaKeyError, ValueError):
    def __init__(self, value: str) -> None:
        self.value = value
        super().__init__(f"Expected a color like '#RRGGBB', got {value!r}.")

"""
Chroma-key background removal toolkit.

This package keys a chosen background color out of raw RGBA pixel buffers,
either feathering every pixel independently or flood-filling from the image
border, and then erodes the remaining fringe.
"""

from .buffer import RawImageData
from .errors import (
    BufferNotWritable,
    BufferSizeMismatch,
    ChromaKeyError,
    InvalidColorFormat,
    UnsupportedPixelType,
)
from .pipeline import ChromaKeyRemover, KeyingConfig, KeyingRequest, KeyingResponse, run_pipeline

__all__ = [
    "ChromaKeyRemover",
    "KeyingConfig",
    "KeyingRequest",
    "KeyingResponse",
    "RawImageData",
    "run_pipeline",
    "ChromaKeyError",
    "BufferSizeMismatch",
    "BufferNotWritable",
    "InvalidColorFormat",
    "UnsupportedPixelType",
]

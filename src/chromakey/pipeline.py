from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Hashable, Iterable, List, Optional

from PIL import Image

from .algorithms.base import Matte
from .algorithms.connected import ConnectedMatte
from .algorithms.feathered import GlobalMatte
from .buffer import RawImageData
from .color import ColorKey
from .refine import erode_alpha

MATTE_REGISTRY: Dict[str, type[Matte]] = {
    "global": GlobalMatte,
    "flood": ConnectedMatte,
}
DEFAULT_MODE = "global"


def _clamp_percent(name: str, value: float) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        number = math.nan
    if not math.isfinite(number):
        logging.warning("%s=%r is not a finite number; using 0.", name, value)
        return 0.0
    clamped = max(0.0, min(100.0, number))
    if clamped != number:
        logging.warning("%s=%s is outside [0, 100]; clamped to %s.", name, number, clamped)
    return clamped


def _clamp_strength(value: Any) -> int:
    try:
        number = float(value)
    except (TypeError, ValueError):
        number = math.nan
    if not math.isfinite(number):
        logging.warning("erode_strength=%r is not a finite number; using 0.", value)
        return 0
    return max(0, int(number))


@dataclass
class KeyingConfig:
    mode: str = DEFAULT_MODE
    target_color: str = "#00FF00"
    tolerance: float = 50.0
    smoothness: float = 10.0
    erode_strength: int = 0
    strict_color: bool = False

    def clamped(self) -> "KeyingConfig":
        return replace(
            self,
            tolerance=_clamp_percent("tolerance", self.tolerance),
            smoothness=_clamp_percent("smoothness", self.smoothness),
            erode_strength=_clamp_strength(self.erode_strength),
        )

    def build_matte(self) -> Matte:
        config = self.clamped()
        key = ColorKey(config.target_color)
        matte_cls = MATTE_REGISTRY.get(config.mode, MATTE_REGISTRY[DEFAULT_MODE])
        if issubclass(matte_cls, GlobalMatte):
            return matte_cls(
                key,
                config.tolerance,
                smoothness=config.smoothness,
                strict_color=config.strict_color,
            )
        return matte_cls(key, config.tolerance, strict_color=config.strict_color)


@dataclass
class KeyingRequest:
    id: Hashable
    raw_image_data: RawImageData
    config: KeyingConfig = field(default_factory=KeyingConfig)

    @classmethod
    def from_dict(cls, message: Dict[str, Any]) -> "KeyingRequest":
        defaults = KeyingConfig()
        config = KeyingConfig(
            mode=message.get("removalMode") or DEFAULT_MODE,
            target_color=message.get("targetColorHex", defaults.target_color),
            tolerance=message.get("colorTolerance", defaults.tolerance),
            smoothness=message.get("smoothness", defaults.smoothness),
            erode_strength=message.get("erodeStrength", defaults.erode_strength),
        )
        return cls(
            id=message.get("id"),
            raw_image_data=RawImageData.from_dict(message["rawImageData"]),
            config=config,
        )


@dataclass
class KeyingResponse:
    id: Hashable
    processed_image_data: RawImageData

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "processedImageData": self.processed_image_data.to_dict(),
        }


def run_pipeline(request: KeyingRequest, strict_color: Optional[bool] = None) -> KeyingResponse:
    """
    Key one image: matte selected by ``config.mode``, then erosion.

    The request's pixel storage is mutated in place and returned inside the
    response. Every precondition is checked before the first write.
    """
    config = request.config
    if strict_color is not None:
        config = replace(config, strict_color=strict_color)
    config = config.clamped()

    image = request.raw_image_data
    rgba = image.rgba()
    matte = config.build_matte()

    logging.debug(
        "Keying request %r: %dx%d mode=%s color=%s tolerance=%s erode=%d",
        request.id,
        image.width,
        image.height,
        matte.MODE_NAME,
        config.target_color,
        config.tolerance,
        config.erode_strength,
    )

    matte(rgba)
    erode_alpha(rgba[..., 3], config.erode_strength)

    return KeyingResponse(id=request.id, processed_image_data=image)


class ChromaKeyRemover:
    def __init__(self, config: KeyingConfig) -> None:
        if config.mode not in MATTE_REGISTRY:
            raise ValueError(f"Unknown mode '{config.mode}'. Choices: {list(MATTE_REGISTRY)}")
        self.config = config.clamped()
        # Resolve the key color up front so strict mode fails before any image is read.
        self.config.build_matte()

    def remove_background(self, image: Image.Image) -> Image.Image:
        rgba = image.convert("RGBA")
        data = bytearray(rgba.tobytes())
        request = KeyingRequest(
            id=None,
            raw_image_data=RawImageData(rgba.width, rgba.height, data),
            config=self.config,
        )
        response = run_pipeline(request)
        keyed = response.processed_image_data
        return Image.frombytes("RGBA", (keyed.width, keyed.height), bytes(keyed.data))

    def process_directory(
        self,
        input_dir: Path,
        output_dir: Path,
        overwrite: bool = False,
        progress=None,
    ) -> Dict[str, float]:
        input_dir = Path(input_dir)
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

        pending: List[Path] = []
        for image_path in sorted(self._iter_images(input_dir)):
            destination = output_dir / (image_path.stem + ".png")
            if destination.exists() and not overwrite:
                continue
            pending.append(image_path)

        if progress is not None:
            pending_iter: Iterable[Path] = progress(pending)
        else:
            pending_iter = pending

        timings: Dict[str, float] = {}
        for image_path in pending_iter:
            start = time.perf_counter()
            with Image.open(image_path) as img:
                result = self.remove_background(img)
            result.save(output_dir / (image_path.stem + ".png"))
            timings[str(image_path)] = time.perf_counter() - start

        return timings

    @staticmethod
    def _iter_images(path: Path) -> Iterable[Path]:
        exts = {".jpg", ".jpeg", ".png", ".bmp", ".tiff", ".webp"}
        for file in path.rglob("*"):
            if file.is_file() and file.suffix.lower() in exts:
                yield file

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from statistics import mean
from typing import List, Optional

from tqdm import tqdm

from .errors import ChromaKeyError
from .pipeline import ChromaKeyRemover, KeyingConfig, MATTE_REGISTRY


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Chroma-key background remover for RGBA images.",
    )
    parser.add_argument(
        "--input-dir",
        type=Path,
        required=True,
        help="Directory containing source images.",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        required=True,
        help="Directory where keyed RGBA PNGs will be written.",
    )
    parser.add_argument(
        "--mode",
        default="global",
        choices=list(MATTE_REGISTRY.keys()),
        help="'global' feathers every pixel; 'flood' only clears background connected to the border.",
    )
    parser.add_argument(
        "--color",
        dest="target_color",
        default="#00FF00",
        help="Key color as #RRGGBB. #00FF00 selects the green-screen detector.",
    )
    parser.add_argument(
        "--tolerance",
        type=float,
        default=50.0,
        help="Color tolerance in percent [0,100].",
    )
    parser.add_argument(
        "--smoothness",
        type=float,
        default=10.0,
        help="Feather width in percent [0,100]. Only used by the global mode.",
    )
    parser.add_argument(
        "--erode",
        dest="erode_strength",
        type=int,
        default=0,
        help="Number of erosion iterations applied to the alpha channel.",
    )
    parser.add_argument(
        "--strict-color",
        action="store_true",
        help="Reject malformed key colors instead of falling back to black.",
    )
    parser.add_argument(
        "--overwrite",
        action="store_true",
        help="Overwrite outputs even if the file already exists.",
    )
    parser.add_argument(
        "--json",
        dest="json_report",
        type=Path,
        default=None,
        help="Optional path to write a JSON timing report.",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Logging level, e.g. DEBUG or INFO.",
    )
    return parser.parse_args(argv)


def run(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )
    args.input_dir = args.input_dir.expanduser()
    args.output_dir = args.output_dir.expanduser()

    if not args.input_dir.exists():
        raise SystemExit(f"Input directory {args.input_dir} does not exist.")

    config = KeyingConfig(
        mode=args.mode,
        target_color=args.target_color,
        tolerance=args.tolerance,
        smoothness=args.smoothness,
        erode_strength=max(0, args.erode_strength),
        strict_color=args.strict_color,
    )
    try:
        remover = ChromaKeyRemover(config)
        print(f"[+] Keying {args.input_dir} ({config.mode}, {config.target_color})")
        timings = remover.process_directory(
            args.input_dir,
            args.output_dir,
            overwrite=args.overwrite,
            progress=lambda items: tqdm(items, desc="Keying", unit="img"),
        )
    except ChromaKeyError as exc:
        raise SystemExit(str(exc)) from exc

    if not timings:
        print("    No images processed (perhaps outputs already exist?).")
        return

    total_time = sum(timings.values())
    avg_time = mean(timings.values())
    print(f"    Processed {len(timings)} images | total {total_time:.2f}s | avg {avg_time:.3f}s")

    if args.json_report:
        report = {
            "mode": config.mode,
            "images": len(timings),
            "total_seconds": total_time,
            "avg_seconds": avg_time,
            "per_image": timings,
        }
        args.json_report.parent.mkdir(parents=True, exist_ok=True)
        with args.json_report.open("w", encoding="utf-8") as handle:
            json.dump(report, handle, indent=2)
        print(f"[+] Wrote timing report to {args.json_report}")


if __name__ == "__main__":
    run()

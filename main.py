"""
Photomark - Main Entry Point
============================
Command-line front end for batch watermarking.

Usage:
    python main.py export photos/ -o out/ --text "(c) 2024" --position center
    python main.py export a.jpg b.png -o out/ --image logo.png --format png
    python main.py export photos/ -o out/ --template templates.json --template-name Default
    python main.py date photos/ --font-size 40 --color yellow

Architecture:
    - Model: photomark/core/ (pure image logic, batch export)
    - Workers: photomark/workers/ (QThread front ends; not used here, so no Qt needed)
    - Controller: This file (argument parsing, logging, exit codes)
"""

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

from PIL import ImageColor

from photomark.core.exif_date import DATE_SPEC, stamp_directory
from photomark.core.export import ExportConfig, ExportError, export_images
from photomark.core.image_io import collect_images
from photomark.core.spec import Position, WatermarkKind, WatermarkSpec, load_template_specs

logger = logging.getLogger("photomark")

POSITION_CHOICES = [p.value for p in Position]


def parse_color(value: str):
    """argparse type: CSS color name, #RRGGBB, #RRGGBBAA -> RGBA tuple."""
    try:
        rgb = ImageColor.getrgb(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e
    return rgb if len(rgb) == 4 else (*rgb, 255)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="photomark",
        description="Add text or image watermarks to photos.",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: INFO).",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    # ----- export -----
    exp = sub.add_parser("export", help="Watermark images and export copies.")
    exp.add_argument("inputs", nargs="+", type=Path, help="Image files or directories.")
    exp.add_argument("-o", "--output-dir", type=Path, required=True)
    exp.add_argument("--template", type=Path, help="Templates JSON file.")
    exp.add_argument("--template-name", help="Template to use from --template.")

    wm = exp.add_argument_group("watermark (override template values)")
    kind = wm.add_mutually_exclusive_group()
    kind.add_argument("--text", help="Text watermark.")
    kind.add_argument("--image", help="Image watermark file.")
    wm.add_argument("--font-size", type=int)
    wm.add_argument("--color", type=parse_color)
    wm.add_argument("--opacity", type=int, help="0-100")
    wm.add_argument("--position", choices=POSITION_CHOICES)
    wm.add_argument("--offset-x", type=int)
    wm.add_argument("--offset-y", type=int)
    wm.add_argument("--rotation", type=float, help="Degrees, counter-clockwise.")

    out = exp.add_argument_group("output")
    out.add_argument("--format", dest="output_format", default="jpeg", choices=["jpeg", "png"])
    out.add_argument("--quality", type=int, default=90, help="JPEG quality 1-100 (default: 90).")
    out.add_argument("--prefix", default="wm_")
    out.add_argument("--suffix", default="")
    out.add_argument("--scale", type=int, default=100, help="Output size in percent (default: 100).")

    # ----- date -----
    date = sub.add_parser("date", help="Stamp photos with their EXIF capture date.")
    date.add_argument("path", type=Path, help="Image file or directory.")
    date.add_argument("--font-size", type=int, default=DATE_SPEC.font_size)
    date.add_argument("--color", type=parse_color, default=DATE_SPEC.color)
    date.add_argument("--position", choices=POSITION_CHOICES, default=DATE_SPEC.position)
    date.add_argument("--quality", type=int, default=95)

    return parser


def resolve_spec(args: argparse.Namespace) -> WatermarkSpec:
    """
    Start from the chosen template (or the defaults) and apply command-line
    overrides.

    Raises:
        ValueError: If the template can't be found.
    """
    spec = WatermarkSpec()
    if args.template:
        templates = load_template_specs(args.template)
        if args.template_name:
            if args.template_name not in templates:
                raise ValueError(f"Template not found: {args.template_name}")
            spec = templates[args.template_name]
        elif len(templates) == 1:
            spec = next(iter(templates.values()))
        else:
            raise ValueError("--template-name is required when the file holds several templates")

    overrides = {
        "font_size": args.font_size,
        "color": args.color,
        "opacity": args.opacity,
        "position": args.position,
        "offset_x": args.offset_x,
        "offset_y": args.offset_y,
        "rotation": args.rotation,
    }
    if args.text is not None:
        overrides.update(kind=WatermarkKind.TEXT, text=args.text)
    if args.image is not None:
        overrides.update(kind=WatermarkKind.IMAGE, image_path=args.image)

    spec = replace(spec, **{k: v for k, v in overrides.items() if v is not None})
    return spec.clamped()


def run_export(args: argparse.Namespace) -> int:
    try:
        spec = resolve_spec(args)
    except (OSError, ValueError) as e:
        logger.error("Invalid watermark settings: %s", e)
        return 2

    image_paths = collect_images(args.inputs)
    if not image_paths:
        logger.error("No supported images found")
        return 2

    config = ExportConfig(
        image_paths=image_paths,
        output_dir=args.output_dir,
        spec=spec,
        output_format=args.output_format,
        quality=max(1, min(100, args.quality)),
        prefix=args.prefix,
        suffix=args.suffix,
        scale_percent=args.scale,
    )

    def on_progress(current: int, total: int, name: str):
        logger.info("[%d/%d] %s", current, total, name)

    try:
        results = export_images(config, on_progress)
    except ExportError as e:
        logger.error("%s", e)
        return 1

    logger.info("All %d image(s) exported to %s", len(results), args.output_dir)
    return 0


def run_date(args: argparse.Namespace) -> int:
    spec = replace(
        DATE_SPEC,
        font_size=args.font_size,
        color=args.color,
        position=args.position,
    ).clamped()

    try:
        written = stamp_directory(args.path, spec, quality=max(1, min(100, args.quality)))
    except OSError as e:
        logger.error("%s", e)
        return 1

    logger.info("Stamped %d image(s)", len(written))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Application entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "export":
        return run_export(args)
    return run_date(args)


if __name__ == "__main__":
    sys.exit(main())

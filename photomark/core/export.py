"""
Batch Export
============
Watermarks a list of images and writes them to an output directory.

Workflow:
1. Decode the watermark image once (image watermarks only; a missing
   asset leaves the images unwatermarked)
2. For each source image, in order:
   a. Decode it (a failure here aborts the batch)
   b. Composite the watermark
   c. Optionally rescale, then encode as JPEG or PNG
3. Stop at the first failure: later images are not processed

Naming Convention:
- {prefix}{original stem}{suffix}.jpg | .png  (default prefix "wm_")

The QThread front end lives in photomark.workers.export_worker.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional

from .compositor import WatermarkCompositor, load_watermark_asset
from .image_io import open_image, output_filename, save_image, scale_image
from .spec import WatermarkSpec

logger = logging.getLogger(__name__)


@dataclass
class ExportConfig:
    """Complete configuration for a batch export."""
    image_paths: List[Path] = field(default_factory=list)
    output_dir: Path = field(default_factory=lambda: Path.cwd() / "output")
    spec: WatermarkSpec = field(default_factory=WatermarkSpec)

    output_format: str = "jpeg"  # "jpeg" or "png"
    quality: int = 90  # JPEG only, 1-100
    prefix: str = "wm_"
    suffix: str = ""
    scale_percent: int = 100


@dataclass
class ExportResult:
    """Result of exporting a single image."""
    source_path: Path
    output_path: Optional[Path] = None
    success: bool = False
    error_message: str = ""


class ExportError(RuntimeError):
    """A batch export stopped on the image in source_path."""

    def __init__(self, source_path: Path, cause: Exception):
        super().__init__(f"Processing failed for {Path(source_path).name}: {cause}")
        self.source_path = Path(source_path)
        self.cause = cause


ProgressCallback = Callable[[int, int, str], None]


class BatchExporter:
    """Per-batch state shared by export_images and ExportWorker."""

    def __init__(self, config: ExportConfig):
        self.config = config
        self.compositor = WatermarkCompositor()
        self.asset = None
        if config.spec.is_image:
            self.asset = load_watermark_asset(config.spec.image_path)

    def export_one(self, image_path: Path) -> ExportResult:
        """Raises on any failure; the caller decides how to surface it."""
        cfg = self.config
        source = open_image(image_path)
        watermarked = self.compositor.composite(source, cfg.spec, self.asset)
        watermarked = scale_image(watermarked, cfg.scale_percent)

        name = output_filename(image_path, cfg.prefix, cfg.suffix, cfg.output_format)
        target = save_image(watermarked, Path(cfg.output_dir) / name,
                            cfg.output_format, cfg.quality)
        return ExportResult(source_path=Path(image_path), output_path=target, success=True)


def export_images(
        config: ExportConfig,
        progress_callback: Optional[ProgressCallback] = None
) -> List[ExportResult]:
    """
    Export every image in config, sequentially.

    Args:
        config: Export settings and the watermark spec.
        progress_callback: Called as (current, total, file_name) before each image.

    Returns:
        One successful ExportResult per image.

    Raises:
        ExportError: On the first image that fails; nothing after it is written.
    """
    exporter = BatchExporter(config)
    total = len(config.image_paths)
    results: List[ExportResult] = []

    for idx, image_path in enumerate(config.image_paths):
        image_path = Path(image_path)
        if progress_callback:
            progress_callback(idx + 1, total, image_path.name)
        try:
            results.append(exporter.export_one(image_path))
        except (OSError, ValueError) as e:
            logger.error("Export aborted at %s: %s", image_path, e)
            raise ExportError(image_path, e) from e

    logger.info("Exported %d image(s) to %s", len(results), config.output_dir)
    return results

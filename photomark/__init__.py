"""
Photomark Package
=================
Image watermarking: text or image watermarks placed on a 9-point grid,
batch export, and EXIF date stamping.

Modules:
    - core: Pure image logic (no UI dependencies)
    - workers: QThread workers for batch export and previews

Usage:
    from photomark.core import WatermarkSpec, WatermarkCompositor
    from photomark.workers import ExportWorker, ExportConfig

The QThread workers are imported on first access, so importing the
package (or photomark.core) does not need PyQt6.
"""

__version__ = "1.0.0"
__app_name__ = "Photomark"

# Core exports
from .core import (
    WatermarkCompositor,
    WatermarkSpec,
    WatermarkKind,
    Position,
    composite,
    load_watermark_asset,
    ExportConfig,
    ExportResult,
    ExportError,
    export_images,
    render_preview,
)

# Worker exports, resolved lazily
_WORKERS = ("ExportWorker", "PreviewWorker")


def __getattr__(name):
    if name in _WORKERS:
        from . import workers
        return getattr(workers, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    # Version info
    "__version__",
    "__app_name__",

    # Core
    "WatermarkCompositor",
    "WatermarkSpec",
    "WatermarkKind",
    "Position",
    "composite",
    "load_watermark_asset",
    "ExportConfig",
    "ExportResult",
    "ExportError",
    "export_images",
    "render_preview",

    # Workers
    "ExportWorker",
    "PreviewWorker",
]

"""
Core Module - Pure Image Logic
==============================
This module contains no UI dependencies.
Watermark compositing, placement, image I/O, batch export and proxy
previews are implemented here.
"""

from .compositor import WatermarkCompositor, composite, load_watermark_asset, watermark_file
from .exif_date import get_exif_date, stamp_date, stamp_directory
from .export import ExportConfig, ExportError, ExportResult, export_images
from .layout import MARGIN, image_anchor, text_anchor
from .preview import make_proxy, render_preview, scale_spec
from .spec import Position, WatermarkKind, WatermarkSpec, load_template_specs

__all__ = [
    "WatermarkCompositor",
    "composite",
    "load_watermark_asset",
    "watermark_file",
    "get_exif_date",
    "stamp_date",
    "stamp_directory",
    "ExportConfig",
    "ExportError",
    "ExportResult",
    "export_images",
    "MARGIN",
    "image_anchor",
    "text_anchor",
    "make_proxy",
    "render_preview",
    "scale_spec",
    "Position",
    "WatermarkKind",
    "WatermarkSpec",
    "load_template_specs",
]

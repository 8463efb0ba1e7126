"""
Workers Module - Async Thread Management
========================================
Contains QThread workers that drive the core module off the UI thread.

Components:
- ExportWorker: Sequential batch export, stops at the first failure
- PreviewWorker: Proxy-image preview rendering

The plain functions (export_images, render_preview) do the same work
synchronously for scripts and the command line; they live in
photomark.core and are re-exported here.
"""

from photomark.core.export import ExportConfig, ExportError, ExportResult, export_images
from photomark.core.preview import make_proxy, render_preview, scale_spec
from .export_worker import ExportWorker
from .preview_worker import PreviewWorker

__all__ = [
    # Export
    "ExportWorker",
    "ExportConfig",
    "ExportResult",
    "ExportError",
    "export_images",
    # Preview
    "PreviewWorker",
    "make_proxy",
    "render_preview",
    "scale_spec",
]

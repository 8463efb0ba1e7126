"""
Preview Worker - Proxy Image Preview
====================================
Runs render_preview off the UI thread. The proxy logic itself lives in
photomark.core.preview; this module only adds the QThread wrapper.
"""

import logging
from pathlib import Path

from PyQt6.QtCore import QThread, pyqtSignal

from photomark.core.compositor import load_watermark_asset
from photomark.core.image_io import open_image
from photomark.core.preview import DEFAULT_PREVIEW_SIZE, render_preview
from photomark.core.spec import WatermarkSpec

logger = logging.getLogger(__name__)


class PreviewWorker(QThread):
    """
    Worker thread for generating one preview.

    Signals:
        preview_ready(PIL.Image.Image): The composited proxy
        preview_error(str): Emitted when the source image can't be read
    """

    preview_ready = pyqtSignal(object)
    preview_error = pyqtSignal(str)

    def __init__(
            self,
            image_path: Path,
            spec: WatermarkSpec,
            max_size: int = DEFAULT_PREVIEW_SIZE,
            parent=None
    ):
        super().__init__(parent)
        self.image_path = Path(image_path)
        self.spec = spec
        self.max_size = max_size
        self._is_cancelled = False

    def cancel(self):
        self._is_cancelled = True

    def run(self):
        try:
            source = open_image(self.image_path)
        except OSError as e:
            logger.warning("Preview failed for %s: %s", self.image_path, e)
            self.preview_error.emit(f"Failed to load image: {e}")
            return

        if self._is_cancelled:
            return

        asset = load_watermark_asset(self.spec.image_path) if self.spec.is_image else None
        try:
            preview = render_preview(source, self.spec, asset, self.max_size)
        except Exception as e:  # surfaced through preview_error
            logger.exception("Preview rendering failed")
            self.preview_error.emit(f"Failed to render preview: {e}")
            return

        if not self._is_cancelled:
            self.preview_ready.emit(preview)

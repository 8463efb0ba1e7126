"""
Export Worker - Batch Watermark Export
======================================
QThread front end for photomark.core.export: the same sequential,
fail-fast batch, reported through Qt signals and cancellable between
images.
"""

import logging
from pathlib import Path
from typing import List

from PyQt6.QtCore import QThread, pyqtSignal

from photomark.core.export import BatchExporter, ExportConfig, ExportError, ExportResult

logger = logging.getLogger(__name__)


class ExportWorker(QThread):
    """
    Worker thread for batch export.

    Signals:
        progress(int, int, str): (current, total, current_file_name)
        image_completed(ExportResult): Emitted when each image is written
        finished_all(list[ExportResult]): Emitted when the batch ends
        error(str): Emitted when an image fails; the batch stops there
    """

    progress = pyqtSignal(int, int, str)
    image_completed = pyqtSignal(object)
    finished_all = pyqtSignal(list)
    error = pyqtSignal(str)

    def __init__(self, config: ExportConfig, parent=None):
        super().__init__(parent)
        self.config = config
        self._is_cancelled = False

    def cancel(self):
        """Request cancellation; takes effect between images."""
        self._is_cancelled = True

    def run(self):
        results: List[ExportResult] = []
        total = len(self.config.image_paths)

        if total == 0:
            self.error.emit("No images to export")
            self.finished_all.emit(results)
            return

        exporter = BatchExporter(self.config)
        for idx, image_path in enumerate(self.config.image_paths):
            if self._is_cancelled:
                break

            image_path = Path(image_path)
            self.progress.emit(idx + 1, total, image_path.name)

            try:
                result = exporter.export_one(image_path)
            except Exception as e:  # surfaced through the error signal
                err = ExportError(image_path, e)
                logger.error("%s", err)
                results.append(ExportResult(
                    source_path=image_path, success=False, error_message=str(e)
                ))
                self.error.emit(str(err))
                break

            results.append(result)
            self.image_completed.emit(result)

        self.finished_all.emit(results)

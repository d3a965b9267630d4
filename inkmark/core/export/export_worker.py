"""
Background export so large documents do not block the UI thread.
"""
import structlog
from PyQt5.QtCore import QThread, pyqtSignal

from inkmark.core.annotations import StoreSnapshot
from inkmark.core.document.pdf_exporter import PDFExporter
from inkmark.core.errors import InkmarkError

logger = structlog.get_logger()


class ExportWorker(QThread):
    """Worker thread that bakes a store snapshot into a copy of the source PDF."""

    # Signals
    finished_export = pyqtSignal(object)  # output bytes
    failed = pyqtSignal(str, object)  # message, exception
    progress = pyqtSignal(str)  # status message
    page_progress = pyqtSignal(int, int)  # current, total pages

    def __init__(self, source: bytes, snapshot: StoreSnapshot,
                 exporter: PDFExporter = None, parent=None):
        super().__init__(parent)
        # Taken by the caller before the thread starts; the store may keep
        # changing while this export runs.
        self.source = bytes(source)
        self.snapshot = snapshot
        self.exporter = exporter or PDFExporter()
        self.result = None
        self.error = None

    def run(self):
        """Execute the export in a background thread."""
        self.exporter.progress_signal.connect(self._on_page_progress)
        self.progress.emit("Exporting annotations...")
        try:
            self.result = self.exporter.export(self.source, self.snapshot)
        except InkmarkError as e:
            self.error = e
            logger.warning("export_failed", error=str(e), error_type=type(e).__name__)
            self.failed.emit(str(e), e)
            return
        except Exception as e:
            # Anything else still has to reach the UI; the thread ends here
            self.error = e
            logger.exception("export_crashed", error_type=type(e).__name__)
            self.failed.emit(f"Error during export: {e}", e)
            return
        finally:
            self.exporter.progress_signal.disconnect(self._on_page_progress)

        self.progress.emit("Finalizing...")
        self.finished_export.emit(self.result)

    def _on_page_progress(self, current, total):
        """Handle page-level progress updates."""
        self.page_progress.emit(current, total)

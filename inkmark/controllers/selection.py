"""
Holds the viewer's current native text selection.
"""
from typing import Optional

from PyQt5.QtCore import QObject, pyqtSignal

from inkmark.core.annotations import TextSelection
from inkmark.core.geometry import Rect


class TextSelectionModel(QObject):
    """
    Current text selection inside the document container.

    The viewer widget reports the selected text and its device-space
    bounding box; the interaction controller reads and clears it.
    """

    # Signals
    selection_changed = pyqtSignal()
    selection_cleared = pyqtSignal()

    def __init__(self, parent=None):
        super().__init__(parent)
        self._selection: Optional[TextSelection] = None

    def set_selection(self, text: str, rect: Rect) -> None:
        self._selection = TextSelection(text, Rect(*rect))
        self.selection_changed.emit()

    def current(self) -> Optional[TextSelection]:
        return self._selection

    def has_selection(self) -> bool:
        return self._selection is not None and not self._selection.is_empty

    def clear(self) -> None:
        if self._selection is None:
            return
        self._selection = None
        self.selection_cleared.emit()

from PyQt5.QtCore import Qt

from inkmark.core.geometry import Point
from .interaction_controller import EDITOR_TOOLS, InteractionController, Tool


class UserInputHandler:
    """
    Forwards mouse and keyboard events from the document viewport to the
    interaction controller.
    """
    def __init__(self, controller: InteractionController):
        """
        Initializes the handler with the controller to drive.

        Args:
            controller (InteractionController): Receives the translated events.
        """
        self.controller = controller

    @staticmethod
    def _point(event) -> Point:
        pos = event.pos()
        return Point(pos.x(), pos.y())

    def handle_mouse_press(self, event):
        """
        Handles mouse press events on the viewport.

        Args:
            event (QMouseEvent): The mouse event.
        """
        if event.button() == Qt.LeftButton:
            self.controller.on_pointer_down(self._point(event))
            event.accept()

    def handle_mouse_move(self, event):
        """
        Handles mouse move events; only drags with the left button count.
        """
        if event.buttons() & Qt.LeftButton:
            self.controller.on_pointer_move(self._point(event))

    def handle_mouse_release(self, event):
        """
        Handles mouse release events. A release with the text box or comment
        tool places an editor at the pointer.
        """
        if event.button() != Qt.LeftButton:
            return
        point = self._point(event)
        if self.controller.active_tool in EDITOR_TOOLS:
            self.controller.on_click(point)
        else:
            self.controller.on_pointer_up(point)
        event.accept()

    def handle_leave(self, event):
        self.controller.on_pointer_leave()

    def handle_key_press(self, event):
        """
        Handles key presses while the viewport has focus.

        Escape cancels the capture in progress. Enter confirms an open comment
        editor; text boxes take Enter as a newline.
        """
        key = event.key()
        if key == Qt.Key_Escape and self.controller.editor is not None:
            self.controller.cancel_editor()
            event.accept()
        elif key == Qt.Key_Escape:
            self.controller.cancel()
            event.accept()
        elif (key in (Qt.Key_Return, Qt.Key_Enter)
              and self.controller.active_tool is Tool.COMMENT
              and self.controller.editor is not None
              and not (event.modifiers() & Qt.ShiftModifier)):
            self.controller.confirm_editor()
            event.accept()
        else:
            event.ignore()

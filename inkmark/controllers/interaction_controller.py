"""
Turns pointer input and the active tool into committed annotations.
"""
import itertools
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Union

import structlog
from PyQt5.QtCore import QObject, pyqtSignal

from inkmark.config import DEFAULT_INTERACTION, InteractionDefaults, parse_color
from inkmark.core.annotations import (
    Annotation,
    AnnotationStore,
    AnnotationType,
    CommentAnnotation,
    EllipseAnnotation,
    FreehandDrawingAnnotation,
    HighlightAnnotation,
    Position,
    RectangleAnnotation,
    SignatureAnnotation,
    StrikeThroughAnnotation,
    TextBoxAnnotation,
    UnderlineAnnotation,
)
from inkmark.core.errors import RangeError
from inkmark.core.geometry import (
    Point,
    bounding_rect,
    check_page_number,
    device_rect_to_page,
    device_to_page,
    encode_path,
)
from .selection import TextSelectionModel
from .view_layout import PageLayout

logger = structlog.get_logger()


class Tool(Enum):
    HIGHLIGHT = "highlight"
    UNDERLINE = "underline"
    STRIKE_THROUGH = "strike-through"
    TEXTBOX = "textbox"
    COMMENT = "comment"
    SIGNATURE = "signature"
    FREEHAND_DRAWING = "freehand-drawing"
    RECTANGLE = "rectangle"
    ELLIPSE = "ellipse"


RANGE_TOOLS = {
    Tool.HIGHLIGHT: HighlightAnnotation,
    Tool.UNDERLINE: UnderlineAnnotation,
    Tool.STRIKE_THROUGH: StrikeThroughAnnotation,
}
STROKE_TOOLS = frozenset({Tool.SIGNATURE, Tool.FREEHAND_DRAWING})
DRAG_TOOLS = {
    Tool.RECTANGLE: RectangleAnnotation,
    Tool.ELLIPSE: EllipseAnnotation,
}
EDITOR_TOOLS = frozenset({Tool.TEXTBOX, Tool.COMMENT})


# ==============================================================================
# States and gesture payloads
# ==============================================================================


@dataclass
class StrokeGesture:
    """Points of an in-progress stroke, in page space."""

    page_number: int
    points: List[Point] = field(default_factory=list)


@dataclass
class DragGesture:
    page_number: int
    start: Point
    end: Point


@dataclass
class EditorGesture:
    """An open inline editor waiting for confirmation."""

    page_number: int
    anchor: Point
    text: str = ""


Gesture = Union[StrokeGesture, DragGesture, EditorGesture]


@dataclass(frozen=True)
class Idle:
    tool = None


@dataclass(frozen=True)
class ToolArmed:
    tool: Tool


@dataclass(frozen=True)
class Capturing:
    tool: Tool
    gesture: Gesture


State = Union[Idle, ToolArmed, Capturing]


# Shared by every IdGenerator so controllers on one store never collide
_ID_COUNTER = itertools.count(1)


class IdGenerator:
    """Issues ids made of a type prefix and a strictly increasing counter."""

    PREFIXES = {
        AnnotationType.HIGHLIGHT: "highlight",
        AnnotationType.UNDERLINE: "underline",
        AnnotationType.STRIKE_THROUGH: "strike",
        AnnotationType.TEXTBOX: "textbox",
        AnnotationType.COMMENT: "comment",
        AnnotationType.SIGNATURE: "sig",
        AnnotationType.FREEHAND_DRAWING: "drawing",
        AnnotationType.RECTANGLE: "rect",
        AnnotationType.ELLIPSE: "ellipse",
    }

    def __init__(self, start: Optional[int] = None):
        """
        Args:
            start: First number of a private counter; by default the
                process-wide counter is used
        """
        self._counter = _ID_COUNTER if start is None else itertools.count(start)

    def next_id(self, annotation_type: AnnotationType) -> str:
        return f"{self.PREFIXES[annotation_type]}-{next(self._counter)}"


# ==============================================================================
# Controller
# ==============================================================================


class InteractionController(QObject):
    """
    Per-tool state machine between the viewer and the annotation store.

    Pointer coordinates are device pixels; every record is committed in page
    space so it does not depend on the zoom or scroll at capture time.
    """

    # Signals
    state_changed = pyqtSignal(object)  # new state
    annotation_committed = pyqtSignal(object)  # committed record
    editor_opened = pyqtSignal(object)  # EditorGesture
    editor_closed = pyqtSignal()

    def __init__(self, store: AnnotationStore, layout: PageLayout,
                 selection: TextSelectionModel,
                 defaults: InteractionDefaults = DEFAULT_INTERACTION,
                 id_generator: IdGenerator = None, parent=None):
        super().__init__(parent)
        self.store = store
        self.layout = layout
        self.selection = selection
        self.defaults = defaults
        self.ids = id_generator or IdGenerator()

        self.color: str = defaults.color
        self.stroke_width: float = defaults.stroke_width
        self.author_name: str = defaults.author_name
        self.author: Optional[str] = None

        self._state: State = Idle()

    # ------------------------------------------------------------------
    # Tool selection
    # ------------------------------------------------------------------

    @property
    def state(self) -> State:
        return self._state

    @property
    def active_tool(self) -> Optional[Tool]:
        return self._state.tool

    def set_tool(self, tool: Optional[Union[Tool, str]]) -> None:
        """
        Arm a tool, or return to idle with None.

        Any capture in progress is dropped without touching the store.
        """
        if tool is not None:
            tool = Tool(tool)
        self._discard_capture("tool_changed")
        self._set_state(ToolArmed(tool) if tool is not None else Idle())

    def set_color(self, color: str) -> None:
        """
        Set the color for new records.

        Raises:
            ValueError: If the color is not a #RRGGBB or #RGB string
        """
        parse_color(color)
        self.color = color

    def set_stroke_width(self, width: float) -> None:
        if width <= 0:
            raise ValueError(f"Stroke width must be positive, got {width}")
        self.stroke_width = width

    def set_author(self, name: Optional[str]) -> None:
        self.author = name
        if name:
            self.author_name = name

    def cancel(self) -> None:
        """Drop the capture in progress and stay on the current tool."""
        if isinstance(self._state, Capturing):
            tool = self._state.tool
            self._discard_capture("cancelled")
            self._set_state(ToolArmed(tool))

    # ------------------------------------------------------------------
    # Pointer events
    # ------------------------------------------------------------------

    def on_pointer_down(self, point: Point) -> None:
        tool = self.active_tool
        if tool not in STROKE_TOOLS and tool not in DRAG_TOOLS:
            return

        located = self._locate(point)
        if located is None:
            return
        page_number, page_point = located

        # A new press always replaces an unfinished gesture
        if tool in STROKE_TOOLS:
            gesture = StrokeGesture(page_number, [page_point])
        else:
            gesture = DragGesture(page_number, page_point, page_point)
        self._set_state(Capturing(tool, gesture))

    def on_pointer_move(self, point: Point) -> None:
        if not isinstance(self._state, Capturing):
            return
        gesture = self._state.gesture
        if isinstance(gesture, StrokeGesture):
            gesture.points.append(self._to_page(point, gesture.page_number))
        elif isinstance(gesture, DragGesture):
            gesture.end = self._to_page(point, gesture.page_number)

    def on_pointer_up(self, point: Optional[Point] = None) -> Optional[Annotation]:
        """
        Finish a gesture, or capture the text selection for range tools.

        Returns:
            The committed record, if any
        """
        state = self._state
        if isinstance(state, ToolArmed) and state.tool in RANGE_TOOLS:
            return self._capture_selection(state.tool)

        if not isinstance(state, Capturing):
            return None
        if isinstance(state.gesture, StrokeGesture):
            return self._finish_stroke(state.tool, state.gesture)
        if isinstance(state.gesture, DragGesture):
            if point is not None:
                state.gesture.end = self._to_page(point, state.gesture.page_number)
            return self._finish_drag(state.tool, state.gesture)
        return None

    def on_pointer_leave(self) -> Optional[Annotation]:
        """Leaving the page ends a stroke or drag like a release."""
        state = self._state
        if isinstance(state, Capturing) and not isinstance(state.gesture, EditorGesture):
            return self.on_pointer_up()
        return None

    def on_click(self, point: Point) -> None:
        """Open an inline editor at the click for the text box and comment tools."""
        tool = self.active_tool
        if tool not in EDITOR_TOOLS:
            return

        located = self._locate(point)
        if located is None:
            return
        page_number, page_point = located

        # Only one editor at a time; an open one loses its text
        self._discard_capture("editor_replaced")
        gesture = EditorGesture(page_number, page_point)
        self._set_state(Capturing(tool, gesture))
        self.editor_opened.emit(gesture)

    # ------------------------------------------------------------------
    # Inline editor
    # ------------------------------------------------------------------

    @property
    def editor(self) -> Optional[EditorGesture]:
        state = self._state
        if isinstance(state, Capturing) and isinstance(state.gesture, EditorGesture):
            return state.gesture
        return None

    def set_editor_text(self, text: str) -> None:
        editor = self.editor
        if editor is not None:
            editor.text = text

    def confirm_editor(self, text: Optional[str] = None) -> Optional[Annotation]:
        """
        Commit the open editor.

        Blank text discards the editor instead.

        Args:
            text: Final editor text; defaults to the text typed so far

        Returns:
            The committed TextBox or Comment, or None
        """
        editor = self.editor
        if editor is None:
            return None
        tool = self._state.tool
        if text is None:
            text = editor.text

        self._set_state(ToolArmed(tool))
        self.editor_closed.emit()

        if not text.strip():
            logger.debug("editor_discarded", tool=tool.value, reason="blank")
            return None

        if tool is Tool.TEXTBOX:
            width, height = self.defaults.textbox_size
            record = TextBoxAnnotation(
                id=self.ids.next_id(AnnotationType.TEXTBOX),
                position=Position(editor.anchor.x, editor.anchor.y, width, height,
                                  editor.page_number),
                author=self.author,
                text=text,
                color=self.color,
            )
        else:
            width, height = self.defaults.comment_size
            record = CommentAnnotation(
                id=self.ids.next_id(AnnotationType.COMMENT),
                position=Position(editor.anchor.x, editor.anchor.y, width, height,
                                  editor.page_number),
                author=self.author,
                text=text,
            )
        return self._commit(record)

    def cancel_editor(self) -> None:
        if self.editor is not None:
            self.cancel()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _set_state(self, state: State) -> None:
        self._state = state
        self.state_changed.emit(state)

    def _discard_capture(self, reason: str) -> None:
        state = self._state
        if not isinstance(state, Capturing):
            return
        logger.debug("capture_discarded", tool=state.tool.value, reason=reason)
        if isinstance(state.gesture, EditorGesture):
            self.editor_closed.emit()
        self._state = ToolArmed(state.tool)

    def _page_under(self, point: Point) -> Optional[int]:
        """Page number under a device point, or None off-page or out of range."""
        page_number = self.layout.page_at(point)
        if page_number is None:
            return None
        try:
            check_page_number(page_number, self.layout.page_count)
        except RangeError:
            logger.warning("pointer_on_unknown_page", page=page_number,
                           page_count=self.layout.page_count)
            return None
        return page_number

    def _locate(self, point: Point):
        """Return (page_number, page point) for a device point, or None off-page."""
        page_number = self._page_under(point)
        if page_number is None:
            return None
        return page_number, self._to_page(point, page_number)

    def _to_page(self, point: Point, page_number: int) -> Point:
        return device_to_page(point, self.layout.page_origin(page_number), self.layout.scale)

    def _capture_selection(self, tool: Tool) -> Optional[Annotation]:
        selection = self.selection.current()
        if selection is None or selection.is_empty:
            return None

        page_number = self._page_under(selection.rect.center)
        if page_number is None:
            logger.debug("selection_outside_pages", tool=tool.value)
            return None
        rect = device_rect_to_page(
            selection.rect, self.layout.page_origin(page_number), self.layout.scale
        )

        record_cls = RANGE_TOOLS[tool]
        record = record_cls(
            id=self.ids.next_id(record_cls.annotation_type),
            position=Position.from_rect(rect, page_number),
            author=self.author,
            color=self.color,
            content=selection.text,
        )
        committed = self._commit(record)
        self.selection.clear()
        return committed

    def _finish_stroke(self, tool: Tool, gesture: StrokeGesture) -> Optional[Annotation]:
        self._set_state(ToolArmed(tool))
        if len(gesture.points) < 2:
            logger.debug("stroke_discarded", tool=tool.value, points=len(gesture.points))
            return None

        position = Position.from_rect(bounding_rect(gesture.points), gesture.page_number)
        path = encode_path(gesture.points)

        if tool is Tool.SIGNATURE:
            record = SignatureAnnotation(
                id=self.ids.next_id(AnnotationType.SIGNATURE),
                position=position,
                author=self.author,
                path=path,
                author_name=self.author_name,
                color=self.color,
            )
        else:
            record = FreehandDrawingAnnotation(
                id=self.ids.next_id(AnnotationType.FREEHAND_DRAWING),
                position=position,
                author=self.author,
                path=path,
                color=self.color,
                stroke_width=self.stroke_width,
            )
        return self._commit(record)

    def _finish_drag(self, tool: Tool, gesture: DragGesture) -> Optional[Annotation]:
        self._set_state(ToolArmed(tool))
        rect = bounding_rect([gesture.start, gesture.end])
        if rect.width == 0 or rect.height == 0:
            logger.debug("drag_discarded", tool=tool.value)
            return None

        record_cls = DRAG_TOOLS[tool]
        record = record_cls(
            id=self.ids.next_id(record_cls.annotation_type),
            position=Position.from_rect(rect, gesture.page_number),
            author=self.author,
            color=self.color,
            stroke_width=self.stroke_width,
        )
        return self._commit(record)

    def _commit(self, record: Annotation) -> Annotation:
        self.store.add(record)
        logger.info(
            "annotation_committed",
            annotation_id=record.id,
            type=record.annotation_type.value,
            page=record.page,
        )
        self.annotation_committed.emit(record)
        return record

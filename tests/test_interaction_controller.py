"""Tests for the tool state machine."""

from unittest.mock import MagicMock

import pytest

from inkmark.controllers import (
    Capturing,
    EditorGesture,
    IdGenerator,
    Idle,
    InteractionController,
    StrokeGesture,
    Tool,
    ToolArmed,
)
from inkmark.core.annotations import (
    AnnotationType,
    CommentAnnotation,
    FreehandDrawingAnnotation,
    HighlightAnnotation,
    Position,
    RectangleAnnotation,
    SignatureAnnotation,
    StrikeThroughAnnotation,
    TextBoxAnnotation,
    UnderlineAnnotation,
)
from inkmark.core.geometry import Point, Rect

# Fixture layout: letter pages stacked with a 30px gap at scale 1.0, so
# page 1 starts at y=0, page 2 at y=822 and page 3 at y=1644.
PAGE_2_TOP = 822


class TestToolSelection:
    def test_starts_idle(self, controller):
        assert isinstance(controller.state, Idle)
        assert controller.active_tool is None

    def test_set_tool_arms(self, controller):
        controller.set_tool(Tool.HIGHLIGHT)
        assert controller.state == ToolArmed(Tool.HIGHLIGHT)

    def test_set_tool_accepts_names(self, controller):
        controller.set_tool("strike-through")
        assert controller.active_tool is Tool.STRIKE_THROUGH

    def test_set_tool_none_returns_to_idle(self, controller):
        controller.set_tool(Tool.SIGNATURE)
        controller.set_tool(None)
        assert isinstance(controller.state, Idle)

    def test_unknown_tool_rejected(self, controller):
        with pytest.raises(ValueError):
            controller.set_tool("laser")

    def test_switching_tools_cancels_capture_without_store(self, layout, selection):
        store = MagicMock()
        controller = InteractionController(store, layout, selection)
        controller.set_tool(Tool.SIGNATURE)
        controller.on_pointer_down(Point(10, 10))
        controller.on_pointer_move(Point(20, 20))
        assert isinstance(controller.state, Capturing)

        controller.set_tool(Tool.HIGHLIGHT)

        assert controller.state == ToolArmed(Tool.HIGHLIGHT)
        assert store.method_calls == []

    def test_state_changed_signal(self, controller):
        states = []
        controller.state_changed.connect(states.append)
        controller.set_tool(Tool.TEXTBOX)
        controller.set_tool(None)
        assert states == [ToolArmed(Tool.TEXTBOX), Idle()]

    @pytest.mark.parametrize("color", ["yellow", "#12345", "", None])
    def test_invalid_color_rejected(self, controller, color):
        with pytest.raises(ValueError):
            controller.set_color(color)
        assert controller.color == "#FFEB3B"

    def test_short_hex_color_accepted(self, controller):
        controller.set_color("#F00")
        assert controller.color == "#F00"


class TestRangeTools:
    @pytest.mark.parametrize(
        "tool, record_cls",
        [
            (Tool.HIGHLIGHT, HighlightAnnotation),
            (Tool.UNDERLINE, UnderlineAnnotation),
            (Tool.STRIKE_THROUGH, StrikeThroughAnnotation),
        ],
    )
    def test_selection_becomes_annotation(self, controller, store, selection, tool, record_cls):
        controller.set_tool(tool)
        controller.set_color("#FF0000")
        selection.set_selection("hello world", Rect(10, PAGE_2_TOP + 20, 100, 30))

        record = controller.on_pointer_up(Point(110, PAGE_2_TOP + 50))

        assert isinstance(record, record_cls)
        assert record.position == Position(10, 20, 100, 30, 2)
        assert record.page == 2
        assert record.content == "hello world"
        assert record.color == "#FF0000"
        assert store.annotations == (record,)
        assert selection.current() is None

    def test_stays_armed_for_repeated_captures(self, controller, store, selection):
        controller.set_tool(Tool.HIGHLIGHT)
        selection.set_selection("one", Rect(10, 10, 50, 12))
        first = controller.on_pointer_up()
        selection.set_selection("two", Rect(10, 40, 50, 12))
        second = controller.on_pointer_up()

        assert controller.state == ToolArmed(Tool.HIGHLIGHT)
        assert [r.content for r in store.annotations] == ["one", "two"]
        assert first.id != second.id

    def test_empty_selection_ignored(self, controller, store, selection):
        controller.set_tool(Tool.UNDERLINE)
        assert controller.on_pointer_up() is None
        selection.set_selection("", Rect(10, 10, 50, 12))
        assert controller.on_pointer_up() is None
        assert len(store) == 0

    def test_selection_outside_pages_ignored(self, controller, store, selection):
        controller.set_tool(Tool.HIGHLIGHT)
        selection.set_selection("gap", Rect(10, 800, 50, 10))
        assert controller.on_pointer_up() is None
        assert len(store) == 0
        assert selection.current() is not None

    def test_selection_on_unknown_page_ignored(self, store, selection):
        layout = MagicMock(page_count=3, scale=1.0)
        layout.page_at.return_value = 7
        controller = InteractionController(store, layout, selection)
        controller.set_tool(Tool.HIGHLIGHT)
        selection.set_selection("stale", Rect(10, 10, 50, 12))

        assert controller.on_pointer_up() is None
        assert len(store) == 0
        layout.page_origin.assert_not_called()

    def test_capture_is_zoom_invariant(self, controller, store, selection, layout):
        layout.set_scale(2.0)
        page_two_top = 792 * 2 + 30
        controller.set_tool(Tool.HIGHLIGHT)
        selection.set_selection("zoomed", Rect(20, page_two_top + 40, 200, 60))

        record = controller.on_pointer_up()

        assert record.position == Position(10, 20, 100, 30, 2)
        layout.set_scale(0.5)
        assert store.get(record.id).position == Position(10, 20, 100, 30, 2)

    def test_capture_accounts_for_scroll(self, controller, selection, layout):
        layout.set_scroll(0, 500)
        controller.set_tool(Tool.HIGHLIGHT)
        selection.set_selection("scrolled", Rect(10, PAGE_2_TOP - 500 + 20, 100, 30))
        record = controller.on_pointer_up()
        assert record.position == Position(10, 20, 100, 30, 2)


class TestStrokeTools:
    def draw(self, controller, points, end="up"):
        controller.on_pointer_down(points[0])
        for point in points[1:]:
            controller.on_pointer_move(point)
        if end == "up":
            return controller.on_pointer_up(points[-1])
        return controller.on_pointer_leave()

    def test_signature_committed(self, controller, store):
        controller.set_tool(Tool.SIGNATURE)
        controller.set_color("#0000FF")
        record = self.draw(controller, [Point(10, 10), Point(20, 30), Point(15, 5)])

        assert isinstance(record, SignatureAnnotation)
        assert record.position == Position(10, 5, 10, 25, 1)
        assert record.path == "M10,10 L20,30 L15,5"
        assert record.author_name == "User"
        assert record.color == "#0000FF"
        assert store.annotations == (record,)
        assert controller.state == ToolArmed(Tool.SIGNATURE)

    def test_signature_on_second_page_in_page_space(self, controller):
        controller.set_tool(Tool.SIGNATURE)
        record = self.draw(
            controller, [Point(100, PAGE_2_TOP + 100), Point(150, PAGE_2_TOP + 120)]
        )
        assert record.page == 2
        assert record.path == "M100,100 L150,120"

    def test_pointer_leave_ends_stroke(self, controller, store):
        controller.set_tool(Tool.SIGNATURE)
        record = self.draw(controller, [Point(1, 1), Point(2, 2)], end="leave")
        assert record is not None
        assert len(store) == 1

    @pytest.mark.parametrize("points", [[], [Point(10, 10)]])
    def test_short_strokes_discarded(self, controller, store, points):
        controller.set_tool(Tool.SIGNATURE)
        if points:
            controller.on_pointer_down(points[0])
        assert controller.on_pointer_up() is None
        assert len(store) == 0
        assert controller.state == ToolArmed(Tool.SIGNATURE)

    def test_new_press_replaces_unfinished_stroke(self, controller, store):
        controller.set_tool(Tool.SIGNATURE)
        controller.on_pointer_down(Point(10, 10))
        controller.on_pointer_move(Point(20, 20))
        record = self.draw(controller, [Point(100, 100), Point(110, 110)])
        assert record.path == "M100,100 L110,110"
        assert len(store) == 1

    def test_stroke_state_payload(self, controller):
        controller.set_tool(Tool.SIGNATURE)
        controller.on_pointer_down(Point(3, 4))
        controller.on_pointer_move(Point(5, 6))
        state = controller.state
        assert isinstance(state, Capturing)
        assert state.gesture == StrokeGesture(1, [Point(3, 4), Point(5, 6)])

    def test_freehand_uses_color_and_width(self, controller):
        controller.set_tool(Tool.FREEHAND_DRAWING)
        controller.set_color("#0000FF")
        controller.set_stroke_width(4)
        record = self.draw(controller, [Point(0, 0), Point(10, 10)])
        assert isinstance(record, FreehandDrawingAnnotation)
        assert record.color == "#0000FF"
        assert record.stroke_width == 4

    def test_press_off_page_ignored(self, controller):
        controller.set_tool(Tool.SIGNATURE)
        controller.on_pointer_down(Point(10, 805))
        assert controller.state == ToolArmed(Tool.SIGNATURE)


class TestDragTools:
    def test_rectangle_from_drag(self, controller):
        controller.set_tool(Tool.RECTANGLE)
        controller.on_pointer_down(Point(60, 40))
        controller.on_pointer_move(Point(30, 20))
        record = controller.on_pointer_up(Point(10, 10))
        assert isinstance(record, RectangleAnnotation)
        assert record.position == Position(10, 10, 50, 30, 1)
        assert record.stroke_width == 2.0

    def test_zero_area_drag_discarded(self, controller, store):
        controller.set_tool(Tool.ELLIPSE)
        controller.on_pointer_down(Point(10, 10))
        assert controller.on_pointer_up(Point(10, 50)) is None
        assert len(store) == 0


class TestEditors:
    def test_textbox_committed(self, controller, store):
        opened = []
        controller.editor_opened.connect(opened.append)
        controller.set_tool(Tool.TEXTBOX)
        controller.on_click(Point(50, PAGE_2_TOP + 60))

        assert opened == [EditorGesture(2, Point(50, 60))]
        record = controller.confirm_editor("Hello")

        assert isinstance(record, TextBoxAnnotation)
        assert record.position == Position(50, 60, 200, 100, 2)
        assert record.text == "Hello"
        assert store.annotations == (record,)
        assert controller.state == ToolArmed(Tool.TEXTBOX)

    def test_comment_committed_to_comments(self, controller, store):
        controller.set_tool(Tool.COMMENT)
        controller.on_click(Point(5, 6))
        controller.set_editor_text("Check this")
        record = controller.confirm_editor()

        assert isinstance(record, CommentAnnotation)
        assert record.position == Position(5, 6, 32, 32, 1)
        assert store.comments == (record,)
        assert store.annotations == ()

    @pytest.mark.parametrize("text", ["", "   ", "\n\t"])
    def test_blank_text_discarded(self, controller, store, text):
        controller.set_tool(Tool.TEXTBOX)
        controller.on_click(Point(5, 6))
        assert controller.confirm_editor(text) is None
        assert len(store) == 0
        assert controller.state == ToolArmed(Tool.TEXTBOX)

    def test_cancel_discards(self, controller, store):
        closed = []
        controller.editor_closed.connect(lambda: closed.append(True))
        controller.set_tool(Tool.COMMENT)
        controller.on_click(Point(5, 6))
        controller.set_editor_text("never saved")
        controller.cancel_editor()

        assert controller.editor is None
        assert controller.confirm_editor() is None
        assert len(store) == 0
        assert closed == [True]

    def test_second_editor_discards_first(self, controller, store):
        controller.set_tool(Tool.COMMENT)
        controller.on_click(Point(5, 6))
        controller.set_editor_text("first")
        controller.on_click(Point(100, 200))
        assert controller.editor.text == ""

        record = controller.confirm_editor("second")
        assert [c.text for c in store.comments] == ["second"]
        assert record.position.x == 100

    def test_comment_then_textbox_commits_only_textbox(self, controller, store):
        comments_before = len(store.comments)
        controller.set_tool(Tool.COMMENT)
        controller.on_click(Point(5, 6))
        controller.set_editor_text("unconfirmed")

        controller.set_tool(Tool.TEXTBOX)
        controller.on_click(Point(40, 40))
        controller.confirm_editor("Box")

        assert len(store.comments) == comments_before
        assert [a.annotation_type for a in store.annotations] == [AnnotationType.TEXTBOX]

    def test_click_ignored_for_other_tools(self, controller):
        controller.set_tool(Tool.HIGHLIGHT)
        controller.on_click(Point(5, 6))
        assert controller.editor is None

    def test_author_recorded(self, controller):
        controller.set_author("Dana")
        controller.set_tool(Tool.COMMENT)
        controller.on_click(Point(5, 6))
        assert controller.confirm_editor("hi").author == "Dana"


class TestIds:
    def test_ids_unique_and_increasing(self):
        ids = IdGenerator(start=1)
        issued = [ids.next_id(AnnotationType.HIGHLIGHT) for _ in range(3)]
        issued.append(ids.next_id(AnnotationType.COMMENT))
        assert issued == ["highlight-1", "highlight-2", "highlight-3", "comment-4"]

    def test_prefix_for_every_type(self):
        assert set(IdGenerator.PREFIXES) == set(AnnotationType)

    def test_committed_signal_and_unique_ids(self, controller, store, selection):
        committed = []
        controller.annotation_committed.connect(committed.append)
        controller.set_tool(Tool.HIGHLIGHT)
        for i in range(5):
            selection.set_selection(f"t{i}", Rect(10, 10 + i * 20, 40, 12))
            controller.on_pointer_up()

        assert len({r.id for r in committed}) == 5
        assert list(store.annotations) == committed

    def test_controllers_sharing_a_store_do_not_collide(self, store, layout, selection):
        first = InteractionController(store, layout, selection)
        second = InteractionController(store, layout, selection)
        records = []
        for controller in (first, second, first):
            controller.set_tool(Tool.SIGNATURE)
            controller.on_pointer_down(Point(10, 10))
            controller.on_pointer_move(Point(20, 20))
            records.append(controller.on_pointer_up(Point(20, 20)))

        assert len({r.id for r in records}) == 3
        assert len(store) == 3

    def test_default_generators_share_one_counter(self):
        first, second = IdGenerator(), IdGenerator()
        a = int(first.next_id(AnnotationType.SIGNATURE).rsplit("-", 1)[1])
        b = int(second.next_id(AnnotationType.SIGNATURE).rsplit("-", 1)[1])
        c = int(first.next_id(AnnotationType.HIGHLIGHT).rsplit("-", 1)[1])
        assert a < b < c

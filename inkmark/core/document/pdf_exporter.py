"""
Bakes stored annotations into a copy of the source PDF.

Export happens in two steps. plan() turns a store snapshot into an ordered
list of DrawOp primitives in export space (PDF points, origin bottom-left);
export() then draws those primitives onto a fresh copy of the document with
PyMuPDF, converting back to PyMuPDF's top-left page space.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

import fitz  # PyMuPDF
import structlog
from PyQt5.QtCore import QObject, pyqtSignal

from inkmark.config import DEFAULT_EXPORT_STYLE, RGB, ExportStyle, parse_color
from inkmark.core.annotations import (
    Annotation,
    AnnotationType,
    BorderStyle,
    StoreSnapshot,
)
from inkmark.core.errors import LoadError, RangeError, RecordError
from inkmark.core.geometry import Point, Rect, page_to_export, parse_path

logger = structlog.get_logger()


class DrawKind(Enum):
    RECT = "rect"
    OVAL = "oval"
    LINE = "line"
    POLYLINE = "polyline"
    TEXT = "text"
    NOTE = "note"


@dataclass(frozen=True)
class DrawOp:
    """One drawing primitive in export space."""

    kind: DrawKind
    page_index: int  # 0-based
    annotation_id: str
    rect: Rect  # bottom-left anchored
    color: Optional[RGB] = None  # stroke or text color
    fill: Optional[RGB] = None
    opacity: float = 1.0
    width: float = 0.0
    dashes: Optional[str] = None
    # LINE / POLYLINE: one point list per stroke
    strokes: Tuple[Tuple[Point, ...], ...] = ()
    # TEXT: baseline origin. NOTE: icon position
    anchor: Optional[Point] = None
    text: Optional[str] = None
    font_size: Optional[float] = None
    author: Optional[str] = None


_DASHES = {
    BorderStyle.DASHED: "[4 2] 0",
    BorderStyle.DOTTED: "[1 2] 0",
}

# Float slack when comparing page-space rectangles to the page box
_BOUNDS_TOLERANCE = 1e-6


def _within_page(rect: Rect, page_width: float, page_height: float) -> bool:
    return (
        rect.x >= -_BOUNDS_TOLERANCE
        and rect.y >= -_BOUNDS_TOLERANCE
        and rect.x + rect.width <= page_width + _BOUNDS_TOLERANCE
        and rect.y + rect.height <= page_height + _BOUNDS_TOLERANCE
    )


def _line_op(record: Annotation, page_index: int, y: float, rect: Rect,
             style: ExportStyle) -> DrawOp:
    start, end = Point(rect.x, y), Point(rect.x + rect.width, y)
    return DrawOp(
        kind=DrawKind.LINE,
        page_index=page_index,
        annotation_id=record.id,
        rect=Rect(rect.x, y, rect.width, 0.0),
        color=parse_color(record.color),
        width=style.line_width,
        strokes=((start, end),),
    )


def _plan_highlight(record, rect, page_index, page_height, style):
    return [DrawOp(
        kind=DrawKind.RECT,
        page_index=page_index,
        annotation_id=record.id,
        rect=rect,
        fill=parse_color(record.color),
        opacity=style.highlight_opacity,
    )]


def _plan_underline(record, rect, page_index, page_height, style):
    # Bottom edge of the text box
    return [_line_op(record, page_index, rect.y, rect, style)]


def _plan_strike_through(record, rect, page_index, page_height, style):
    return [_line_op(record, page_index, rect.y + rect.height / 2, rect, style)]


def _plan_textbox(record, rect, page_index, page_height, style):
    font_size = record.font_size or style.default_font_size
    top = rect.y + rect.height
    return [DrawOp(
        kind=DrawKind.TEXT,
        page_index=page_index,
        annotation_id=record.id,
        rect=rect,
        color=parse_color(record.color or style.default_text_color),
        anchor=Point(rect.x, top - font_size),
        text=record.text,
        font_size=font_size,
    )]


def _plan_comment(record, rect, page_index, page_height, style):
    marker_color = parse_color(style.comment_color)
    top = rect.y + rect.height
    dx, dy = style.comment_label_offset
    ops = [
        DrawOp(
            kind=DrawKind.RECT,
            page_index=page_index,
            annotation_id=record.id,
            rect=rect,
            color=marker_color,
            fill=marker_color,
            opacity=style.comment_opacity,
            width=style.comment_border_width,
        ),
        DrawOp(
            kind=DrawKind.TEXT,
            page_index=page_index,
            annotation_id=record.id,
            rect=rect,
            color=parse_color(style.default_text_color),
            anchor=Point(rect.x + dx, top - dy),
            text=style.comment_label,
            font_size=style.comment_label_size,
        ),
    ]
    if style.attach_comment_notes:
        ops.append(DrawOp(
            kind=DrawKind.NOTE,
            page_index=page_index,
            annotation_id=record.id,
            rect=rect,
            anchor=Point(rect.x, top),
            text=record.text,
            author=record.author,
        ))
    return ops


def _path_strokes(path: str, page_height: float) -> Tuple[Tuple[Point, ...], ...]:
    return tuple(
        tuple(Point(p.x, page_height - p.y) for p in subpath)
        for subpath in parse_path(path)
        if len(subpath) >= 2
    )


def _plan_signature(record, rect, page_index, page_height, style):
    return [DrawOp(
        kind=DrawKind.POLYLINE,
        page_index=page_index,
        annotation_id=record.id,
        rect=rect,
        color=parse_color(record.color or style.signature_color),
        width=style.signature_width,
        strokes=_path_strokes(record.path, page_height),
    )]


def _plan_freehand(record, rect, page_index, page_height, style):
    return [DrawOp(
        kind=DrawKind.POLYLINE,
        page_index=page_index,
        annotation_id=record.id,
        rect=rect,
        color=parse_color(record.color),
        width=record.stroke_width,
        strokes=_path_strokes(record.path, page_height),
    )]


def _shape_op(kind: DrawKind):
    def plan(record, rect, page_index, page_height, style):
        return [DrawOp(
            kind=kind,
            page_index=page_index,
            annotation_id=record.id,
            rect=rect,
            color=parse_color(record.color),
            fill=parse_color(record.fill_color) if record.fill_color else None,
            width=record.stroke_width,
            dashes=_DASHES.get(record.border_style),
        )]
    return plan


Planner = Callable[[Annotation, Rect, int, float, ExportStyle], List[DrawOp]]

_PLANNERS: Dict[AnnotationType, Planner] = {
    AnnotationType.HIGHLIGHT: _plan_highlight,
    AnnotationType.UNDERLINE: _plan_underline,
    AnnotationType.STRIKE_THROUGH: _plan_strike_through,
    AnnotationType.TEXTBOX: _plan_textbox,
    AnnotationType.COMMENT: _plan_comment,
    AnnotationType.SIGNATURE: _plan_signature,
    AnnotationType.FREEHAND_DRAWING: _plan_freehand,
    AnnotationType.RECTANGLE: _shape_op(DrawKind.RECT),
    AnnotationType.ELLIPSE: _shape_op(DrawKind.OVAL),
}

_unplanned = set(AnnotationType) - set(_PLANNERS)
if _unplanned:
    raise TypeError(f"No export handler for: {sorted(t.value for t in _unplanned)}")


class PDFExporter(QObject):
    """Handles exporting annotations to PDF documents."""

    progress_signal = pyqtSignal(int, int)  # pages done, pages total

    def __init__(self, style: ExportStyle = DEFAULT_EXPORT_STYLE, parent=None):
        super().__init__(parent)
        self.style = style

    def plan(self, snapshot: Iterable[Annotation],
             page_sizes: Sequence[Tuple[float, float]]) -> List[DrawOp]:
        """
        Project annotations onto export-space drawing primitives.

        Args:
            snapshot: Records in export order
            page_sizes: (width, height) in points of every page, by 0-based index

        Returns:
            Primitives in record order

        Raises:
            RangeError: If a record sits on a page the document does not have,
                or its rectangle reaches outside that page
            RecordError: If a record holds a color or path that cannot be drawn
        """
        page_count = len(page_sizes)
        ops: List[DrawOp] = []

        for record in snapshot:
            page_index = record.position.page_number - 1
            if not (0 <= page_index < page_count):
                raise RangeError(record.position.page_number, page_count, record.id)

            page_width, page_height = page_sizes[page_index]
            box = record.position.rect
            if not _within_page(box, page_width, page_height):
                raise RangeError(record.position.page_number, page_count, record.id,
                                 rect=box)

            rect = page_to_export(box, page_height)
            try:
                ops.extend(_PLANNERS[record.annotation_type](
                    record, rect, page_index, page_height, self.style
                ))
            except ValueError as e:
                raise RecordError(record.id, str(e)) from e

        return ops

    def export(self, source: bytes, snapshot: StoreSnapshot) -> bytes:
        """
        Produce a new PDF with every annotation drawn onto its page.

        Args:
            source: Original PDF bytes, left untouched
            snapshot: Store snapshot taken when the export was requested

        Returns:
            Bytes of the annotated copy

        Raises:
            LoadError: If the source is not a readable PDF
            RangeError: If an annotation references a missing page or lies
                outside its page
            RecordError: If an annotation holds a value that cannot be drawn
        """
        doc = self._open(source)
        try:
            page_sizes = [(page.rect.width, page.rect.height) for page in doc]
            ops = self.plan(snapshot, page_sizes)

            ops_by_page: Dict[int, List[DrawOp]] = {}
            for op in ops:
                ops_by_page.setdefault(op.page_index, []).append(op)

            total_pages = len(ops_by_page)
            for done, (page_index, page_ops) in enumerate(ops_by_page.items()):
                self.progress_signal.emit(done, total_pages)
                page = doc[page_index]
                for op in page_ops:
                    self._draw(page, op, page_sizes[page_index][1])
            self.progress_signal.emit(total_pages, total_pages)

            output = doc.tobytes(garbage=self.style.garbage, deflate=self.style.deflate)
        finally:
            doc.close()

        logger.info(
            "export_completed",
            records=len(snapshot),
            primitives=len(ops),
            pages=len(page_sizes),
            size=len(output),
        )
        return output

    def _open(self, source: bytes) -> fitz.Document:
        try:
            doc = fitz.open(stream=bytes(source), filetype="pdf")
        except Exception as e:
            logger.warning("export_load_failed", error=str(e))
            raise LoadError(f"Could not parse the source PDF: {e}") from e

        if doc.needs_pass:
            doc.close()
            raise LoadError("The source PDF is encrypted")
        if doc.page_count == 0:
            doc.close()
            raise LoadError("The source PDF has no pages")
        return doc

    def _draw(self, page: fitz.Page, op: DrawOp, page_height: float) -> None:
        """Draw one export-space primitive on a PyMuPDF page."""
        # Export space -> PyMuPDF space (origin top-left)
        flip = fitz.Matrix(1, 0, 0, -1, 0, page_height)

        def to_page(point: Point) -> fitz.Point:
            return fitz.Point(point.x, point.y) * flip

        if op.kind is DrawKind.TEXT:
            page.insert_text(
                to_page(op.anchor),
                op.text,
                fontsize=op.font_size,
                fontname=self.style.font_name,
                color=op.color,
            )
            return

        if op.kind is DrawKind.NOTE:
            note = page.add_text_annot(to_page(op.anchor), op.text, icon="Comment")
            if op.author:
                note.set_info(title=op.author)
            note.update()
            return

        shape = page.new_shape()
        close_path = True

        if op.kind in (DrawKind.RECT, DrawKind.OVAL):
            r = op.rect
            area = fitz.Rect(r.x, r.y, r.x + r.width, r.y + r.height) * flip
            if op.kind is DrawKind.RECT:
                shape.draw_rect(area)
            else:
                shape.draw_oval(area)
        elif op.kind is DrawKind.LINE:
            start, end = op.strokes[0]
            shape.draw_line(to_page(start), to_page(end))
            close_path = False
        elif op.kind is DrawKind.POLYLINE:
            for stroke in op.strokes:
                shape.draw_polyline([to_page(p) for p in stroke])
            close_path = False
        else:
            raise TypeError(f"Unknown draw primitive: {op.kind}")

        shape.finish(
            color=op.color if op.width > 0 else None,
            fill=op.fill,
            width=op.width,
            dashes=op.dashes,
            closePath=close_path,
            lineCap=1 if op.kind is DrawKind.POLYLINE else 0,
            lineJoin=1 if op.kind is DrawKind.POLYLINE else 0,
            fill_opacity=op.opacity if op.fill else 1,
            stroke_opacity=1 if op.fill else op.opacity,
        )
        shape.commit()

"""
Annotation records.

Every variant is a frozen dataclass; edits produce a new record through
with_changes() so snapshots taken for export never observe later edits.
"""
import dataclasses
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, ClassVar, Dict, Mapping, Optional, Tuple, Union

import structlog

from inkmark.config import parse_color
from inkmark.core.geometry import Rect

logger = structlog.get_logger()


class AnnotationType(Enum):
    HIGHLIGHT = "highlight"
    UNDERLINE = "underline"
    STRIKE_THROUGH = "strike-through"
    TEXTBOX = "textbox"
    COMMENT = "comment"
    SIGNATURE = "signature"
    FREEHAND_DRAWING = "freehand-drawing"
    RECTANGLE = "rectangle"
    ELLIPSE = "ellipse"


class BorderStyle(Enum):
    SOLID = "solid"
    DASHED = "dashed"
    DOTTED = "dotted"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Position:
    """Location of an annotation in page space (scale 1.0)."""

    x: float
    y: float
    width: float
    height: float
    page_number: int  # 1-based

    def __post_init__(self):
        if self.width < 0 or self.height < 0:
            raise ValueError(
                f"Position size must be non-negative, got {self.width}x{self.height}"
            )
        if self.page_number < 1:
            raise ValueError(f"Page numbers are 1-based, got {self.page_number}")

    @property
    def rect(self) -> Rect:
        return Rect(self.x, self.y, self.width, self.height)

    @classmethod
    def from_rect(cls, rect: Rect, page_number: int) -> "Position":
        return cls(rect.x, rect.y, rect.width, rect.height, page_number)


@dataclass(frozen=True)
class Reply:
    text: str
    author: str
    created_at: datetime = field(default_factory=utc_now)


@dataclass(frozen=True, kw_only=True)
class BaseAnnotation:
    """Fields shared by all annotation variants."""

    annotation_type: ClassVar[AnnotationType]

    id: str
    position: Position
    created_at: datetime = field(default_factory=utc_now)
    updated_at: Optional[datetime] = None
    author: Optional[str] = None

    @property
    def page(self) -> int:
        """1-based page number, always equal to position.page_number."""
        return self.position.page_number

    @property
    def is_comment(self) -> bool:
        return self.annotation_type is AnnotationType.COMMENT


@dataclass(frozen=True, kw_only=True)
class HighlightAnnotation(BaseAnnotation):
    annotation_type: ClassVar[AnnotationType] = AnnotationType.HIGHLIGHT

    color: str
    content: str


@dataclass(frozen=True, kw_only=True)
class UnderlineAnnotation(BaseAnnotation):
    annotation_type: ClassVar[AnnotationType] = AnnotationType.UNDERLINE

    color: str
    content: str


@dataclass(frozen=True, kw_only=True)
class StrikeThroughAnnotation(BaseAnnotation):
    annotation_type: ClassVar[AnnotationType] = AnnotationType.STRIKE_THROUGH

    color: str
    content: str


@dataclass(frozen=True, kw_only=True)
class TextBoxAnnotation(BaseAnnotation):
    annotation_type: ClassVar[AnnotationType] = AnnotationType.TEXTBOX

    text: str
    color: str
    font_size: Optional[float] = None
    font_family: Optional[str] = None
    background_color: Optional[str] = None


@dataclass(frozen=True, kw_only=True)
class CommentAnnotation(BaseAnnotation):
    annotation_type: ClassVar[AnnotationType] = AnnotationType.COMMENT

    text: str
    resolved: bool = False
    replies: Tuple[Reply, ...] = ()


@dataclass(frozen=True, kw_only=True)
class SignatureAnnotation(BaseAnnotation):
    annotation_type: ClassVar[AnnotationType] = AnnotationType.SIGNATURE

    path: str
    author_name: str
    color: Optional[str] = None


@dataclass(frozen=True, kw_only=True)
class FreehandDrawingAnnotation(BaseAnnotation):
    annotation_type: ClassVar[AnnotationType] = AnnotationType.FREEHAND_DRAWING

    path: str
    color: str
    stroke_width: float


@dataclass(frozen=True, kw_only=True)
class RectangleAnnotation(BaseAnnotation):
    annotation_type: ClassVar[AnnotationType] = AnnotationType.RECTANGLE

    color: str
    stroke_width: float
    fill_color: Optional[str] = None
    border_style: Optional[BorderStyle] = None


@dataclass(frozen=True, kw_only=True)
class EllipseAnnotation(BaseAnnotation):
    annotation_type: ClassVar[AnnotationType] = AnnotationType.ELLIPSE

    color: str
    stroke_width: float
    fill_color: Optional[str] = None
    border_style: Optional[BorderStyle] = None


Annotation = Union[
    HighlightAnnotation,
    UnderlineAnnotation,
    StrikeThroughAnnotation,
    TextBoxAnnotation,
    CommentAnnotation,
    SignatureAnnotation,
    FreehandDrawingAnnotation,
    RectangleAnnotation,
    EllipseAnnotation,
]

TYPE_TO_CLASS: Dict[AnnotationType, type] = {
    cls.annotation_type: cls for cls in Annotation.__args__
}

# Adding a variant to AnnotationType without a record class fails at import.
_missing = set(AnnotationType) - set(TYPE_TO_CLASS)
if _missing:
    raise TypeError(f"No annotation class for: {sorted(t.value for t in _missing)}")

IMMUTABLE_FIELDS = frozenset({"id", "type", "annotation_type", "page", "created_at"})
COLOR_FIELDS = frozenset({"color", "fill_color", "background_color"})


def _is_required(f: dataclasses.Field) -> bool:
    return f.default is dataclasses.MISSING and f.default_factory is dataclasses.MISSING


def _check_value(record: Annotation, f: dataclasses.Field, value: Any) -> None:
    if value is None:
        if _is_required(f):
            raise ValueError(f"{f.name} is required on {record.annotation_type.value} records")
        return
    if f.name == "position" and not isinstance(value, Position):
        raise ValueError(f"position must be a Position, got {type(value).__name__}")
    if f.name in COLOR_FIELDS:
        parse_color(value)


def with_changes(record: Annotation, changes: Mapping[str, Any]) -> Annotation:
    """
    Return a copy of a record with the mutable fields in `changes` merged in.

    Immutable fields and fields the variant does not have are ignored. A
    position on a different page is ignored as well, since the page of an
    annotation never changes. `updated_at` is stamped unless given.

    Args:
        record: Annotation to update
        changes: Field names mapped to their new values

    Returns:
        The updated copy, or the record itself when nothing applies

    Raises:
        ValueError: If a required field is set to None, a position is not a
            Position, or a color is not a hex color
    """
    fields = {f.name: f for f in dataclasses.fields(record)}
    accepted: Dict[str, Any] = {}

    for name, value in changes.items():
        if name in IMMUTABLE_FIELDS or name not in fields:
            logger.debug("annotation_field_ignored", annotation_id=record.id, field=name)
            continue
        _check_value(record, fields[name], value)
        if name == "position" and value.page_number != record.page:
            logger.debug(
                "annotation_page_change_ignored",
                annotation_id=record.id,
                page=record.page,
                requested_page=value.page_number,
            )
            continue
        accepted[name] = value

    if not accepted:
        return record

    accepted.setdefault("updated_at", utc_now())
    return dataclasses.replace(record, **accepted)


@dataclass(frozen=True)
class TextSelection:
    """The viewer's native text selection."""

    text: str
    rect: Rect  # device space bounding box

    @property
    def is_empty(self) -> bool:
        return not self.text

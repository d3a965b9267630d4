"""
Conversions between the three coordinate spaces used by the annotator.

Device space is viewport pixels (scroll offset and zoom applied), page space
is pixels relative to one page's top-left corner at scale 1.0, and export
space is the PDF's native point space with its origin at the bottom-left.
At scale 1.0 one page pixel is one PDF point, so page space needs no unit
conversion on export, only the vertical flip.
"""
from typing import Iterable, NamedTuple

from inkmark.core.errors import RangeError

MIN_SCALE = 0.5
MAX_SCALE = 2.0


class Point(NamedTuple):
    x: float
    y: float


class Rect(NamedTuple):
    """Axis-aligned rectangle anchored at its top-left (or bottom-left in export space)."""

    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def center(self) -> Point:
        return Point(self.x + self.width / 2, self.y + self.height / 2)

    def contains(self, point: Point) -> bool:
        return self.x <= point.x <= self.right and self.y <= point.y <= self.bottom


def validate_scale(scale: float) -> float:
    """Raise ValueError when the zoom scale is outside [MIN_SCALE, MAX_SCALE]."""
    if not (MIN_SCALE <= scale <= MAX_SCALE):
        raise ValueError(f"Scale {scale} is outside {MIN_SCALE}..{MAX_SCALE}")
    return scale


def clamp_scale(scale: float) -> float:
    return max(MIN_SCALE, min(MAX_SCALE, scale))


def check_page_number(page_number: int, page_count: int) -> int:
    """
    Ensure a 1-based page number exists in the document.

    Args:
        page_number: 1-based page number
        page_count: Number of pages in the document

    Returns:
        The page number, unchanged

    Raises:
        RangeError: If the page is outside [1, page_count]
    """
    if not (1 <= page_number <= page_count):
        raise RangeError(page_number, page_count)
    return page_number


def device_to_page(point: Point, page_origin: Point, scale: float) -> Point:
    """
    Convert a viewport point into page space.

    Args:
        point: Point in device pixels
        page_origin: Device position of the page's top-left corner
        scale: Current zoom scale

    Returns:
        The point relative to the page at scale 1.0
    """
    validate_scale(scale)
    return Point((point.x - page_origin.x) / scale, (point.y - page_origin.y) / scale)


def page_to_device(point: Point, page_origin: Point, scale: float) -> Point:
    """Inverse of device_to_page. Only used to place overlays."""
    validate_scale(scale)
    return Point(point.x * scale + page_origin.x, point.y * scale + page_origin.y)


def device_rect_to_page(rect: Rect, page_origin: Point, scale: float) -> Rect:
    top_left = device_to_page(Point(rect.x, rect.y), page_origin, scale)
    return Rect(top_left.x, top_left.y, rect.width / scale, rect.height / scale)


def page_rect_to_device(rect: Rect, page_origin: Point, scale: float) -> Rect:
    top_left = page_to_device(Point(rect.x, rect.y), page_origin, scale)
    return Rect(top_left.x, top_left.y, rect.width * scale, rect.height * scale)


def page_to_export(rect: Rect, page_height: float) -> Rect:
    """
    Flip a page-space rectangle into export space.

    The returned rectangle is anchored at its bottom-left corner:
    y = page_height - rect.y - rect.height.
    """
    return Rect(rect.x, page_height - rect.y - rect.height, rect.width, rect.height)


def bounding_rect(points: Iterable[Point]) -> Rect:
    """Smallest rectangle covering all points. Raises ValueError when empty."""
    points = list(points)
    if not points:
        raise ValueError("Cannot compute the bounds of an empty point sequence")
    xs = [p.x for p in points]
    ys = [p.y for p in points]
    return Rect(min(xs), min(ys), max(xs) - min(xs), max(ys) - min(ys))

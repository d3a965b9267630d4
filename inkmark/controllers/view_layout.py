"""
Geometry of the scrollable page stack shown by the document viewer.
"""
from typing import List, Optional, Protocol, Sequence, Tuple

from inkmark.core.geometry import Point, Rect, check_page_number, validate_scale


class PageLayout(Protocol):
    """What the interaction layer needs to know about the rendered pages."""

    page_count: int
    scale: float

    def page_origin(self, page_number: int) -> Point:
        """Device position of a page's top-left corner."""

    def page_at(self, point: Point) -> Optional[int]:
        """1-based number of the page under a device point, if any."""


class PageStackLayout:
    """
    Pages stacked vertically with a fixed gap, as the viewer lays them out.

    Page sizes are in PDF points; at scale 1.0 one point is one pixel.
    """

    def __init__(self, page_sizes: Sequence[Tuple[float, float]], scale: float = 1.0,
                 page_spacing: float = 30.0, margin: float = 0.0):
        self.page_sizes: List[Tuple[float, float]] = list(page_sizes)
        self.scale = validate_scale(scale)
        self.page_spacing = page_spacing
        self.margin = margin
        self.scroll_x: float = 0.0
        self.scroll_y: float = 0.0

    @property
    def page_count(self) -> int:
        return len(self.page_sizes)

    def set_scale(self, scale: float) -> None:
        """
        Change the zoom level.

        Only the rendering geometry changes; stored annotations are in page
        space and are unaffected.
        """
        self.scale = validate_scale(scale)

    def set_scroll(self, x: float, y: float) -> None:
        self.scroll_x = x
        self.scroll_y = y

    def page_origin(self, page_number: int) -> Point:
        check_page_number(page_number, self.page_count)
        top = self.margin
        for width, height in self.page_sizes[:page_number - 1]:
            top += height * self.scale + self.page_spacing
        return Point(self.margin - self.scroll_x, top - self.scroll_y)

    def page_rect(self, page_number: int) -> Rect:
        """Device rectangle covered by a page at the current zoom and scroll."""
        origin = self.page_origin(page_number)
        width, height = self.page_sizes[page_number - 1]
        return Rect(origin.x, origin.y, width * self.scale, height * self.scale)

    def page_at(self, point: Point) -> Optional[int]:
        for page_number in range(1, self.page_count + 1):
            if self.page_rect(page_number).contains(point):
                return page_number
        return None

"""
Overlay geometry for the annotations of the visible page.
"""
from dataclasses import dataclass
from typing import List

from inkmark.core.annotations import Annotation, AnnotationStore
from inkmark.core.geometry import Point, Rect, page_rect_to_device

from .view_layout import PageLayout


@dataclass(frozen=True)
class OverlayItem:
    record: Annotation
    device_rect: Rect


def overlays_for_page(store: AnnotationStore, page_number: int,
                      page_origin: Point, scale: float) -> List[OverlayItem]:
    """
    Place the page's annotations and comments at the current zoom.

    Args:
        store: Session annotation store
        page_number: 1-based page being rendered
        page_origin: Device position of the page's top-left corner
        scale: Current zoom scale

    Returns:
        Overlay items in insertion order, annotations before comments
    """
    return [
        OverlayItem(record, page_rect_to_device(record.position.rect, page_origin, scale))
        for record in store.list_by_page(page_number)
    ]


def overlays_for_layout(store: AnnotationStore, layout: PageLayout,
                        page_number: int) -> List[OverlayItem]:
    return overlays_for_page(store, page_number, layout.page_origin(page_number), layout.scale)

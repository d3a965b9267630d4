"""
Coordinate spaces and vector path helpers.
"""
from .mapper import (
    MAX_SCALE,
    MIN_SCALE,
    Point,
    Rect,
    bounding_rect,
    check_page_number,
    clamp_scale,
    device_rect_to_page,
    device_to_page,
    page_rect_to_device,
    page_to_device,
    page_to_export,
    validate_scale,
)
from .path import encode_path, parse_path

__all__ = [
    "MIN_SCALE",
    "MAX_SCALE",
    "Point",
    "Rect",
    "bounding_rect",
    "check_page_number",
    "clamp_scale",
    "device_rect_to_page",
    "device_to_page",
    "page_rect_to_device",
    "page_to_device",
    "page_to_export",
    "validate_scale",
    "encode_path",
    "parse_path",
]

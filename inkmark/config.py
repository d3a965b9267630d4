"""
Default settings for capture and export.
"""
from dataclasses import dataclass
from typing import Tuple

RGB = Tuple[float, float, float]


@dataclass(frozen=True)
class ExportStyle:
    """Drawing parameters used when baking annotations into a PDF."""
    # Text markup
    highlight_opacity: float = 0.4
    line_width: float = 1.5

    # Text boxes
    font_name: str = "helv"
    default_font_size: float = 12.0
    default_text_color: str = "#000000"

    # Comment markers
    comment_color: str = "#FF0000"
    comment_opacity: float = 0.2
    comment_border_width: float = 1.0
    comment_label: str = "Comment"
    comment_label_size: float = 10.0
    comment_label_offset: Tuple[float, float] = (5.0, 15.0)
    attach_comment_notes: bool = True

    # Signatures
    signature_color: str = "#000000"
    signature_width: float = 2.0

    # Output
    garbage: int = 3
    deflate: bool = True


@dataclass(frozen=True)
class InteractionDefaults:
    """Initial tool settings and fixed sizes for placed records."""
    color: str = "#FFEB3B"
    stroke_width: float = 2.0
    author_name: str = "User"
    textbox_size: Tuple[float, float] = (200.0, 100.0)
    comment_size: Tuple[float, float] = (32.0, 32.0)


DEFAULT_EXPORT_STYLE = ExportStyle()
DEFAULT_INTERACTION = InteractionDefaults()


def parse_color(value: str) -> RGB:
    """
    Convert a #RRGGBB or #RGB string to PyMuPDF's 0-1 RGB floats.

    Raises:
        ValueError: If the string is not a hex color
    """
    if not isinstance(value, str):
        raise ValueError(f"Not a hex color: {value!r}")
    text = value.strip().lstrip("#")
    if len(text) == 3:
        text = "".join(c * 2 for c in text)
    if len(text) != 6:
        raise ValueError(f"Not a hex color: {value!r}")
    try:
        channels = [int(text[i:i + 2], 16) for i in (0, 2, 4)]
    except ValueError:
        raise ValueError(f"Not a hex color: {value!r}") from None
    return tuple(c / 255.0 for c in channels)

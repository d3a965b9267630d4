"""
Encoding of captured strokes as compact vector path strings.

Only absolute move-to (M) and line-to (L) commands are produced and parsed,
e.g. ``"M10,20 L12,24 L15,30"``.
"""
import re
from typing import List, Sequence

from .mapper import Point

_TOKEN_RE = re.compile(r"[MLml]|-?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")


def _fmt(value: float) -> str:
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return "0" if text == "-0" else text


def encode_path(points: Sequence[Point]) -> str:
    """
    Encode a point sequence as a move-to followed by line-to segments.

    Args:
        points: Ordered stroke points, at least one

    Returns:
        Path string such as "M0,0 L5,5"
    """
    if not points:
        raise ValueError("A path needs at least one point")
    first, rest = points[0], points[1:]
    parts = [f"M{_fmt(first.x)},{_fmt(first.y)}"]
    parts.extend(f"L{_fmt(p.x)},{_fmt(p.y)}" for p in rest)
    return " ".join(parts)


def parse_path(path: str) -> List[List[Point]]:
    """
    Parse a path string into sub-paths, one per move-to command.

    Raises:
        ValueError: If the string contains anything besides M/L commands and
            coordinate pairs
    """
    leftover = _TOKEN_RE.sub("", path).replace(",", "").strip()
    if leftover:
        raise ValueError(f"Unsupported path content: {leftover!r}")

    tokens = _TOKEN_RE.findall(path)
    subpaths: List[List[Point]] = []
    command = None
    i = 0
    while i < len(tokens):
        token = tokens[i]
        if token.upper() in ("M", "L"):
            command = token.upper()
            i += 1
            continue
        if command is None or i + 1 >= len(tokens):
            raise ValueError(f"Malformed path: {path!r}")
        point = Point(float(token), float(tokens[i + 1]))
        if command == "M":
            subpaths.append([point])
            # Implicit coordinates after a move-to are line-to
            command = "L"
        else:
            if not subpaths:
                raise ValueError(f"Path must start with a move-to: {path!r}")
            subpaths[-1].append(point)
        i += 2
    return subpaths

"""Stroke consumers: SVG documents and PNG frame sequences."""

from __future__ import annotations

import math
import os
from collections.abc import Sequence

from PIL import Image, ImageDraw

from errors import _require
from pen import Color, Stroke


def _ensure_parent_dir(path: str) -> None:
    os.makedirs(os.path.dirname(os.path.abspath(path)) or ".", exist_ok=True)


def compute_bounds(strokes: Sequence[Stroke]) -> tuple[float, float, float, float]:
    _require(len(strokes) > 0, "No drawable geometry produced.")
    min_x = min_y = math.inf
    max_x = max_y = -math.inf
    for stroke in strokes:
        for x, y in (stroke.start, stroke.end):
            min_x = min(min_x, x)
            max_x = max(max_x, x)
            min_y = min(min_y, y)
            max_y = max(max_y, y)
    return (min_x, min_y, max_x, max_y)


# -------------------------
# SVG
# -------------------------


def _fmt(x: float, precision: int) -> str:
    # Normalise -0.0 so it never produces "-0" in SVG output.
    if not x:
        x = 0.0
    s = f"{x:.{precision}f}"
    if "." in s:
        s = s.rstrip("0").rstrip(".")
    if s == "-0":
        s = "0"
    return s or "0"


def _rgb(color: Color) -> str:
    r, g, b = color
    return f"rgb({r},{g},{b})"


def _escape(text: str) -> str:
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def write_svg(
    strokes: Sequence[Stroke],
    *,
    out_path: str,
    margin: float = 10.0,
    precision: int = 3,
    flip_y: bool = True,
    stroke_width: float = 1.0,
    background: str | None = None,
    title: str | None = None,
) -> None:
    """Write one <line> per stroke, in emission order, with its own color."""
    minx, miny, maxx, maxy = compute_bounds(strokes)

    minx -= margin
    miny -= margin
    maxx += margin
    maxy += margin
    w = maxx - minx
    h = maxy - miny
    _require(
        w > 0 and h > 0,
        "Degenerate bounds after margin (width or height is zero). "
        "Set svg.margin > 0 to render collinear or single-point geometry.",
    )

    view_box = " ".join(_fmt(v, precision) for v in (minx, miny, w, h))

    lines: list[str] = []
    lines.append('<?xml version="1.0" encoding="UTF-8"?>')
    lines.append(
        f'<svg xmlns="http://www.w3.org/2000/svg" version="1.1" viewBox="{view_box}">'
    )
    if title:
        lines.append(f"  <title>{_escape(title)}</title>")
    if background and background.lower() != "none":
        lines.append(
            f'  <rect x="{_fmt(minx, precision)}" y="{_fmt(miny, precision)}" '
            f'width="{_fmt(w, precision)}" height="{_fmt(h, precision)}" '
            f'fill="{_escape(background)}" />'
        )

    if flip_y:
        # Mirror about the horizontal center line of the viewBox.
        lines.append(
            f'  <g transform="translate(0,{_fmt(miny + maxy, precision)}) scale(1,-1)">'
        )
        indent = "    "
    else:
        indent = "  "

    lines.append(
        f'{indent}<g stroke-width="{_fmt(stroke_width, precision)}" '
        'stroke-linecap="round" fill="none">'
    )
    for stroke in strokes:
        (x1, y1), (x2, y2) = stroke.start, stroke.end
        lines.append(
            f'{indent}  <line x1="{_fmt(x1, precision)}" y1="{_fmt(y1, precision)}" '
            f'x2="{_fmt(x2, precision)}" y2="{_fmt(y2, precision)}" '
            f'stroke="{_rgb(stroke.color)}" />'
        )
    lines.append(f"{indent}</g>")

    if flip_y:
        lines.append("  </g>")
    lines.append("</svg>")

    _ensure_parent_dir(out_path)
    with open(out_path, "w", encoding="utf-8") as f:
        f.write("\n".join(lines))
        f.write("\n")


# -------------------------
# PNG frames
# -------------------------


def frame_path(out_dir: str, index: int) -> str:
    return os.path.join(out_dir, f"out{index}.png")


def write_frames(
    strokes: Sequence[Stroke],
    out_dir: str,
    *,
    steps: int = 1,
    last_only: bool = False,
    still_frames: int = 240,
    background: Color = (0, 0, 0),
) -> int:
    """Rasterize strokes into a numbered PNG sequence, `steps` strokes per frame.

    The canvas is sized to the stroke bounds, one pixel per unit, and the
    drawing is shifted so the lower corner of the bounds lands on pixel (0, 0).
    The sequence ends with `still_frames` copies of the finished image so an
    encoder can hold on it, e.g. ``ffmpeg -r 60 -i out%d.png output.mp4``.
    With `last_only` only the finished image is saved.

    Returns the number of files written.
    """
    _require(steps > 0, f"steps must be > 0, got {steps}")
    _require(still_frames >= 0, f"still_frames must be >= 0, got {still_frames}")
    minx, miny, maxx, maxy = compute_bounds(strokes)
    size = (int(maxx - minx) + 1, int(maxy - miny) + 1)

    img = Image.new("RGB", size, background)
    draw = ImageDraw.Draw(img)
    os.makedirs(out_dir, exist_ok=True)

    total = math.ceil(len(strokes) / steps)
    written = 0
    for frame in range(total):
        for stroke in strokes[frame * steps : (frame + 1) * steps]:
            (x1, y1), (x2, y2) = stroke.start, stroke.end
            draw.line(
                [(int(x1 - minx), int(y1 - miny)), (int(x2 - minx), int(y2 - miny))],
                fill=stroke.color,
            )
        if not last_only:
            img.save(frame_path(out_dir, frame))
            written += 1
            if frame % 4 == 0:
                print(f"Saved {frame + 1}/{total}")

    holds = 1 if last_only else still_frames
    for i in range(holds):
        img.save(frame_path(out_dir, written + i))
    if last_only:
        print(f"last image saved on {frame_path(out_dir, written)}")
    return written + holds

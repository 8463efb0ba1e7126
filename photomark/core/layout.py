"""
Watermark Placement
===================
The 9-way position table shared by the text and image paths.

The two paths anchor differently and must stay that way:
- text:  returned y is the BASELINE (bottom edge) of the text box
- image: returned y is the TOP edge of the watermark box
"""

from typing import Tuple, Union

from .spec import Position

MARGIN = 10

Size = Tuple[int, int]


def text_anchor(
        canvas_size: Size,
        box_size: Size,
        position: Union[str, Position]
) -> Tuple[int, int]:
    """
    Compute (x, baseline_y) for a text box.

    Args:
        canvas_size: (width, height) of the image being watermarked.
        box_size: Estimated (width, height) of the text box.
        position: One of the nine anchor names. Unknown names place the
                  text bottom-left.
    """
    cw, ch = canvas_size
    bw, bh = box_size
    m = MARGIN

    left = m
    center_x = (cw - bw) // 2
    right = cw - bw - m

    top = m + bh
    middle = ch // 2
    bottom = ch - m

    table = {
        Position.TOP_LEFT: (left, top),
        Position.TOP_CENTER: (center_x, top),
        Position.TOP_RIGHT: (right, top),
        Position.CENTER_LEFT: (left, middle),
        Position.CENTER: (center_x, middle),
        Position.CENTER_RIGHT: (right, middle),
        Position.BOTTOM_LEFT: (left, bottom),
        Position.BOTTOM_CENTER: (center_x, bottom),
        Position.BOTTOM_RIGHT: (right, bottom),
    }
    return table[Position.parse(position)]


def image_anchor(
        canvas_size: Size,
        box_size: Size,
        position: Union[str, Position]
) -> Tuple[int, int]:
    """Compute the top-left corner (x, y) for an image watermark box."""
    cw, ch = canvas_size
    bw, bh = box_size
    m = MARGIN

    left = m
    center_x = (cw - bw) // 2
    right = cw - bw - m

    top = m
    middle = (ch - bh) // 2
    bottom = ch - bh - m

    table = {
        Position.TOP_LEFT: (left, top),
        Position.TOP_CENTER: (center_x, top),
        Position.TOP_RIGHT: (right, top),
        Position.CENTER_LEFT: (left, middle),
        Position.CENTER: (center_x, middle),
        Position.CENTER_RIGHT: (right, middle),
        Position.BOTTOM_LEFT: (left, bottom),
        Position.BOTTOM_CENTER: (center_x, bottom),
        Position.BOTTOM_RIGHT: (right, bottom),
    }
    return table[Position.parse(position)]

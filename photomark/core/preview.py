"""
Proxy Preview
=============
Live previews are rendered on a small "proxy" copy of the source image
instead of the full-resolution original.

- The proxy is at most `max_size` pixels on its longest side
- Font size and manual offsets are scaled by the same ratio so the
  watermark keeps its relative size and placement
- Export always works on the original resolution
"""

from dataclasses import replace
from typing import Optional, Tuple

from PIL import Image

from .compositor import WatermarkCompositor
from .spec import WatermarkSpec

DEFAULT_PREVIEW_SIZE = 800


def make_proxy(image: Image.Image, max_size: int = DEFAULT_PREVIEW_SIZE) -> Tuple[Image.Image, float]:
    """
    Downscale an image for previewing.

    Returns:
        (proxy, ratio) where ratio = proxy size / original size (<= 1.0).
    """
    width, height = image.size
    if width <= max_size and height <= max_size:
        return image.copy(), 1.0

    ratio = max_size / max(width, height)
    new_size = (max(1, int(width * ratio)), max(1, int(height * ratio)))
    # BILINEAR is plenty for an on-screen preview
    return image.resize(new_size, Image.Resampling.BILINEAR), ratio


def scale_spec(spec: WatermarkSpec, ratio: float) -> WatermarkSpec:
    """Scale the size-dependent fields of a spec by ratio."""
    if ratio == 1.0:
        return spec
    return replace(
        spec,
        font_size=max(1, round(spec.font_size * ratio)),
        offset_x=round(spec.offset_x * ratio),
        offset_y=round(spec.offset_y * ratio),
    )


def render_preview(
        image: Image.Image,
        spec: WatermarkSpec,
        watermark_asset: Optional[Image.Image] = None,
        max_size: int = DEFAULT_PREVIEW_SIZE,
        compositor: Optional[WatermarkCompositor] = None
) -> Image.Image:
    """Composite spec onto a proxy of image."""
    proxy, ratio = make_proxy(image, max_size)
    return (compositor or WatermarkCompositor()).composite(
        proxy, scale_spec(spec, ratio), watermark_asset
    )

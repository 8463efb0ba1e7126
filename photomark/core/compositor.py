"""
Watermark Compositor
====================
Draws a text or image watermark over a source image using PIL/Pillow.

Technical Notes:
- The source image is never modified; every call returns a new RGBA image
  of the same size.
- Text is rendered with the bundled 7x13 fixed-cell bitmap font
  (photomark/fonts/fixed7x13.bdf, 7 px advance, 11 px ascent) at its
  base size and then upscaled with LANCZOS, which gives the chunky
  "stamped" look of the desktop app.
- Text placement is estimated from the unscaled string length
  (len * font_size / 2 wide, font_size tall) before the glyph raster is
  scaled. The scaled raster is then drawn with its bottom-left corner on
  the computed anchor.
- Image watermarks are shrunk to at most a quarter of the shorter canvas
  side. Their opacity is NOT adjusted.
- A watermark asset that is missing or undecodable is not an error: the
  source comes back unchanged.
"""

import logging
from pathlib import Path
from typing import Optional, Tuple, Union

from PIL import BdfFontFile, Image, ImageDraw, ImageFont

from .image_io import open_image
from .layout import image_anchor, text_anchor
from .spec import DEFAULT_TEXT, WatermarkSpec

logger = logging.getLogger(__name__)


class WatermarkCompositor:
    """
    Composites a WatermarkSpec onto images.

    The instance only caches the bitmap font; it holds no per-image state,
    so one compositor can serve any number of calls.
    """

    FONT_FILE = Path(__file__).resolve().parent.parent / "fonts" / "fixed7x13.bdf"

    # Bitmap font metrics the layout arithmetic is built around
    BASE_FONT_HEIGHT = 13  # also the baseline inside the scratch buffer
    FONT_ADVANCE = 7
    FONT_ASCENT = 11
    GLYPH_ADVANCE = 8  # scratch buffer width per character
    SCRATCH_HEIGHT = 20

    ROTATE_RESAMPLE = Image.Resampling.BICUBIC
    SCALE_RESAMPLE = Image.Resampling.LANCZOS

    def __init__(self):
        self._font: Optional[ImageFont.ImageFont] = None

    def _get_font(self) -> ImageFont.ImageFont:
        if self._font is None:
            with open(self.FONT_FILE, "rb") as fp:
                self._font = BdfFontFile.BdfFontFile(fp).to_imagefont()
        return self._font

    # ----- text path -----

    @staticmethod
    def estimate_text_box(text: str, font_size: int) -> Tuple[int, int]:
        """Approximate (width, height) of the rendered text for placement."""
        return len(text) * font_size // 2, font_size

    def text_scale(self, font_size: int) -> float:
        return max(1.0, font_size / self.BASE_FONT_HEIGHT)

    def _render_text(self, text: str, fill: Tuple[int, int, int, int]) -> Image.Image:
        """Render text at base size onto a transparent scratch buffer."""
        font = self._get_font()
        # The bitmap font only covers printable ASCII
        text = text.encode("ascii", "replace").decode("ascii")
        width = max(1, len(text) * self.GLYPH_ADVANCE)
        scratch = Image.new("RGBA", (width, self.SCRATCH_HEIGHT), (0, 0, 0, 0))

        # Cell top goes where the baseline lands on BASE_FONT_HEIGHT
        top = self.BASE_FONT_HEIGHT - self.FONT_ASCENT
        ImageDraw.Draw(scratch).text((0, top), text, font=font, fill=fill)
        return scratch

    def _apply_text(self, base: Image.Image, spec: WatermarkSpec) -> Image.Image:
        text = spec.text or DEFAULT_TEXT

        box = self.estimate_text_box(text, spec.font_size)
        x, y = text_anchor(base.size, box, spec.position)
        x += spec.offset_x
        y += spec.offset_y

        r, g, b, a = spec.color
        fill = (r, g, b, int(a * spec.opacity / 100.0))
        glyphs = self._render_text(text, fill)

        scale = self.text_scale(spec.font_size)
        scaled_size = (max(1, int(glyphs.width * scale)), max(1, int(glyphs.height * scale)))
        glyphs = glyphs.resize(scaled_size, self.SCALE_RESAMPLE)
        glyphs = self._rotate(glyphs, spec.rotation)

        # bottom-left of the raster sits on (x, y)
        return self._draw_over(base, glyphs, (x, y - glyphs.height))

    # ----- image path -----

    @classmethod
    def fit_asset(cls, asset: Image.Image, canvas_size: Tuple[int, int]) -> Image.Image:
        """
        Shrink the watermark so neither side exceeds min(canvas) / 4.

        Aspect ratio is kept; assets already small enough are returned as-is.
        """
        max_side = min(canvas_size) // 4
        width, height = asset.size
        if width <= max_side and height <= max_side:
            return asset

        scale = max_side / max(width, height)
        new_size = (max(1, int(width * scale)), max(1, int(height * scale)))
        return asset.resize(new_size, cls.SCALE_RESAMPLE)

    def _apply_image(
            self,
            base: Image.Image,
            spec: WatermarkSpec,
            asset: Image.Image
    ) -> Image.Image:
        if asset.mode != "RGBA":
            asset = asset.convert("RGBA")

        mark = self.fit_asset(asset, base.size)
        mark = self._rotate(mark, spec.rotation)

        x, y = image_anchor(base.size, mark.size, spec.position)
        return self._draw_over(base, mark, (x + spec.offset_x, y + spec.offset_y))

    # ----- shared -----

    def _rotate(self, layer: Image.Image, angle: float) -> Image.Image:
        if not angle or angle % 360 == 0:
            return layer
        return layer.rotate(angle, resample=self.ROTATE_RESAMPLE, expand=True)

    @staticmethod
    def _draw_over(
            base: Image.Image,
            overlay: Image.Image,
            top_left: Tuple[int, int]
    ) -> Image.Image:
        """Source-over blend overlay onto base at top_left (may be off-canvas)."""
        layer = Image.new("RGBA", base.size, (0, 0, 0, 0))
        # No mask: the layer is empty, so copying keeps overlay alpha intact
        layer.paste(overlay, top_left)
        return Image.alpha_composite(base, layer)

    def composite(
            self,
            source: Image.Image,
            spec: WatermarkSpec,
            watermark_asset: Optional[Image.Image] = None
    ) -> Image.Image:
        """
        Apply a watermark to an image.

        Args:
            source: Decoded source image with non-zero size.
            spec: Watermark parameters. Trusted as-is (see WatermarkSpec.clamped).
            watermark_asset: Decoded watermark image, used when spec is
                             image-kind.

        Returns:
            New RGBA image the size of source. For an image-kind spec without
            an asset, a plain copy of source.
        """
        if spec.is_image:
            if watermark_asset is None:
                return source.copy()
            base = source.convert("RGBA")
            return self._apply_image(base, spec, watermark_asset)

        base = source.convert("RGBA")
        return self._apply_text(base, spec)


_default_compositor = WatermarkCompositor()


def composite(
        source: Image.Image,
        spec: WatermarkSpec,
        watermark_asset: Optional[Image.Image] = None
) -> Image.Image:
    """Convenience wrapper around a shared WatermarkCompositor."""
    return _default_compositor.composite(source, spec, watermark_asset)


def load_watermark_asset(path: Union[str, Path, None]) -> Optional[Image.Image]:
    """
    Decode a watermark image, or return None if it can't be used.

    Failures are logged, never raised: a broken watermark asset leaves
    images unwatermarked instead of stopping an export.
    """
    if not path:
        return None
    try:
        return open_image(path)
    except OSError as e:
        logger.warning("Watermark image unavailable (%s): %s", path, e)
        return None


def watermark_file(
        source_path: Union[str, Path],
        spec: WatermarkSpec,
        watermark_asset: Optional[Image.Image] = None,
        compositor: Optional[WatermarkCompositor] = None
) -> Image.Image:
    """
    Load an image from disk and watermark it.

    The watermark asset is read from spec.image_path when not supplied.

    Raises:
        FileNotFoundError: If the source image doesn't exist.
        OSError: If the source image can't be decoded.
    """
    source = open_image(source_path)
    if spec.is_image and watermark_asset is None:
        watermark_asset = load_watermark_asset(spec.image_path)
    return (compositor or _default_compositor).composite(source, spec, watermark_asset)

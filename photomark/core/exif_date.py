"""
EXIF Date Stamp
===============
Stamps each photo with the date it was taken (YYYY-MM-DD), read from its
EXIF metadata and drawn with the compositor's bitmap-font text path.
"""

import logging
from dataclasses import replace
from pathlib import Path
from typing import List, Optional, Union

from PIL import ExifTags, Image

from .compositor import WatermarkCompositor
from .image_io import DATE_STAMP_EXTS, collect_images, open_image, save_image
from .spec import WatermarkKind, WatermarkSpec

logger = logging.getLogger(__name__)

# Looked up in this order
_EXIF_DATE_TAGS = (
    ExifTags.Base.DateTimeOriginal,
    ExifTags.Base.DateTimeDigitized,
)

DATE_SPEC = WatermarkSpec(
    kind=WatermarkKind.TEXT,
    font_size=26,
    color=(255, 255, 255, 255),
    opacity=100,
    position="bottom-right",
)


def _format_date(raw) -> Optional[str]:
    if isinstance(raw, bytes):
        raw = raw.decode("ascii", errors="ignore")
    if not isinstance(raw, str):
        return None
    date_part = raw.strip().split(" ")[0]
    pieces = date_part.replace("-", ":").split(":")
    if len(pieces) != 3 or not all(p.isdigit() for p in pieces):
        return None
    return "-".join(pieces)


def read_exif_date(image: Image.Image) -> Optional[str]:
    """Extract the capture date of an already-opened image."""
    exif = image.getexif()
    if not exif:
        return None

    sub_ifd = exif.get_ifd(ExifTags.IFD.Exif)
    for tag in _EXIF_DATE_TAGS:
        date = _format_date(sub_ifd.get(tag))
        if date:
            return date

    return _format_date(exif.get(ExifTags.Base.DateTime))


def get_exif_date(path: Union[str, Path]) -> Optional[str]:
    """
    Read the capture date of an image file as YYYY-MM-DD.

    Returns None when the image carries no usable date.
    """
    with Image.open(path) as img:
        return read_exif_date(img)


def stamp_date(
        path: Union[str, Path],
        spec: WatermarkSpec = DATE_SPEC,
        compositor: Optional[WatermarkCompositor] = None
) -> Optional[Image.Image]:
    """
    Watermark one image with its EXIF date.

    Returns:
        The stamped image, or None if the image has no date.
    """
    date = get_exif_date(path)
    if date is None:
        return None

    source = open_image(path)
    date_spec = replace(spec, kind=WatermarkKind.TEXT, text=date)
    return (compositor or WatermarkCompositor()).composite(source, date_spec)


def stamp_directory(
        input_path: Union[str, Path],
        spec: WatermarkSpec = DATE_SPEC,
        quality: int = 95
) -> List[Path]:
    """
    Date-stamp a single image or every image in a directory.

    Output goes to a sibling directory named "<dir>_watermark", keeping the
    original file names. Images without a date are skipped.

    Raises:
        FileNotFoundError: If input_path does not exist.

    Returns:
        Paths of the written images.
    """
    input_path = Path(input_path)
    if not input_path.exists():
        raise FileNotFoundError(f"Path not found: {input_path}")

    base_dir = input_path if input_path.is_dir() else input_path.parent
    output_dir = base_dir.parent / f"{base_dir.name}_watermark"

    compositor = WatermarkCompositor()
    written: List[Path] = []
    for image_path in collect_images([input_path], DATE_STAMP_EXTS):
        stamped = stamp_date(image_path, spec, compositor)
        if stamped is None:
            logger.info("No EXIF date in %s, skipping", image_path.name)
            continue

        target = output_dir / image_path.name
        save_image(stamped, target, quality=quality)
        written.append(target)
        logger.info("Stamped %s -> %s", image_path.name, target)

    return written

"""
Image Decode / Encode Helpers
=============================
Everything that touches the filesystem lives here so the compositor can
stay a pure function of in-memory images.
"""

import logging
from pathlib import Path
from typing import Iterable, List, Optional, Set, Union

from PIL import Image, ImageOps

logger = logging.getLogger(__name__)

SUPPORTED_EXTS = {".jpg", ".jpeg", ".png", ".bmp", ".tif", ".tiff"}
# The EXIF date stamper also accepts GIF input
DATE_STAMP_EXTS = SUPPORTED_EXTS | {".gif"}

OUTPUT_FORMATS = {
    "jpeg": ".jpg",
    "jpg": ".jpg",
    "png": ".png",
}


def is_image_file(path: Union[str, Path], exts: Optional[Set[str]] = None) -> bool:
    return Path(path).suffix.lower() in (exts or SUPPORTED_EXTS)


def collect_images(
        inputs: Iterable[Union[str, Path]],
        exts: Optional[Set[str]] = None
) -> List[Path]:
    """
    Expand files and directories into a de-duplicated list of image paths.

    Directories are listed (not walked) and sorted by name. Input order is
    otherwise preserved.
    """
    exts = exts or SUPPORTED_EXTS
    found: List[Path] = []
    for item in inputs:
        item = Path(item)
        if item.is_dir():
            found.extend(
                p for p in sorted(item.iterdir())
                if p.is_file() and is_image_file(p, exts)
            )
        elif item.is_file() and is_image_file(item, exts):
            found.append(item)

    seen = set()
    unique: List[Path] = []
    for p in found:
        key = p.resolve()
        if key not in seen:
            seen.add(key)
            unique.append(p)
    return unique


def open_image(path: Union[str, Path]) -> Image.Image:
    """
    Decode an image fully and apply its EXIF orientation.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        OSError: If the file cannot be decoded.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Image not found: {path}")

    with Image.open(path) as img:
        img.load()
        # Always a detached copy, rotated when the EXIF tag asks for it
        return ImageOps.exif_transpose(img)


def normalize_format(fmt: str) -> str:
    fmt = fmt.lower().lstrip(".")
    if fmt not in OUTPUT_FORMATS:
        raise ValueError(f"Unsupported output format: {fmt}")
    return "png" if fmt == "png" else "jpeg"


def save_image(
        image: Image.Image,
        path: Union[str, Path],
        fmt: Optional[str] = None,
        quality: int = 90
) -> Path:
    """
    Encode an image to disk.

    Args:
        image: Image to write (any mode).
        path: Destination file. Parent directories are created.
        fmt: "jpeg" or "png". When None, taken from the file suffix;
             suffixes other than jpeg/png are handed to Pillow as-is.
        quality: JPEG quality 1-100.

    Returns:
        The written path.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    if fmt is None:
        suffix = path.suffix.lower().lstrip(".")
        if suffix not in OUTPUT_FORMATS:
            image.save(path)
            return path
        fmt = suffix

    fmt = normalize_format(fmt)
    if fmt == "jpeg":
        # JPEG has no alpha channel: flatten onto white
        if image.mode in ("RGBA", "LA", "P"):
            rgba = image.convert("RGBA")
            rgb = Image.new("RGB", rgba.size, (255, 255, 255))
            rgb.paste(rgba, mask=rgba.getchannel("A"))
        else:
            rgb = image.convert("RGB")
        rgb.save(path, "JPEG", quality=max(1, min(100, int(quality))))
    else:
        image.save(path, "PNG")

    logger.debug("Saved %s (%s)", path, fmt)
    return path


def output_filename(
        source_path: Union[str, Path],
        prefix: str = "wm_",
        suffix: str = "",
        fmt: str = "jpeg"
) -> str:
    """Name an exported file: prefix + original stem + suffix + format extension."""
    stem = Path(source_path).stem
    return f"{prefix}{stem}{suffix}{OUTPUT_FORMATS[normalize_format(fmt)]}"


def scale_image(image: Image.Image, percent: int) -> Image.Image:
    """Rescale an image by a percentage. 100 (or less than 1) leaves it untouched."""
    if percent == 100 or percent < 1:
        return image
    ratio = percent / 100.0
    width = max(1, int(image.width * ratio))
    height = max(1, int(image.height * ratio))
    return image.resize((width, height), Image.Resampling.LANCZOS)

"""
Watermark Specification
=======================
Immutable description of a single watermark, built fresh for every
compositing call.

The persisted template record uses the field names of the desktop app's
JSON file (Text, FontSize, Color{R,G,B,A}, Opacity, Position, X, Y,
Rotation, ImagePath, IsImage). This module only reads and writes that
shape; managing the template file itself is left to the caller.
"""

import json
from dataclasses import dataclass, replace, asdict
from enum import Enum
from pathlib import Path
from typing import Dict, Tuple, Union


DEFAULT_TEXT = "WATERMARK"


class WatermarkKind(Enum):
    """Which compositing path a spec takes."""
    TEXT = "text"
    IMAGE = "image"


class Position(str, Enum):
    """The nine anchor points of the placement grid."""
    TOP_LEFT = "top-left"
    TOP_CENTER = "top-center"
    TOP_RIGHT = "top-right"
    CENTER_LEFT = "center-left"
    CENTER = "center"
    CENTER_RIGHT = "center-right"
    BOTTOM_LEFT = "bottom-left"
    BOTTOM_CENTER = "bottom-center"
    BOTTOM_RIGHT = "bottom-right"

    @classmethod
    def parse(cls, value: Union[str, "Position", None]) -> "Position":
        """
        Resolve a position name.

        Names must match exactly (no case folding or trimming). Anything
        else falls back to BOTTOM_LEFT for both the text and the image path.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return cls.BOTTOM_LEFT


RGBA = Tuple[int, int, int, int]


def _field(record: Dict, key: str, default):
    """record[key], with absent keys and JSON nulls both reading as default."""
    value = record.get(key)
    return default if value is None else value


@dataclass(frozen=True)
class WatermarkSpec:
    """Parameters of one watermark."""
    kind: WatermarkKind = WatermarkKind.TEXT
    text: str = DEFAULT_TEXT
    image_path: str = ""
    font_size: int = 52
    color: RGBA = (255, 255, 255, 255)
    opacity: int = 80  # 0-100, scales color alpha
    position: str = Position.BOTTOM_RIGHT.value
    offset_x: int = 0
    offset_y: int = 0
    rotation: float = 0.0  # degrees, counter-clockwise

    @property
    def is_image(self) -> bool:
        return self.kind is WatermarkKind.IMAGE

    def clamped(self) -> "WatermarkSpec":
        """
        Return a copy with every numeric field forced into its documented
        range. The compositor trusts its input, so callers that take values
        from users should pass specs through here first.
        """
        color = tuple(max(0, min(255, int(c))) for c in self.color)
        if len(color) == 3:
            color = color + (255,)
        return replace(
            self,
            font_size=max(1, int(self.font_size)),
            color=color[:4],
            opacity=max(0, min(100, int(self.opacity))),
            rotation=float(self.rotation) % 360.0,
        )

    @classmethod
    def from_template(cls, record: Dict) -> "WatermarkSpec":
        """
        Build a spec from a persisted template record.

        Raises:
            ValueError: If a numeric field holds a non-numeric value.
        """
        defaults = cls()
        color_record = record.get("Color") or {}

        try:
            if isinstance(color_record, dict):
                color = (
                    int(_field(color_record, "R", defaults.color[0])),
                    int(_field(color_record, "G", defaults.color[1])),
                    int(_field(color_record, "B", defaults.color[2])),
                    int(_field(color_record, "A", defaults.color[3])),
                )
            else:
                color = tuple(int(c) for c in color_record)

            return cls(
                kind=WatermarkKind.IMAGE if record.get("IsImage") else WatermarkKind.TEXT,
                text=str(_field(record, "Text", defaults.text)),
                image_path=str(_field(record, "ImagePath", "")),
                font_size=int(_field(record, "FontSize", defaults.font_size)),
                color=color,
                opacity=int(_field(record, "Opacity", defaults.opacity)),
                position=str(_field(record, "Position", defaults.position)),
                offset_x=int(_field(record, "X", defaults.offset_x)),
                offset_y=int(_field(record, "Y", defaults.offset_y)),
                rotation=float(_field(record, "Rotation", defaults.rotation)),
            )
        except TypeError as e:
            raise ValueError(f"Invalid template record: {e}") from e

    def to_template(self) -> Dict:
        """Inverse of from_template."""
        r, g, b, a = self.color
        return {
            "Text": self.text,
            "FontSize": self.font_size,
            "Color": {"R": r, "G": g, "B": b, "A": a},
            "Opacity": self.opacity,
            "Position": self.position,
            "X": self.offset_x,
            "Y": self.offset_y,
            "Rotation": self.rotation,
            "ImagePath": self.image_path,
            "IsImage": self.is_image,
        }

    def as_dict(self) -> Dict:
        data = asdict(self)
        data["kind"] = self.kind.value
        return data


def load_template_specs(path: Union[str, Path]) -> Dict[str, WatermarkSpec]:
    """
    Read a templates file (template name -> record) into specs.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file is not a JSON object of records.
    """
    path = Path(path)
    with path.open("r", encoding="utf-8") as f:
        data = json.load(f)

    if not isinstance(data, dict):
        raise ValueError(f"Template file must hold a JSON object: {path}")

    return {
        name: WatermarkSpec.from_template(record)
        for name, record in data.items()
        if isinstance(record, dict)
    }

"""
Module: categories

Purpose:
    Provides the Category dataclass - the subject an evaluation belongs to.
    Its color fills the title banner on the first printed page.

Key Functions:
    - Category.rgb: Color as an (r, g, b) tuple
    - Category.contrast_color: Black or white text for the banner
    - Category.to_dict() / Category.from_dict(): Serialization

Dependencies:
    - dataclasses (std)
    - re (std)

Used By:
    - core.utils.serialization
    - storage.repository
    - builder.output.renderer
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

DEFAULT_CATEGORY_COLOR = "#3b82f6"

_HEX_COLOR = re.compile(r"^#[0-9a-fA-F]{6}$")


def is_hex_color(value: str) -> bool:
    """Check that value is a ``#rrggbb`` color string."""
    return isinstance(value, str) and bool(_HEX_COLOR.match(value))


def hex_to_rgb(color: str) -> tuple[int, int, int]:
    """
    Convert a ``#rrggbb`` string to integer RGB components.

    Args:
        color: Hex color like "#3b82f6"

    Returns:
        Tuple of (r, g, b) in 0-255

    Raises:
        ValueError: If color is not a ``#rrggbb`` string
    """
    if not is_hex_color(color):
        raise ValueError(f"color must be #rrggbb: {color!r}")
    return int(color[1:3], 16), int(color[3:5], 16), int(color[5:7], 16)


def contrast_color(color: str) -> str:
    """
    Pick readable text color for a background using the YIQ formula.

    Example:
        >>> contrast_color("#ffffff")
        'black'
        >>> contrast_color("#1e3a8a")
        'white'
    """
    r, g, b = hex_to_rgb(color)
    yiq = (r * 299 + g * 587 + b * 114) / 1000
    return "black" if yiq >= 128 else "white"


@dataclass(frozen=True)
class Category:
    """
    Subject category (immutable).

    Attributes:
        id: Unique identifier
        name: Display name like "Mathematics"
        color: Banner color as "#rrggbb"
    """

    id: str
    name: str
    color: str = DEFAULT_CATEGORY_COLOR

    def __post_init__(self) -> None:
        """Validate category on construction."""
        if not self.id:
            raise ValueError("category id must not be empty")
        if not self.name or not self.name.strip():
            raise ValueError("category name must not be empty")
        if not is_hex_color(self.color):
            raise ValueError(f"color must be #rrggbb: {self.color!r}")

    @property
    def rgb(self) -> tuple[int, int, int]:
        return hex_to_rgb(self.color)

    @property
    def contrast_color(self) -> str:
        """Text color ("black" or "white") readable on this category's color."""
        return contrast_color(self.color)

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "color": self.color}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Category":
        return cls(
            id=str(data["id"]),
            name=data["name"],
            color=data.get("color") or DEFAULT_CATEGORY_COLOR,
        )

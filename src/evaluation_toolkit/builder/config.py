"""
Module: builder.config

Purpose:
    Configuration dataclass for the build pipeline. Immutable
    configuration with validation on construction.

Key Classes:
    - BuilderConfig: Main configuration for building one copy of an evaluation

Dependencies:
    - dataclasses (std)
    - pathlib (std)

Used By:
    - builder.controller: Main build controller
    - evaluation_toolkit.__main__: CLI
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from evaluation_toolkit.builder.layout.config import PageGeometry, RenderMode, Typography


@dataclass(frozen=True)
class BuilderConfig:
    """
    Configuration for building an evaluation PDF (immutable).

    Attributes:
        mode: Teacher or student copy
        output_dir: Output directory for generated files
        geometry: Page geometry (layout units)
        typography: Fonts shared by measurement and rendering
        assets_dir: Directory that relative image sources resolve against
        grade_scale: Denominator printed in the header grade cell ("/ 20")
        show_footer: Draw title and page numbers on every page
        write_previews: Also export PNG previews of every page
        preview_dpi: Resolution of PNG previews

    Example:
        >>> config = BuilderConfig(
        ...     mode=RenderMode.STUDENT,
        ...     output_dir=Path("out"),
        ... )
    """

    mode: RenderMode = RenderMode.TEACHER
    output_dir: Path = field(default_factory=lambda: Path("output"))

    # Layout
    geometry: PageGeometry = field(default_factory=PageGeometry)
    typography: Typography = field(default_factory=Typography)
    assets_dir: Optional[Path] = None

    # Header / footer
    grade_scale: int = 20
    show_footer: bool = True

    # Previews
    write_previews: bool = False
    preview_dpi: int = 96

    def __post_init__(self) -> None:
        """Validate configuration on construction."""
        if not isinstance(self.mode, RenderMode):
            raise ValueError(f"mode must be a RenderMode: {self.mode!r}")
        if self.grade_scale <= 0:
            raise ValueError(f"grade_scale must be positive: {self.grade_scale}")
        if self.preview_dpi <= 0:
            raise ValueError(f"preview_dpi must be positive: {self.preview_dpi}")

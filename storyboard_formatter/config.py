## storyboard_formatter/config.py

import logging
import os
from dataclasses import dataclass, field
from typing import Tuple

# ---- Import / normalization ----


@dataclass(frozen=True)
class ImportConfig:
    max_width: int = 4096
    max_height: int = 4096
    jpeg_quality: int = 98  # near-maximum, PIL scale is 1..100

    def __post_init__(self) -> None:
        if self.max_width <= 0 or self.max_height <= 0:
            raise ValueError(f"max size must be positive: {self.max_width}x{self.max_height}")
        if not 1 <= self.jpeg_quality <= 100:
            raise ValueError(f"jpeg_quality must be in 1..100: {self.jpeg_quality}")


# ---- Flattened frame (single image / ZIP export) ----


@dataclass(frozen=True)
class FrameConfig:
    width: int = 1920
    height: int = 1080
    top_band: int = 120
    bottom_band: int = 200
    overlay_alpha: float = 0.8
    side_margin: int = 40
    fps: int = 24

    title_size: int = 48
    timecode_size: int = 36
    camera_size: int = 32
    dialogue_size: int = 42
    dialogue_pitch: int = 50
    note_size: int = 24
    note_color: Tuple[int, int, int] = (204, 204, 204)

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"frame size must be positive: {self.width}x{self.height}")
        if not 0.0 <= self.overlay_alpha <= 1.0:
            raise ValueError(f"overlay_alpha must be in [0, 1]: {self.overlay_alpha}")
        if self.top_band + self.bottom_band > self.height:
            raise ValueError("overlay bands taller than the frame")
        if self.fps <= 0:
            raise ValueError(f"fps must be positive: {self.fps}")


# ---- PDF page (units: mm, A4 landscape) ----


@dataclass(frozen=True)
class PageConfig:
    page_width: float = 297.0
    page_height: float = 210.0
    margin: float = 10.0
    gutter: float = 10.0
    cell_padding: float = 5.0
    image_height: float = 60.0
    caption_gap: float = 5.0
    font_size: float = 8.0
    line_pitch: float = 4.0
    columns: int = 2
    rows: int = 2

    def __post_init__(self) -> None:
        if self.columns <= 0 or self.rows <= 0:
            raise ValueError(f"grid must be at least 1x1: {self.columns}x{self.rows}")
        if self.cell_width <= 2 * self.cell_padding or self.cell_height <= 0:
            raise ValueError("margins and gutters leave no room for cells")

    @property
    def per_page(self) -> int:
        return self.columns * self.rows

    @property
    def cell_width(self) -> float:
        return (self.page_width - 2 * self.margin - (self.columns - 1) * self.gutter) / self.columns

    @property
    def cell_height(self) -> float:
        return (self.page_height - 2 * self.margin - (self.rows - 1) * self.gutter) / self.rows


# ---- Export batches ----


@dataclass(frozen=True)
class ExportConfig:
    download_pause: float = 0.1  # seconds between single-image downloads
    document_name: str = "storyboard.pdf"
    archive_name: str = "storyboard_panels.zip"

    def __post_init__(self) -> None:
        if self.download_pause < 0:
            raise ValueError(f"download_pause must be non-negative: {self.download_pause}")


@dataclass(frozen=True)
class AppConfig:
    imports: ImportConfig = field(default_factory=ImportConfig)
    frame: FrameConfig = field(default_factory=FrameConfig)
    page: PageConfig = field(default_factory=PageConfig)
    export: ExportConfig = field(default_factory=ExportConfig)
    autosave_seconds: float = 30.0
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if self.autosave_seconds <= 0:
            raise ValueError(f"autosave_seconds must be positive: {self.autosave_seconds}")

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Build a config, letting STORYBOARD_* environment variables override defaults."""
        autosave = float(os.environ.get("STORYBOARD_AUTOSAVE_SECONDS", 30.0))
        pause = float(os.environ.get("STORYBOARD_DOWNLOAD_PAUSE", 0.1))
        level = os.environ.get("STORYBOARD_LOG_LEVEL", "INFO").upper()
        return cls(
            export=ExportConfig(download_pause=pause),
            autosave_seconds=autosave,
            log_level=level,
        )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

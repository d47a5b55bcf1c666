## storyboard_formatter/compositor.py

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from PIL import Image, ImageDraw

from storyboard_formatter.config import FrameConfig
from storyboard_formatter.errors import DecodeError, RenderError
from storyboard_formatter.imaging import open_data_url
from storyboard_formatter.models import Panel, format_seconds
from storyboard_formatter.text_layout import load_font, measure_with, text_width, wrap

logger = logging.getLogger(__name__)

Rect = Tuple[float, float, float, float]  # x, y, w, h

WHITE = (255, 255, 255)


def letterbox_rect(src_w: int, src_h: int, frame_w: int, frame_h: int) -> Rect:
    """
    Scale (src_w, src_h) so it spans the frame on both axes, aspect preserved.

    A source wider than the frame matches the frame height and overflows horizontally,
    centered (negative x). A taller one matches the width and overflows vertically.
    """
    if src_w <= 0 or src_h <= 0:
        raise ValueError(f"invalid source size {src_w}x{src_h}")
    img_aspect = src_w / src_h
    frame_aspect = frame_w / frame_h
    if img_aspect > frame_aspect:
        h = float(frame_h)
        w = h * img_aspect
        return (frame_w - w) / 2, 0.0, w, h
    w = float(frame_w)
    h = w / img_aspect
    return 0.0, (frame_h - h) / 2, w, h


def format_timecode(seconds: float, fps: int = 24) -> str:
    """HH:MM:SS.FF at a fixed frame rate. Cosmetic only."""
    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = int(seconds % 60)
    frames = int((seconds % 1) * fps)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}.{frames:02d}"


@dataclass(frozen=True)
class TextItem:
    text: str
    x: float  # left edge after alignment
    y: float
    size: int
    bold: bool = False
    color: Tuple[int, int, int] = WHITE


@dataclass
class FrameLayout:
    size: Tuple[int, int]
    image_rect: Rect
    top_band: Rect
    bottom_band: Optional[Rect] = None
    texts: List[TextItem] = field(default_factory=list)

    def find(self, prefix: str) -> List[TextItem]:
        return [t for t in self.texts if t.text.startswith(prefix)]


class PanelCompositor:
    """Flattens one panel into a fixed-size frame with overlay bands and captions."""

    def __init__(self, config: Optional[FrameConfig] = None):
        self.config = config or FrameConfig()

    def _item(self, text: str, x: float, y: float, size: int, bold: bool = False,
              align: str = "left", color: Tuple[int, int, int] = WHITE) -> TextItem:
        if align != "left":
            w = text_width(load_font(size, bold), text)
            x = x - w if align == "right" else x - w / 2
        return TextItem(text=text, x=x, y=y, size=size, bold=bold, color=color)

    def frame_layout(self, panel: Panel, frame_index: int, image_size: Tuple[int, int]) -> FrameLayout:
        c = self.config
        W, H = c.width, c.height
        has_dialogue = bool(panel.dialogue.strip())

        layout = FrameLayout(
            size=(W, H),
            image_rect=letterbox_rect(image_size[0], image_size[1], W, H),
            top_band=(0, 0, W, c.top_band),
            bottom_band=(0, H - c.bottom_band, W, c.bottom_band) if has_dialogue else None,
        )
        texts = layout.texts

        texts.append(self._item(panel.label, c.side_margin, 25, c.title_size, bold=True))
        timecode = format_timecode(frame_index * panel.duration, c.fps)
        texts.append(
            self._item(f"{format_seconds(panel.duration)}s | {timecode}", W - c.side_margin, 30,
                       c.timecode_size, bold=True, align="right")
        )
        if panel.camera.strip():
            texts.append(self._item(f"CAM: {panel.camera}", c.side_margin, 80, c.camera_size))

        if has_dialogue:
            font = load_font(c.dialogue_size, True)
            lines = wrap(panel.dialogue, W - 2 * c.side_margin, measure_with(font))
            top = H - c.bottom_band + 40
            for i, line in enumerate(lines):
                texts.append(self._item(line, W / 2, top + i * c.dialogue_pitch, c.dialogue_size,
                                        bold=True, align="center"))

        if panel.description.strip():
            texts.append(self._item(f"DESC: {panel.description}", c.side_margin, H - 40, c.note_size,
                                    color=c.note_color))
        if panel.direction.strip():
            texts.append(self._item(f"DIR: {panel.direction}", W - c.side_margin, H - 40, c.note_size,
                                    align="right", color=c.note_color))
        return layout

    def render(self, panel: Panel, frame_index: int) -> Image.Image:
        c = self.config
        try:
            source = open_data_url(panel.image).convert("RGBA")
        except DecodeError as e:
            raise RenderError(f"{panel.label}: {e}", frame_index) from e

        layout = self.frame_layout(panel, frame_index, source.size)
        canvas = Image.new("RGBA", layout.size, (0, 0, 0, 255))

        x, y, w, h = layout.image_rect
        scaled = source.resize((max(1, round(w)), max(1, round(h))), Image.LANCZOS)
        canvas.paste(scaled, (round(x), round(y)), scaled)

        overlay = Image.new("RGBA", layout.size, (0, 0, 0, 0))
        shade = ImageDraw.Draw(overlay)
        alpha = round(c.overlay_alpha * 255)
        for band in (layout.top_band, layout.bottom_band):
            if band is not None:
                bx, by, bw, bh = band
                shade.rectangle([bx, by, bx + bw - 1, by + bh - 1], fill=(0, 0, 0, alpha))
        canvas = Image.alpha_composite(canvas, overlay)

        draw = ImageDraw.Draw(canvas)
        for t in layout.texts:
            draw.text((t.x, t.y), t.text, font=load_font(t.size, t.bold), fill=t.color)

        logger.debug("Rendered frame %d (%s)", frame_index, panel.label)
        return canvas.convert("RGB")

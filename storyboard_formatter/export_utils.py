## storyboard_formatter/export_utils.py

import logging
import math
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Tuple

from fpdf import FPDF
from fpdf.errors import FPDFException
from PIL import Image, ImageOps

from storyboard_formatter.config import PageConfig
from storyboard_formatter.errors import DecodeError
from storyboard_formatter.imaging import open_data_url
from storyboard_formatter.models import Panel, caption_or_placeholder
from storyboard_formatter.text_layout import wrap

logger = logging.getLogger(__name__)

PDF_FONT = "Helvetica"

Box = Tuple[float, float, float, float]  # x, y, w, h

# ---- Layout (pure geometry, no drawing) ----


@dataclass(frozen=True)
class CaptionLine:
    text: str
    x: float
    y: float


@dataclass
class CellLayout:
    panel_index: int
    panel: Panel
    box: Box
    image_box: Box
    captions: List[CaptionLine] = field(default_factory=list)


@dataclass
class PageLayout:
    number: int
    cells: List[Optional[CellLayout]]

    @property
    def populated(self) -> int:
        return sum(1 for c in self.cells if c is not None)


def pdf_safe(text: str) -> str:
    # core PDF fonts only cover latin-1
    return text.encode("latin-1", "replace").decode("latin-1")


def pdf_measure(font_size: float) -> Callable[[str], float]:
    probe = FPDF(unit="mm")
    probe.set_font(PDF_FONT, size=font_size)
    return lambda s: probe.get_string_width(pdf_safe(s))


def cell_origin(slot: int, config: PageConfig) -> Tuple[float, float]:
    col = slot % config.columns
    row = slot // config.columns
    x = config.margin + col * (config.cell_width + config.gutter)
    y = config.margin + row * (config.cell_height + config.gutter)
    return x, y


def caption_block(panel: Panel, x: float, y: float, width: float, config: PageConfig,
                  width_of: Callable[[str], float]) -> List[CaptionLine]:
    entries = [
        panel.label,
        f"DESC: {caption_or_placeholder(panel, 'description')}",
        f"DIALOG: {caption_or_placeholder(panel, 'dialogue')}",
        f"DIRECTION: {caption_or_placeholder(panel, 'direction')}",
        f"CAM: {caption_or_placeholder(panel, 'camera')}",
    ]
    lines: List[CaptionLine] = []
    for entry in entries:
        for line in wrap(entry, width, width_of):
            # overflow past the cell bottom is kept
            lines.append(CaptionLine(line, x, y + len(lines) * config.line_pitch))
    return lines


def layout(panels: Sequence[Panel], config: Optional[PageConfig] = None,
           width_of: Optional[Callable[[str], float]] = None) -> List[PageLayout]:
    """Paginate panels into a fixed grid, one page per `config.per_page` panels."""
    config = config or PageConfig()
    width_of = width_of or pdf_measure(config.font_size)
    pad = config.cell_padding
    text_width = config.cell_width - 2 * pad

    pages: List[PageLayout] = []
    for i, panel in enumerate(panels):
        slot = i % config.per_page
        if slot == 0:
            pages.append(PageLayout(number=len(pages) + 1, cells=[None] * config.per_page))
        x, y = cell_origin(slot, config)
        caption_top = y + pad + config.image_height + config.caption_gap
        pages[-1].cells[slot] = CellLayout(
            panel_index=i,
            panel=panel,
            box=(x, y, config.cell_width, config.cell_height),
            image_box=(x + pad, y + pad, text_width, config.image_height),
            captions=caption_block(panel, x + pad, caption_top, text_width, config, width_of),
        )
    return pages


def contain_box(src_w: int, src_h: int, box: Box) -> Box:
    bx, by, bw, bh = box
    scale = min(bw / src_w, bh / src_h)
    w, h = src_w * scale, src_h * scale
    return bx + (bw - w) / 2, by + (bh - h) / 2, w, h


# ---- Drawing ----


@dataclass
class PdfResult:
    data: bytes
    pages: int
    failed_panels: List[int] = field(default_factory=list)

    @property
    def failures(self) -> int:
        return len(self.failed_panels)


def render_pdf(pages: Sequence[PageLayout], config: Optional[PageConfig] = None) -> PdfResult:
    config = config or PageConfig()
    pdf = FPDF(orientation="L", unit="mm", format=(config.page_height, config.page_width))
    pdf.set_auto_page_break(auto=False)
    pdf.set_font(PDF_FONT, size=config.font_size)
    failed: List[int] = []

    for page in pages:
        pdf.add_page()
        for cell in page.cells:
            if cell is None:
                continue
            pdf.rect(*cell.box)
            try:
                img = open_data_url(cell.panel.image).convert("RGB")
                pdf.image(img, *contain_box(img.width, img.height, cell.image_box))
            except (DecodeError, FPDFException, ValueError, OSError) as e:
                logger.warning("Could not add image for panel %d to PDF: %s", cell.panel_index + 1, e)
                failed.append(cell.panel_index)
            for line in cell.captions:
                pdf.text(line.x, line.y, pdf_safe(line.text))

    return PdfResult(data=bytes(pdf.output()), pages=len(pages), failed_panels=failed)


# ---- Preview ----


def make_grid_image(panels: Sequence[Panel], columns: int = 3, pad: int = 8,
                    thumb: Tuple[int, int] = (320, 180), bg=(245, 245, 245)) -> Image.Image:
    """Contact sheet of panel thumbnails; undecodable images leave a blank slot."""
    w, h = thumb
    rows = max(1, math.ceil(len(panels) / columns))
    grid = Image.new("RGB", (columns * w + (columns + 1) * pad, rows * h + (rows + 1) * pad), color=bg)
    for idx, panel in enumerate(panels):
        r, c = divmod(idx, columns)
        x, y = pad + c * (w + pad), pad + r * (h + pad)
        try:
            im = open_data_url(panel.image).convert("RGB")
        except DecodeError as e:
            logger.debug("Preview skipped panel %d: %s", idx + 1, e)
            continue
        fitted = ImageOps.contain(im, (w, h))
        grid.paste(fitted, (x + (w - fitted.width) // 2, y + (h - fitted.height) // 2))
    return grid

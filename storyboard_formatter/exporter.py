## storyboard_formatter/exporter.py

import asyncio
import io
import logging
import zipfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Union

from storyboard_formatter.compositor import PanelCompositor
from storyboard_formatter.config import ExportConfig, PageConfig
from storyboard_formatter.errors import EmptyBatchError, RenderError
from storyboard_formatter.export_utils import layout, render_pdf
from storyboard_formatter.imaging import image_to_png_bytes
from storyboard_formatter.store import PanelStore

logger = logging.getLogger(__name__)

# (file name, payload, mime type) -> None
FileSink = Callable[[str, bytes, str], None]


def frame_filename(index: int) -> str:
    return f"panel_{index + 1:03d}.png"


@dataclass(frozen=True)
class SinkFile:
    name: str
    data: bytes
    mime_type: str


class MemorySink:
    """Keeps every emitted file in order. Used by the UI shell for download buttons."""

    def __init__(self):
        self.files: List[SinkFile] = []

    def __call__(self, name: str, data: bytes, mime_type: str) -> None:
        self.files.append(SinkFile(name, data, mime_type))

    @property
    def names(self) -> List[str]:
        return [f.name for f in self.files]


class DirectorySink:
    def __init__(self, root: Union[str, Path]):
        self.root = Path(root)

    def __call__(self, name: str, data: bytes, mime_type: str) -> None:
        self.root.mkdir(parents=True, exist_ok=True)
        path = self.root / name
        path.write_bytes(data)
        logger.info("Saved %s (%s, %d bytes)", path, mime_type, len(data))


@dataclass
class ExportReport:
    operation: str
    total: int
    failed: List[int] = field(default_factory=list)
    files: List[str] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return self.total - len(self.failed)

    @property
    def summary(self) -> str:
        msg = f"{self.operation}: exported {self.succeeded} of {self.total} panels"
        if self.failed:
            numbers = ", ".join(str(i + 1) for i in self.failed)
            msg += f" ({len(self.failed)} failed: panel {numbers})"
        return msg


class ExportOrchestrator:
    """
    Runs the three export products over the store's panels.

    Every batch is sequential: panel i is rendered and handed off before panel i+1
    starts. A failing panel is logged and counted; only an empty storyboard stops a batch.
    """

    def __init__(
        self,
        store: PanelStore,
        sink: FileSink,
        compositor: Optional[PanelCompositor] = None,
        export_config: Optional[ExportConfig] = None,
        page_config: Optional[PageConfig] = None,
    ):
        self.store = store
        self.sink = sink
        self.compositor = compositor or PanelCompositor()
        self.config = export_config or ExportConfig()
        self.page_config = page_config or PageConfig()

    def _require_panels(self, operation: str) -> None:
        if not self.store.panels:
            raise EmptyBatchError(operation)

    async def _render_png(self, index: int) -> bytes:
        panel = self.store.panels[index]
        img = await asyncio.to_thread(self.compositor.render, panel, index)
        return await asyncio.to_thread(image_to_png_bytes, img)

    async def export_document(self) -> ExportReport:
        self._require_panels("PDF export")
        panels = list(self.store.panels)
        pages = await asyncio.to_thread(layout, panels, self.page_config)
        result = await asyncio.to_thread(render_pdf, pages, self.page_config)

        report = ExportReport("PDF export", total=len(panels), failed=result.failed_panels)
        self.sink(self.config.document_name, result.data, "application/pdf")
        report.files.append(self.config.document_name)
        logger.info("%s, %d pages", report.summary, result.pages)
        return report

    async def export_images(self) -> ExportReport:
        self._require_panels("Image export")
        total = len(self.store.panels)
        report = ExportReport("Image export", total=total)

        for i in range(total):
            try:
                data = await self._render_png(i)
            except RenderError as e:
                logger.warning("Skipping panel %d: %s", i + 1, e)
                report.failed.append(i)
                continue
            name = frame_filename(i)
            self.sink(name, data, "image/png")
            report.files.append(name)
            if i < total - 1:
                # hosts throttle bursts of simultaneous downloads
                await asyncio.sleep(self.config.download_pause)

        logger.info(report.summary)
        return report

    async def export_archive(self) -> ExportReport:
        self._require_panels("ZIP export")
        total = len(self.store.panels)
        report = ExportReport("ZIP export", total=total)

        buf = io.BytesIO()
        with zipfile.ZipFile(buf, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            for i in range(total):
                try:
                    data = await self._render_png(i)
                except RenderError as e:
                    logger.warning("Skipping panel %d: %s", i + 1, e)
                    report.failed.append(i)
                    continue
                zf.writestr(frame_filename(i), data)

        if report.succeeded:
            self.sink(self.config.archive_name, buf.getvalue(), "application/zip")
            report.files.append(self.config.archive_name)
        else:
            logger.error("ZIP export produced no entries; archive not written")
        logger.info(report.summary)
        return report

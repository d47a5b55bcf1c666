## storyboard_formatter/store.py

import logging
import mimetypes
from dataclasses import dataclass, field
from typing import Iterable, List, Mapping, Optional, Union

from storyboard_formatter.errors import DecodeError
from storyboard_formatter.imaging import ImageNormalizer
from storyboard_formatter.models import EDITABLE_FIELDS, Panel, PanelCard, PanelFields, make_card

logger = logging.getLogger(__name__)

DEFAULT_PROJECT_NAME = "Untitled Project"
APP_TITLE = "Storyboard Formatter"


@dataclass(frozen=True)
class ImportFile:
    name: str
    data: bytes
    mime_type: Optional[str] = None

    @property
    def resolved_type(self) -> str:
        if self.mime_type:
            return self.mime_type
        guessed, _ = mimetypes.guess_type(self.name)
        return guessed or "application/octet-stream"

    @property
    def is_image(self) -> bool:
        return self.resolved_type.startswith("image/")


@dataclass
class ImportResult:
    selected: int = 0
    images: int = 0
    added: int = 0
    failed: List[str] = field(default_factory=list)

    @property
    def summary(self) -> str:
        if self.images == 0:
            return f"No valid image files found among {self.selected} selected"
        msg = f"Imported {self.added} of {self.images} images"
        if self.failed:
            msg += f" ({len(self.failed)} failed: {', '.join(self.failed)})"
        if self.images != self.selected:
            msg += f"; {self.selected - self.images} non-image files skipped"
        return msg


class PanelStore:
    """Ordered panels plus the selection cursor, the one-slot clipboard and the dirty flag."""

    def __init__(self, normalizer: Optional[ImageNormalizer] = None, recovery=None):
        self.normalizer = normalizer or ImageNormalizer()
        self.recovery = recovery  # session-scoped AutoRecovery, optional
        self.panels: List[Panel] = []
        self.current_index: Optional[int] = None
        self.clipboard: Optional[PanelFields] = None
        self.project_name: str = DEFAULT_PROJECT_NAME
        self.dirty: bool = False

    def __len__(self) -> int:
        return len(self.panels)

    @property
    def current(self) -> Optional[Panel]:
        return None if self.current_index is None else self.panels[self.current_index]

    @property
    def title(self) -> str:
        star = " *" if self.dirty else ""
        return f"{self.project_name}{star} - {APP_TITLE}"

    def mark_dirty(self) -> None:
        self.dirty = True

    def mark_saved(self) -> None:
        self.dirty = False

    # ---- Import ----

    def import_files(self, files: Iterable[ImportFile]) -> ImportResult:
        files = list(files)
        images = [f for f in files if f.is_image]
        result = ImportResult(selected=len(files), images=len(images))

        for f in images:
            try:
                normalized = self.normalizer.normalize(f.data, f.resolved_type)
            except DecodeError as e:
                logger.warning("Error processing image %s: %s", f.name, e)
                result.failed.append(f.name)
                continue
            # labels follow the live count so they stay sequential mid-batch
            n = len(self.panels) + 1
            self.panels.append(
                Panel(
                    image=normalized.data_url,
                    original_file_name=f.name,
                    scene=f"Scene {n}",
                    shot=f"Panel {n}",
                )
            )
            result.added += 1

        if result.added:
            self.mark_dirty()
        logger.info(result.summary)
        return result

    # ---- Selection ----

    def select(self, index: Optional[int]) -> None:
        if index is None or index == -1:
            self.current_index = None
            return
        if not 0 <= index < len(self.panels):
            raise IndexError(f"panel index {index} out of range (0..{len(self.panels) - 1})")
        self.current_index = index

    def close_editor(self) -> None:
        self.select(None)

    # ---- Editing ----

    def update(self, fields: Union[PanelFields, Mapping[str, object]]) -> bool:
        panel = self.current
        if panel is None:
            return False
        if not isinstance(fields, PanelFields):
            fields = PanelFields(**{k: v for k, v in fields.items() if k in EDITABLE_FIELDS})
        panel.apply(fields)
        self.mark_dirty()
        return True

    def copy_clipboard(self) -> bool:
        panel = self.current
        if panel is None:
            return False
        self.clipboard = panel.fields()
        logger.debug("Copied panel data from %s", panel.label)
        return True

    def paste_clipboard(self) -> bool:
        """Returns False when there is nothing to paste (empty clipboard or no selection)."""
        panel = self.current
        if panel is None or self.clipboard is None:
            logger.info("No data to paste")
            return False
        panel.apply(self.clipboard)
        self.mark_dirty()
        return True

    # ---- Deletion ----

    def delete_at(self, index: int) -> Panel:
        if not 0 <= index < len(self.panels):
            raise IndexError(f"panel index {index} out of range (0..{len(self.panels) - 1})")
        removed = self.panels.pop(index)
        if self.current_index is not None:
            if self.current_index == index:
                self.current_index = None
            elif self.current_index > index:
                self.current_index -= 1
        self.mark_dirty()
        return removed

    def delete_current(self) -> Optional[Panel]:
        if self.current_index is None:
            return None
        return self.delete_at(self.current_index)

    # ---- Whole-project ----

    def new_project(self) -> None:
        self.replace_contents(DEFAULT_PROJECT_NAME, [])
        if self.recovery is not None:
            self.recovery.clear()

    def replace_contents(self, name: str, panels: List[Panel]) -> None:
        self.panels = list(panels)
        self.project_name = name
        self.current_index = None
        self.dirty = False

    def cards(self) -> List[PanelCard]:
        return [make_card(p, i, active=(i == self.current_index)) for i, p in enumerate(self.panels)]

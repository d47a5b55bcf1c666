## storyboard_formatter/serializer.py

import json
import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, List, Optional, Tuple, Union

from pydantic import ValidationError

from storyboard_formatter.errors import FormatError
from storyboard_formatter.models import FORMAT_VERSION, Panel, ProjectDocument
from storyboard_formatter.store import PanelStore

logger = logging.getLogger(__name__)

LOADED_PROJECT_NAME = "Loaded Project"


def iso_now(now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def project_filename(name: str) -> str:
    return re.sub(r"[^a-z0-9]", "_", name, flags=re.IGNORECASE).lower() + ".json"


@dataclass
class LoadedProject:
    name: str
    panels: List[Panel] = field(default_factory=list)
    version: Optional[str] = None
    skipped: int = 0


def serialize(store: PanelStore, now: Optional[datetime] = None) -> ProjectDocument:
    stamp = iso_now(now)
    return ProjectDocument(
        name=store.project_name,
        panels=[p.model_copy(deep=True) for p in store.panels],
        version=FORMAT_VERSION,
        created=stamp,
        last_modified=stamp,
    )


def to_json(store: PanelStore, now: Optional[datetime] = None) -> str:
    return serialize(store, now).model_dump_json(indent=2, by_alias=True)


def panels_from_list(entries: List[Any]) -> Tuple[List[Panel], int]:
    """Tolerant per-panel coercion; only entries that are not objects at all are dropped."""
    panels: List[Panel] = []
    skipped = 0
    for i, entry in enumerate(entries):
        if not isinstance(entry, dict):
            logger.warning("Skipping panel %s: expected an object, got %s", i, type(entry).__name__)
            skipped += 1
            continue
        try:
            panels.append(Panel.model_validate(entry))
        except ValidationError as e:
            logger.warning("Skipping panel %s: %s", i, e)
            skipped += 1
    return panels, skipped


def parse_document(data: Union[bytes, str]) -> dict:
    if isinstance(data, bytes):
        try:
            data = data.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise FormatError(f"Project file is not UTF-8 text: {e}") from e
    try:
        raw = json.loads(data)
    except ValueError as e:
        # JSONDecodeError, and integer literals past the int digit limit
        raise FormatError(f"Project file is not valid JSON: {e}") from e
    if not isinstance(raw, dict) or not isinstance(raw.get("panels"), list):
        raise FormatError("Invalid project file format: missing panel list")
    return raw


def deserialize(data: Union[bytes, str]) -> LoadedProject:
    raw = parse_document(data)
    panels, skipped = panels_from_list(raw["panels"])
    name = raw.get("name") or LOADED_PROJECT_NAME
    return LoadedProject(name=str(name), panels=panels, version=raw.get("version"), skipped=skipped)


def load_into(store: PanelStore, data: Union[bytes, str]) -> LoadedProject:
    """Replace the store's content with a project file. The store is untouched on FormatError."""
    project = deserialize(data)
    store.replace_contents(project.name, project.panels)
    logger.info("Project loaded: %s (%d panels)", project.name, len(project.panels))
    return project


def save(store: PanelStore, now: Optional[datetime] = None) -> Tuple[str, bytes]:
    payload = to_json(store, now).encode("utf-8")
    store.mark_saved()
    return project_filename(store.project_name), payload

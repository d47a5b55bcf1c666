## storyboard_formatter/recovery.py

import json
import logging
from dataclasses import dataclass
from typing import List, Optional

from storyboard_formatter.models import Panel
from storyboard_formatter.serializer import iso_now, panels_from_list
from storyboard_formatter.store import PanelStore

logger = logging.getLogger(__name__)

RECOVERED_PROJECT_NAME = "Recovered Project"


@dataclass(frozen=True)
class RecoverySnapshot:
    project_name: str
    panels: List[Panel]
    timestamp: str


class AutoRecovery:
    """
    One in-memory recovery snapshot for the current session.

    The snapshot lives only as long as this object; nothing is written to disk. The
    owner creates it at start, offers `pending` once, then either restores or discards.
    """

    def __init__(self):
        self._data: Optional[str] = None

    def capture(self, store: PanelStore) -> bool:
        if not store.panels:
            return False
        payload = {
            "panels": [p.to_document() for p in store.panels],
            "projectName": store.project_name,
            "timestamp": iso_now(),
        }
        try:
            self._data = json.dumps(payload)
        except (TypeError, ValueError) as e:
            logger.warning("Auto-save failed: %s", e)
            return False
        logger.debug("Auto-saved %d panels", len(store.panels))
        return True

    @property
    def pending(self) -> Optional[RecoverySnapshot]:
        if self._data is None:
            return None
        try:
            raw = json.loads(self._data)
        except json.JSONDecodeError as e:
            logger.warning("Could not load auto-save: %s", e)
            return None
        entries = raw.get("panels")
        if not isinstance(entries, list) or not entries:
            return None
        panels, _ = panels_from_list(entries)
        return RecoverySnapshot(
            project_name=raw.get("projectName") or RECOVERED_PROJECT_NAME,
            panels=panels,
            timestamp=raw.get("timestamp", ""),
        )

    def restore(self, store: PanelStore) -> bool:
        snapshot = self.pending
        if snapshot is None:
            return False
        store.replace_contents(snapshot.project_name, snapshot.panels)
        logger.info("Auto-save restored (%d panels from %s)", len(snapshot.panels), snapshot.timestamp)
        return True

    def discard(self) -> None:
        self._data = None

    def clear(self) -> None:
        self.discard()

## storyboard_formatter/models.py

import math
import uuid
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_DURATION = 5.0
FORMAT_VERSION = "1.0"

EDITABLE_FIELDS = ("scene", "shot", "description", "dialogue", "direction", "camera", "duration")
TEXT_FIELDS = EDITABLE_FIELDS[:-1]

PLACEHOLDERS = {
    "description": "No description",
    "dialogue": "No dialogue",
    "direction": "No direction",
    "camera": "No camera notes",
}


def new_panel_id() -> str:
    return uuid.uuid4().hex


def parse_duration(value: Any) -> float:
    """Lenient seconds parser: anything unusable falls back to the 5 second default."""
    if value is None or isinstance(value, bool):
        return DEFAULT_DURATION
    try:
        seconds = float(value)
    except (TypeError, ValueError, OverflowError):
        return DEFAULT_DURATION
    if not math.isfinite(seconds) or seconds == 0:
        return DEFAULT_DURATION
    return seconds


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


class EditableFields(BaseModel):
    """The metadata a user can edit on a panel. Everything except id and image."""

    scene: str = ""
    shot: str = ""
    description: str = ""
    dialogue: str = ""
    direction: str = ""
    camera: str = ""
    duration: float = DEFAULT_DURATION

    @field_validator(*TEXT_FIELDS, mode="before")
    @classmethod
    def _coerce_text(cls, v: Any) -> str:
        return _as_text(v)

    @field_validator("duration", mode="before")
    @classmethod
    def _coerce_duration(cls, v: Any) -> float:
        return parse_duration(v)


class PanelFields(EditableFields):
    """Value snapshot of the editable subset (clipboard, editor form)."""

    model_config = ConfigDict(frozen=True)


class Panel(EditableFields):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default_factory=new_panel_id)
    image: str = ""
    original_file_name: Optional[str] = Field(default=None, alias="originalFileName")

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, v: Any) -> str:
        return new_panel_id() if v is None or v == "" else _as_text(v)

    @field_validator("image", mode="before")
    @classmethod
    def _coerce_image(cls, v: Any) -> str:
        return _as_text(v)

    @field_validator("original_file_name", mode="before")
    @classmethod
    def _coerce_name(cls, v: Any) -> Optional[str]:
        return None if v is None else _as_text(v)

    @property
    def label(self) -> str:
        return f"{self.scene} - {self.shot}"

    def fields(self) -> PanelFields:
        return PanelFields(**self.model_dump(include=set(EDITABLE_FIELDS)))

    def apply(self, fields: PanelFields) -> None:
        for name in EDITABLE_FIELDS:
            setattr(self, name, getattr(fields, name))

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True)


class PanelCard(BaseModel):
    """Read-only view of one panel for the UI shell."""

    model_config = ConfigDict(frozen=True)

    index: int
    header: str
    duration_label: str
    image: str
    captions: List[str]
    active: bool = False


def format_seconds(seconds: float) -> str:
    return f"{seconds:g}"


def caption_or_placeholder(panel: Panel, name: str) -> str:
    text = getattr(panel, name)
    return text if text.strip() else PLACEHOLDERS[name]


def make_card(panel: Panel, index: int, active: bool = False) -> PanelCard:
    return PanelCard(
        index=index,
        header=panel.label,
        duration_label=f"{format_seconds(panel.duration)}s",
        image=panel.image,
        captions=[
            f"DESC: {caption_or_placeholder(panel, 'description')}",
            f"DIALOG: {caption_or_placeholder(panel, 'dialogue')}",
            f"DIR: {caption_or_placeholder(panel, 'direction')}",
            f"CAM: {caption_or_placeholder(panel, 'camera')}",
        ],
        active=active,
    )


class ProjectDocument(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    panels: List[Panel]
    version: str = FORMAT_VERSION
    created: str
    last_modified: str = Field(alias="lastModified")

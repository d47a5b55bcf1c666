## storyboard_formatter/__init__.py

from storyboard_formatter.errors import DecodeError, EmptyBatchError, FormatError, RenderError, StoryboardError
from storyboard_formatter.models import Panel, PanelFields, ProjectDocument
from storyboard_formatter.store import ImportFile, ImportResult, PanelStore

__all__ = [
    "DecodeError",
    "EmptyBatchError",
    "FormatError",
    "ImportFile",
    "ImportResult",
    "Panel",
    "PanelFields",
    "PanelStore",
    "ProjectDocument",
    "RenderError",
    "StoryboardError",
]

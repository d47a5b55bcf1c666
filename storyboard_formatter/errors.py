## storyboard_formatter/errors.py


class StoryboardError(Exception):
    """Base class for every failure raised by the storyboard core."""


class DecodeError(StoryboardError):
    """Image bytes could not be interpreted as an image. Skip the item, keep the batch."""


class FormatError(StoryboardError):
    """A project document lacks the panel-array shape. The whole load is aborted."""


class EmptyBatchError(StoryboardError):
    """An export was requested while the storyboard holds no panels."""

    def __init__(self, operation: str):
        super().__init__(f"{operation}: no panels to export")
        self.operation = operation


class RenderError(StoryboardError):
    """Drawing or embedding one panel failed during an export batch."""

    def __init__(self, message: str, index: int = -1):
        super().__init__(message)
        self.index = index

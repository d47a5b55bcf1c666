## storyboard_formatter/text_layout.py

from functools import lru_cache
from typing import Callable, List

from PIL import ImageFont

_REGULAR_FONTS = [
    "DejaVuSans.ttf",
    "Arial.ttf",
    "arial.ttf",
    "LiberationSans-Regular.ttf",
]
_BOLD_FONTS = [
    "DejaVuSans-Bold.ttf",
    "Arial Bold.ttf",
    "arialbd.ttf",
    "LiberationSans-Bold.ttf",
]


def wrap(text: str, max_width: float, width_of: Callable[[str], float]) -> List[str]:
    """
    Greedy word wrap.

    Words are added to the current line until the measured candidate line would exceed
    max_width; the line is then closed and the word opens the next one. A word that is
    wider than max_width on its own is kept whole on its own line. Empty text gives [].
    """
    words = (text or "").split()
    lines: List[str] = []
    current: List[str] = []
    for word in words:
        candidate = " ".join(current + [word])
        if current and width_of(candidate) > max_width:
            lines.append(" ".join(current))
            current = [word]
        else:
            current.append(word)
    if current:
        lines.append(" ".join(current))
    return lines


@lru_cache(maxsize=32)
def load_font(size: int, bold: bool = False) -> ImageFont.ImageFont:
    for candidate in _BOLD_FONTS if bold else _REGULAR_FONTS:
        try:
            return ImageFont.truetype(candidate, size)
        except OSError:
            continue
    return ImageFont.load_default(size=size)


def text_width(font: ImageFont.ImageFont, text: str) -> float:
    return font.getlength(text) if text else 0.0


def measure_with(font: ImageFont.ImageFont) -> Callable[[str], float]:
    return lambda s: text_width(font, s)

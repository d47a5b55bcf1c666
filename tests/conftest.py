import io

import pytest
from PIL import Image

from storyboard_formatter.imaging import encode_data_url
from storyboard_formatter.models import Panel


def image_bytes(size=(64, 32), fmt="PNG", color=(200, 40, 40)) -> bytes:
    mode = "RGBA" if fmt == "PNG" else "RGB"
    img = Image.new(mode, size, color=color)
    buf = io.BytesIO()
    img.save(buf, format=fmt)
    return buf.getvalue()


def make_panel(n: int = 1, size=(64, 32), **fields) -> Panel:
    fields.setdefault("scene", f"Scene {n}")
    fields.setdefault("shot", f"Panel {n}")
    return Panel(image=encode_data_url(image_bytes(size), "image/png"), **fields)


BROKEN_IMAGE = "data:image/png;base64,bm90IGFuIGltYWdl"


@pytest.fixture
def png_bytes():
    return image_bytes()


@pytest.fixture
def jpeg_bytes():
    return image_bytes(fmt="JPEG")


@pytest.fixture
def panels():
    return [make_panel(i + 1) for i in range(3)]


def dumps(panels):
    return [p.model_dump() for p in panels]

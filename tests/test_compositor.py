"""
Unit tests for compositor.py.
"""

import pytest

from conftest import BROKEN_IMAGE, make_panel
from storyboard_formatter.compositor import PanelCompositor, format_timecode, letterbox_rect
from storyboard_formatter.errors import RenderError
from storyboard_formatter.models import Panel


class TestLetterbox:

    def test_wide_image_fills_height_and_is_centered(self):
        x, y, w, h = letterbox_rect(2000, 1000, 1920, 1080)
        assert h == 1080
        assert w == 2160
        assert x == -120 and y == 0

    def test_tall_image_fills_width(self):
        x, y, w, h = letterbox_rect(1000, 1000, 1920, 1080)
        assert (x, w, h) == (0, 1920, 1920)
        assert y == pytest.approx(-420)

    def test_exact_aspect(self):
        assert letterbox_rect(960, 540, 1920, 1080) == pytest.approx((0, 0, 1920, 1080))

    def test_invalid_size(self):
        with pytest.raises(ValueError):
            letterbox_rect(0, 10, 1920, 1080)


class TestTimecode:

    @pytest.mark.parametrize("seconds,expected", [
        (0, "00:00:00.00"),
        (5, "00:00:05.00"),
        (2.5, "00:00:02.12"),
        (3725.25, "01:02:05.06"),
    ])
    def test_format(self, seconds, expected):
        assert format_timecode(seconds) == expected


class TestFrameLayout:

    def setup_method(self):
        self.compositor = PanelCompositor()

    def test_minimal_panel(self):
        layout = self.compositor.frame_layout(Panel(scene="S1", shot="P1"), 0, (2000, 1000))
        assert layout.size == (1920, 1080)
        assert layout.top_band == (0, 0, 1920, 120)
        assert layout.bottom_band is None
        texts = [t.text for t in layout.texts]
        assert texts == ["S1 - P1", "5s | 00:00:00.00"]

    def test_elapsed_time_uses_frame_index(self):
        layout = self.compositor.frame_layout(Panel(duration=2.5), 3, (100, 100))
        assert layout.texts[1].text == "2.5s | 00:00:07.12"
        right_edge = layout.texts[1].x
        assert right_edge < 1920 - 40

    def test_optional_text(self):
        panel = Panel(
            camera="Dolly in",
            dialogue="We have to leave now before the storm reaches the harbour " * 8,
            description="Rain",
            direction="Slow",
        )
        layout = self.compositor.frame_layout(panel, 0, (1920, 1080))
        assert layout.bottom_band == (0, 880, 1920, 200)
        assert layout.find("CAM: Dolly in")[0].y == 80
        desc = layout.find("DESC: ")[0]
        assert (desc.x, desc.y) == (40, 1040)
        direction = layout.find("DIR: ")[0]
        assert direction.x < 1880

        dialogue = [t for t in layout.texts if t.size == 42]
        assert len(dialogue) > 1
        assert [t.y for t in dialogue[:2]] == [920, 970]
        for t in dialogue:
            assert t.x >= 0

    def test_blank_dialogue_has_no_band(self):
        layout = self.compositor.frame_layout(Panel(dialogue="   "), 0, (10, 10))
        assert layout.bottom_band is None
        assert not [t for t in layout.texts if t.size == 42]


class TestRender:

    def test_output_frame(self):
        img = PanelCompositor().render(make_panel(1, size=(200, 100), dialogue="Hello"), 0)
        assert img.size == (1920, 1080)
        assert img.mode == "RGB"
        # centre of the frame shows the source image, bands stay dark
        r, g, b = img.getpixel((960, 540))
        assert r > 150 and g < 80
        assert max(img.getpixel((1900, 110))) < 90

    def test_broken_image(self):
        with pytest.raises(RenderError):
            PanelCompositor().render(Panel(image=BROKEN_IMAGE), 4)

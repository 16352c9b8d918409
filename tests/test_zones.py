"""Zone 카탈로그·측정 테스트"""
import numpy as np
import pytest

from da_layout.analysis.zones import lane_catalog, measure_zone, zone_catalog
from da_layout.models.analysis import PixelBuffer, ZoneSpec
from da_layout.utils.color import SAFE_BLACK, SAFE_WHITE


def _solid_buffer(value: int, width: int = 40, height: int = 40) -> PixelBuffer:
    arr = np.full((height, width, 4), value, dtype=np.uint8)
    arr[:, :, 3] = 255
    return PixelBuffer(width=width, height=height, data=arr.tobytes())


def _noise_buffer(width: int = 40, height: int = 40, seed: int = 7) -> PixelBuffer:
    rng = np.random.default_rng(seed)
    arr = rng.integers(0, 256, size=(height, width, 4), dtype=np.uint8)
    arr[:, :, 3] = 255
    return PixelBuffer(width=width, height=height, data=arr.tobytes())


@pytest.mark.parametrize("format_id", ["square", "portrait", "story"])
def test_zone_catalog_stays_inside_frame(format_id):
    zones = zone_catalog(format_id)
    assert len(zones) == 8
    for zone in zones:
        assert 0 <= zone.x and zone.x + zone.w <= 1
        assert 0 <= zone.y and zone.y + zone.h <= 1


@pytest.mark.parametrize("format_id", ["square", "portrait", "story"])
@pytest.mark.parametrize("align", ["left", "center", "right"])
def test_lane_catalog_stays_inside_frame(format_id, align):
    lane = lane_catalog(format_id, align)
    assert set(lane) == {"headline", "subhead", "cta"}
    for zone in lane.values():
        assert zone.x + zone.w <= 1 and zone.y + zone.h <= 1
    assert lane["subhead"].y >= lane["headline"].y + lane["headline"].h


def test_story_bands_are_inset():
    square = {z.id: z for z in zone_catalog("square")}
    story = {z.id: z for z in zone_catalog("story")}
    assert story["top-left"].y > square["top-left"].y
    assert story["bottom-center"].y > square["bottom-center"].y


def test_zone_spec_rejects_zone_past_frame():
    with pytest.raises(ValueError):
        ZoneSpec(id="bad", x=0.8, y=0.1, w=0.4, h=0.1, band="top", align="left")


def test_light_zone_prefers_dark_text():
    zone = zone_catalog("square")[0]
    stats = measure_zone(_solid_buffer(245), zone)
    assert stats.preferred_text_color == SAFE_BLACK
    assert stats.clutter == pytest.approx(0, abs=1e-12)
    assert stats.preferred_contrast > 4.5


def test_dark_zone_prefers_light_text():
    zone = zone_catalog("square")[0]
    stats = measure_zone(_solid_buffer(20), zone)
    assert stats.preferred_text_color == SAFE_WHITE
    assert stats.clutter == pytest.approx(0, abs=1e-12)


def test_noise_raises_clutter():
    zone = zone_catalog("square")[1]
    stats = measure_zone(_noise_buffer(), zone)
    assert 0 < stats.clutter <= 1


def test_clutter_weights_are_configurable():
    zone = zone_catalog("square")[1]
    buffer = _noise_buffer()
    assert measure_zone(buffer, zone, variance_weight=0, edge_weight=0).clutter == 0


def test_degenerate_zone_reports_mid_luminance():
    # 픽셀이 없는 존
    buffer = PixelBuffer(width=0, height=0, data=b"")
    stats = measure_zone(buffer, zone_catalog("square")[0])
    assert stats.mean_luminance == 0.5
    assert stats.clutter == 0


def test_pixel_buffer_validates_length():
    with pytest.raises(ValueError):
        PixelBuffer(width=2, height=2, data=b"\x00" * 3)


@pytest.mark.parametrize("value", [20, 128, 245])
def test_uniform_image_has_no_clutter(value):
    """균일한 이미지는 어떤 존에서도 clutter 가 사실상 0 입니다."""
    buffer = _solid_buffer(value, width=63, height=57)
    for zone in zone_catalog("square"):
        assert measure_zone(buffer, zone).clutter == pytest.approx(0, abs=1e-12)

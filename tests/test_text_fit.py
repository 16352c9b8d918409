"""텍스트 크기 결정·오토핏·트리밍 테스트"""
import pytest

from da_layout.compositor.canvas import TextElement
from da_layout.compositor.text_fit import (
    MIN_TRIM_WORDS,
    aligned_left,
    apply_casing,
    cta_font_size,
    estimate_text_width,
    fit_to_height,
    headline_font_size,
    subhead_font_size,
    trim_to_height,
)
from da_layout.utils.image_utils import text_block_height

LONG_COPY = "Everything you need for the perfect summer run starts right here today with free delivery"


def _element(text: str, width: float = 220, font_size: int = 60) -> TextElement:
    return TextElement(text, left=0, top=0, width=width, font_size=font_size)


def test_fit_to_height_stops_when_block_fits():
    element = _element(LONG_COPY)
    max_height = element.height / 2
    iterations = fit_to_height(element, max_height, min_font_size=26, font_step=2)

    assert iterations > 0
    assert element.font_size >= 26
    assert element.height <= max_height or element.font_size == 26


def test_fit_to_height_is_bounded_by_floor():
    element = _element(LONG_COPY, font_size=60)
    iterations = fit_to_height(element, 1, min_font_size=26, font_step=2)

    assert element.font_size == 26
    assert iterations == (60 - 26) // 2


def test_fit_to_height_noop_when_already_fits():
    element = _element("Sale", font_size=40)
    assert fit_to_height(element, 10_000, min_font_size=26) == 0
    assert element.font_size == 40


def test_trim_keeps_longest_fitting_prefix():
    element = _element(LONG_COPY, width=160, font_size=20)
    one_line = text_block_height(1, 20, element.line_height)
    assert element.height > one_line * 2

    trimmed = trim_to_height(element, LONG_COPY, one_line * 2)

    assert trimmed is True
    words = element.text.split()
    assert len(words) >= MIN_TRIM_WORDS
    assert LONG_COPY.startswith(element.text)
    assert len(words) < len(LONG_COPY.split())


def test_trim_never_drops_below_three_words():
    element = _element(LONG_COPY, width=40, font_size=30)
    trim_to_height(element, LONG_COPY, 1)
    assert len(element.text.split()) == MIN_TRIM_WORDS


def test_trim_leaves_short_copy_alone():
    element = _element("Shop the drop", width=40, font_size=40)
    assert trim_to_height(element, "Shop the drop", 1) is False
    assert element.text == "Shop the drop"


def test_trim_noop_when_fits():
    element = _element("Sale", font_size=20)
    assert trim_to_height(element, "Sale", 10_000) is False


def test_estimate_text_width_is_clamped_to_lane():
    lane = 500
    assert estimate_text_width("Hi", 40, lane, "headline") == pytest.approx(lane * 0.45)
    assert estimate_text_width("x" * 200, 40, lane, "headline") == lane
    assert estimate_text_width("Shop", 20, lane, "cta") == pytest.approx(lane * 0.35)


def test_estimate_uses_longest_explicit_line():
    short = estimate_text_width("aaaa aaaa aaaa\nbb", 40, 400, "subhead")
    assert short == pytest.approx(14 * 40 * 0.5)


@pytest.mark.parametrize(
    "align,expected",
    [("left", 100), ("center", 150), ("right", 200)],
)
def test_aligned_left(align, expected):
    assert aligned_left(100, 300, 200, align) == expected


def test_apply_casing():
    assert apply_casing("summer sale", "upper") == "SUMMER SALE"
    assert apply_casing("summer sale now", "title") == "Summer Sale Now"
    assert apply_casing("  summer sale", "sentence") == "  Summer sale"
    assert apply_casing("Summer", "none") == "Summer"


def test_font_size_rules():
    assert headline_font_size(10, "square") == 34
    assert headline_font_size(1000, "square") == 88
    assert headline_font_size(1000, "story") == 112
    assert subhead_font_size(200, "square") == 44
    assert subhead_font_size(200, "story") == 56
    assert subhead_font_size(10, None) == 17
    assert cta_font_size(200) == 30
    assert cta_font_size(10) == 14

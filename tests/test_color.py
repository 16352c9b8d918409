"""WCAG 휘도·명암비 유틸리티 테스트"""
import pytest

from da_layout.utils.color import (
    SAFE_BLACK,
    SAFE_WHITE,
    best_text_color,
    best_text_color_for_hex,
    button_text_color,
    contrast_ratio,
    contrast_ratio_hex,
    hex_luminance,
    hex_to_rgba,
    parse_hex,
    relative_luminance,
)


def test_relative_luminance_extremes():
    assert relative_luminance(0, 0, 0) == 0
    assert relative_luminance(255, 255, 255) == pytest.approx(1.0)


def test_relative_luminance_clamps_out_of_range_channels():
    assert relative_luminance(-20, 300, 0) == relative_luminance(0, 255, 0)


def test_contrast_ratio_black_white_is_21():
    assert contrast_ratio(1.0, 0.0) == pytest.approx(21.0)


def test_contrast_ratio_is_symmetric():
    assert contrast_ratio(0.2, 0.7) == contrast_ratio(0.7, 0.2)


def test_contrast_ratio_identical_is_one():
    assert contrast_ratio(0.42, 0.42) == pytest.approx(1.0)


def test_best_text_color():
    assert best_text_color(0.9) == SAFE_BLACK
    assert best_text_color(0.02) == SAFE_WHITE


def test_parse_hex():
    assert parse_hex("#FF8000") == (255, 128, 0)
    assert parse_hex("ff8000") == (255, 128, 0)
    assert parse_hex("#FFF") is None
    assert parse_hex("not-a-color") is None
    assert parse_hex(None) is None


def test_malformed_hex_is_treated_as_black():
    assert hex_luminance("#zzzzzz") == 0
    assert contrast_ratio_hex("#zzzzzz", "#FFFFFF") == pytest.approx(21.0)


def test_hex_to_rgba():
    assert hex_to_rgba("#102030", 1.0) == (16, 32, 48, 255)
    assert hex_to_rgba("#102030", 0.5) == (16, 32, 48, 128)
    assert hex_to_rgba("#102030", 3) == (16, 32, 48, 255)


def test_hex_to_rgba_malformed_is_transparent():
    assert hex_to_rgba("oops", 1.0) == (0, 0, 0, 0)


def test_button_text_color():
    assert button_text_color("#FFD400") == SAFE_BLACK
    assert button_text_color("#2D6A4F") == SAFE_WHITE


def test_best_text_color_for_hex_defaults_to_white():
    assert best_text_color_for_hex("#F0F0F0") == SAFE_BLACK
    assert best_text_color_for_hex("garbage") == SAFE_WHITE

"""WCAG 2.0 휘도·명암비 유틸리티

모든 함수는 순수 함수이며 예외를 던지지 않습니다.
잘못된 HEX 입력은 안전한 기본값(검정)으로 대체됩니다.
"""
from __future__ import annotations

import re

SAFE_WHITE = "#F8F8F4"
SAFE_BLACK = "#141414"

_HEX_RE = re.compile(r"^[0-9a-fA-F]{6}$")


def clamp(value: float, low: float, high: float) -> float:
    return min(high, max(low, value))


def _linearize(component: float) -> float:
    s = component / 255
    return s / 12.92 if s <= 0.03928 else ((s + 0.055) / 1.055) ** 2.4


def relative_luminance(r: float, g: float, b: float) -> float:
    """sRGB 채널(0~255)을 WCAG 상대 휘도(0~1)로 변환합니다."""
    r, g, b = (clamp(c, 0, 255) for c in (r, g, b))
    return 0.2126 * _linearize(r) + 0.7152 * _linearize(g) + 0.0722 * _linearize(b)


def contrast_ratio(l1: float, l2: float) -> float:
    """두 휘도 사이의 명암비 (1~21). 인자 순서와 무관합니다."""
    l1, l2 = clamp(l1, 0, 1), clamp(l2, 0, 1)
    lighter, darker = max(l1, l2), min(l1, l2)
    return (lighter + 0.05) / (darker + 0.05)


def best_text_color(background_luminance: float) -> str:
    """배경 휘도에 대해 더 높은 명암비를 주는 근백색/근흑색을 고릅니다 (동률이면 흰색)."""
    white = contrast_ratio(1.0, background_luminance)
    black = contrast_ratio(0.0, background_luminance)
    return SAFE_WHITE if white >= black else SAFE_BLACK


def parse_hex(color: str | None) -> tuple[int, int, int] | None:
    """'#rrggbb' 문자열을 RGB 튜플로 변환합니다. 형식이 틀리면 None."""
    if not isinstance(color, str):
        return None
    clean = color.strip().lstrip("#")
    if not _HEX_RE.match(clean):
        return None
    return int(clean[0:2], 16), int(clean[2:4], 16), int(clean[4:6], 16)


def hex_luminance(color: str | None) -> float:
    r, g, b = parse_hex(color) or (0, 0, 0)
    return relative_luminance(r, g, b)


def contrast_ratio_hex(color1: str, color2: str) -> float:
    return contrast_ratio(hex_luminance(color1), hex_luminance(color2))


def hex_to_rgba(color: str | None, alpha: float) -> tuple[int, int, int, int]:
    """HEX + 불투명도(0~1)를 Pillow RGBA 튜플로 변환합니다.

    잘못된 색상은 완전 투명한 검정으로 대체합니다.
    """
    parsed = parse_hex(color)
    if parsed is None:
        return (0, 0, 0, 0)
    a = round(clamp(alpha, 0, 1) * 255)
    return (*parsed, a)


def button_text_color(button_color: str | None) -> str:
    """CTA 버튼 배경색 위에서 읽기 좋은 글자색."""
    return best_text_color(hex_luminance(button_color))


def best_text_color_for_hex(background: str | None) -> str:
    """스크림 색상 위 글자색. 색상을 해석할 수 없으면 흰색."""
    parsed = parse_hex(background)
    if parsed is None:
        return SAFE_WHITE
    return best_text_color(relative_luminance(*parsed))

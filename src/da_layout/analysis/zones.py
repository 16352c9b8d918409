"""Zone 측정: 후보 영역별 clutter·휘도·권장 글자색 계산"""
from __future__ import annotations

import math

import numpy as np

from da_layout.models.analysis import HorizontalAlign, PixelBuffer, ZoneSpec, ZoneStats
from da_layout.utils.color import SAFE_BLACK, SAFE_WHITE, clamp, contrast_ratio

CLUTTER_VARIANCE_WEIGHT = 8.0
CLUTTER_EDGE_WEIGHT = 1.6


def zone_catalog(format_id: str | None = "square") -> tuple[ZoneSpec, ...]:
    """8개 후보 존. 스토리 포맷은 상·하단 UI 여백만큼 밴드를 안쪽으로 옮깁니다.

    선언 순서가 동점 처리 우선순위입니다.
    """
    story = format_id == "story"
    top_y = 0.1 if story else 0.06
    upper_y = 0.22 if story else 0.18
    bottom_y = 0.8 if story else 0.76

    return (
        ZoneSpec(id="top-left", x=0.07, y=top_y, w=0.4, h=0.2, band="top", align="left"),
        ZoneSpec(id="top-center", x=0.17, y=top_y, w=0.66, h=0.2, band="top", align="center"),
        ZoneSpec(id="top-right", x=0.53, y=top_y, w=0.4, h=0.2, band="top", align="right"),
        ZoneSpec(id="upper-left", x=0.07, y=upper_y, w=0.42, h=0.18, band="middle", align="left"),
        ZoneSpec(id="upper-right", x=0.51, y=upper_y, w=0.42, h=0.18, band="middle", align="right"),
        ZoneSpec(id="bottom-left", x=0.08, y=bottom_y, w=0.36, h=0.12, band="bottom", align="left"),
        ZoneSpec(id="bottom-center", x=0.2, y=bottom_y, w=0.6, h=0.12, band="bottom", align="center"),
        ZoneSpec(id="bottom-right", x=0.56, y=bottom_y, w=0.36, h=0.12, band="bottom", align="right"),
    )


def lane_catalog(format_id: str | None, align: HorizontalAlign) -> dict[str, ZoneSpec]:
    """정렬이 고정된 경우 사용하는 3단 레인 (headline / subhead / cta)."""
    story = format_id == "story"
    margin = 0.06 if story else 0.055
    lane_width = (0.68 if story else 0.64) if align == "center" else (0.38 if story else 0.34)
    if align == "left":
        lane_x = margin
    elif align == "right":
        lane_x = 1 - margin - lane_width
    else:
        lane_x = (1 - lane_width) / 2

    top_y = 0.07 if story else 0.065
    headline_h = 0.19 if story else 0.2
    sub_y = top_y + headline_h + (0.03 if story else 0.028)
    sub_h = 0.14 if story else 0.13
    cta_y = 0.84 if story else 0.82
    if align == "center":
        cta_w = min(0.38, lane_width * 0.58)
        cta_x = 0.5 - cta_w / 2
    else:
        cta_w = min(0.26, lane_width * 0.72)
        cta_x = lane_x + lane_width - cta_w if align == "right" else lane_x

    return {
        "headline": ZoneSpec(
            id=f"lane-headline-{align}", x=lane_x, y=top_y, w=lane_width, h=headline_h,
            band="top", align=align,
        ),
        "subhead": ZoneSpec(
            id=f"lane-subhead-{align}", x=lane_x, y=sub_y, w=lane_width, h=sub_h,
            band="middle", align=align,
        ),
        "cta": ZoneSpec(
            id=f"lane-cta-{align}", x=cta_x, y=cta_y, w=cta_w, h=0.07 if story else 0.075,
            band="bottom", align=align,
        ),
    }


def luminance_matrix(rgb: np.ndarray) -> np.ndarray:
    """(h, w, 3) uint8 → (h, w) WCAG 상대 휘도."""
    s = rgb.astype(np.float64) / 255.0
    linear = np.where(s <= 0.03928, s / 12.92, ((s + 0.055) / 1.055) ** 2.4)
    return linear @ np.array([0.2126, 0.7152, 0.0722])


def zone_bounds(buffer: PixelBuffer, zone: ZoneSpec) -> tuple[int, int, int, int]:
    x0 = max(0, math.floor(zone.x * buffer.width))
    y0 = max(0, math.floor(zone.y * buffer.height))
    x1 = min(buffer.width, math.ceil((zone.x + zone.w) * buffer.width))
    y1 = min(buffer.height, math.ceil((zone.y + zone.h) * buffer.height))
    return x0, y0, x1, y1


def measure_zone(
    buffer: PixelBuffer,
    zone: ZoneSpec,
    variance_weight: float = CLUTTER_VARIANCE_WEIGHT,
    edge_weight: float = CLUTTER_EDGE_WEIGHT,
    luminance: np.ndarray | None = None,
) -> ZoneStats:
    """존 내부의 휘도 분산과 인접 픽셀 간 휘도 차(엣지 밀도)로 clutter를 계산합니다.

    luminance 에 버퍼 전체의 휘도 행렬을 넘기면 존마다 다시 계산하지 않습니다.
    """
    x0, y0, x1, y1 = zone_bounds(buffer, zone)
    count = max(0, x1 - x0) * max(0, y1 - y0)

    if count == 0:
        mean = 0.5
        variance = 0.0
        edge_density = 0.0
    else:
        if luminance is None:
            luminance = luminance_matrix(buffer.rgb())
        window = luminance[y0:y1, x0:x1]
        mean = float(window.mean())
        variance = float(window.var())
        edge_sum = float(np.abs(np.diff(window, axis=1)).sum() + np.abs(np.diff(window, axis=0)).sum())
        edge_density = edge_sum / count

    clutter = clamp(variance * variance_weight + edge_density * edge_weight, 0, 1)
    contrast_white = contrast_ratio(1.0, mean)
    contrast_black = contrast_ratio(0.0, mean)

    return ZoneStats(
        zone=zone,
        clutter=clutter,
        mean_luminance=mean,
        contrast_white=contrast_white,
        contrast_black=contrast_black,
        preferred_text_color=SAFE_WHITE if contrast_white >= contrast_black else SAFE_BLACK,
        preferred_contrast=max(contrast_white, contrast_black),
    )

"""Placement Planner: 존 측정 결과로 헤드라인·서브카피·CTA 배치 계획을 결정합니다.

두 가지 경로:
  A) 구조화 레인: 정렬이 고정(auto 아님)되고 avoid_center 인 경우.
     요청한 쪽에 세로 3단 레인을 쌓아 겹침 없는 배치를 보장합니다.
  B) 존 점수화(기본): 8개 후보 존의 clutter·명암비·힌트 패널티로 최저 점수 존을 고릅니다.
"""
from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

from pydantic import BaseModel, ConfigDict

from da_layout.config import Settings, get_settings
from da_layout.models.analysis import PixelBuffer, ZoneSpec, ZoneStats
from da_layout.models.placement import (
    PlacementCtaBlock,
    PlacementHints,
    PlacementPlan,
    PlacementScrim,
    PlacementTextBlock,
)
from da_layout.utils.color import button_text_color, clamp

from .zones import lane_catalog, luminance_matrix, measure_zone, zone_catalog

logger = logging.getLogger(__name__)

WCAG_AA_RATIO = 4.5

_DEFAULT_ACCENT = "#ff6a3d"
_DEFAULT_LANE_ACCENT = "#2D6A4F"


class PlannerConfig(BaseModel):
    """플래너에 주입되는 튜닝 상수 (불변)."""

    model_config = ConfigDict(frozen=True)

    variance_weight: float = 8.0
    edge_weight: float = 1.6
    scrim_clutter_threshold: float = 0.24
    scrim_contrast_threshold: float = 4.8

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "PlannerConfig":
        settings = settings or get_settings()
        return cls(
            variance_weight=settings.clutter_variance_weight,
            edge_weight=settings.clutter_edge_weight,
            scrim_clutter_threshold=settings.scrim_clutter_threshold,
            scrim_contrast_threshold=settings.scrim_contrast_threshold,
        )


def build_scrim(clutter: float, contrast: float, config: PlannerConfig | None = None) -> PlacementScrim:
    config = config or PlannerConfig()
    low_contrast = contrast < config.scrim_contrast_threshold
    if not (clutter > config.scrim_clutter_threshold or low_contrast):
        return PlacementScrim(enabled=False, color="#000000", opacity=0.0, padding=0.012)

    return PlacementScrim(
        enabled=True,
        color="#000000" if low_contrast else "#0E1218",
        opacity=clamp(0.18 + clutter * 0.55 + (0.12 if low_contrast else 0.0), 0.2, 0.62),
        padding=0.016,
    )


def _has_fixed_alignment(hints: PlacementHints) -> bool:
    return hints.preferred_alignment != "auto"


def score_headline_zone(stat: ZoneStats, hints: PlacementHints) -> float:
    score = stat.clutter * 1.7

    if stat.zone.band != "top":
        score += 0.12 if hints.preferred_headline_band == "upper" else 0.24

    if _has_fixed_alignment(hints) and stat.zone.align != hints.preferred_alignment:
        score += 0.3

    if hints.avoid_center and stat.zone.align == "center":
        score += 0.4

    if stat.preferred_contrast < WCAG_AA_RATIO:
        score += 0.25

    return score


def score_cta_zone(stat: ZoneStats, hints: PlacementHints) -> float:
    score = stat.clutter * 1.6

    if stat.zone.band != "bottom":
        score += 0.28

    if hints.objective == "offer" and stat.zone.align != "center":
        score += 0.08

    if hints.avoid_center and hints.objective != "offer" and stat.zone.align == "center":
        score += 0.22

    if stat.preferred_contrast < WCAG_AA_RATIO:
        score += 0.18

    return score


def score_lane(headline: ZoneStats, subhead: ZoneStats, cta: ZoneStats, hints: PlacementHints) -> float:
    """레인 전체의 clutter·명암비 점수 (낮을수록 좋음)."""
    score = headline.clutter * 1.65 + subhead.clutter * 1.4 + cta.clutter * 1.05
    min_contrast = min(headline.preferred_contrast, subhead.preferred_contrast, cta.preferred_contrast)

    if min_contrast < WCAG_AA_RATIO:
        score += (WCAG_AA_RATIO - min_contrast) * 0.24

    if hints.objective == "offer" and headline.zone.align == "center":
        score -= 0.05

    if abs(headline.mean_luminance - subhead.mean_luminance) > 0.22:
        score += 0.08

    return max(0.0, score)


def choose_best(candidates: Sequence[ZoneStats], scorer: Callable[[ZoneStats], float]) -> ZoneStats:
    """최저 점수 후보. 동점이면 먼저 선언된 존이 이깁니다."""
    winner = candidates[0]
    best_score = scorer(winner)
    for candidate in candidates[1:]:
        score = scorer(candidate)
        if score < best_score:
            winner, best_score = candidate, score
    return winner


def _button_style(hints: PlacementHints) -> str:
    if hints.objective == "launch":
        return "outline"
    if hints.objective == "awareness":
        return "ghost"
    return "solid"


def _plan_structured_lane(
    buffer: PixelBuffer,
    hints: PlacementHints,
    config: PlannerConfig,
    luminance,
) -> PlacementPlan:
    story = hints.format_id == "story"
    align = hints.preferred_alignment
    lane = lane_catalog(hints.format_id, align)
    headline_stat, subhead_stat, cta_stat = (
        measure_zone(buffer, lane[key], config.variance_weight, config.edge_weight, luminance)
        for key in ("headline", "subhead", "cta")
    )
    lane_score = score_lane(headline_stat, subhead_stat, cta_stat, hints)

    headline_height = 0.13 if story else 0.14
    subhead_height = 0.09 if story else 0.095
    # 헤드라인 높이에서 유도한 최소 간격 아래로 서브카피를 강제 배치
    subhead_y = clamp(
        lane["headline"].y + headline_height + (0.024 if story else 0.02),
        lane["subhead"].y,
        0.74 if story else 0.68,
    )

    accent = hints.accent_color or _DEFAULT_LANE_ACCENT
    cta_text_color = button_text_color(accent)
    confidence = clamp(
        1 - (headline_stat.clutter * 0.5 + subhead_stat.clutter * 0.25 + cta_stat.clutter * 0.25),
        0.4,
        0.96,
    )

    return PlacementPlan(
        headline=PlacementTextBlock(
            x=lane["headline"].x,
            y=lane["headline"].y,
            width=lane["headline"].w,
            height=headline_height,
            align=align,
            color=headline_stat.preferred_text_color,
            scrim=build_scrim(headline_stat.clutter, headline_stat.preferred_contrast, config),
        ),
        subhead=PlacementTextBlock(
            x=lane["subhead"].x,
            y=subhead_y,
            width=lane["subhead"].w,
            height=subhead_height,
            align=align,
            color=subhead_stat.preferred_text_color,
            scrim=build_scrim(subhead_stat.clutter * 0.92, subhead_stat.preferred_contrast, config),
        ),
        cta=PlacementCtaBlock(
            x=lane["cta"].x,
            y=lane["cta"].y,
            width=lane["cta"].w,
            height=0.06 if story else 0.065,
            align="center",
            color=cta_text_color,
            text_color=cta_text_color,
            button_color=accent,
            button_style=_button_style(hints),
            radius=18,
            scrim=build_scrim(cta_stat.clutter * 0.68, cta_stat.preferred_contrast, config),
        ),
        confidence=confidence,
        rationale=[
            f"Structured lane pinned to the {align} side (avoid-center requested).",
            f"Lane score {lane_score:.2f}. Headline clutter {headline_stat.clutter:.2f}, "
            f"subhead clutter {subhead_stat.clutter:.2f}.",
            f"CTA contrast {cta_stat.preferred_contrast:.2f} with compact action lane sizing.",
        ],
    )


def _plan_scored_zones(
    buffer: PixelBuffer,
    hints: PlacementHints,
    config: PlannerConfig,
    zones: Sequence[ZoneSpec],
    luminance,
) -> PlacementPlan:
    stats = [measure_zone(buffer, zone, config.variance_weight, config.edge_weight, luminance) for zone in zones]
    headline_candidates = [s for s in stats if s.zone.band != "bottom"]
    cta_candidates = [s for s in stats if s.zone.band == "bottom"]
    if not headline_candidates or not cta_candidates:
        raise ValueError("zone catalog needs both bottom and non-bottom zones")

    headline_zone = choose_best(headline_candidates, lambda s: score_headline_zone(s, hints))
    cta_zone = choose_best(cta_candidates, lambda s: score_cta_zone(s, hints))

    story = hints.format_id == "story"
    headline_height = 0.12 if story else 0.11
    subhead_height = 0.08 if story else 0.07
    subhead_y = clamp(headline_zone.zone.y + headline_height + 0.014, 0.16, 0.68)
    align = hints.preferred_alignment if _has_fixed_alignment(hints) else headline_zone.zone.align

    cta_width = min(0.58, cta_zone.zone.w)
    cta_x = 0.5 - cta_width / 2 if cta_zone.zone.align == "center" else cta_zone.zone.x

    accent = hints.accent_color or _DEFAULT_ACCENT
    cta_text_color = button_text_color(accent)
    confidence = clamp(1 - (headline_zone.clutter * 0.55 + cta_zone.clutter * 0.35), 0.35, 0.98)

    return PlacementPlan(
        headline=PlacementTextBlock(
            x=headline_zone.zone.x,
            y=headline_zone.zone.y,
            width=headline_zone.zone.w,
            height=headline_height,
            align=align,
            color=headline_zone.preferred_text_color,
            scrim=build_scrim(headline_zone.clutter, headline_zone.preferred_contrast, config),
        ),
        subhead=PlacementTextBlock(
            x=headline_zone.zone.x,
            y=subhead_y,
            width=headline_zone.zone.w,
            height=subhead_height,
            align=align,
            color=headline_zone.preferred_text_color,
            scrim=build_scrim(headline_zone.clutter * 0.86, headline_zone.preferred_contrast, config),
        ),
        cta=PlacementCtaBlock(
            x=cta_x,
            y=cta_zone.zone.y,
            width=cta_width,
            height=0.055 if story else 0.068,
            align="center",
            color=cta_text_color,
            text_color=cta_text_color,
            button_color=accent,
            button_style=_button_style(hints),
            radius=18,
            scrim=build_scrim(cta_zone.clutter * 0.75, cta_zone.preferred_contrast, config),
        ),
        confidence=confidence,
        rationale=[
            f"Headline zone: {headline_zone.zone.id} (clutter {headline_zone.clutter:.2f}).",
            f"CTA zone: {cta_zone.zone.id} (clutter {cta_zone.clutter:.2f}).",
            f"Text color chosen from luminance analysis ({headline_zone.mean_luminance:.2f}).",
        ],
    )


def uses_structured_lane(hints: PlacementHints) -> bool:
    return _has_fixed_alignment(hints) and hints.avoid_center


def build_placement_plan(
    buffer: PixelBuffer,
    hints: PlacementHints | None = None,
    config: PlannerConfig | None = None,
    zones: Sequence[ZoneSpec] | None = None,
) -> PlacementPlan:
    """픽셀 버퍼와 힌트로 PlacementPlan을 만듭니다.

    Args:
        buffer: 다운샘플된 RGBA 버퍼
        hints: 카피 단계 배치 힌트 (없으면 기본값)
        config: 튜닝 상수 (없으면 설정에서 생성)
        zones: 경로 B 후보 존 카탈로그 (없으면 포맷별 기본 8개)
    """
    hints = hints or PlacementHints()
    config = config or PlannerConfig.from_settings()
    luminance = luminance_matrix(buffer.rgb())

    if uses_structured_lane(hints):
        plan = _plan_structured_lane(buffer, hints, config, luminance)
    else:
        plan = _plan_scored_zones(buffer, hints, config, zones or zone_catalog(hints.format_id), luminance)

    logger.debug("Placement plan (confidence=%.2f): %s", plan.confidence, plan.rationale)
    return plan

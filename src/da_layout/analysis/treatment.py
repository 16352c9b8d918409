"""Text Treatment Selector

카피 + 목적 + variant 를 해시해 고정 카탈로그에서 트리트먼트를 고릅니다.
같은 입력이면 항상 같은 트리트먼트가 나오므로 저장된 광고를 다시 그려도 결과가 동일합니다.
"""
from __future__ import annotations

import logging
from collections.abc import Sequence

from da_layout.models.generation import AdCopy
from da_layout.models.treatment import TextTreatmentProfile

logger = logging.getLogger(__name__)

TREATMENT_CATALOG: tuple[TextTreatmentProfile, ...] = (
    TextTreatmentProfile(
        id="bold-impact",
        name="Bold Impact",
        headline_font="Space Grotesk",
        subhead_font="Inter",
        cta_font="Space Grotesk",
        headline_case="upper",
        subhead_case="sentence",
        scrim_strength=1.1,
        cta_style="pill",
    ),
    TextTreatmentProfile(
        id="editorial-serif",
        name="Editorial Serif",
        headline_font="Playfair Display",
        subhead_font="Inter",
        cta_font="Inter",
        headline_case="none",
        subhead_case="none",
        scrim_strength=0.85,
        cta_style="label",
    ),
    TextTreatmentProfile(
        id="modern-grotesk",
        name="Modern Grotesk",
        headline_font="Space Grotesk",
        subhead_font="Space Grotesk",
        cta_font="Space Grotesk",
        headline_case="title",
        subhead_case="none",
        scrim_strength=1.0,
        cta_style="outline",
    ),
    TextTreatmentProfile(
        id="soft-minimal",
        name="Soft Minimal",
        headline_font="DM Sans",
        subhead_font="DM Sans",
        cta_font="DM Sans",
        headline_case="sentence",
        subhead_case="sentence",
        headline_bold=False,
        scrim_strength=0.8,
        cta_style="ghost",
    ),
    TextTreatmentProfile(
        id="condensed-promo",
        name="Condensed Promo",
        headline_font="Oswald",
        subhead_font="Inter",
        cta_font="Oswald",
        headline_case="upper",
        subhead_case="none",
        scrim_strength=1.2,
        cta_style="pill",
    ),
)

# 목적별 온브랜드 후보. 없는 목적은 전체 카탈로그를 사용합니다.
OBJECTIVE_TREATMENTS: dict[str, tuple[str, ...]] = {
    "offer": ("bold-impact", "condensed-promo", "modern-grotesk"),
}


def stable_hash(text: str) -> int:
    """hash = hash * 31 + code (부호 없는 32비트 wraparound)."""
    value = 0
    for char in text:
        value = (value * 31 + ord(char)) & 0xFFFFFFFF
    return value


def select_treatment(
    copy: AdCopy,
    objective: str | None = None,
    variant: int = 0,
    treatment_id: str | None = None,
    catalog: Sequence[TextTreatmentProfile] = TREATMENT_CATALOG,
) -> TextTreatmentProfile:
    """트리트먼트 선택.

    - treatment_id 가 카탈로그에 있으면 해시 없이 그대로 반환
    - 목적에 온브랜드 부분집합이 있으면 그 안에서만 선택
    """
    if treatment_id:
        for profile in catalog:
            if profile.id == treatment_id:
                return profile
        logger.warning("Unknown treatment id %r, using hashed selection", treatment_id)

    candidates = list(catalog)
    allowed = OBJECTIVE_TREATMENTS.get(objective or "")
    if allowed:
        subset = [profile for profile in catalog if profile.id in allowed]
        candidates = subset or candidates

    seed = f"{copy.headline}{copy.subhead}{copy.cta}{objective or ''}{variant}"
    return candidates[stable_hash(seed) % len(candidates)]

"""배치 분석 진입점

생성 이미지를 디코드·다운샘플한 뒤 Placement Planner를 실행합니다.
디코드 실패나 타임아웃은 예외가 아니라 "적응형 배치 없음(None)"으로 처리되며,
이 경우 합성 단계는 템플릿의 정적 좌표를 사용합니다.
"""
from __future__ import annotations

import asyncio
import logging

import httpx
from PIL import Image, UnidentifiedImageError

from da_layout.config import get_settings
from da_layout.models.placement import PlacementHints, PlacementPlan
from da_layout.utils.image_utils import ImageSource, load_image, to_pixel_buffer

from .planner import PlannerConfig, build_placement_plan

logger = logging.getLogger(__name__)

_ANALYSIS_ERRORS = (httpx.HTTPError, OSError, UnidentifiedImageError, Image.DecompressionBombError, ValueError)


def _plan_from_image(image: Image.Image, hints: PlacementHints) -> PlacementPlan:
    settings = get_settings()
    buffer = to_pixel_buffer(image, settings.sample_width, settings.min_sample_height)
    return build_placement_plan(buffer, hints, PlannerConfig.from_settings(settings))


async def _analyze(source: ImageSource, hints: PlacementHints) -> PlacementPlan | None:
    try:
        image = await load_image(source)
        return await asyncio.to_thread(_plan_from_image, image, hints)
    except _ANALYSIS_ERRORS as exc:
        logger.warning("Placement analysis failed, falling back to template layout: %s", exc)
        return None


async def analyze_for_placement(
    image_source: ImageSource,
    hints: PlacementHints | None = None,
    timeout_ms: int | None = None,
) -> PlacementPlan | None:
    """생성 이미지를 분석해 PlacementPlan을 반환합니다.

    분석 태스크는 shield 되어 타임아웃과 경쟁합니다. 타임아웃이 먼저 끝나면
    디코드는 취소되지 않고 결과만 버려집니다.

    Returns:
        PlacementPlan, 또는 디코드 실패·타임아웃 시 None
    """
    hints = hints or PlacementHints()
    timeout_ms = get_settings().analysis_timeout_ms if timeout_ms is None else timeout_ms

    task = asyncio.ensure_future(_analyze(image_source, hints))
    try:
        plan = await asyncio.wait_for(asyncio.shield(task), timeout=timeout_ms / 1000)
    except asyncio.TimeoutError:
        logger.warning("Placement analysis timed out after %d ms", timeout_ms)
        return None

    if plan is not None:
        logger.info(
            "Placement plan ready: confidence=%.2f headline=(%.2f, %.2f) cta=(%.2f, %.2f)",
            plan.confidence,
            plan.headline.x,
            plan.headline.y,
            plan.cta.x,
            plan.cta.y,
        )
    return plan

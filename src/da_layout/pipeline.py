"""
합성 파이프라인 오케스트레이터

저장된 배치 계획 확인 → (없으면) 이미지 배치 분석 → 계획 부착
→ 트리트먼트 선택 → 캔버스 합성 → 래스터 렌더링
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field

from PIL import Image

from da_layout.analysis.layout_analyzer import analyze_for_placement
from da_layout.analysis.treatment import select_treatment
from da_layout.compositor.canvas import Canvas
from da_layout.compositor.composer import AdComposer, Layer
from da_layout.models.generation import FORMAT_DIMENSIONS, GenerationResult
from da_layout.models.placement import PlacementPlan
from da_layout.models.treatment import TextTreatmentProfile
from da_layout.utils.image_utils import image_to_bytes

logger = logging.getLogger(__name__)


@dataclass
class CompositionResult:
    generation: GenerationResult
    image: Image.Image
    image_bytes: bytes
    treatment: TextTreatmentProfile
    plan: PlacementPlan | None
    adaptive: bool
    layers: list[Layer] = field(default_factory=list)


async def attach_placement_plan(
    result: GenerationResult,
    timeout_ms: int | None = None,
) -> GenerationResult:
    """생성 결과에 배치 계획을 붙여 반환합니다.

    이미 계획이 있으면(저장된 광고 재로드) 재분석하지 않습니다.
    분석 실패·타임아웃이면 계획 없이 그대로 반환합니다.
    """
    meta = result.ad_spec.metadata
    if meta.placement_plan is not None:
        logger.info("Reusing stored placement plan (confidence=%.2f)", meta.placement_plan.confidence)
        return result

    source = result.image_source()
    if not source:
        logger.info("No image on generation result, using template layout")
        return result

    plan = await analyze_for_placement(source, result.placement_hints(), timeout_ms=timeout_ms)
    if plan is None:
        return result

    new_meta = meta.model_copy(update={"placement_plan": plan})
    new_spec = result.ad_spec.model_copy(update={"metadata": new_meta})
    return result.model_copy(update={"ad_spec": new_spec})


async def run_composition(
    result: GenerationResult,
    *,
    canvas: Canvas | None = None,
    timeout_ms: int | None = None,
) -> CompositionResult:
    """생성 결과 1건을 분석·합성·렌더링합니다.

    Args:
        result: 카피·이미지 생성 결과
        canvas: 재사용할 캔버스 (없으면 포맷 크기로 생성)
        timeout_ms: 배치 분석 타임아웃 (없으면 설정값)
    """
    format_id = result.ad_spec.metadata.format_id
    if canvas is None:
        width, height = FORMAT_DIMENSIONS.get(format_id, FORMAT_DIMENSIONS["square"])
        canvas = Canvas(width, height)

    # Stage 1: 배치 분석 (저장된 계획이 있으면 건너뜀)
    logger.info("Stage 1: resolving placement plan...")
    result = await attach_placement_plan(result, timeout_ms=timeout_ms)
    plan = result.ad_spec.metadata.placement_plan

    # Stage 2: 트리트먼트 선택 (카피 해시 기반, 재현 가능)
    meta = result.ad_spec.metadata
    treatment = select_treatment(result.ad_spec.texts, meta.objective, meta.variant, meta.treatment_id)
    logger.info("Stage 2: treatment %s", treatment.id)

    # Stage 3: 합성
    logger.info("Stage 3: composing %s layout...", "adaptive" if plan else "template")
    layers = await AdComposer(canvas).compose(result, treatment=treatment)

    # Stage 4: 렌더링
    image = canvas.render()
    return CompositionResult(
        generation=result,
        image=image,
        image_bytes=image_to_bytes(image),
        treatment=treatment,
        plan=plan,
        adaptive=plan is not None,
        layers=layers,
    )

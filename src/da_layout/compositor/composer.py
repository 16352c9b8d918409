"""Layout Compositor

PlacementPlan(또는 정적 템플릿 좌표) + 트리트먼트 + 카피를 캔버스 요소로 변환합니다.

레이어 순서 (뒤 → 앞):
  1) 배경 이미지 (실패 시 배경색 사각형)
  2) 헤드라인 스크림 → 헤드라인
  3) 서브카피 스크림 → 서브카피
  4) CTA 스크림 → CTA 버튼 → CTA 텍스트

상태: EMPTY → COMPOSING → COMPOSED. 합성은 항상 기존 요소와 레이어를 먼저 비웁니다.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Literal

import httpx
from PIL import Image, UnidentifiedImageError

from da_layout.analysis.treatment import select_treatment
from da_layout.models.generation import FORMAT_DIMENSIONS, AdSpec, GenerationResult
from da_layout.models.placement import PlacementCtaBlock, PlacementPlan, PlacementTextBlock
from da_layout.models.treatment import TextTreatmentProfile
from da_layout.utils.color import best_text_color_for_hex, clamp, hex_to_rgba
from da_layout.utils.image_utils import load_image

from .backdrop import BackdropLink
from .canvas import Bounds, Canvas, ImageElement, RectElement, TextElement
from .templates import get_template, slot_position
from .text_fit import (
    TEXT_ROLES,
    aligned_left,
    apply_casing,
    cta_font_size,
    estimate_text_width,
    fit_to_height,
    headline_font_size,
    subhead_font_size,
    trim_to_height,
)

logger = logging.getLogger(__name__)

_BACKGROUND_ERRORS = (httpx.HTTPError, OSError, UnidentifiedImageError, Image.DecompressionBombError, ValueError)

_COVER_OVERSCAN = 1.03
_FOCAL_SHIFT = 0.12
_SCRIM_RADIUS = 14
_SCRIM_TEXT_OPACITY = 0.15  # 이 불투명도 이상이면 글자색을 스크림 기준으로 결정
_CTA_RADIUS = 20
_LANE_GAP = 0.02          # 블록 간 최소 세로 간격 (캔버스 높이 비율)
_CTA_PAD = (0.012, 0.007)  # CTA 버튼 패딩 (캔버스 너비, 높이 비율)


class ComposerState(str, Enum):
    EMPTY = "empty"
    COMPOSING = "composing"
    COMPOSED = "composed"


@dataclass
class Layer:
    type: Literal["background", "shape", "text"]
    name: str
    element: object


def place_cover_image(
    source_width: float,
    source_height: float,
    canvas_width: float,
    canvas_height: float,
    preferred_alignment: str = "auto",
) -> tuple[float, float, float]:
    """캔버스를 꽉 채우는 배율과 크롭 오프셋 (left, top, scale).

    텍스트가 한쪽에 정렬되면 반대쪽 시각 요소를 더 남기도록 초점을 12% 옮깁니다.
    """
    source_width = source_width or canvas_width
    source_height = source_height or canvas_height
    scale = max(canvas_width / source_width, canvas_height / source_height) * _COVER_OVERSCAN
    overflow_x = max(0.0, source_width * scale - canvas_width)
    overflow_y = max(0.0, source_height * scale - canvas_height)

    focal_x = 0.5
    if preferred_alignment == "left":
        focal_x = 0.5 + _FOCAL_SHIFT
    elif preferred_alignment == "right":
        focal_x = 0.5 - _FOCAL_SHIFT

    return -overflow_x * focal_x, -overflow_y * 0.5, scale


def resolve_block_text_color(block: PlacementTextBlock, desired: str, scrim_strength: float = 1.0) -> str:
    """실제로 그려지는 스크림(트리트먼트 강도 반영)이 충분히 진하면 스크림 색 기준으로 글자색을 다시 고릅니다."""
    if not block.scrim.enabled or clamp(block.scrim.opacity * scrim_strength, 0, 1) < _SCRIM_TEXT_OPACITY:
        return desired
    return best_text_color_for_hex(block.scrim.color)


def cta_casing(treatment: TextTreatmentProfile) -> str:
    """CTA 는 헤드라인이 대문자인 트리트먼트에서만 대문자로 맞춥니다."""
    return "upper" if treatment.headline_case == "upper" else "none"


def resolve_cta_chrome(plan_style: str, treatment_style: str) -> str:
    """CTA 크롬 결정. label 트리트먼트는 크롬 없음, 플랜의 outline/ghost 는 우선 적용."""
    if treatment_style == "label":
        return "label"
    if plan_style in ("outline", "ghost"):
        return plan_style
    return treatment_style


class AdComposer:
    """캔버스 1개에 대한 광고 합성기. 겹친 compose 호출은 마지막 요청만 반영됩니다."""

    def __init__(self, canvas: Canvas) -> None:
        self.canvas = canvas
        self.layers: list[Layer] = []
        self.links: list[BackdropLink] = []
        self.state = ComposerState.EMPTY
        self._generation = 0

    # -- lifecycle ----------------------------------------------------------

    def _begin(self) -> int:
        self.canvas.clear()
        self.layers = []
        self.links = []
        self.state = ComposerState.COMPOSING
        self._generation += 1
        return self._generation

    def _add(self, layer_type: str, name: str, element) -> None:
        self.canvas.add(element)
        self.layers.append(Layer(type=layer_type, name=name, element=element))

    async def compose(
        self,
        result: GenerationResult,
        treatment: TextTreatmentProfile | None = None,
    ) -> list[Layer]:
        """생성 결과를 캔버스에 합성하고 레이어 목록(뒤 → 앞)을 반환합니다."""
        token = self._begin()
        spec = result.ad_spec
        meta = spec.metadata
        try:
            treatment = treatment or select_treatment(
                spec.texts, meta.objective, meta.variant, meta.treatment_id
            )
            alignment = meta.placement_hints.preferred_alignment if meta.placement_hints else "auto"
            background = await self._load_background(result)
            if token != self._generation:
                logger.info("Composition superseded by a newer request, discarding")
                return []

            self._add_background(background, spec, alignment)
            if meta.placement_plan is not None:
                self._compose_adaptive(spec, meta.placement_plan, treatment)
            else:
                self._compose_static(spec, treatment)
        except Exception:
            self.canvas.clear()
            self.layers = []
            self.links = []
            self.state = ComposerState.EMPTY
            raise

        self.canvas.request_render()
        self.state = ComposerState.COMPOSED
        logger.info(
            "Composed ad (%s, treatment=%s, layers=%d)",
            "adaptive" if meta.placement_plan is not None else f"template {spec.template_id}",
            treatment.id,
            len(self.layers),
        )
        return list(self.layers)

    # -- background ---------------------------------------------------------

    async def _load_background(self, result: GenerationResult):
        source = result.image_source()
        if not source:
            return None
        try:
            return await load_image(source)
        except _BACKGROUND_ERRORS as exc:
            logger.warning("Background image failed to load, using solid fill: %s", exc)
            return None

    def _add_background(self, image, spec: AdSpec, alignment: str) -> None:
        canvas = self.canvas
        if image is not None:
            left, top, scale = place_cover_image(image.width, image.height, canvas.width, canvas.height, alignment)
            self._add("background", "Background Image", ImageElement(image, left=left, top=top, scale=scale))
            return
        rect = RectElement(
            left=0,
            top=0,
            width=canvas.width,
            height=canvas.height,
            fill=hex_to_rgba(spec.colors.background or "#1a1a2e", 1.0),
        )
        self._add("background", "Background", rect)

    # -- adaptive -----------------------------------------------------------

    def _to_pixels(self, block: PlacementTextBlock) -> Bounds:
        cw, ch = self.canvas.width, self.canvas.height
        return Bounds(block.x * cw, block.y * ch, block.width * cw, block.height * ch)

    def _add_scrim(
        self, label: str, block: PlacementTextBlock, treatment: TextTreatmentProfile
    ) -> tuple[RectElement, float, float] | None:
        if not block.scrim.enabled:
            return None
        px = self._to_pixels(block)
        pad_x = block.scrim.padding * self.canvas.width
        pad_y = block.scrim.padding * self.canvas.height
        opacity = clamp(block.scrim.opacity * treatment.scrim_strength, 0, 1)
        scrim = RectElement(
            left=px.left - pad_x,
            top=px.top - pad_y,
            width=px.width + pad_x * 2,
            height=px.height + pad_y * 2,
            fill=hex_to_rgba(block.scrim.color, opacity),
            radius=_SCRIM_RADIUS,
        )
        self._add("shape", f"{label} Scrim", scrim)
        return scrim, pad_x, pad_y

    def _link(self, text: TextElement, scrim: tuple[RectElement, float, float] | None) -> None:
        if scrim is not None:
            rect, pad_x, pad_y = scrim
            self.links.append(BackdropLink(self.canvas, text, rect, pad_x, pad_y))

    def _fit_text_block(
        self,
        role: str,
        text: str,
        lane: Bounds,
        top: float,
        max_height: float,
        font_size: int,
        **style,
    ) -> TextElement:
        """추정 폭으로 박스를 만든 뒤 오토핏·트리밍하고, 실측 폭 기준으로 가로 위치를 확정합니다."""
        align = style.get("align", "left")
        metrics = TEXT_ROLES[role]
        width = estimate_text_width(text, font_size, lane.width, role)
        element = TextElement(
            text,
            left=aligned_left(lane.left, lane.width, width, align),
            top=top,
            width=width,
            font_size=font_size,
            **style,
        )
        fit_to_height(element, max_height, metrics.min_font_size, metrics.font_step)
        if trim_to_height(element, text, max_height):
            logger.debug("%s trimmed to %r", role, element.text)

        # 짧은 가운데/오른쪽 정렬 텍스트가 추정 폭 전체를 차지하지 않도록 실측 폭으로 축소
        content_width = element.content_width or width
        element.set(width=content_width, left=aligned_left(lane.left, lane.width, content_width, align))
        return element

    def _compose_adaptive(self, spec: AdSpec, plan: PlacementPlan, treatment: TextTreatmentProfile) -> None:
        format_id = spec.metadata.format_id
        ch = self.canvas.height
        lane_gap = ch * _LANE_GAP
        cta_px = self._to_pixels(plan.cta)

        # Headline
        headline_scrim = self._add_scrim("Headline", plan.headline, treatment)
        headline_px = self._to_pixels(plan.headline)
        headline_size = headline_font_size(headline_px.height, format_id)
        headline = self._fit_text_block(
            "headline",
            apply_casing(spec.texts.headline, treatment.headline_case),
            headline_px,
            headline_px.top,
            headline_px.height,
            headline_size,
            font_family=treatment.headline_font,
            bold=treatment.headline_bold,
            fill=resolve_block_text_color(plan.headline, plan.headline.color, treatment.scrim_strength),
            align=plan.headline.align,
            line_height=1.03,
        )
        self._add("text", "Headline", headline)
        self._link(headline, headline_scrim)

        # Subhead: 헤드라인 실제 하단 + 간격 아래로
        subhead_scrim = self._add_scrim("Subhead", plan.subhead, treatment)
        subhead_px = self._to_pixels(plan.subhead)
        subhead_top = max(subhead_px.top, headline.top + headline.height + lane_gap)
        subhead_max_h = max(40.0, min(subhead_px.height, cta_px.top - subhead_top - lane_gap))
        subhead = self._fit_text_block(
            "subhead",
            apply_casing(spec.texts.subhead, treatment.subhead_case),
            subhead_px,
            subhead_top,
            subhead_max_h,
            subhead_font_size(headline.font_size, format_id),
            font_family=treatment.subhead_font,
            bold=False,
            fill=resolve_block_text_color(plan.subhead, plan.subhead.color, treatment.scrim_strength),
            align=plan.subhead.align,
            line_height=1.2,
        )
        self._add("text", "Subhead", subhead)
        self._link(subhead, subhead_scrim)

        # CTA
        cta_scrim = self._add_scrim("CTA", plan.cta, treatment)
        cta_top = max(cta_px.top, subhead.top + subhead.height + lane_gap)
        cta = self._add_cta(spec, plan.cta, treatment, cta_px, cta_top, cta_font_size(headline_size))
        if cta_scrim is not None:
            # CTA 스크림은 버튼과 같은 텍스트 박스 전체를 감쌈
            rect, pad_x, pad_y = cta_scrim
            self.links.append(
                BackdropLink(
                    self.canvas, cta, rect, pad_x, pad_y,
                    min_height=cta_px.height + pad_y * 2,
                    hug_content=False,
                )
            )

    def _add_cta(
        self,
        spec: AdSpec,
        block: PlacementCtaBlock,
        treatment: TextTreatmentProfile,
        cta_px: Bounds,
        cta_top: float,
        font_size: int,
    ) -> TextElement:
        cw, ch = self.canvas.width, self.canvas.height
        chrome = resolve_cta_chrome(block.button_style, treatment.cta_style)
        background = spec.colors.background or "#132B20"

        if chrome == "pill":
            rect = RectElement(left=0, top=0, width=1, height=1, fill=hex_to_rgba(block.button_color, 1.0), radius=block.radius)
            text_color = block.text_color
        elif chrome == "outline":
            rect = RectElement(
                left=0, top=0, width=1, height=1,
                fill=hex_to_rgba(background, 0.35),
                stroke=hex_to_rgba(block.button_color, 1.0),
                stroke_width=3,
                radius=block.radius,
            )
            text_color = best_text_color_for_hex(background)
        elif chrome == "ghost":
            rect = RectElement(left=0, top=0, width=1, height=1, fill=hex_to_rgba(background, 0.74), radius=_CTA_RADIUS)
            text_color = best_text_color_for_hex(background)
        else:
            rect = None
            text_color = resolve_block_text_color(block, block.color, treatment.scrim_strength)

        if rect is not None:
            self._add("shape", "CTA Button", rect)

        metrics = TEXT_ROLES["cta"]
        cta = TextElement(
            apply_casing(spec.texts.cta, cta_casing(treatment)),
            left=cta_px.left,
            top=cta_top,
            width=cta_px.width,
            font_size=font_size,
            font_family=treatment.cta_font,
            bold=True,
            fill=text_color,
            align=block.align or "center",
            line_height=1.08,
        )
        fit_to_height(cta, cta_px.height, metrics.min_font_size, metrics.font_step)
        self._add("text", "CTA", cta)

        if rect is not None:
            pad_x, pad_y = _CTA_PAD[0] * cw, _CTA_PAD[1] * ch
            self.links.append(
                BackdropLink(
                    self.canvas, cta, rect, pad_x, pad_y,
                    min_height=cta_px.height + pad_y * 2,
                    hug_content=False,
                )
            )
        return cta

    # -- static fallback ----------------------------------------------------

    def _compose_static(self, spec: AdSpec, treatment: TextTreatmentProfile) -> None:
        format_id = spec.metadata.format_id
        template = get_template(spec.template_id)
        base_w, base_h = FORMAT_DIMENSIONS.get(format_id, FORMAT_DIMENSIONS["square"])
        sx, sy = self.canvas.width / base_w, self.canvas.height / base_h
        texts = {
            "headline": apply_casing(spec.texts.headline, treatment.headline_case),
            "subhead": apply_casing(spec.texts.subhead, treatment.subhead_case),
            "cta": apply_casing(spec.texts.cta, cta_casing(treatment)),
        }
        names = {"headline": "Headline", "subhead": "Subhead", "cta": "CTA"}

        for slot_type in ("headline", "subhead", "cta"):
            slot = template.slot(slot_type)
            if slot is None:
                continue
            pos = slot_position(slot, format_id)
            style = slot.style
            button = None
            if slot_type == "cta" and style.background_color:
                button = RectElement(
                    left=pos.x * sx, top=pos.y * sy, width=pos.width * sx, height=pos.height * sy,
                    fill=hex_to_rgba(style.background_color, 1.0),
                    radius=style.border_radius,
                )
                self._add("shape", "CTA Button", button)

            text = TextElement(
                texts[slot_type],
                left=pos.x * sx,
                top=pos.y * sy,
                width=pos.width * sx,
                font_size=round(style.font_size * sy),
                font_family=style.font_family,
                bold=style.bold,
                fill=style.color or spec.colors.text,
                align=style.text_align,
                line_height=1.08 if slot_type == "cta" else 1.16,
            )
            self._add("text", names[slot_type], text)
            if button is not None:
                self.links.append(
                    BackdropLink(self.canvas, text, button, 0.0, 0.0, min_height=pos.height * sy, hug_content=False)
                )


async def compose_ad(canvas: Canvas, result: GenerationResult) -> list[Layer]:
    """캔버스 1회성 합성 헬퍼."""
    return await AdComposer(canvas).compose(result)

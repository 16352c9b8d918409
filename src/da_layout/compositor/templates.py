"""정적 템플릿 슬롯: 적응형 배치가 없을 때 사용하는 포맷별 고정 좌표 (px)"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

SlotType = Literal["headline", "subhead", "cta"]


@dataclass(frozen=True)
class SlotPosition:
    x: int
    y: int
    width: int
    height: int


@dataclass(frozen=True)
class SlotStyle:
    font_size: int
    font_family: str = "Space Grotesk"
    bold: bool = False
    color: str = "#FFFFFF"
    text_align: str = "center"
    background_color: str | None = None
    border_radius: int = 0


@dataclass(frozen=True)
class TemplateSlot:
    type: SlotType
    label: str
    positions: dict[str, SlotPosition]
    style: SlotStyle


@dataclass(frozen=True)
class AdTemplate:
    id: str
    name: str
    slots: tuple[TemplateSlot, ...] = field(default_factory=tuple)

    def slot(self, slot_type: SlotType) -> TemplateSlot | None:
        return next((s for s in self.slots if s.type == slot_type), None)


def _positions(square: tuple, portrait: tuple, story: tuple) -> dict[str, SlotPosition]:
    return {
        "square": SlotPosition(*square),
        "portrait": SlotPosition(*portrait),
        "story": SlotPosition(*story),
    }


BOLD_SALE = AdTemplate(
    id="bold-sale",
    name="Bold Sale",
    slots=(
        TemplateSlot(
            "headline", "Sale Headline",
            _positions((90, 120, 900, 200), (90, 150, 900, 220), (90, 300, 900, 260)),
            SlotStyle(font_size=72, bold=True, color="#FFFFFF", text_align="center"),
        ),
        TemplateSlot(
            "subhead", "Subheadline",
            _positions((140, 340, 800, 80), (140, 400, 800, 80), (140, 580, 800, 100)),
            SlotStyle(font_size=28, color="#E0E0E0", text_align="center"),
        ),
        TemplateSlot(
            "cta", "Call to Action",
            _positions((290, 860, 500, 80), (290, 1100, 500, 80), (240, 1520, 600, 100)),
            SlotStyle(
                font_size=24, bold=True, color="#FFFFFF", text_align="center",
                background_color="#FF4444", border_radius=12,
            ),
        ),
    ),
)

PRODUCT_SHOWCASE = AdTemplate(
    id="product-showcase",
    name="Product Showcase",
    slots=(
        TemplateSlot(
            "headline", "Product Name",
            _positions((90, 720, 900, 100), (90, 880, 900, 100), (90, 1160, 900, 120)),
            SlotStyle(font_size=48, bold=True, color="#FFFFFF", text_align="left"),
        ),
        TemplateSlot(
            "subhead", "Product Description",
            _positions((90, 830, 700, 60), (90, 990, 700, 60), (90, 1300, 800, 80)),
            SlotStyle(font_size=22, color="#AAAAAA", text_align="left"),
        ),
        TemplateSlot(
            "cta", "Shop Now",
            _positions((90, 920, 300, 64), (90, 1100, 300, 64), (90, 1440, 360, 80)),
            SlotStyle(
                font_size=20, bold=True, color="#000000", text_align="center",
                background_color="#FFFFFF", border_radius=8,
            ),
        ),
    ),
)

MINIMAL = AdTemplate(
    id="minimal",
    name="Minimal",
    slots=(
        TemplateSlot(
            "headline", "Headline",
            _positions((120, 200, 840, 140), (120, 250, 840, 140), (120, 400, 840, 160)),
            SlotStyle(font_size=56, color="#FFFFFF", text_align="center"),
        ),
        TemplateSlot(
            "subhead", "Subtitle",
            _positions((200, 370, 680, 60), (200, 420, 680, 60), (200, 590, 680, 70)),
            SlotStyle(font_size=20, color="#999999", text_align="center"),
        ),
        TemplateSlot(
            "cta", "Learn More",
            _positions((370, 870, 340, 56), (370, 1080, 340, 56), (340, 1480, 400, 70)),
            SlotStyle(font_size=18, color="#FFFFFF", text_align="center", border_radius=28),
        ),
    ),
)

BUILT_IN_TEMPLATES: tuple[AdTemplate, ...] = (BOLD_SALE, PRODUCT_SHOWCASE, MINIMAL)
DEFAULT_TEMPLATE_ID = "bold-sale"


def get_template(template_id: str | None) -> AdTemplate:
    """id 로 템플릿을 찾습니다. 없으면 bold-sale."""
    for template in BUILT_IN_TEMPLATES:
        if template.id == template_id:
            return template
    return BOLD_SALE


def slot_position(slot: TemplateSlot, format_id: str) -> SlotPosition:
    try:
        return slot.positions[format_id]
    except KeyError:
        raise ValueError(f"Slot {slot.label!r} has no position for format {format_id!r}") from None

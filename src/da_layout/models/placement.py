from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from .analysis import HorizontalAlign

FormatId = Literal["square", "portrait", "story"]
Objective = Literal["offer", "launch", "awareness"]


class PlacementHints(BaseModel):
    """카피 생성 단계에서 전달되는 배치 힌트 (플래너 입장에서는 읽기 전용)."""

    format_id: FormatId = "square"
    objective: Objective | None = None
    preferred_alignment: HorizontalAlign | Literal["auto"] = "auto"
    preferred_headline_band: Literal["top", "upper"] = "top"
    avoid_center: bool = False
    accent_color: str | None = None
    background_color: str | None = None


class PlacementScrim(BaseModel):
    enabled: bool = False
    color: str = "#000000"
    opacity: float = Field(default=0.0, ge=0, le=1)
    padding: float = Field(default=0.012, ge=0, le=1, description="캔버스 대비 패딩 비율")


class PlacementTextBlock(BaseModel):
    x: float = Field(ge=0, le=1)
    y: float = Field(ge=0, le=1)
    width: float = Field(gt=0, le=1)
    height: float = Field(gt=0, le=1)
    align: HorizontalAlign
    color: str
    scrim: PlacementScrim


class PlacementCtaBlock(PlacementTextBlock):
    button_style: Literal["solid", "outline", "ghost"] = "solid"
    button_color: str
    text_color: str
    radius: int = 18


class PlacementPlan(BaseModel):
    """이미지 1장에 대한 최종 배치 결정. 생성 결과와 함께 저장되어 재분석 없이 재사용됩니다."""

    headline: PlacementTextBlock
    subhead: PlacementTextBlock
    cta: PlacementCtaBlock
    confidence: float = Field(ge=0, le=1, description="선택된 존의 clutter 기반 설명용 점수")
    rationale: list[str] = Field(default_factory=list, description="디버깅용 판단 근거")

from pydantic import BaseModel, Field

from .placement import FormatId, Objective, PlacementHints, PlacementPlan

FORMAT_DIMENSIONS: dict[str, tuple[int, int]] = {
    "square": (1080, 1080),
    "portrait": (1080, 1350),
    "story": (1080, 1920),
}


class AdCopy(BaseModel):
    headline: str = Field(description="헤드라인 (상류에서 34자 이내로 제한)")
    subhead: str = Field(default="", description="서브카피 (62자 이내)")
    cta: str = Field(description="행동 유도 문구 (16자 이내)")


class ColorHints(BaseModel):
    primary: str = "#FF6600"
    secondary: str = "#000000"
    accent: str = "#FF4444"
    text: str = "#FFFFFF"
    background: str = "#1a1a2e"


class AdMetadata(BaseModel):
    objective: Objective | None = None
    format_id: FormatId = "square"
    placement_hints: PlacementHints | None = None
    placement_plan: PlacementPlan | None = None
    treatment_id: str | None = None
    variant: int = 0


class AdSpec(BaseModel):
    texts: AdCopy
    colors: ColorHints = Field(default_factory=ColorHints)
    template_id: str = "bold-sale"
    image_prompt: str = ""
    metadata: AdMetadata = Field(default_factory=AdMetadata)


class GenerationResult(BaseModel):
    """카피·이미지 생성 결과. image_base64 가 있으면 image_url 보다 우선합니다."""

    ad_spec: AdSpec
    image_url: str | None = None
    image_base64: str | None = None

    def image_source(self) -> str | None:
        if self.image_base64:
            return f"data:image/png;base64,{self.image_base64}"
        return self.image_url or None

    def placement_hints(self) -> PlacementHints:
        """메타데이터 힌트에 format/objective/색상 힌트를 채워 넣습니다."""
        meta = self.ad_spec.metadata
        base = meta.placement_hints or PlacementHints()
        return base.model_copy(
            update={
                "format_id": meta.format_id,
                "objective": meta.objective if meta.objective else base.objective,
                "accent_color": base.accent_color or self.ad_spec.colors.accent,
                "background_color": base.background_color or self.ad_spec.colors.background,
            }
        )

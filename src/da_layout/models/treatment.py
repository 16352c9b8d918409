from typing import Literal

from pydantic import BaseModel, ConfigDict

Casing = Literal["upper", "title", "sentence", "none"]
CtaStyle = Literal["pill", "outline", "ghost", "label"]


class TextTreatmentProfile(BaseModel):
    """헤드라인·서브카피·CTA에 일괄 적용되는 폰트/대소문자/크롬 조합."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    headline_font: str
    subhead_font: str
    cta_font: str
    headline_case: Casing = "none"
    subhead_case: Casing = "none"
    headline_bold: bool = True
    scrim_strength: float = 1.0
    cta_style: CtaStyle = "pill"

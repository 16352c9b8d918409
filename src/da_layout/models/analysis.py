from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, model_validator

HorizontalAlign = Literal["left", "center", "right"]
Band = Literal["top", "middle", "bottom"]


@dataclass(frozen=True)
class PixelBuffer:
    """분석용으로 다운샘플된 이미지의 RGBA 스냅샷 (분석 호출 1회 동안만 존재)."""

    width: int
    height: int
    data: bytes

    def __post_init__(self) -> None:
        expected = self.width * self.height * 4
        if self.width < 0 or self.height < 0 or len(self.data) != expected:
            raise ValueError(
                f"PixelBuffer data length {len(self.data)} does not match "
                f"{self.width}x{self.height} RGBA ({expected})"
            )

    def rgb(self) -> np.ndarray:
        """(height, width, 3) uint8 배열로 반환합니다."""
        arr = np.frombuffer(self.data, dtype=np.uint8)
        return arr.reshape(self.height, self.width, 4)[:, :, :3]


class ZoneSpec(BaseModel):
    """분수 좌표(0~1)로 표현된 후보 텍스트 영역."""

    model_config = ConfigDict(frozen=True)

    id: str
    x: float = Field(ge=0, le=1)
    y: float = Field(ge=0, le=1)
    w: float = Field(gt=0, le=1)
    h: float = Field(gt=0, le=1)
    band: Band
    align: HorizontalAlign

    @model_validator(mode="after")
    def _check_inside_frame(self) -> "ZoneSpec":
        # 부동소수 오차 허용
        if self.x + self.w > 1 + 1e-9 or self.y + self.h > 1 + 1e-9:
            raise ValueError(f"zone {self.id} extends past the frame")
        return self


class ZoneStats(BaseModel):
    zone: ZoneSpec
    clutter: float = Field(ge=0, le=1, description="시각적 복잡도 (분산 + 엣지 밀도)")
    mean_luminance: float
    contrast_white: float
    contrast_black: float
    preferred_text_color: str
    preferred_contrast: float

"""텍스트 크기 결정·폭 추정·오토핏·오버플로 트리밍"""
from __future__ import annotations

from dataclasses import dataclass

from da_layout.utils.color import clamp

from .canvas import TextElement

MIN_TRIM_WORDS = 3


@dataclass(frozen=True)
class TextRole:
    char_width: float    # 글자당 평균 폭 (font_size 배수)
    min_fraction: float  # 레인 폭 대비 최소 박스 폭
    max_fraction: float  # 레인 폭 대비 최대 박스 폭
    min_font_size: int   # 오토핏 하한
    font_step: int       # 오토핏 감소 단위 (pt)


TEXT_ROLES: dict[str, TextRole] = {
    "headline": TextRole(char_width=0.56, min_fraction=0.45, max_fraction=1.0, min_font_size=26, font_step=2),
    "subhead": TextRole(char_width=0.5, min_fraction=0.55, max_fraction=1.0, min_font_size=14, font_step=1),
    "cta": TextRole(char_width=0.6, min_fraction=0.35, max_fraction=1.0, min_font_size=12, font_step=1),
}


def headline_font_size(block_height_px: float, format_id: str | None) -> int:
    return int(clamp(round(block_height_px * 0.58), 34, 112 if format_id == "story" else 88))


def subhead_font_size(headline_size: float, format_id: str | None) -> int:
    return int(clamp(round(headline_size * 0.52), 17, 56 if format_id == "story" else 44))


def cta_font_size(headline_size: float) -> int:
    return int(clamp(round(headline_size * 0.34), 14, 30))


def estimate_text_width(text: str, font_size: float, lane_width: float, role: str) -> float:
    """글자 수 기반 박스 폭 추정 (실측 전 배치용)."""
    metrics = TEXT_ROLES[role]
    longest = max((len(line) for line in text.split("\n")), default=0)
    estimate = longest * font_size * metrics.char_width
    return clamp(estimate, lane_width * metrics.min_fraction, lane_width * metrics.max_fraction)


def aligned_left(lane_left: float, lane_width: float, content_width: float, align: str) -> float:
    if align == "right":
        return lane_left + lane_width - content_width
    if align == "center":
        return lane_left + (lane_width - content_width) / 2
    return lane_left


def apply_casing(text: str, casing: str) -> str:
    if casing == "upper":
        return text.upper()
    if casing == "title":
        return " ".join(word[:1].upper() + word[1:] for word in text.split(" "))
    if casing == "sentence":
        stripped = text.lstrip()
        return text[: len(text) - len(stripped)] + stripped[:1].upper() + stripped[1:]
    return text


def fit_to_height(element: TextElement, max_height: float, min_font_size: int, font_step: int = 2) -> int:
    """높이가 max_height 이하가 되거나 하한에 닿을 때까지 폰트를 줄입니다.

    반복 횟수는 (시작 크기 - 하한) / step 이하로 제한됩니다.

    Returns:
        폰트 크기를 줄인 횟수
    """
    step = max(1, int(font_step))
    size = element.font_size
    iterations = 0
    element.refresh_metrics()

    while element.height > max_height and size > min_font_size:
        size = max(min_font_size, size - step)
        element.set(font_size=size)
        iterations += 1

    return iterations


def trim_to_height(element: TextElement, original_text: str, max_height: float) -> bool:
    """하한 크기에서도 넘치면 앞쪽 단어 수를 이분 탐색해 들어가는 가장 긴 접두어만 남깁니다.

    3단어 미만으로는 자르지 않으며, 원문이 3단어 이하이면 넘친 채로 둡니다.

    Returns:
        텍스트를 잘랐는지 여부
    """
    if element.height <= max_height:
        return False

    words = original_text.split()
    if len(words) <= MIN_TRIM_WORDS:
        return False

    low, high = MIN_TRIM_WORDS, len(words)
    best = MIN_TRIM_WORDS
    while low <= high:
        mid = (low + high) // 2
        element.set(text=" ".join(words[:mid]))
        if element.height <= max_height:
            best = mid
            low = mid + 1
        else:
            high = mid - 1

    element.set(text=" ".join(words[:best]))
    return best < len(words)

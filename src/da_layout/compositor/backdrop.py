"""텍스트 ↔ 배경 도형 연결

BackdropLink 는 텍스트 요소의 유일한 구독자로, 이동·스케일·수정·내용 변경마다
배경 도형의 위치와 크기를 즉시 다시 계산하고 렌더를 요청합니다.
"""
from __future__ import annotations

from .canvas import Canvas, RectElement, TextElement


class BackdropLink:
    def __init__(
        self,
        canvas: Canvas,
        text: TextElement,
        backdrop: RectElement,
        pad_x: float,
        pad_y: float,
        min_height: float = 0.0,
        hug_content: bool = True,
    ) -> None:
        self.canvas = canvas
        self.text = text
        self.backdrop = backdrop
        self.pad_x = pad_x
        self.pad_y = pad_y
        self.min_height = min_height
        # True: 정렬 기준 실제 글자 영역을 감쌈 / False: 텍스트 박스 전체 (CTA 버튼)
        self.hug_content = hug_content
        text.on(self.sync)
        self.sync("linked", text)

    def sync(self, event: str = "linked", _source: TextElement | None = None) -> None:
        self.text.refresh_metrics()
        bounds = self.text.content_bounds() if self.hug_content else self.text.scaled_bounds()
        self.backdrop.set(
            left=bounds.left - self.pad_x,
            top=bounds.top - self.pad_y,
            width=bounds.width + self.pad_x * 2,
            height=max(bounds.height + self.pad_y * 2, self.min_height),
        )
        self.canvas.request_render()

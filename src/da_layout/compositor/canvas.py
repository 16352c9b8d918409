"""캔버스 프리미티브

렌더링 대상이 제공해야 하는 능력을 Positionable / Scalable / Renderable 프로토콜로 명시하고,
Pillow 기반 구현(TextElement, RectElement, ImageElement)과 이를 담는 Canvas를 제공합니다.
텍스트 요소의 기하 변경은 이벤트('moving', 'scaling', 'modified', 'changed')로 발행됩니다.
"""
from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from PIL import Image

from da_layout.utils.color import hex_to_rgba, parse_hex
from da_layout.utils.image_utils import (
    FONT_SIZE_MULT,
    draw_rounded_rect,
    draw_text_lines,
    load_font,
    text_block_height,
    text_length,
    wrap_text,
)

RGBA = tuple[int, int, int, int]
GeometryListener = Callable[[str, "TextElement"], None]


@dataclass(frozen=True)
class Bounds:
    left: float
    top: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height


@runtime_checkable
class Positionable(Protocol):
    left: float
    top: float

    def move_to(self, left: float, top: float) -> None: ...


@runtime_checkable
class Scalable(Protocol):
    scale_x: float
    scale_y: float

    def scale_to(self, scale_x: float, scale_y: float) -> None: ...

    def scaled_bounds(self) -> Bounds: ...


@runtime_checkable
class Renderable(Protocol):
    def render(self, image: Image.Image) -> Image.Image: ...


def _fill_rgba(fill: str | RGBA) -> RGBA:
    if isinstance(fill, tuple):
        return fill
    return hex_to_rgba(fill, 1.0) if parse_hex(fill) else (255, 255, 255, 255)


class TextElement:
    """줄바꿈 텍스트 박스. 폭은 고정, 높이는 레이아웃 결과로 결정됩니다."""

    def __init__(
        self,
        text: str,
        *,
        left: float,
        top: float,
        width: float,
        font_size: int,
        font_family: str = "Space Grotesk",
        bold: bool = False,
        fill: str | RGBA = "#FFFFFF",
        align: str = "left",
        line_height: float = 1.16,
    ) -> None:
        self.text = text
        self.left = left
        self.top = top
        self.width = max(1.0, width)
        self.font_size = int(font_size)
        self.font_family = font_family
        self.bold = bold
        self.fill = fill
        self.align = align
        self.line_height = line_height
        self.scale_x = 1.0
        self.scale_y = 1.0
        self.lines: list[str] = []
        self.height = 0.0
        self.content_width = 0.0
        self._listeners: list[GeometryListener] = []
        self.refresh_metrics()

    @property
    def font(self):
        return load_font(self.font_family, self.font_size, self.bold)

    def refresh_metrics(self) -> None:
        """현재 텍스트·폰트·폭으로 줄바꿈과 높이를 다시 계산합니다."""
        font = self.font
        self.lines = wrap_text(self.text, font, self.width) if self.text.strip() else []
        self.height = text_block_height(len(self.lines), self.font_size, self.line_height)
        self.content_width = max((text_length(line, font) for line in self.lines), default=0.0)

    # -- events -------------------------------------------------------------

    def on(self, listener: GeometryListener) -> None:
        self._listeners.append(listener)

    def fire(self, event: str) -> None:
        for listener in list(self._listeners):
            listener(event, self)

    # -- mutation -----------------------------------------------------------

    def set(self, **props) -> None:
        """속성을 조용히 갱신합니다 (이벤트 없음). 오토핏 루프에서 사용합니다."""
        for key, value in props.items():
            if not hasattr(self, key) or key.startswith("_"):
                raise AttributeError(f"TextElement has no property {key!r}")
            setattr(self, key, value)
        if "width" in props:
            self.width = max(1.0, self.width)
        self.refresh_metrics()

    def move_to(self, left: float, top: float) -> None:
        self.left, self.top = left, top
        self.fire("moving")

    def scale_to(self, scale_x: float, scale_y: float) -> None:
        self.scale_x, self.scale_y = scale_x, scale_y
        self.fire("scaling")

    def set_text(self, text: str) -> None:
        self.set(text=text)
        self.fire("changed")

    def update(self, **props) -> None:
        """사용자 편집(폰트 크기, 폭 등) 완료 시점의 변경."""
        self.set(**props)
        self.fire("modified")

    # -- geometry -----------------------------------------------------------

    def scaled_bounds(self) -> Bounds:
        return Bounds(self.left, self.top, self.width * self.scale_x, self.height * self.scale_y)

    def content_bounds(self) -> Bounds:
        """정렬을 반영한 실제 글자 영역 (박스 폭보다 좁을 수 있음)."""
        box = self.scaled_bounds()
        content_w = self.content_width * self.scale_x
        slack = max(0.0, box.width - content_w)
        if self.align == "center":
            left = box.left + slack / 2
        elif self.align == "right":
            left = box.left + slack
        else:
            left = box.left
        return Bounds(left, box.top, content_w, box.height)

    def render(self, image: Image.Image) -> Image.Image:
        if not self.lines:
            return image
        size = max(1, round(self.font_size * self.scale_y))
        font = load_font(self.font_family, size, self.bold)
        line_step = size * FONT_SIZE_MULT * self.line_height
        return draw_text_lines(
            image,
            self.lines,
            font,
            self.left,
            self.top,
            self.width * self.scale_x,
            self.align,
            line_step,
            _fill_rgba(self.fill),
        )


class RectElement:
    """스크림·CTA 버튼용 둥근 사각형."""

    def __init__(
        self,
        *,
        left: float,
        top: float,
        width: float,
        height: float,
        fill: RGBA | None = None,
        radius: float = 0,
        stroke: RGBA | None = None,
        stroke_width: int = 0,
    ) -> None:
        self.left = left
        self.top = top
        self.width = width
        self.height = height
        self.fill = fill
        self.radius = radius
        self.stroke = stroke
        self.stroke_width = stroke_width
        self.scale_x = 1.0
        self.scale_y = 1.0

    def set(self, **props) -> None:
        for key, value in props.items():
            if not hasattr(self, key):
                raise AttributeError(f"RectElement has no property {key!r}")
            setattr(self, key, value)

    def move_to(self, left: float, top: float) -> None:
        self.left, self.top = left, top

    def scale_to(self, scale_x: float, scale_y: float) -> None:
        self.scale_x, self.scale_y = scale_x, scale_y

    def scaled_bounds(self) -> Bounds:
        return Bounds(self.left, self.top, self.width * self.scale_x, self.height * self.scale_y)

    def render(self, image: Image.Image) -> Image.Image:
        b = self.scaled_bounds()
        return draw_rounded_rect(
            image, b.left, b.top, b.width, b.height,
            fill=self.fill, radius=self.radius, outline=self.stroke, stroke_width=self.stroke_width,
        )


class ImageElement:
    """배경 이미지. scale 은 원본 대비 배율, left/top 은 음수일 수 있습니다 (크롭)."""

    def __init__(self, image: Image.Image, *, left: float = 0, top: float = 0, scale: float = 1.0) -> None:
        self.image = image
        self.left = left
        self.top = top
        self.scale_x = scale
        self.scale_y = scale

    def move_to(self, left: float, top: float) -> None:
        self.left, self.top = left, top

    def scale_to(self, scale_x: float, scale_y: float) -> None:
        self.scale_x, self.scale_y = scale_x, scale_y

    def scaled_bounds(self) -> Bounds:
        w, h = self.image.size
        return Bounds(self.left, self.top, w * self.scale_x, h * self.scale_y)

    def render(self, image: Image.Image) -> Image.Image:
        b = self.scaled_bounds()
        size = (max(1, round(b.width)), max(1, round(b.height)))
        resized = self.image.convert("RGBA").resize(size, Image.LANCZOS)
        img = image.convert("RGBA")
        img.paste(resized, (round(b.left), round(b.top)), mask=resized)
        return img


class Canvas:
    """순서가 있는 요소 목록 (뒤 → 앞). 렌더 요청은 카운트만 하고 render()에서 래스터화합니다."""

    def __init__(self, width: int, height: int, background: RGBA = (0, 0, 0, 255)) -> None:
        self.width = width
        self.height = height
        self.background = background
        self.objects: list[Renderable] = []
        self.render_requests = 0

    def add(self, *objects: Renderable) -> None:
        self.objects.extend(objects)

    def remove(self, obj: Renderable) -> None:
        self.objects.remove(obj)

    def clear(self) -> None:
        self.objects = []

    def request_render(self) -> None:
        self.render_requests += 1

    def render(self) -> Image.Image:
        image = Image.new("RGBA", (self.width, self.height), self.background)
        for obj in self.objects:
            image = obj.render(image)
        return image

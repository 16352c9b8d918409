from __future__ import annotations

import base64
import binascii
import io
from functools import lru_cache
from pathlib import Path

from PIL import Image, ImageDraw, ImageFont

from da_layout.config import get_settings
from da_layout.models.analysis import PixelBuffer
from da_layout.utils.http_client import create_http_client

# 폰트 경로: 프로젝트 루트 기준 assets/fonts/
_DEFAULT_FONT_DIR = Path(__file__).parent.parent.parent.parent / "assets/fonts"

# Fabric 계열 텍스트 박스와 같은 줄 높이 배수
FONT_SIZE_MULT = 1.13

ImageSource = str | bytes | Image.Image


def _font_dir() -> Path:
    configured = get_settings().font_dir
    return Path(configured) if configured else _DEFAULT_FONT_DIR


def _font_candidates(family: str, bold: bool) -> list[Path]:
    stem = family.replace(" ", "")
    weight = "Bold" if bold else "Regular"
    font_dir = _font_dir()
    return [font_dir / f"{stem}-{weight}.ttf", font_dir / f"{stem}.ttf"]


@lru_cache(maxsize=256)
def load_font(family: str, size: int, bold: bool = False) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    """패밀리 이름으로 폰트를 로드합니다. 폰트 파일이 없으면 Pillow 기본 폰트로 fallback."""
    size = max(1, int(size))
    for path in _font_candidates(family, bold):
        if path.exists():
            return ImageFont.truetype(str(path), size=size)
    # Fallback: assets/fonts/ 에 <Family>-Bold.ttf / <Family>-Regular.ttf 를 추가하세요
    return ImageFont.load_default(size=size)


def text_length(text: str, font: ImageFont.FreeTypeFont | ImageFont.ImageFont) -> float:
    return float(font.getlength(text)) if text else 0.0


def _break_long_word(word: str, font, max_width: float) -> list[str]:
    """한 단어가 max_width보다 길면 글자 단위로 끊습니다."""
    pieces: list[str] = []
    current = ""
    for char in word:
        if current and text_length(current + char, font) > max_width:
            pieces.append(current)
            current = char
        else:
            current += char
    if current:
        pieces.append(current)
    return pieces


def wrap_text(text: str, font, max_width: float) -> list[str]:
    """텍스트를 max_width에 맞게 단어 단위로 줄바꿈합니다. 명시적 개행은 유지합니다."""
    lines: list[str] = []
    for paragraph in text.split("\n"):
        current = ""
        for word in paragraph.split():
            candidate = f"{current} {word}" if current else word
            if text_length(candidate, font) <= max_width:
                current = candidate
                continue
            if current:
                lines.append(current)
            if text_length(word, font) <= max_width:
                current = word
            else:
                *full, current = _break_long_word(word, font, max_width)
                lines.extend(full)
        lines.append(current)
    return lines


def text_block_height(line_count: int, font_size: float, line_height: float) -> float:
    """줄 수 기준 텍스트 높이(px). 마지막 줄에는 line_height 배수를 적용하지 않습니다."""
    if line_count <= 0:
        return 0.0
    per_line = font_size * FONT_SIZE_MULT
    return per_line * line_height * (line_count - 1) + per_line


def _decode_data_url(data_url: str) -> bytes:
    header, _, payload = data_url.partition(",")
    if ";base64" not in header:
        raise ValueError("Only base64 data URLs are supported")
    try:
        return base64.b64decode(payload, validate=True)
    except binascii.Error as exc:
        raise ValueError("Invalid base64 image payload") from exc


async def download_image(url: str) -> Image.Image:
    """URL에서 이미지를 다운로드하여 PIL Image로 반환합니다."""
    async with create_http_client() as client:
        response = await client.get(url)
        response.raise_for_status()
    return Image.open(io.BytesIO(response.content)).convert("RGBA")


def open_image(source: bytes | str | Image.Image) -> Image.Image:
    """로컬 경로 / data URL / bytes / PIL Image 를 RGBA 이미지로 엽니다 (네트워크 미사용)."""
    if isinstance(source, Image.Image):
        return source.convert("RGBA")
    if isinstance(source, bytes):
        return Image.open(io.BytesIO(source)).convert("RGBA")
    if source.startswith("data:"):
        return Image.open(io.BytesIO(_decode_data_url(source))).convert("RGBA")
    return Image.open(source).convert("RGBA")


async def load_image(source: ImageSource) -> Image.Image:
    """로컬 파일 경로, URL, data URL, bytes, PIL Image 에서 이미지를 로드합니다.

    - HTTPS/HTTP URL → httpx로 다운로드
    - 그 외 → PIL로 직접 열기
    """
    if isinstance(source, str) and source.startswith(("http://", "https://")):
        return await download_image(source)
    return open_image(source)


def to_pixel_buffer(image: Image.Image, sample_width: int = 420, min_height: int = 160) -> PixelBuffer:
    """분석 비용을 고정하기 위해 고정 너비로 다운샘플한 RGBA 버퍼를 만듭니다."""
    src_w, src_h = image.size
    if src_w <= 0 or src_h <= 0:
        raise ValueError("Cannot analyze an empty image")
    sample_height = max(min_height, round(sample_width * (src_h / src_w)))
    sampled = image.convert("RGBA").resize((sample_width, sample_height), Image.BILINEAR)
    return PixelBuffer(width=sample_width, height=sample_height, data=sampled.tobytes())


def draw_rounded_rect(
    image: Image.Image,
    left: float,
    top: float,
    width: float,
    height: float,
    fill: tuple[int, int, int, int] | None,
    radius: float = 0,
    outline: tuple[int, int, int, int] | None = None,
    stroke_width: int = 0,
) -> Image.Image:
    """반투명 둥근 사각형(스크림, CTA 버튼)을 알파 합성으로 그립니다."""
    img = image.convert("RGBA")
    overlay = Image.new("RGBA", img.size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(overlay)
    box = [round(left), round(top), round(left + width), round(top + height)]
    if box[2] <= box[0] or box[3] <= box[1]:
        return img
    draw.rounded_rectangle(
        box,
        radius=max(0, round(radius)),
        fill=fill,
        outline=outline,
        width=stroke_width,
    )
    return Image.alpha_composite(img, overlay)


def draw_text_lines(
    image: Image.Image,
    lines: list[str],
    font,
    left: float,
    top: float,
    box_width: float,
    align: str,
    line_step: float,
    color: tuple[int, int, int, int],
) -> Image.Image:
    """줄바꿈이 끝난 텍스트를 정렬에 맞춰 그립니다."""
    img = image.convert("RGBA")
    overlay = Image.new("RGBA", img.size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(overlay)
    for i, line in enumerate(lines):
        line_w = text_length(line, font)
        if align == "center":
            x = left + (box_width - line_w) / 2
        elif align == "right":
            x = left + box_width - line_w
        else:
            x = left
        draw.text((round(x), round(top + i * line_step)), line, font=font, fill=color)
    return Image.alpha_composite(img, overlay)


def image_to_bytes(image: Image.Image, format: str = "PNG") -> bytes:
    """PIL Image를 bytes로 변환합니다."""
    buffer = io.BytesIO()
    image.convert("RGB").save(buffer, format=format)
    return buffer.getvalue()

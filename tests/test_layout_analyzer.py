"""배치 분석 진입점 테스트: 디코드 실패·타임아웃은 None"""
import asyncio
import base64
import io
from unittest.mock import patch

import pytest
from PIL import Image

from da_layout.analysis.layout_analyzer import analyze_for_placement
from da_layout.models.placement import PlacementHints, PlacementPlan


def _split_image() -> Image.Image:
    """위쪽 절반 흰색, 아래쪽 절반 검정."""
    image = Image.new("RGBA", (300, 300), (0, 0, 0, 255))
    image.paste((255, 255, 255, 255), (0, 0, 300, 150))
    return image


@pytest.mark.asyncio
async def test_pil_image_returns_plan():
    plan = await analyze_for_placement(_split_image(), PlacementHints(), timeout_ms=5000)

    assert isinstance(plan, PlacementPlan)
    assert plan.headline.color == "#141414"
    assert plan.cta.y > 0.7


@pytest.mark.asyncio
async def test_data_url_source():
    buffer = io.BytesIO()
    _split_image().save(buffer, format="PNG")
    data_url = "data:image/png;base64," + base64.b64encode(buffer.getvalue()).decode("utf-8")

    plan = await analyze_for_placement(data_url, timeout_ms=5000)
    assert plan is not None


@pytest.mark.asyncio
async def test_missing_file_returns_none():
    assert await analyze_for_placement("/nonexistent/generated.png", timeout_ms=5000) is None


@pytest.mark.asyncio
async def test_corrupt_payload_returns_none():
    assert await analyze_for_placement(b"not an image", timeout_ms=5000) is None
    assert await analyze_for_placement("data:image/png;base64,@@@", timeout_ms=5000) is None


@pytest.mark.asyncio
async def test_timeout_returns_none():
    """타임아웃 시 None: 진행 중인 분석은 취소되지 않고 결과만 버려집니다."""
    finished = asyncio.Event()

    async def slow_analyze(source, hints):
        await asyncio.sleep(0.1)
        finished.set()
        return None

    with patch("da_layout.analysis.layout_analyzer._analyze", new=slow_analyze):
        plan = await analyze_for_placement(_split_image(), timeout_ms=10)

    assert plan is None
    await asyncio.wait_for(finished.wait(), timeout=2)


@pytest.mark.asyncio
async def test_oversized_image_returns_none(monkeypatch):
    """픽셀 수 제한(DecompressionBombError)을 넘는 이미지도 None."""
    buffer = io.BytesIO()
    _split_image().save(buffer, format="PNG")
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 100)

    assert await analyze_for_placement(buffer.getvalue(), timeout_ms=5000) is None

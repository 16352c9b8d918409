"""Layout Compositor 테스트: 레이어 순서, 상태 전이, 배경 연결, 정적 템플릿 fallback"""
import asyncio
import base64
import io
from unittest.mock import patch

import pytest
from PIL import Image

from da_layout.analysis.treatment import TREATMENT_CATALOG
from da_layout.compositor.canvas import Canvas, RectElement
from da_layout.compositor.composer import (
    AdComposer,
    ComposerState,
    compose_ad,
    place_cover_image,
    resolve_block_text_color,
    resolve_cta_chrome,
)
from da_layout.models.generation import AdCopy, AdMetadata, AdSpec, GenerationResult
from da_layout.models.placement import (
    PlacementCtaBlock,
    PlacementHints,
    PlacementPlan,
    PlacementScrim,
    PlacementTextBlock,
)

TREATMENTS = {profile.id: profile for profile in TREATMENT_CATALOG}


def _png_base64(color=(40, 90, 160, 255), size=(64, 64)) -> str:
    buffer = io.BytesIO()
    Image.new("RGBA", size, color).save(buffer, format="PNG")
    return base64.b64encode(buffer.getvalue()).decode("utf-8")


def _plan(scrim: bool = True) -> PlacementPlan:
    s = PlacementScrim(enabled=scrim, color="#000000", opacity=0.4 if scrim else 0.0, padding=0.016)
    return PlacementPlan(
        headline=PlacementTextBlock(x=0.07, y=0.06, width=0.4, height=0.11, align="left", color="#141414", scrim=s),
        subhead=PlacementTextBlock(x=0.07, y=0.184, width=0.4, height=0.07, align="left", color="#141414", scrim=s),
        cta=PlacementCtaBlock(
            x=0.21, y=0.76, width=0.58, height=0.068, align="center",
            color="#F8F8F4", text_color="#F8F8F4", button_color="#ff6a3d", scrim=s,
        ),
        confidence=0.9,
        rationale=["test plan"],
    )


def _result(plan: PlacementPlan | None = None, image: bool = True, **meta) -> GenerationResult:
    return GenerationResult(
        ad_spec=AdSpec(
            texts=AdCopy(headline="Summer Sale", subhead="30% off all athletic shoes", cta="Shop Now"),
            metadata=AdMetadata(placement_plan=plan, **meta),
        ),
        image_base64=_png_base64() if image else None,
    )


def _names(layers) -> list[str]:
    return [layer.name for layer in layers]


def _layer(layers, name):
    return next(layer.element for layer in layers if layer.name == name)


@pytest.mark.asyncio
async def test_adaptive_layer_order():
    """적응형 배치: 배경 → (스크림 → 텍스트) × 3, CTA 버튼은 CTA 텍스트 뒤."""
    composer = AdComposer(Canvas(1080, 1080))
    layers = await composer.compose(_result(_plan()), treatment=TREATMENTS["bold-impact"])

    assert _names(layers) == [
        "Background Image",
        "Headline Scrim",
        "Headline",
        "Subhead Scrim",
        "Subhead",
        "CTA Scrim",
        "CTA Button",
        "CTA",
    ]
    assert [layer.type for layer in layers][:3] == ["background", "shape", "text"]
    assert composer.state == ComposerState.COMPOSED
    assert len(composer.canvas.objects) == len(layers)


@pytest.mark.asyncio
async def test_adaptive_without_scrims():
    layers = await AdComposer(Canvas(1080, 1080)).compose(
        _result(_plan(scrim=False)), treatment=TREATMENTS["bold-impact"]
    )
    assert _names(layers) == ["Background Image", "Headline", "Subhead", "CTA Button", "CTA"]


@pytest.mark.asyncio
async def test_label_treatment_has_no_cta_chrome():
    layers = await AdComposer(Canvas(1080, 1080)).compose(
        _result(_plan(scrim=False)), treatment=TREATMENTS["editorial-serif"]
    )
    assert "CTA Button" not in _names(layers)
    assert _names(layers)[-1] == "CTA"


@pytest.mark.asyncio
async def test_adaptive_text_stays_in_vertical_order():
    canvas = Canvas(1080, 1080)
    plan = _plan()
    layers = await AdComposer(canvas).compose(_result(plan), treatment=TREATMENTS["bold-impact"])
    headline = _layer(layers, "Headline")
    subhead = _layer(layers, "Subhead")
    cta = _layer(layers, "CTA")

    assert headline.top == pytest.approx(plan.headline.y * canvas.height)
    assert subhead.top >= headline.top + headline.height
    assert cta.top >= subhead.top + subhead.height
    assert headline.text == "SUMMER SALE"


@pytest.mark.asyncio
async def test_scrim_switches_text_to_readable_color():
    """진한 스크림 위 글자색은 스크림 기준으로 다시 결정됩니다."""
    layers = await AdComposer(Canvas(1080, 1080)).compose(_result(_plan()), treatment=TREATMENTS["bold-impact"])
    assert _layer(layers, "Headline").fill == "#F8F8F4"


@pytest.mark.asyncio
async def test_scrim_follows_headline_edits():
    layers = await AdComposer(Canvas(1080, 1080)).compose(_result(_plan()), treatment=TREATMENTS["bold-impact"])
    headline = _layer(layers, "Headline")
    scrim = _layer(layers, "Headline Scrim")
    pad_x = 0.016 * 1080

    headline.move_to(300, 400)
    assert scrim.top == pytest.approx(400 - 0.016 * 1080)
    assert scrim.left == pytest.approx(headline.content_bounds().left - pad_x)

    before = scrim.height
    headline.set_text("A much longer headline that now wraps across several lines")
    assert scrim.height > before


@pytest.mark.asyncio
async def test_recompose_clears_previous_elements():
    composer = AdComposer(Canvas(1080, 1080))
    await composer.compose(_result(_plan()), treatment=TREATMENTS["bold-impact"])
    layers = await composer.compose(_result(None, image=False))

    assert len(composer.canvas.objects) == len(layers)
    assert "Headline Scrim" not in _names(layers)


@pytest.mark.asyncio
async def test_static_template_fallback():
    """배치 계획이 없으면 템플릿 좌표 사용: bold-sale 은 CTA 버튼 포함."""
    layers = await AdComposer(Canvas(1080, 1080)).compose(_result(None, image=False))

    assert _names(layers) == ["Background", "Headline", "Subhead", "CTA Button", "CTA"]
    headline = _layer(layers, "Headline")
    assert (headline.left, headline.top) == (90, 120)


@pytest.mark.asyncio
async def test_static_template_scales_to_canvas():
    layers = await AdComposer(Canvas(540, 540)).compose(_result(None, image=False))
    headline = _layer(layers, "Headline")
    assert (headline.left, headline.top) == (45, 60)


@pytest.mark.asyncio
async def test_background_load_failure_uses_solid_fill():
    result = _result(None, image=False).model_copy(update={"image_url": "/nonexistent/generated.png"})
    layers = await AdComposer(Canvas(1080, 1080)).compose(result)

    background = layers[0]
    assert background.name == "Background"
    assert isinstance(background.element, RectElement)
    assert background.element.fill == (26, 26, 46, 255)


@pytest.mark.asyncio
async def test_failure_resets_to_empty():
    composer = AdComposer(Canvas(1080, 1080))
    with patch.object(AdComposer, "_compose_static", side_effect=RuntimeError("boom")):
        with pytest.raises(RuntimeError):
            await composer.compose(_result(None, image=False))

    assert composer.state == ComposerState.EMPTY
    assert composer.canvas.objects == []
    assert composer.layers == []


@pytest.mark.asyncio
async def test_latest_compose_wins():
    """겹친 compose 요청: 먼저 시작한 요청의 결과는 버려집니다."""
    composer = AdComposer(Canvas(1080, 1080))

    async def slow_load(source):
        await asyncio.sleep(0.01)
        return Image.new("RGBA", (64, 64), (0, 0, 0, 255))

    with patch("da_layout.compositor.composer.load_image", new=slow_load):
        first, second = await asyncio.gather(
            composer.compose(_result(_plan()), treatment=TREATMENTS["bold-impact"]),
            composer.compose(_result(None)),
        )

    assert first == []
    assert "Headline Scrim" not in _names(second)
    assert len(composer.canvas.objects) == len(second)
    assert composer.state == ComposerState.COMPOSED


@pytest.mark.asyncio
async def test_compose_ad_helper_requests_render():
    canvas = Canvas(1080, 1080)
    layers = await compose_ad(canvas, _result(None, image=False))
    assert layers
    assert canvas.render_requests >= 1
    assert canvas.render().size == (1080, 1080)


@pytest.mark.asyncio
async def test_alignment_hint_shifts_background_focal_point():
    result = _result(
        None,
        placement_hints=PlacementHints(preferred_alignment="left"),
    )
    result = result.model_copy(update={"image_base64": _png_base64(size=(200, 100))})
    layers = await AdComposer(Canvas(1080, 1080)).compose(result)
    left, _, _ = place_cover_image(200, 100, 1080, 1080, "left")
    assert layers[0].element.left == pytest.approx(left)


def test_place_cover_image_covers_canvas():
    left, top, scale = place_cover_image(1000, 500, 1080, 1080)
    assert 1000 * scale >= 1080 and 500 * scale >= 1080
    assert scale == pytest.approx(1080 / 500 * 1.03)
    overflow_x = 1000 * scale - 1080
    assert left == pytest.approx(-overflow_x * 0.5)
    assert top == pytest.approx(-(500 * scale - 1080) * 0.5)


def test_place_cover_image_focal_shift():
    overflow_x = 1000 * (1080 / 500 * 1.03) - 1080
    left_aligned, _, _ = place_cover_image(1000, 500, 1080, 1080, "left")
    right_aligned, _, _ = place_cover_image(1000, 500, 1080, 1080, "right")
    assert left_aligned == pytest.approx(-overflow_x * 0.62)
    assert right_aligned == pytest.approx(-overflow_x * 0.38)


@pytest.mark.parametrize(
    "plan_style,treatment_style,expected",
    [
        ("solid", "pill", "pill"),
        ("outline", "pill", "outline"),
        ("ghost", "outline", "ghost"),
        ("solid", "ghost", "ghost"),
        ("outline", "label", "label"),
    ],
)
def test_resolve_cta_chrome(plan_style, treatment_style, expected):
    assert resolve_cta_chrome(plan_style, treatment_style) == expected


@pytest.mark.asyncio
async def test_oversized_background_uses_solid_fill(monkeypatch):
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 100)
    layers = await AdComposer(Canvas(1080, 1080)).compose(_result(None))

    assert layers[0].name == "Background"
    assert isinstance(layers[0].element, RectElement)


@pytest.mark.asyncio
async def test_cta_scrim_follows_cta_edits():
    """label 트리트먼트에서 CTA 의 유일한 배경인 스크림도 CTA 이동·수정을 따라갑니다."""
    layers = await AdComposer(Canvas(1080, 1080)).compose(_result(_plan()), treatment=TREATMENTS["editorial-serif"])
    cta = _layer(layers, "CTA")
    scrim = _layer(layers, "CTA Scrim")
    pad = 0.016 * 1080

    assert scrim.left == pytest.approx(cta.left - pad)
    assert scrim.top == pytest.approx(cta.top - pad)

    new_left, new_top = cta.left + 200, cta.top - 300
    cta.move_to(new_left, new_top)
    assert scrim.left == pytest.approx(new_left - pad)
    assert scrim.top == pytest.approx(new_top - pad)

    cta.set_text("Discover the entire new summer collection today")
    assert scrim.height >= cta.height + pad * 2


@pytest.mark.asyncio
async def test_cta_scrim_and_button_both_follow():
    layers = await AdComposer(Canvas(1080, 1080)).compose(_result(_plan()), treatment=TREATMENTS["bold-impact"])
    cta = _layer(layers, "CTA")
    scrim = _layer(layers, "CTA Scrim")
    button = _layer(layers, "CTA Button")

    cta.move_to(cta.left, cta.top - 100)
    assert scrim.top == pytest.approx(cta.top - 0.016 * 1080)
    assert button.top == pytest.approx(cta.top - 0.007 * 1080)


def test_text_color_uses_rendered_scrim_opacity():
    """트리트먼트 강도를 곱한 실제 스크림 불투명도로 글자색 재결정 여부를 판단합니다."""
    block = _plan().headline.model_copy(
        update={"scrim": PlacementScrim(enabled=True, color="#000000", opacity=0.17)}
    )
    assert resolve_block_text_color(block, "#141414", 0.8) == "#141414"
    assert resolve_block_text_color(block, "#141414", 1.1) == "#F8F8F4"
    assert resolve_block_text_color(block, "#141414") == "#F8F8F4"


@pytest.mark.asyncio
async def test_soft_treatment_keeps_planned_text_color_on_faint_scrim():
    plan = _plan()
    faint = plan.headline.model_copy(
        update={"scrim": PlacementScrim(enabled=True, color="#000000", opacity=0.17, padding=0.016)}
    )
    plan = plan.model_copy(update={"headline": faint})

    soft = await AdComposer(Canvas(1080, 1080)).compose(_result(plan), treatment=TREATMENTS["soft-minimal"])
    bold = await AdComposer(Canvas(1080, 1080)).compose(_result(plan), treatment=TREATMENTS["bold-impact"])

    assert _layer(soft, "Headline").fill == "#141414"
    assert _layer(bold, "Headline").fill == "#F8F8F4"


@pytest.mark.asyncio
async def test_static_cta_follows_treatment_casing():
    """정적 템플릿 경로도 적응형 경로와 같은 CTA 대소문자 규칙을 따릅니다."""
    upper = await AdComposer(Canvas(1080, 1080)).compose(
        _result(None, image=False), treatment=TREATMENTS["bold-impact"]
    )
    plain = await AdComposer(Canvas(1080, 1080)).compose(
        _result(None, image=False), treatment=TREATMENTS["soft-minimal"]
    )

    assert _layer(upper, "CTA").text == "SHOP NOW"
    assert _layer(plain, "CTA").text == "Shop Now"

"""
사용법:
  uv run python -m da_layout path/to/generated.png \
      --headline "Summer Sale" --subhead "30% off all athletic shoes" --cta "Shop Now"

생성 이미지 위에 카피를 적응형 배치로 합성하고 output/ 에 PNG로 저장합니다.
"""
import argparse
import asyncio
import base64
import logging
import os
import sys
from datetime import datetime
from pathlib import Path

from da_layout.config import get_settings
from da_layout.models.generation import AdCopy, AdMetadata, AdSpec, ColorHints, GenerationResult
from da_layout.models.placement import PlacementHints
from da_layout.pipeline import run_composition

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="da-layout", description="Compose ad copy onto a generated image.")
    parser.add_argument("image", help="generated image path or URL")
    parser.add_argument("--headline", required=True)
    parser.add_argument("--subhead", default="")
    parser.add_argument("--cta", required=True)
    parser.add_argument("--format", dest="format_id", default="square", choices=["square", "portrait", "story"])
    parser.add_argument("--objective", choices=["offer", "launch", "awareness"])
    parser.add_argument("--align", default="auto", choices=["auto", "left", "center", "right"])
    parser.add_argument("--avoid-center", action="store_true")
    parser.add_argument("--accent", default="#FF4444")
    parser.add_argument("--background", default="#1a1a2e")
    parser.add_argument("--template", default="bold-sale")
    parser.add_argument("--treatment")
    parser.add_argument("--variant", type=int, default=0)
    parser.add_argument("--out", help="output PNG path (default: output/ad_<timestamp>.png)")
    return parser.parse_args(argv)


def _build_generation(args: argparse.Namespace) -> GenerationResult:
    image_url = None
    image_base64 = None
    if args.image.startswith(("http://", "https://")):
        image_url = args.image
    else:
        image_base64 = base64.b64encode(Path(args.image).read_bytes()).decode("utf-8")

    return GenerationResult(
        ad_spec=AdSpec(
            texts=AdCopy(headline=args.headline, subhead=args.subhead, cta=args.cta),
            colors=ColorHints(accent=args.accent, background=args.background),
            template_id=args.template,
            metadata=AdMetadata(
                objective=args.objective,
                format_id=args.format_id,
                placement_hints=PlacementHints(
                    format_id=args.format_id,
                    preferred_alignment=args.align,
                    avoid_center=args.avoid_center,
                ),
                treatment_id=args.treatment,
                variant=args.variant,
            ),
        ),
        image_url=image_url,
        image_base64=image_base64,
    )


async def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    result = await run_composition(_build_generation(args))

    if result.plan is not None:
        print(f"\n✓ 적응형 배치 (confidence {result.plan.confidence:.2f}, treatment {result.treatment.id})")
        for line in result.plan.rationale:
            print(f"  - {line}")
    else:
        print(f"\n⚠️ 배치 분석 실패: 템플릿 좌표 사용 (treatment {result.treatment.id})")

    if args.out:
        output_path = Path(args.out)
        output_path.parent.mkdir(parents=True, exist_ok=True)
    else:
        output_dir = get_settings().output_dir
        os.makedirs(output_dir, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        output_path = Path(output_dir) / f"ad_{timestamp}.png"

    output_path.write_bytes(result.image_bytes)
    print(f"\n💾 최종 이미지가 저장되었습니다: {output_path}")
    return 0


def cli() -> None:
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    cli()

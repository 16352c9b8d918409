from .analysis import PixelBuffer, ZoneSpec, ZoneStats
from .generation import FORMAT_DIMENSIONS, AdCopy, AdMetadata, AdSpec, ColorHints, GenerationResult
from .placement import (
    PlacementCtaBlock,
    PlacementHints,
    PlacementPlan,
    PlacementScrim,
    PlacementTextBlock,
)
from .treatment import TextTreatmentProfile

__all__ = [
    "PixelBuffer",
    "ZoneSpec",
    "ZoneStats",
    "PlacementHints",
    "PlacementScrim",
    "PlacementTextBlock",
    "PlacementCtaBlock",
    "PlacementPlan",
    "TextTreatmentProfile",
    "AdCopy",
    "ColorHints",
    "AdMetadata",
    "AdSpec",
    "GenerationResult",
    "FORMAT_DIMENSIONS",
]

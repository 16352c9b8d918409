from .analysis import analyze_for_placement, build_placement_plan, select_treatment
from .compositor import AdComposer, Canvas, compose_ad
from .pipeline import CompositionResult, run_composition

__all__ = [
    "analyze_for_placement",
    "build_placement_plan",
    "select_treatment",
    "AdComposer",
    "Canvas",
    "compose_ad",
    "run_composition",
    "CompositionResult",
]

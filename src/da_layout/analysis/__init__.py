from .layout_analyzer import analyze_for_placement
from .planner import PlannerConfig, build_placement_plan, build_scrim
from .treatment import TREATMENT_CATALOG, select_treatment
from .zones import lane_catalog, measure_zone, zone_catalog

__all__ = [
    "analyze_for_placement",
    "build_placement_plan",
    "build_scrim",
    "PlannerConfig",
    "select_treatment",
    "TREATMENT_CATALOG",
    "measure_zone",
    "zone_catalog",
    "lane_catalog",
]

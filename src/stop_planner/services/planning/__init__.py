"""Deterministic planners and their shared scoring primitives."""

from .drift import plan_drift
from .models import (
    DayStats,
    NearbyStop,
    OptimizationSuggestion,
    PlacementSuggestion,
    PlanningParameters,
    PlanningResult,
    ReorgAssignment,
    ReorgPlan,
)
from .placement import plan_placement
from .reorg import plan_reorg
from .scorer import ClusterScore, score_day
from .snapshot import Snapshot, build_snapshot

__all__ = [
    "ClusterScore",
    "DayStats",
    "NearbyStop",
    "OptimizationSuggestion",
    "PlacementSuggestion",
    "PlanningParameters",
    "PlanningResult",
    "ReorgAssignment",
    "ReorgPlan",
    "Snapshot",
    "build_snapshot",
    "plan_drift",
    "plan_placement",
    "plan_reorg",
    "score_day",
]

"""Refinement layer: the refine / edit / accept cycle and diff presentation."""

from .presentation import DiffPresenter, RecordingPresenter, UnifiedDiffPresenter, render_unified_diff
from .refinement_cycle import CyclePhase, RefinementCycle

__all__ = [
    "RefinementCycle",
    "CyclePhase",
    "DiffPresenter",
    "UnifiedDiffPresenter",
    "RecordingPresenter",
    "render_unified_diff",
]

"""Selection tracking and description helpers."""

from .describe import render_selection_analysis, render_selection_details
from .tracker import ExtractionResult, SelectionTracker

__all__ = [
    "ExtractionResult",
    "SelectionTracker",
    "render_selection_analysis",
    "render_selection_details",
]

# src/tasks/reporting/__init__.py
"""
Reporting Package

Text diagnostics and charts for a final selection.
"""

from .selection_report import (
    ScoreStatistics,
    SelectionReport,
    build_selection_report,
    render_text_report,
    selection_frame,
)
from .selection_visualization import create_selection_plots

__all__ = [
    'ScoreStatistics',
    'SelectionReport',
    'build_selection_report',
    'render_text_report',
    'selection_frame',
    'create_selection_plots',
]

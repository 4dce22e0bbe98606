# src/tasks/selection/__init__.py
"""
Balanced Selection Package

Quota planning, the three-pass balanced selector and the end-to-end pipeline.
"""

from .quota_planner import QuotaPlan, QuotaPlanner
from .balanced_selector import (
    BalancedSelector,
    SelectionResult,
    SelectionState,
    admit,
    admit_curated,
    backfill_by_score,
    fill_type_quotas,
)
from .selection_pipeline import BalancedSelectionPipeline, PipelineResult, resolve_generated_at

__all__ = [
    # Core components
    'QuotaPlanner',
    'BalancedSelector',

    # Selection passes
    'admit',
    'admit_curated',
    'fill_type_quotas',
    'backfill_by_score',

    # Main pipeline
    'BalancedSelectionPipeline',
    'resolve_generated_at',

    # Data classes
    'QuotaPlan',
    'SelectionState',
    'SelectionResult',
    'PipelineResult',
]

__version__ = "1.0.0"
__description__ = "Quota-constrained balanced selection of scored catalog records"

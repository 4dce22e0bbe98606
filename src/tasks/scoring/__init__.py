# src/tasks/scoring/__init__.py
"""
Scoring Package

Per-metric normalization, total score aggregation and percentile tiering.
"""

from .attribute_normalizer import AttributeNormalizer, NormalizationResult, normalize
from .score_aggregator import ScoreAggregator
from .tier_assigner import TierAssigner, TierAssignment, TierBand

__all__ = [
    'AttributeNormalizer',
    'NormalizationResult',
    'normalize',
    'ScoreAggregator',
    'TierAssigner',
    'TierAssignment',
    'TierBand',
]

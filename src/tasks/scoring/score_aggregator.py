# src/tasks/scoring/score_aggregator.py
"""
Score aggregator for catalog records.
Sums per-metric scores into a total score and applies the curated bonus.
"""

import logging
from dataclasses import replace
from typing import List, Optional

from src.catalog.records import CatalogRecord, MetricScores
from src.shared.settings import ScoringConfig

from .attribute_normalizer import AttributeNormalizer

logger = logging.getLogger(__name__)


class ScoreAggregator:
    """
    Computes total scores for catalog records.

    Scores are always recomputed from the raw attributes, so scoring an
    already scored record gives the same result and the curated bonus can
    never stack across calls.
    """

    def __init__(self, normalizer: Optional[AttributeNormalizer] = None,
                 config: Optional[ScoringConfig] = None):
        """Initialize the aggregator."""
        self.normalizer = normalizer or AttributeNormalizer()
        self.config = config or ScoringConfig()
        self.min_total = 0
        self.max_total = self.config.max_total_score

    def total_score(self, scores: MetricScores, curated: bool = False) -> int:
        """
        Sum metric scores, adding the curated bonus once, clamped to the maximum total.

        Args:
            scores: Per-metric scores of a record
            curated: Whether the record is hand-authored

        Returns:
            Total score in [0, max_total_score]
        """
        total = scores.total
        if curated:
            total += self.config.curated_bonus
        return max(self.min_total, min(self.max_total, total))

    def score_record(self, record: CatalogRecord) -> CatalogRecord:
        """Return a scored copy of the record with its tier cleared."""
        result = self.normalizer.score_record(record)
        return replace(
            record,
            scores=result.scores,
            total_score=self.total_score(result.scores, record.is_curated),
            badge_tier=None,
            missing_metrics=tuple(result.missing_metrics),
            low_confidence=result.low_confidence,
        )

    def score_pool(self, records: List[CatalogRecord]) -> List[CatalogRecord]:
        """
        Score every record of a pool, preserving order.

        Args:
            records: Merged pool of curated and generated records

        Returns:
            Scored copies in the same order
        """
        scored = [self.score_record(record) for record in records]

        curated = sum(1 for record in scored if record.is_curated)
        low_confidence = sum(1 for record in scored if record.low_confidence)
        logger.info(
            f"Scored {len(scored)} records ({curated} curated with +{self.config.curated_bonus} bonus, "
            f"{low_confidence} low confidence)"
        )
        return scored

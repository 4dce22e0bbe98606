# src/tasks/scoring/tier_assigner.py
"""
Percentile-based tier assignment.
Tiers are relative to the pool of a single run: the same score can land in
different tiers for different pool compositions, so tier labels must never be
cached or compared across runs.
"""

import logging
import math
from dataclasses import dataclass, replace
from typing import Dict, List, Tuple

from src.catalog.records import BadgeTier, CatalogRecord
from src.shared.numeric import as_fraction

logger = logging.getLogger(__name__)


@dataclass
class TierBand:
    """Summary of the records that ended up in one tier."""
    tier: BadgeTier
    count: int
    min_score: int
    max_score: int


@dataclass
class TierAssignment:
    """Container for tier assignment results."""
    ranked: List[CatalogRecord]  # highest score first
    labeled: List[CatalogRecord]  # same records in input order
    bands: Dict[BadgeTier, TierBand]

    def by_tier(self, tier: BadgeTier) -> List[CatalogRecord]:
        return [record for record in self.ranked if record.badge_tier == tier]


class TierAssigner:
    """Relabels every record's tier by its rank in the whole pool."""

    def __init__(self, tier_percentages: Dict[BadgeTier, float]):
        """
        Initialize the assigner.

        Args:
            tier_percentages: Share of the pool per tier, rarest tier first
        """
        if not tier_percentages:
            raise ValueError("at least one tier is required")
        self.tier_percentages = dict(tier_percentages)

    def cut_points(self, pool_size: int) -> List[Tuple[BadgeTier, int]]:
        """
        Exclusive end rank of every tier.

        Cut index is floor(pool_size * cumulative_percent / 100), computed with
        exact fractions; the last tier always ends at pool_size.
        """
        cuts = []
        cumulative = 0
        tiers = list(self.tier_percentages)
        for tier in tiers[:-1]:
            cumulative += as_fraction(self.tier_percentages[tier])
            cut = min(pool_size, math.floor(pool_size * cumulative / 100))
            cuts.append((tier, cut))
        cuts.append((tiers[-1], pool_size))
        return cuts

    def assign(self, pool: List[CatalogRecord]) -> TierAssignment:
        """
        Rank the pool by total score and label tiers by rank position.

        The sort is stable: records with equal scores keep their relative
        input order (curated first, then catalog file order).

        Args:
            pool: Scored records

        Returns:
            TierAssignment with the ranked, tier-labeled records
        """
        order = sorted(range(len(pool)), key=lambda i: pool[i].total_score, reverse=True)

        labeled: List[CatalogRecord] = list(pool)
        ranked = []
        start = 0
        for tier, end in self.cut_points(len(order)):
            for i in order[start:end]:
                labeled[i] = replace(pool[i], badge_tier=tier)
                ranked.append(labeled[i])
            start = max(start, end)

        bands = {}
        for tier in self.tier_percentages:
            scores = [record.total_score for record in ranked if record.badge_tier == tier]
            bands[tier] = TierBand(
                tier=tier,
                count=len(scores),
                min_score=min(scores) if scores else 0,
                max_score=max(scores) if scores else 0,
            )
            if scores:
                logger.info(f"  {tier.value}: {len(scores)} records (scores {min(scores)}-{max(scores)})")
            else:
                logger.info(f"  {tier.value}: 0 records")

        return TierAssignment(ranked=ranked, labeled=labeled, bands=bands)

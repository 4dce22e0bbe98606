# src/tasks/selection/quota_planner.py
"""
Quota planning for balanced selection.
Derives integer targets per tier and per (tier, type category) cell from a
single target count. Rounding drift between the sum of quotas and the target
is accepted and never corrected.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List

from src.catalog.records import BadgeTier, TypeCategory
from src.shared.numeric import as_fraction, round_half_up

logger = logging.getLogger(__name__)


@dataclass
class QuotaPlan:
    """Integer quotas derived for one selection run."""
    target_count: int
    tier_quotas: Dict[BadgeTier, int]
    type_quotas: Dict[BadgeTier, Dict[TypeCategory, int]]

    @property
    def tier_order(self) -> List[BadgeTier]:
        return list(self.tier_quotas)

    @property
    def total_planned(self) -> int:
        return sum(self.tier_quotas.values())

    @property
    def drift(self) -> int:
        return self.total_planned - self.target_count

    def category_for(self, tier: BadgeTier, object_type: str) -> TypeCategory:
        """
        Quota cell a record of this type is counted against in the given tier.

        Types without an entry in the tier's table share its OTHER bucket.
        """
        category = TypeCategory.from_object_type(object_type)
        if category in self.type_quotas.get(tier, {}):
            return category
        return TypeCategory.OTHER

    def is_tracked(self, tier: BadgeTier, category: TypeCategory) -> bool:
        return category in self.type_quotas.get(tier, {})


class QuotaPlanner:
    """Builds quota plans from tier percentages and base type tables."""

    def __init__(self, tier_percentages: Dict[BadgeTier, float],
                 base_type_quotas: Dict[BadgeTier, Dict[TypeCategory, float]]):
        """
        Initialize the planner.

        Args:
            tier_percentages: Share of the target per tier, rarest first
            base_type_quotas: Per-tier base counts, scaled to each tier's quota
        """
        self.tier_percentages = dict(tier_percentages)
        self.base_type_quotas = {tier: dict(table) for tier, table in base_type_quotas.items()}

    def plan(self, target_count: int) -> QuotaPlan:
        """
        Compute the quota plan for a target count.

        Args:
            target_count: Total number of records to select

        Returns:
            QuotaPlan with rounded tier and cell quotas
        """
        if target_count <= 0:
            raise ValueError(f"target_count must be positive, got {target_count}")

        tier_quotas = {}
        type_quotas = {}
        for tier, percent in self.tier_percentages.items():
            tier_quota = round_half_up(target_count * as_fraction(percent) / 100)
            tier_quotas[tier] = tier_quota

            table = self.base_type_quotas.get(tier)
            if not table:
                continue
            base_total = sum(as_fraction(base) for base in table.values())
            type_quotas[tier] = {
                category: round_half_up(as_fraction(base) * tier_quota / base_total) if base_total else 0
                for category, base in table.items()
            }

        plan = QuotaPlan(target_count=target_count, tier_quotas=tier_quotas, type_quotas=type_quotas)
        logger.info(f"Quota plan for {target_count}: {plan.total_planned} planned (drift {plan.drift:+d})")
        for tier in plan.tier_order:
            cells = ", ".join(f"{c.value}={q}" for c, q in plan.type_quotas.get(tier, {}).items())
            logger.info(f"  {tier.value}: {tier_quotas[tier]} [{cells}]")
        return plan

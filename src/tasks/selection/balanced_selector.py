# src/tasks/selection/balanced_selector.py
"""
Three-pass greedy selection under tier and type quotas.

1. Curated priority: curated records in authored order.
2. Quota fill: per tier (rarest first) and type category, round-robin over
   the generated (tier, object type) groups, largest group first.
3. Backfill: leftover records of the whole pool by score, checking only the
   tier quota.

Each pass takes a SelectionState and returns a new one; no pass mutates the
state it was given.
"""

import copy
import logging
from collections import Counter, deque
from dataclasses import dataclass, field
from typing import Dict, List, Set, Tuple

from src.catalog.records import BadgeTier, CatalogRecord, TypeCategory
from src.tasks.scoring.tier_assigner import TierAssignment

from .quota_planner import QuotaPlan

logger = logging.getLogger(__name__)

PASS_CURATED = "curated"
PASS_QUOTA_FILL = "quota_fill"
PASS_BACKFILL = "backfill"


@dataclass
class SelectionState:
    """Selected records, used names and remaining quota counters."""
    target_count: int
    selected: List[CatalogRecord] = field(default_factory=list)
    used_names: Set[str] = field(default_factory=set)
    remaining_tier: Dict[BadgeTier, int] = field(default_factory=dict)
    remaining_type: Dict[BadgeTier, Dict[TypeCategory, int]] = field(default_factory=dict)
    pass_counts: Dict[str, int] = field(default_factory=dict)

    @classmethod
    def from_plan(cls, plan: QuotaPlan) -> "SelectionState":
        return cls(
            target_count=plan.target_count,
            remaining_tier=dict(plan.tier_quotas),
            remaining_type={tier: dict(table) for tier, table in plan.type_quotas.items()},
        )

    def copy(self) -> "SelectionState":
        # records are immutable, so a shallow copy of the list is enough
        return SelectionState(
            target_count=self.target_count,
            selected=list(self.selected),
            used_names=set(self.used_names),
            remaining_tier=dict(self.remaining_tier),
            remaining_type=copy.deepcopy(self.remaining_type),
            pass_counts=dict(self.pass_counts),
        )

    @property
    def is_full(self) -> bool:
        return len(self.selected) >= self.target_count


@dataclass
class SelectionResult:
    """Container for balanced selection results."""
    selected: List[CatalogRecord]
    plan: QuotaPlan
    tier_counts: Dict[BadgeTier, int]
    type_counts: Dict[str, int]  # real object type -> count
    tier_type_counts: Dict[BadgeTier, Dict[TypeCategory, int]]
    pass_counts: Dict[str, int]

    @property
    def actual_count(self) -> int:
        return len(self.selected)

    @property
    def shortfall(self) -> int:
        return max(0, self.plan.target_count - self.actual_count)


def admit(state: SelectionState, record: CatalogRecord, plan: QuotaPlan,
          enforce_type_quota: bool = True) -> bool:
    """
    Try to add one record to the selection, updating state in place.

    Rejected when the name is already used, the target is reached, the
    record's tier quota is exhausted, or (when enforced) its tracked
    (tier, type category) cell is exhausted.

    Returns:
        True if the record was admitted
    """
    tier = record.badge_tier
    if record.name_key in state.used_names:
        return False
    if state.is_full:
        return False
    if state.remaining_tier.get(tier, 0) <= 0:
        return False

    category = plan.category_for(tier, record.object_type)
    tracked = plan.is_tracked(tier, category)
    if enforce_type_quota and tracked and state.remaining_type[tier][category] <= 0:
        return False

    state.selected.append(record)
    state.used_names.add(record.name_key)
    state.remaining_tier[tier] -= 1
    if enforce_type_quota and tracked:
        state.remaining_type[tier][category] -= 1
    return True


def _count_pass(state: SelectionState, pass_name: str, before: int) -> None:
    state.pass_counts[pass_name] = len(state.selected) - before


def admit_curated(state: SelectionState, curated: List[CatalogRecord],
                  plan: QuotaPlan) -> SelectionState:
    """
    Pass 1: offer curated records in their authored order.

    Curated records go through the same quota checks as everything else;
    one whose cell is already full is skipped.
    """
    state = state.copy()
    before = len(state.selected)
    for record in curated:
        if not admit(state, record, plan):
            logger.debug(f"Curated record '{record.name}' ({record.badge_tier.value}) not admitted")
    _count_pass(state, PASS_CURATED, before)
    logger.info(f"Pass 1 (curated): admitted {state.pass_counts[PASS_CURATED]} of {len(curated)}")
    return state


def _group_by_tier_and_type(records: List[CatalogRecord]) -> Dict[Tuple[BadgeTier, str], List[CatalogRecord]]:
    """Group records by (tier, object type), each group sorted by score descending."""
    groups: Dict[Tuple[BadgeTier, str], List[CatalogRecord]] = {}
    for record in records:
        groups.setdefault((record.badge_tier, record.object_type), []).append(record)
    for members in groups.values():
        members.sort(key=lambda record: record.total_score, reverse=True)
    return groups


def _fill_cell(state: SelectionState, plan: QuotaPlan, tier: BadgeTier,
               category: TypeCategory, groups: List[List[CatalogRecord]]) -> int:
    """Round-robin over the groups of one cell until its quota or the candidates run out."""
    # Largest group first; ties keep their first-seen order
    queues = [deque(members) for members in sorted(groups, key=len, reverse=True)]
    added = 0
    index = 0
    while queues and state.remaining_type[tier][category] > 0 and state.remaining_tier[tier] > 0:
        if state.is_full:
            break
        position = index % len(queues)
        queue = queues[position]
        admitted = False
        while queue:
            record = queue.popleft()
            if admit(state, record, plan):
                admitted = True
                break
        if admitted:
            added += 1
            index += 1
        else:
            queues.pop(position)
    return added


def fill_type_quotas(state: SelectionState, catalog: List[CatalogRecord],
                     plan: QuotaPlan) -> SelectionState:
    """
    Pass 2: fill each (tier, type category) cell from the generated records.

    Tiers are visited rarest first and categories in quota-table order.
    """
    state = state.copy()
    before = len(state.selected)
    groups = _group_by_tier_and_type(catalog)

    for tier in plan.tier_order:
        for category in plan.type_quotas.get(tier, {}):
            if state.remaining_type[tier][category] <= 0:
                continue
            cell_groups = [
                members for (group_tier, object_type), members in groups.items()
                if group_tier == tier and plan.category_for(tier, object_type) == category
            ]
            if not cell_groups:
                continue
            added = _fill_cell(state, plan, tier, category, cell_groups)
            logger.debug(
                f"  {tier.value}/{category.value}: +{added} from {len(cell_groups)} groups, "
                f"{state.remaining_type[tier][category]} left"
            )

    _count_pass(state, PASS_QUOTA_FILL, before)
    logger.info(f"Pass 2 (quota fill): admitted {state.pass_counts[PASS_QUOTA_FILL]}")
    return state


def backfill_by_score(state: SelectionState, ranked: List[CatalogRecord],
                      plan: QuotaPlan) -> SelectionState:
    """
    Pass 3: spend leftover tier capacity on the highest-scoring unused records.

    Type sub-quotas are ignored here; tier quotas and the target are not.
    """
    state = state.copy()
    before = len(state.selected)
    candidates = sorted(
        (record for record in ranked if record.name_key not in state.used_names),
        key=lambda record: record.total_score,
        reverse=True,
    )
    for record in candidates:
        if state.is_full:
            break
        admit(state, record, plan, enforce_type_quota=False)

    _count_pass(state, PASS_BACKFILL, before)
    logger.info(f"Pass 3 (backfill): admitted {state.pass_counts[PASS_BACKFILL]}")
    return state


class BalancedSelector:
    """Runs the three selection passes over a tier-labeled pool."""

    def select(self, assignment: TierAssignment, plan: QuotaPlan) -> SelectionResult:
        """
        Select a balanced subset of the pool.

        Args:
            assignment: Tier-labeled pool from the TierAssigner
            plan: Quota plan for this run

        Returns:
            SelectionResult; under-fill is reported, never raised
        """
        ranked = assignment.ranked
        # curated records keep their authored order, not rank order
        curated = [record for record in assignment.labeled if record.is_curated]
        catalog = [record for record in ranked if not record.is_curated]

        state = SelectionState.from_plan(plan)
        state = admit_curated(state, curated, plan)
        state = fill_type_quotas(state, catalog, plan)
        state = backfill_by_score(state, ranked, plan)

        result = self.build_result(state, plan)
        if result.shortfall:
            logger.warning(
                f"Selected {result.actual_count} of {plan.target_count} requested "
                f"({result.shortfall} short)"
            )
        else:
            logger.info(f"Selected {result.actual_count} records")
        return result

    @staticmethod
    def build_result(state: SelectionState, plan: QuotaPlan) -> SelectionResult:
        tier_counts = {tier: 0 for tier in plan.tier_order}
        tier_type_counts: Dict[BadgeTier, Dict[TypeCategory, int]] = {}
        type_counts = Counter()
        for record in state.selected:
            tier_counts[record.badge_tier] = tier_counts.get(record.badge_tier, 0) + 1
            category = plan.category_for(record.badge_tier, record.object_type)
            cell = tier_type_counts.setdefault(record.badge_tier, {})
            cell[category] = cell.get(category, 0) + 1
            type_counts[record.object_type] += 1

        return SelectionResult(
            selected=list(state.selected),
            plan=plan,
            tier_counts=tier_counts,
            type_counts=dict(sorted(type_counts.items(), key=lambda item: (-item[1], item[0]))),
            tier_type_counts=tier_type_counts,
            pass_counts=dict(state.pass_counts),
        )

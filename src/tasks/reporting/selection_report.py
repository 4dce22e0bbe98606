# src/tasks/reporting/selection_report.py
"""
Distribution diagnostics for a final selection.
Works on a flat DataFrame of selected records so that a fresh selection and a
selection file loaded from disk are reported the same way.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

import numpy as np
import pandas as pd

from src.catalog.records import CatalogRecord
from src.shared.numeric import round_half_up

logger = logging.getLogger(__name__)

FRAME_COLUMNS = ["name", "objectType", "catalogSource", "badgeTier", "totalScore", "lowConfidence"]


def selection_frame(records: List[CatalogRecord]) -> pd.DataFrame:
    """Flatten selected records into the columns the report needs."""
    rows = [
        {
            "name": record.name,
            "objectType": record.object_type,
            "catalogSource": record.catalog_source.value,
            "badgeTier": record.badge_tier.value if record.badge_tier else None,
            "totalScore": record.total_score,
            "lowConfidence": record.low_confidence,
        }
        for record in records
    ]
    return pd.DataFrame(rows, columns=FRAME_COLUMNS)


@dataclass
class ScoreStatistics:
    """Summary statistics of total scores."""
    min: float
    max: float
    mean: float
    median: float
    std: float  # population standard deviation


@dataclass
class SelectionReport:
    """Container for selection diagnostics."""
    target_count: int
    actual_count: int
    score_stats: Optional[ScoreStatistics]
    tier_table: pd.DataFrame       # index: tier; columns: count, percent, target_percent
    type_table: pd.DataFrame       # index: object type; columns: count, percent
    tier_type_counts: Dict[str, Dict[str, int]]
    top_records: pd.DataFrame
    curated_count: int
    low_confidence_count: int

    @property
    def shortfall(self) -> int:
        return max(0, self.target_count - self.actual_count)


def score_statistics(scores: pd.Series) -> Optional[ScoreStatistics]:
    if scores.empty:
        return None
    values = scores.to_numpy(dtype=float)
    return ScoreStatistics(
        min=float(np.min(values)),
        max=float(np.max(values)),
        mean=float(np.mean(values)),
        median=float(np.median(values)),
        std=float(np.std(values)),
    )


def build_selection_report(frame: pd.DataFrame, target_count: int,
                           tier_percentages: Dict[str, float],
                           top_n: int = 10) -> SelectionReport:
    """
    Compute distribution diagnostics from a selection frame.

    Args:
        frame: Selected records (see selection_frame)
        target_count: Requested selection size
        tier_percentages: Target share per tier name, rarest first
        top_n: Number of highest-scoring records to list

    Returns:
        SelectionReport
    """
    actual = len(frame)

    tier_counts = frame["badgeTier"].value_counts()
    tiers = list(tier_percentages) + [t for t in tier_counts.index if t not in tier_percentages]
    tier_table = pd.DataFrame(
        {
            "count": [int(tier_counts.get(tier, 0)) for tier in tiers],
            "target_percent": [float(tier_percentages.get(tier, 0.0)) for tier in tiers],
        },
        index=pd.Index(tiers, name="tier"),
    )
    tier_table["percent"] = tier_table["count"] / actual * 100 if actual else 0.0
    tier_table = tier_table[["count", "percent", "target_percent"]]

    type_counts = frame["objectType"].value_counts()
    ordered_types = sorted(type_counts.items(), key=lambda item: (-item[1], item[0]))
    type_table = pd.DataFrame(
        {"count": [int(count) for _, count in ordered_types]},
        index=pd.Index([object_type for object_type, _ in ordered_types], name="objectType"),
    )
    type_table["percent"] = type_table["count"] / actual * 100 if actual else 0.0

    tier_type_counts: Dict[str, Dict[str, int]] = {}
    for tier in tiers:
        members = frame[frame["badgeTier"] == tier]
        if members.empty:
            continue
        counts = members["objectType"].value_counts()
        ordered = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
        tier_type_counts[tier] = {object_type: int(count) for object_type, count in ordered}

    top_records = frame.sort_values("totalScore", ascending=False, kind="mergesort").head(top_n)

    curated = int((frame["catalogSource"] == "curated").sum()) if actual else 0
    low_confidence = int(frame["lowConfidence"].fillna(False).astype(bool).sum()) if actual else 0

    return SelectionReport(
        target_count=target_count,
        actual_count=actual,
        score_stats=score_statistics(frame["totalScore"]),
        tier_table=tier_table,
        type_table=type_table,
        tier_type_counts=tier_type_counts,
        top_records=top_records.reset_index(drop=True),
        curated_count=curated,
        low_confidence_count=low_confidence,
    )


def render_text_report(report: SelectionReport, bar_width: int = 30) -> str:
    """Render the report as plain text for the console."""
    lines = []
    rule = "=" * 60

    lines.append(rule)
    lines.append("BALANCED SELECTION REPORT")
    lines.append(rule)
    status = f" ({report.shortfall} short)" if report.shortfall else ""
    lines.append(f"Selected: {report.actual_count} / {report.target_count}{status}")
    lines.append(f"Curated: {report.curated_count}   Low confidence: {report.low_confidence_count}")

    lines.append("")
    lines.append("Score statistics:")
    stats = report.score_stats
    if stats is None:
        lines.append("  (no records selected)")
    else:
        lines.append(
            f"  min {stats.min:.0f}  max {stats.max:.0f}  mean {stats.mean:.1f}  "
            f"median {stats.median:.1f}  std {stats.std:.1f}"
        )

    lines.append("")
    lines.append("Tier distribution:")
    lines.append(f"  {'Tier':<12} {'Count':>7} {'Percent':>8} {'Target %':>9}")
    lines.append(f"  {'-' * 39}")
    for tier, row in report.tier_table.iterrows():
        lines.append(
            f"  {tier:<12} {int(row['count']):>7} {row['percent']:>7.1f}% {row['target_percent']:>8.1f}%"
        )

    lines.append("")
    lines.append("Type distribution:")
    for object_type, row in report.type_table.iterrows():
        lines.append(f"  {object_type:<20} {int(row['count']):>7} {row['percent']:>7.1f}%")

    lines.append("")
    lines.append("Tier x type breakdown:")
    for tier, counts in report.tier_type_counts.items():
        tier_total = sum(counts.values())
        lines.append(f"  {tier} ({tier_total})")
        for object_type, count in counts.items():
            bar = "#" * round_half_up(count / tier_total * bar_width)
            lines.append(f"    {object_type:<20} {count:>6} {bar}")

    if not report.top_records.empty:
        lines.append("")
        lines.append(f"Top {len(report.top_records)} by score:")
        for rank, row in enumerate(report.top_records.itertuples(index=False), start=1):
            lines.append(
                f"  {rank:>3}. {row.name} ({row.objectType}, {row.badgeTier}) {int(row.totalScore)}"
            )

    lines.append(rule)
    return "\n".join(lines)

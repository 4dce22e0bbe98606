# src/tasks/reporting/selection_visualization.py
"""
Visualization functions for balanced selection results.
Saves tier, type and score distribution charts as PNG files.
"""

import logging
from pathlib import Path
from typing import Dict, List

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import pandas as pd
import seaborn as sns

logger = logging.getLogger(__name__)

# One color per tier, rarest first
TIER_COLORS = ['#9467bd', '#d62728', '#ff7f0e', '#2ca02c', '#1f77b4']


def create_tier_distribution_plot(frame: pd.DataFrame, tier_percentages: Dict[str, float],
                                  save_dir: Path) -> Path:
    """
    Bar chart of selected share per tier against the target share.

    Args:
        frame: Selected records (see selection_frame)
        tier_percentages: Target share per tier name, rarest first
        save_dir: Directory to save plots

    Returns:
        Path of the saved chart
    """
    tiers = list(tier_percentages)
    total = max(len(frame), 1)
    actual = [(frame['badgeTier'] == tier).sum() / total * 100 for tier in tiers]
    target = [tier_percentages[tier] for tier in tiers]

    fig, ax = plt.subplots(figsize=(10, 6))
    positions = range(len(tiers))
    width = 0.4
    ax.bar([p - width / 2 for p in positions], actual, width, label='Selected',
           color=TIER_COLORS[:len(tiers)], edgecolor='black', linewidth=1)
    ax.bar([p + width / 2 for p in positions], target, width, label='Target',
           color='white', edgecolor='black', linewidth=1, hatch='//')
    ax.set_xticks(list(positions))
    ax.set_xticklabels(tiers)
    ax.set_ylabel('Share of selection (%)', fontweight='bold')
    ax.set_title('Tier Distribution vs Target', fontweight='bold')
    ax.legend()

    for position, value in zip(positions, actual):
        ax.text(position - width / 2, value + 0.5, f'{value:.1f}%', ha='center', fontsize=9)

    path = save_dir / "tier_distribution.png"
    plt.tight_layout()
    plt.savefig(path, dpi=300, bbox_inches='tight')
    plt.close()
    return path


def create_score_distribution_plot(frame: pd.DataFrame, tier_order: List[str], save_dir: Path) -> Path:
    """Histogram of total scores, stacked by tier."""
    plt.figure(figsize=(10, 6))
    sns.histplot(
        data=frame, x='totalScore', hue='badgeTier', hue_order=tier_order,
        multiple='stack', bins=40, palette=TIER_COLORS[:len(tier_order)]
    )
    plt.xlabel('Total score', fontweight='bold')
    plt.ylabel('Records', fontweight='bold')
    plt.title('Score Distribution by Tier', fontweight='bold')

    path = save_dir / "score_distribution.png"
    plt.tight_layout()
    plt.savefig(path, dpi=300, bbox_inches='tight')
    plt.close()
    return path


def create_tier_type_heatmap(frame: pd.DataFrame, tier_order: List[str], save_dir: Path) -> Path:
    """Heatmap of selected counts per tier and object type."""
    table = pd.crosstab(frame['badgeTier'], frame['objectType'])
    table = table.reindex([tier for tier in tier_order if tier in table.index])
    table = table[table.sum().sort_values(ascending=False).index]

    plt.figure(figsize=(max(8, len(table.columns) * 0.9), 5))
    sns.heatmap(table, annot=True, fmt='d', cmap='Blues', linewidths=0.5, cbar_kws={'label': 'Records'})
    plt.xlabel('Object type', fontweight='bold')
    plt.ylabel('Tier', fontweight='bold')
    plt.title('Selection by Tier and Type', fontweight='bold')

    path = save_dir / "tier_type_heatmap.png"
    plt.tight_layout()
    plt.savefig(path, dpi=300, bbox_inches='tight')
    plt.close()
    return path


def create_selection_plots(frame: pd.DataFrame, tier_percentages: Dict[str, float],
                           save_dir: Path) -> List[Path]:
    """
    Create and save all selection charts.

    Args:
        frame: Selected records (see selection_frame)
        tier_percentages: Target share per tier name, rarest first
        save_dir: Directory to save plots

    Returns:
        Paths of the saved charts
    """
    save_dir = Path(save_dir)
    save_dir.mkdir(parents=True, exist_ok=True)

    if frame.empty:
        logger.warning("No selected records; skipping plots")
        return []

    tier_order = list(tier_percentages)
    paths = [
        create_tier_distribution_plot(frame, tier_percentages, save_dir),
        create_score_distribution_plot(frame, tier_order, save_dir),
        create_tier_type_heatmap(frame, tier_order, save_dir),
    ]
    logger.info(f"Saved {len(paths)} plots to {save_dir}")
    return paths

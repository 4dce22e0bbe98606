#!/usr/bin/env python3
# scripts/report_selection.py
"""
Re-render the distribution report (and optional charts) of a saved selection file.
"""

import sys
import argparse
import logging
from pathlib import Path

# Add src to path to import modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.catalog.catalog_loader import CatalogLoadError
from src.shared.settings import SelectionConfigError, load_selection_config
from src.tasks.reporting import build_selection_report, create_selection_plots, render_text_report
from src.utils.data_loader import load_selection_frame


def setup_logging(verbose: bool = False):
    """Setup logging configuration."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )


def main():
    """Main execution function."""
    parser = argparse.ArgumentParser(
        description="Print the distribution report of a saved selection",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/report_selection.py
  python scripts/report_selection.py --selection out/selection.json --plots-dir results/plots
        """
    )
    parser.add_argument("--selection", type=str, default="staging/selected-nfts.json",
                        help="Selection file (default: staging/selected-nfts.json)")
    parser.add_argument("--config", type=str, default="configs/selection/selection.yaml",
                        help="Path to configuration file (default: configs/selection/selection.yaml)")
    parser.add_argument("--plots-dir", type=str, default=None, help="Directory for distribution charts")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging")

    args = parser.parse_args()
    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    try:
        config = load_selection_config(args.config)
        frame, metadata = load_selection_frame(args.selection)
    except (SelectionConfigError, CatalogLoadError) as e:
        logger.error(str(e))
        print(f"Error: {e}")
        return 1

    tier_percentages = {tier.value: float(config.tiers[tier]) for tier in config.tier_order}
    target = int(metadata.get("targetCount", len(frame)))
    report = build_selection_report(frame, target, tier_percentages, top_n=config.report.top_n)

    print(f"Selection: {args.selection} (generated {metadata.get('generatedAt', 'unknown')})")
    print(render_text_report(report, bar_width=config.report.bar_width))

    if args.plots_dir:
        for path in create_selection_plots(frame, tier_percentages, Path(args.plots_dir)):
            print(f"  - {path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())

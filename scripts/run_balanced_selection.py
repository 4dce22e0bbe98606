#!/usr/bin/env python3
# scripts/run_balanced_selection.py
"""
Standalone script to run the balanced catalog selection.
Scores the merged curated + generated pool, assigns percentile tiers and
selects a quota-balanced subset, then writes the selection file and prints
a distribution report.
"""

import sys
import argparse
import logging
from pathlib import Path
from datetime import datetime
from dotenv import load_dotenv

# Add src to path to import modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from pydantic import ValidationError

from src.catalog.catalog_loader import CatalogLoadError
from src.shared.settings import SelectionConfigError, SelectionSettings
from src.tasks.reporting import create_selection_plots, render_text_report, selection_frame
from src.tasks.selection import BalancedSelectionPipeline


def setup_logging(verbose: bool = False, level_name: str = "INFO"):
    """Setup logging configuration."""
    level = logging.DEBUG if verbose else getattr(logging, level_name.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )


def load_config(settings: SelectionSettings):
    """Load the selection configuration the run settings point at."""
    try:
        return settings.load_config()
    except SelectionConfigError as e:
        print(f"Error loading configuration from {settings.config_path}: {e}")
        sys.exit(1)


def load_settings(args) -> SelectionSettings:
    """Environment / .env settings, overridden by explicit CLI flags."""
    load_dotenv()
    overrides = {
        "target_count": args.target_count,
        "input_path": args.input,
        "output_path": args.output,
        "config_path": args.config,
        "curated_path": args.curated,
        "generated_at": args.generated_at,
    }
    try:
        return SelectionSettings(**{key: value for key, value in overrides.items() if value is not None})
    except ValidationError as e:
        print(f"Error: invalid settings: {e}")
        sys.exit(1)


def main():
    """Main execution function."""
    parser = argparse.ArgumentParser(
        description="Select a quota-balanced subset of the scored astronomical catalog",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Default run (20000 records from staging/hyg-scored.json)
  python scripts/run_balanced_selection.py

  # Smaller selection with custom paths
  python scripts/run_balanced_selection.py --target-count 5000 --input data/catalog.json --output out/selection.json

  # Reproducible output (pins metadata.generatedAt)
  python scripts/run_balanced_selection.py --generated-at 2025-01-01T00:00:00Z

  # Validate configuration and input without selecting
  python scripts/run_balanced_selection.py --dry-run

  # Save distribution charts next to the report
  python scripts/run_balanced_selection.py --plots-dir results/selection_plots

Settings can also come from SELECTION_TARGET_COUNT, SELECTION_INPUT_PATH,
SELECTION_OUTPUT_PATH, SELECTION_CONFIG_PATH and SELECTION_GENERATED_AT
(environment or .env). The output file is replaced atomically; when two runs
write the same path at once, the last one to finish wins.
        """
    )

    parser.add_argument(
        "--target-count",
        type=int,
        default=None,
        help="Total number of records to select (default: 20000)"
    )

    # Data paths
    parser.add_argument(
        "--input",
        type=str,
        default=None,
        help="Generated catalog JSON (default: staging/hyg-scored.json)"
    )

    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Selection file destination (default: staging/selected-nfts.json)"
    )

    parser.add_argument(
        "--curated",
        type=str,
        default=None,
        help="Curated dataset YAML (default: packaged curated objects)"
    )

    # Configuration
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to configuration file (default: configs/selection/selection.yaml)"
    )

    parser.add_argument(
        "--generated-at",
        type=str,
        default=None,
        help="ISO timestamp recorded as metadata.generatedAt"
    )

    parser.add_argument(
        "--plots-dir",
        type=str,
        default=None,
        help="Directory for distribution charts (no charts when omitted)"
    )

    # Options
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging"
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Validate configuration and input without writing output"
    )

    args = parser.parse_args()

    settings = load_settings(args)

    # Setup logging
    setup_logging(args.verbose, settings.log_level)
    logger = logging.getLogger(__name__)

    # Load configuration
    logger.info(f"Loading configuration from {settings.config_path}...")
    config = load_config(settings)

    pipeline = BalancedSelectionPipeline(config)

    # Print configuration
    print("="*60)
    print("BALANCED SELECTION CONFIGURATION")
    print("="*60)
    print(f"Target count: {settings.target_count}")
    print(f"Input catalog: {settings.input_path}")
    print(f"Curated dataset: {settings.curated_path or 'packaged'}")
    print(f"Output file: {settings.output_path}")
    print(f"Configuration: {settings.config_path}")
    print(f"Tiers: {pipeline.tier_percentages}")
    print("="*60)

    try:
        if args.dry_run:
            pool = pipeline.load_pool(settings.input_path, settings.curated_path)
            plan = pipeline.quota_planner.plan(settings.target_count)
            print(f"Pool size: {len(pool)}")
            print(f"Planned quotas: {plan.total_planned} (drift {plan.drift:+d})")
            print("Dry run completed successfully. Configuration and input are valid.")
            return 0

        logger.info("Starting balanced selection...")
        started = datetime.now()
        result = pipeline.run(
            target_count=settings.target_count,
            input_path=settings.input_path,
            output_path=settings.output_path,
            curated_path=settings.curated_path,
            generated_at=settings.generated_at,
        )

        print()
        print(render_text_report(result.report, bar_width=config.report.bar_width))

        if args.plots_dir:
            frame = selection_frame(result.selection.selected)
            for path in create_selection_plots(frame, pipeline.tier_percentages, Path(args.plots_dir)):
                print(f"  - {path}")

        print("\n" + "="*60)
        print(f"Selection written to {result.output_path} "
              f"({(datetime.now() - started).total_seconds():.1f}s)")
        print("="*60)
        return 0

    except KeyboardInterrupt:
        print("\nSelection interrupted by user.")
        return 130

    except CatalogLoadError as e:
        logger.error(f"Input error: {e}")
        return 1

    except Exception as e:
        logger.error(f"Error during balanced selection: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())

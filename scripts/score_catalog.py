#!/usr/bin/env python3
# scripts/score_catalog.py
"""
Score a generated catalog on its own and write it with provisional tiers.
The selection run rescores the merged pool, so tiers written here are only
a preview of the catalog's own distribution.
"""

import sys
import argparse
import logging
from pathlib import Path

# Add src to path to import modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.catalog.catalog_loader import CatalogLoadError
from src.shared.output_writer import write_json_atomic
from src.shared.settings import SelectionConfigError, load_selection_config
from src.tasks.selection import BalancedSelectionPipeline


def setup_logging(verbose: bool = False):
    """Setup logging configuration."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )


def main():
    """Main execution function."""
    parser = argparse.ArgumentParser(
        description="Score a generated catalog and assign provisional percentile tiers",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/score_catalog.py --input staging/hyg-import.json --output staging/hyg-scored.json
        """
    )
    parser.add_argument("--input", type=str, required=True, help="Generated catalog JSON")
    parser.add_argument("--output", type=str, default="staging/hyg-scored.json",
                        help="Scored catalog destination (default: staging/hyg-scored.json)")
    parser.add_argument("--config", type=str, default="configs/selection/selection.yaml",
                        help="Path to configuration file (default: configs/selection/selection.yaml)")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging")

    args = parser.parse_args()
    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    try:
        config = load_selection_config(args.config)
    except SelectionConfigError as e:
        print(f"Error loading configuration from {args.config}: {e}")
        return 1

    try:
        pipeline = BalancedSelectionPipeline(config)
        document = pipeline.score_catalog(args.input)
        write_json_atomic(args.output, document)

        metadata = document["metadata"]
        print("="*60)
        print("CATALOG SCORING RESULTS")
        print("="*60)
        print(f"Records scored: {metadata['count']}")
        print(f"Low confidence: {metadata['lowConfidenceCount']}")
        for tier, count in metadata["tierDistribution"].items():
            print(f"  {tier:<12} {count:>7}")
        print(f"Output: {args.output}")
        print("="*60)
        return 0

    except KeyboardInterrupt:
        print("\nScoring interrupted by user.")
        return 130

    except CatalogLoadError as e:
        logger.error(f"Input error: {e}")
        return 1

    except Exception as e:
        logger.error(f"Error during catalog scoring: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())

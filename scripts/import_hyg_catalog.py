#!/usr/bin/env python3
# scripts/import_hyg_catalog.py
"""
Convert the HYG star database CSV into a generated catalog JSON file.
"""

import sys
import argparse
import logging
from pathlib import Path

# Add src to path to import modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.catalog.hyg_importer import import_hyg_csv
from src.shared.output_writer import write_json_atomic


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
        description="Import the HYG star database into a generated catalog",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/import_hyg_catalog.py --csv data/raw/hygdata_v41.csv
  python scripts/import_hyg_catalog.py --csv data/raw/hygdata_v41.csv --limit 50000 --output staging/hyg-import.json
        """
    )
    parser.add_argument("--csv", type=str, required=True, help="HYG database CSV")
    parser.add_argument("--output", type=str, default="staging/hyg-import.json",
                        help="Catalog destination (default: staging/hyg-import.json)")
    parser.add_argument("--limit", type=int, default=None, help="Maximum number of rows to convert")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging")

    args = parser.parse_args()
    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    if not Path(args.csv).exists():
        print(f"Error: HYG CSV file not found: {args.csv}")
        return 1

    try:
        entries = import_hyg_csv(args.csv, limit=args.limit)
        write_json_atomic(args.output, {"objects": entries})
        print(f"Imported {len(entries)} stars into {args.output}")
        return 0

    except KeyboardInterrupt:
        print("\nImport interrupted by user.")
        return 130

    except Exception as e:
        logger.error(f"Error importing HYG catalog: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())

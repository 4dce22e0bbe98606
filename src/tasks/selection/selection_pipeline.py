# src/tasks/selection/selection_pipeline.py
"""
Main pipeline for balanced catalog selection.
Orchestrates loading, scoring, percentile tiering, quota planning, selection,
output and reporting for a single run.
"""

import logging
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from src.catalog.catalog_loader import load_catalog_file, load_curated_records, merge_catalogs
from src.catalog.records import CatalogRecord
from src.shared.output_writer import write_json_atomic
from src.shared.settings import SelectionConfig
from src.tasks.reporting.selection_report import (
    SelectionReport,
    build_selection_report,
    selection_frame,
)
from src.tasks.scoring.attribute_normalizer import AttributeNormalizer
from src.tasks.scoring.score_aggregator import ScoreAggregator
from src.tasks.scoring.tier_assigner import TierAssigner, TierAssignment

from .balanced_selector import BalancedSelector, SelectionResult
from .quota_planner import QuotaPlanner

logger = logging.getLogger(__name__)


def resolve_generated_at(pinned: Optional[datetime] = None) -> str:
    """
    Timestamp for output metadata as an ISO-8601 UTC string.

    Uses the pinned value if given, else SOURCE_DATE_EPOCH, else the current time.
    """
    if pinned is None:
        epoch = os.environ.get("SOURCE_DATE_EPOCH")
        if epoch:
            pinned = datetime.fromtimestamp(int(epoch), tz=timezone.utc)
        else:
            pinned = datetime.now(timezone.utc)
    if pinned.tzinfo is None:
        pinned = pinned.replace(tzinfo=timezone.utc)
    return pinned.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


@dataclass
class PipelineResult:
    """Container for one selection run."""
    selection: SelectionResult
    report: SelectionReport
    document: Dict[str, Any]
    output_path: Optional[Path]


class BalancedSelectionPipeline:
    """
    Main pipeline for balanced catalog selection.
    """

    def __init__(self, config: Optional[SelectionConfig] = None):
        """
        Initialize the selection pipeline.

        Args:
            config: Validated selection configuration (defaults when omitted)
        """
        self.config = config or SelectionConfig()

        # Initialize components
        self.normalizer = AttributeNormalizer(self.config.normalizer)
        self.aggregator = ScoreAggregator(self.normalizer, self.config.scoring)
        self.tier_assigner = TierAssigner(self.config.tiers)
        self.quota_planner = QuotaPlanner(self.config.tiers, self.config.type_quotas)
        self.selector = BalancedSelector()

    @property
    def tier_percentages(self) -> Dict[str, float]:
        return {tier.value: float(self.config.tiers[tier]) for tier in self.config.tier_order}

    def load_pool(self, input_path: Union[str, Path],
                  curated_path: Optional[Union[str, Path]] = None) -> List[CatalogRecord]:
        """Load curated and generated records and merge them, curated first."""
        curated = load_curated_records(curated_path)
        catalog = load_catalog_file(input_path)
        return merge_catalogs(curated, catalog)

    def rank_pool(self, pool: List[CatalogRecord]) -> TierAssignment:
        """Score every record and assign tiers by percentile rank."""
        scored = self.aggregator.score_pool(pool)
        logger.info("Assigning tiers by percentile rank:")
        return self.tier_assigner.assign(scored)

    def select(self, pool: List[CatalogRecord], target_count: int) -> SelectionResult:
        """Score, tier, plan and select from an already loaded pool."""
        assignment = self.rank_pool(pool)
        plan = self.quota_planner.plan(target_count)
        return self.selector.select(assignment, plan)

    def build_report(self, selection: SelectionResult) -> SelectionReport:
        return build_selection_report(
            selection_frame(selection.selected),
            selection.plan.target_count,
            self.tier_percentages,
            top_n=self.config.report.top_n,
        )

    def build_output_document(self, selection: SelectionResult, input_file: str,
                              generated_at: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Build the selection document in its fixed key order.

        Args:
            selection: Selection result
            input_file: Generated catalog path recorded in metadata
            generated_at: Pinned timestamp (see resolve_generated_at)

        Returns:
            JSON-serializable document
        """
        return {
            "metadata": {
                "generatedAt": resolve_generated_at(generated_at),
                "targetCount": selection.plan.target_count,
                "actualCount": selection.actual_count,
                "inputFile": input_file,
                "tierDistribution": {tier.value: count for tier, count in selection.tier_counts.items()},
                "typeDistribution": dict(selection.type_counts),
            },
            "objects": [record.to_output_dict() for record in selection.selected],
        }

    def run(self, target_count: int, input_path: Union[str, Path],
            output_path: Optional[Union[str, Path]] = None,
            curated_path: Optional[Union[str, Path]] = None,
            generated_at: Optional[datetime] = None,
            dry_run: bool = False) -> PipelineResult:
        """
        Run the complete selection pipeline.

        Args:
            target_count: Total number of records to select
            input_path: Generated catalog JSON
            output_path: Selection file destination (nothing is written when None)
            curated_path: Optional override of the packaged curated dataset
            generated_at: Pinned metadata timestamp for reproducible output
            dry_run: Run every step but skip writing the output file

        Returns:
            PipelineResult with the selection, report and output document
        """
        logger.info(f"Starting balanced selection (target {target_count})")

        try:
            # Step 1: Load the whole pool before any scoring
            logger.info("Step 1: Loading curated and generated catalogs...")
            pool = self.load_pool(input_path, curated_path)

            # Step 2: Score and tier the merged pool
            logger.info("Step 2: Scoring and assigning tiers...")
            assignment = self.rank_pool(pool)

            logger.info("Step 3: Planning quotas...")
            plan = self.quota_planner.plan(target_count)

            logger.info("Step 4: Running balanced selection...")
            selection = self.selector.select(assignment, plan)

            # Step 5: Output
            document = self.build_output_document(selection, str(input_path), generated_at)
            written = None
            if output_path and not dry_run:
                logger.info("Step 5: Writing selection file...")
                written = write_json_atomic(output_path, document)
            else:
                logger.info("Step 5: Skipping output (dry run or no output path)")

            report = self.build_report(selection)
            logger.info("Balanced selection completed successfully")

            return PipelineResult(
                selection=selection,
                report=report,
                document=document,
                output_path=written,
            )

        except Exception as e:
            logger.error(f"Balanced selection failed: {e}")
            raise

    def score_catalog(self, input_path: Union[str, Path],
                      generated_at: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Score a generated catalog on its own, with provisional tiers.

        Tiers here are relative to the catalog alone; the selection run
        recomputes scores and tiers over the merged pool.

        Args:
            input_path: Generated catalog JSON
            generated_at: Pinned metadata timestamp

        Returns:
            Scored catalog document with the same `objects` layout as a selection
        """
        catalog = merge_catalogs([], load_catalog_file(input_path))
        assignment = self.rank_pool(catalog)

        tier_distribution = {tier.value: band.count for tier, band in assignment.bands.items()}
        return {
            "metadata": {
                "generatedAt": resolve_generated_at(generated_at),
                "inputFile": str(input_path),
                "count": len(assignment.ranked),
                "lowConfidenceCount": sum(1 for record in assignment.ranked if record.low_confidence),
                "tierDistribution": tier_distribution,
            },
            "objects": [record.to_output_dict() for record in assignment.ranked],
        }

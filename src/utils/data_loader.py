# src/utils/data_loader.py
"""
Data loading utilities for saved selection files.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Tuple, Union

import pandas as pd

from src.catalog.catalog_loader import CatalogLoadError
from src.tasks.reporting.selection_report import FRAME_COLUMNS

logger = logging.getLogger(__name__)


def load_selection_document(json_path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load a selection file written by the selection pipeline.

    Args:
        json_path: Path to the selection JSON

    Returns:
        Parsed document with `metadata` and `objects`
    """
    json_path = Path(json_path)
    if not json_path.exists():
        raise CatalogLoadError(f"Selection file not found: {json_path}")
    try:
        with open(json_path, 'r', encoding='utf-8') as f:
            document = json.load(f)
    except json.JSONDecodeError as e:
        raise CatalogLoadError(f"{json_path}: invalid JSON: {e}") from e

    if not isinstance(document, dict) or not isinstance(document.get("objects"), list):
        raise CatalogLoadError(f"{json_path}: not a selection file (missing 'objects' list)")
    return document


def load_selection_frame(json_path: Union[str, Path]) -> Tuple[pd.DataFrame, Dict[str, Any]]:
    """
    Load a selection file as a flat DataFrame plus its metadata.

    Per-metric scores are flattened into `scores.<metric>` columns.

    Args:
        json_path: Path to the selection JSON

    Returns:
        (DataFrame of selected records, metadata dict)
    """
    document = load_selection_document(json_path)
    metadata = document.get("metadata", {})

    df = pd.json_normalize(document["objects"])
    for column in FRAME_COLUMNS:
        if column not in df.columns:
            df[column] = None

    logger.info(f"Loaded {len(df)} selected records from {json_path}")
    logger.info(f"Tier distribution: {df['badgeTier'].value_counts().to_dict()}")
    return df, metadata

"""
Shared fixtures for the selection test suite.
"""

import sys
from dataclasses import replace
from pathlib import Path

import pytest

# Add repository root to path so `src.` imports resolve
REPO_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(REPO_ROOT))

from src.catalog.records import BadgeTier, CatalogRecord, CatalogSource


@pytest.fixture
def repo_root() -> Path:
    return REPO_ROOT


@pytest.fixture
def make_record():
    """Factory for tier-labeled, pre-scored records."""
    def _make(name, object_type="Star", score=100, tier=BadgeTier.STANDARD, curated=False, **attributes):
        record = CatalogRecord(
            name=name,
            object_type=object_type,
            catalog_source=CatalogSource.CURATED if curated else CatalogSource.GENERATED,
            **attributes,
        )
        return replace(record, total_score=score, badge_tier=tier)
    return _make

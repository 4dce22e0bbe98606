# src/catalog/__init__.py
"""
Catalog Package

Record model, raw entry validation, catalog loading and HYG CSV import.
"""

from .records import BadgeTier, CatalogRecord, CatalogSource, MetricScores, TypeCategory
from .schema import RawCatalogEntry
from .catalog_loader import (
    CatalogLoadError,
    load_catalog_file,
    load_curated_records,
    merge_catalogs,
    parse_entries,
)
from .hyg_importer import import_hyg_csv

__all__ = [
    # Data model
    'BadgeTier',
    'CatalogRecord',
    'CatalogSource',
    'MetricScores',
    'TypeCategory',
    'RawCatalogEntry',

    # Loading
    'CatalogLoadError',
    'load_catalog_file',
    'load_curated_records',
    'merge_catalogs',
    'parse_entries',
    'import_hyg_csv',
]

# src/catalog/catalog_loader.py
"""
Loading of the curated dataset and of generated catalog files.
Loading either succeeds for the whole file or raises CatalogLoadError;
no partially parsed catalog ever reaches the scoring stage.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

import yaml
from pydantic import ValidationError

from .records import CatalogRecord, CatalogSource
from .schema import RawCatalogEntry

logger = logging.getLogger(__name__)

DEFAULT_CURATED_PATH = Path(__file__).parent / "data" / "curated_objects.yaml"


class CatalogLoadError(Exception):
    """Raised when a catalog file is missing, unreadable or malformed."""


def parse_entries(entries: Iterable[Any], source: CatalogSource,
                  origin: str = "<memory>") -> List[CatalogRecord]:
    """
    Validate raw entries and convert them into catalog records.

    Args:
        entries: Raw dictionaries (camelCase or snake_case keys)
        source: Source assigned to every produced record
        origin: Description of where the entries came from, for diagnostics

    Returns:
        List of CatalogRecord in input order

    Raises:
        CatalogLoadError: If any entry is not a mapping or fails validation
    """
    records = []
    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise CatalogLoadError(
                f"{origin}: entry {index} is {type(entry).__name__}, expected an object"
            )
        try:
            raw = RawCatalogEntry.model_validate(entry)
        except ValidationError as e:
            label = entry.get("name", f"#{index}")
            raise CatalogLoadError(f"{origin}: invalid entry {label!r}: {e}") from e
        records.append(raw.to_record(source))
    return records


def _extract_entries(data: Any, origin: str) -> List[Any]:
    """Accept either a bare list or an object wrapping an `objects` list."""
    if isinstance(data, list):
        return data
    if isinstance(data, dict) and isinstance(data.get("objects"), list):
        return data["objects"]
    raise CatalogLoadError(
        f"{origin}: expected a list of records or an object with an 'objects' list"
    )


def load_catalog_file(path: Union[str, Path],
                      source: CatalogSource = CatalogSource.GENERATED) -> List[CatalogRecord]:
    """
    Load a generated catalog from a JSON file.

    Args:
        path: Path to the JSON catalog
        source: Source assigned to the loaded records

    Returns:
        List of CatalogRecord in file order
    """
    path = Path(path)
    if not path.exists():
        raise CatalogLoadError(f"Catalog file not found: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise CatalogLoadError(f"{path}: invalid JSON: {e}") from e
    except OSError as e:
        raise CatalogLoadError(f"{path}: could not be read: {e}") from e

    records = parse_entries(_extract_entries(data, str(path)), source, str(path))
    logger.info(f"Loaded {len(records)} {source.value} records from {path}")
    return records


def load_curated_records(path: Optional[Union[str, Path]] = None) -> List[CatalogRecord]:
    """
    Load the hand-authored curated dataset (YAML).

    Args:
        path: Optional override of the packaged curated dataset

    Returns:
        List of curated CatalogRecord in their authored order
    """
    path = Path(path) if path else DEFAULT_CURATED_PATH
    if not path.exists():
        raise CatalogLoadError(f"Curated dataset not found: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise CatalogLoadError(f"{path}: invalid YAML: {e}") from e
    except OSError as e:
        raise CatalogLoadError(f"{path}: could not be read: {e}") from e

    records = parse_entries(_extract_entries(data, str(path)), CatalogSource.CURATED, str(path))
    logger.info(f"Loaded {len(records)} curated records from {path}")
    return records


def merge_catalogs(curated: List[CatalogRecord],
                   catalog: List[CatalogRecord]) -> List[CatalogRecord]:
    """
    Merge curated and generated records into one pool, curated first.

    Names are compared case-insensitively; the first occurrence wins and
    later duplicates are dropped.

    Returns:
        Deduplicated pool preserving input order
    """
    pool = []
    seen: Dict[str, CatalogRecord] = {}

    for record in [*curated, *catalog]:
        existing = seen.get(record.name_key)
        if existing is not None:
            logger.info(
                f"Dropping duplicate '{record.name}' ({record.catalog_source.value}); "
                f"keeping first occurrence ({existing.catalog_source.value})"
            )
            continue
        seen[record.name_key] = record
        pool.append(record)

    dropped = len(curated) + len(catalog) - len(pool)
    logger.info(f"Merged pool: {len(pool)} records ({dropped} duplicates dropped)")
    return pool

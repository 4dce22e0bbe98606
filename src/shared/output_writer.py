# src/shared/output_writer.py
"""
Atomic JSON output for selection and scoring results.
A crash mid-write never leaves a partially written file at the destination.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Union

logger = logging.getLogger(__name__)


def write_json_atomic(file_path: Union[str, Path], data: Dict[str, Any]) -> Path:
    """
    Atomically write JSON data to file.

    The document is written to a temporary file in the destination directory
    and then moved over the target. Two concurrent writers to the same path
    do not interleave; the last one to finish wins.

    Args:
        file_path: Target file path
        data: Data to write

    Returns:
        The target path
    """
    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)

    temp_file = None
    try:
        with tempfile.NamedTemporaryFile(
            mode='w',
            encoding='utf-8',
            dir=file_path.parent,
            prefix=f".{file_path.name}.",
            delete=False,
            suffix='.tmp'
        ) as f:
            temp_file = f.name
            json.dump(data, f, indent=2, ensure_ascii=False)
            f.write("\n")
            f.flush()
            os.fsync(f.fileno())

        # Atomic move to final location
        Path(temp_file).replace(file_path)

    except Exception:
        # Clean up temp file on error
        if temp_file and Path(temp_file).exists():
            Path(temp_file).unlink()
        raise

    logger.info(f"Wrote {file_path}")
    return file_path

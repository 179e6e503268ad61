"""
File operation utilities.

This module provides utilities for saving and loading the persisted
document (JSON) and schedule exports (CSV).
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional

import pandas as pd


logger = logging.getLogger(__name__)


def save_json(data: Dict[str, Any], filepath: Path) -> bool:
    """
    Atomically save data to a JSON file.

    The document is written to a temporary file in the target directory
    and then renamed over the target, so readers never observe a
    half-written file. Keys are sorted so successive saves diff cleanly.

    Args:
        data: Dictionary data to save
        filepath: Path to save the JSON file

    Returns:
        True if save successful, False otherwise

    Examples:
        >>> save_json(state.to_dict(), Path("~/.tutordesk/data.json").expanduser())
        True
    """
    tmp_name = None
    try:
        filepath.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{filepath.name}.",
            suffix=".tmp",
            dir=str(filepath.parent)
        )
        with os.fdopen(fd, 'w', encoding='utf-8') as f:
            json.dump(data, f, ensure_ascii=False, indent=2, sort_keys=True)
            f.flush()
            os.fsync(f.fileno())

        os.replace(tmp_name, filepath)
        tmp_name = None

        logger.debug(f"Saved JSON file: {filepath}")
        return True

    except (OSError, TypeError, ValueError) as e:
        logger.error(f"Failed to save JSON file {filepath}: {e}", exc_info=True)
        return False

    finally:
        if tmp_name and os.path.exists(tmp_name):
            os.unlink(tmp_name)


def load_json(filepath: Path) -> Optional[Dict[str, Any]]:
    """
    Load a JSON object from file.

    Args:
        filepath: Path to the JSON file

    Returns:
        Loaded dictionary, or None if the file is missing, unreadable,
        not valid JSON, or not a JSON object
    """
    try:
        if not filepath.exists():
            logger.info(f"JSON file not found: {filepath}")
            return None

        with open(filepath, 'r', encoding='utf-8') as f:
            data = json.load(f)

        if not isinstance(data, dict):
            logger.error(f"Expected a JSON object in {filepath}, got {type(data).__name__}")
            return None

        logger.debug(f"Loaded JSON file: {filepath}")
        return data

    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON in file {filepath}: {e}")
        return None

    except (OSError, UnicodeDecodeError) as e:
        logger.error(f"Failed to load JSON file {filepath}: {e}", exc_info=True)
        return None


def save_csv(df: pd.DataFrame, filepath: Path) -> bool:
    """
    Save DataFrame to CSV file.

    Args:
        df: Pandas DataFrame to save
        filepath: Path to save the CSV file

    Returns:
        True if save successful, False otherwise
    """
    try:
        filepath.parent.mkdir(parents=True, exist_ok=True)

        # utf-8-sig so spreadsheet apps detect the encoding of CJK names
        df.to_csv(filepath, index=False, encoding='utf-8-sig')

        logger.debug(f"Saved CSV file: {filepath}")
        return True

    except OSError as e:
        logger.error(f"Failed to save CSV file {filepath}: {e}", exc_info=True)
        return False

"""
Persistence gateway for the roster document.

This module defines the abstract load/save contract the store depends
on, plus two implementations:
- JsonFilePersistence: a single JSON document on disk
- InMemoryPersistence: keeps the last saved document in memory

Load failures read as "no prior state"; save failures are reported via
Result and never raised.
"""

import copy
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional

from ..models.entities import AppState
from ..models.result import Result
from ..utils.file_utils import load_json, save_json
from ..validation import validate_state


logger = logging.getLogger(__name__)


class PersistenceGateway(ABC):
    """
    Abstract interface for loading and saving the aggregate.

    This interface enables:
    - Swapping the on-disk format without touching the store
    - Easy mocking for unit tests
    """

    @abstractmethod
    def load(self) -> Optional[AppState]:
        """
        Load the persisted aggregate.

        Returns:
            AppState, or None when there is no usable prior state
        """
        pass

    @abstractmethod
    def save(self, state: AppState) -> Result[Optional[Path]]:
        """
        Persist the aggregate (best effort).

        Args:
            state: Aggregate to write

        Returns:
            Result with the written location (if any) on success
        """
        pass


def state_from_document(document: Optional[Dict[str, Any]], source: str) -> Optional[AppState]:
    """
    Decode a persisted document and log structural problems.

    Returns:
        AppState, or None when the document is absent or undecodable
    """
    if document is None:
        return None

    try:
        state = AppState.from_dict(document)
    except (TypeError, ValueError, AttributeError, OverflowError) as e:
        logger.error(f"Could not decode roster document from {source}: {e}", exc_info=True)
        return None

    report = validate_state(state)
    if report.has_errors or report.has_warnings:
        logger.warning(f"Loaded roster from {source} with issues:\n{report.get_summary()}")

    return state


class JsonFilePersistence(PersistenceGateway):
    """
    Stores the aggregate as one JSON document.

    Writes go through file_utils.save_json (temp file + rename, sorted
    keys), so a crash mid-write leaves the previous document intact.

    Examples:
        >>> gateway = JsonFilePersistence(config.data_file)
        >>> state = gateway.load() or make_default_state()
    """

    def __init__(self, path: Path):
        self.path = Path(path).expanduser()

    def load(self) -> Optional[AppState]:
        return state_from_document(load_json(self.path), str(self.path))

    def save(self, state: AppState) -> Result[Optional[Path]]:
        try:
            document = state.to_dict()
        except (TypeError, ValueError, AttributeError) as e:
            logger.error(f"Could not encode roster state: {e}", exc_info=True)
            return Result.failure("Failed to encode roster state", e)

        if not save_json(document, self.path):
            return Result.failure(f"Failed to write {self.path}")

        return Result.success(self.path, f"Saved {self.path}")


class InMemoryPersistence(PersistenceGateway):
    """
    Keeps the last saved document in memory.

    The document is stored in its serialized form so a later load()
    returns fresh objects, exactly like a round trip through disk.
    """

    def __init__(self, document: Optional[Dict[str, Any]] = None):
        self.document = copy.deepcopy(document)
        self.save_count = 0

    def load(self) -> Optional[AppState]:
        return state_from_document(copy.deepcopy(self.document), "memory")

    def save(self, state: AppState) -> Result[Optional[Path]]:
        self.document = state.to_dict()
        self.save_count += 1
        return Result.success(None, "Saved to memory")

"""
Store construction for host applications.

Wires configuration, logging and the JSON file gateway into a ready
AppStore.
"""

import logging
from typing import Optional

from .persistence.gateway import JsonFilePersistence
from .store.app_store import AppStore
from .utils.config import Config, config as default_config
from .utils.logger import setup_logger


def create_store(app_config: Optional[Config] = None) -> AppStore:
    """
    Build an AppStore backed by the configured data file.

    Args:
        app_config: Configuration (default: read from the environment)

    Returns:
        Loaded AppStore

    Raises:
        ValueError: If the configuration is invalid

    Examples:
        >>> store = create_store()
        >>> try:
        ...     run_ui(store)
        ... finally:
        ...     store.close()
    """
    app_config = app_config or default_config
    app_config.validate()
    app_config.ensure_directories()

    logger = setup_logger(
        "tutordesk",
        level=app_config.log_level_value,
        log_file=app_config.log_file
    )
    logger.info(f"Opening roster at {app_config.data_file}")

    store = AppStore(
        JsonFilePersistence(app_config.data_file),
        save_delay=app_config.save_debounce_seconds
    )
    logging.getLogger(__name__).debug("Store ready")
    return store

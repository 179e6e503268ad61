"""Loading, saving and exporting the roster."""

from .export import export_sessions_csv, sessions_frame
from .gateway import InMemoryPersistence, JsonFilePersistence, PersistenceGateway
from .seed import make_default_state

__all__ = [
    "InMemoryPersistence",
    "JsonFilePersistence",
    "PersistenceGateway",
    "export_sessions_csv",
    "make_default_state",
    "sessions_frame",
]

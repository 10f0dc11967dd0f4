# Draft persistence — debounced autosave + safe recovery
from .gateway import DraftGateway
from .store import DraftStore, FileDraftStore, MemoryDraftStore

__all__ = ["DraftGateway", "DraftStore", "FileDraftStore", "MemoryDraftStore"]

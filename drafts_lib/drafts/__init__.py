from .draft_store import DraftStore, DRAFTS_KEY

__all__ = ["DraftStore", "DRAFTS_KEY"]

"""In-memory dataset storage."""

from bldgreport.storage.dataset import DatasetStore, read_first_sheet

__all__ = ["DatasetStore", "read_first_sheet"]

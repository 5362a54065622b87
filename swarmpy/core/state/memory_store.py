"""
In-memory metadata storage implementation.

Provides non-persistent storage for testing and temporary use.
"""
from typing import Optional, Dict, Any, Mapping

from .protocols import MetadataStore, Handle
from .models import UploadRecord


class MemoryMetadataStore(MetadataStore):
    """
    In-memory upload metadata storage.

    Data is lost when the object is destroyed.

    Useful for:
    - Unit testing
    - One-shot uploads that should leave no trace
    """

    def __init__(self):
        self._table: Dict[str, Dict[str, Any]] = {}

    def put(self, handle: Handle, fields: Mapping[str, Any]) -> UploadRecord:
        key = str(handle)
        self._table[key] = {**self._table.get(key, {}), **fields}
        return UploadRecord.from_dict(self._table[key])

    def get(self, handle: Handle) -> Optional[UploadRecord]:
        data = self._table.get(str(handle))
        return UploadRecord.from_dict(data) if data is not None else None

    def all(self) -> Dict[str, UploadRecord]:
        return {key: UploadRecord.from_dict(value) for key, value in self._table.items()}

    def raw(self, handle: Handle) -> Optional[Dict[str, Any]]:
        """Get the stored dictionary for handle (for inspection in tests)."""
        data = self._table.get(str(handle))
        return dict(data) if data is not None else None

"""
Metadata storage protocols.

Defines interfaces for upload metadata storage implementations.
"""
from typing import Protocol, Optional, Dict, Any, Mapping, Union, runtime_checkable
from .models import UploadRecord


Handle = Union[int, str]


@runtime_checkable
class MetadataStore(Protocol):
    """
    Protocol for upload metadata storage.

    Maps a transfer handle to its UploadRecord. Records are only ever merged
    into, never replaced or deleted.
    """

    def put(self, handle: Handle, fields: Mapping[str, Any]) -> UploadRecord:
        """
        Merge fields into the record for handle, creating it if absent.

        Args:
            handle: Transfer handle
            fields: Partial record in persisted key layout

        Returns:
            The merged record
        """
        ...

    def get(self, handle: Handle) -> Optional[UploadRecord]:
        """
        Get the record for handle.

        Returns:
            UploadRecord if known, None otherwise
        """
        ...

    def all(self) -> Dict[str, UploadRecord]:
        """Get every known record keyed by handle."""
        ...

"""
Protocol definitions for upload module.

Defines the interfaces the upload session depends on, so the Bee client,
the archive packager and the file reader can be swapped for fakes.
"""
from typing import Protocol, Optional
from pathlib import Path

from .models import TransferStatus, DirectoryScan


class TransportProtocol(Protocol):
    """Remote operations of the upload engine."""

    async def create_transfer(self) -> int:
        """
        Create a transfer handle.

        Returns:
            Tag uid
        """
        ...

    async def fetch_status(self, uid: int) -> TransferStatus:
        """
        Fetch propagation counters for a transfer.

        Args:
            uid: Tag uid

        Returns:
            Current counters
        """
        ...

    async def upload_payload(
        self,
        data: bytes,
        name: str,
        batch_id: str,
        uid: int,
        is_collection: bool = False,
        entry_point: Optional[str] = None
    ) -> str:
        """
        Upload the full payload in one request.

        Returns:
            Content address
        """
        ...


class ArchiveJobProtocol(Protocol):
    """A packed directory on disk."""

    path: Path
    size: int

    def cleanup(self) -> None:
        """Remove the archive. Safe to call more than once."""
        ...


class ArchivePackagerProtocol(Protocol):
    """Protocol for directory packaging."""

    def scan(self, directory: Path) -> DirectoryScan:
        """
        Build the manifest of a directory.

        Args:
            directory: Directory to scan

        Returns:
            Manifest, total size and entry point
        """
        ...

    async def pack(self, scan: DirectoryScan) -> ArchiveJobProtocol:
        """
        Pack the scanned files into one archive rooted at the directory.

        Raises:
            LocalIOError: If the archive tool is unavailable or fails
        """
        ...


class FileReaderProtocol(Protocol):
    """Protocol for file reading operations."""

    async def read_file(self, file_path: Path) -> bytes:
        """
        Read an entire file.

        Raises:
            LocalIOError: If the file cannot be read
        """
        ...

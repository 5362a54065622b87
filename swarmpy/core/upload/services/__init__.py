"""Upload services module."""
from .file_service import FileValidator, AsyncFileReader
from .archive_service import ArchivePackager, ArchiveJob, ENTRY_POINT_NAME

__all__ = [
    'FileValidator',
    'AsyncFileReader',
    'ArchivePackager',
    'ArchiveJob',
    'ENTRY_POINT_NAME',
]

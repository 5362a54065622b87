"""
Persistent state module.

Upload metadata (transfer handle -> UploadRecord) and user configuration,
stored as JSON tables in the state directory.
"""
from .protocols import MetadataStore, Handle
from .models import UploadRecord, ManifestEntry, partial, now_iso
from .json_store import JSONMetadataStore, ConfigStore
from .memory_store import MemoryMetadataStore
from .paths import StatePaths, migrate_legacy_state

__all__ = [
    'MetadataStore',
    'Handle',
    'UploadRecord',
    'ManifestEntry',
    'partial',
    'now_iso',
    'JSONMetadataStore',
    'ConfigStore',
    'MemoryMetadataStore',
    'StatePaths',
    'migrate_legacy_state',
]

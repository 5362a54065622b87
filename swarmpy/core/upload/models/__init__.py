"""Upload models."""
from .upload_models import (
    SessionState,
    ProgressPhase,
    TransferStatus,
    UploadProgress,
    ManifestEntry,
    DirectoryScan,
    UploadSource,
    UploadResult,
    SessionConfig,
    to_path
)

__all__ = [
    'SessionState',
    'ProgressPhase',
    'TransferStatus',
    'UploadProgress',
    'ManifestEntry',
    'DirectoryScan',
    'UploadSource',
    'UploadResult',
    'SessionConfig',
    'to_path'
]

"""
Upload module for Swarm uploads.

A session per upload creates the tag, uploads the payload, polls tag
counters into a progress signal and records the result.
"""
from .facade import UploadFacade
from .session import UploadSession
from .reconciler import ProgressReconciler, reconcile, PROCESSING_PLACEHOLDER
from .models import (
    SessionState,
    SessionConfig,
    ProgressPhase,
    TransferStatus,
    UploadProgress,
    UploadResult,
    UploadSource,
    DirectoryScan,
    ManifestEntry
)
from .protocols import (
    TransportProtocol,
    ArchivePackagerProtocol,
    FileReaderProtocol
)

__all__ = [
    # Main classes
    'UploadFacade',
    'UploadSession',
    'ProgressReconciler',
    'reconcile',
    'PROCESSING_PLACEHOLDER',

    # Models
    'SessionState',
    'SessionConfig',
    'ProgressPhase',
    'TransferStatus',
    'UploadProgress',
    'UploadResult',
    'UploadSource',
    'DirectoryScan',
    'ManifestEntry',

    # Protocols
    'TransportProtocol',
    'ArchivePackagerProtocol',
    'FileReaderProtocol',
]

"""
swarmpy - Async Python uploader for a local Swarm Bee node.

Usage:
    >>> from swarmpy import SwarmClient
    >>>
    >>> async with SwarmClient() as swarm:
    ...     session = swarm.start_upload("site/")
    ...     session.on('progress', lambda p: print(p.label, f"{p.percent:.0f}%"))
    ...     result = await session.wait()
"""
import logging
from .client import SwarmClient, KnownTransfer

# Configuration
from .core.api import (
    APIConfig,
    TimeoutConfig,
    AsyncAPIClient
)

# Upload engine
from .core.upload import (
    UploadFacade,
    UploadSession,
    SessionConfig,
    SessionState,
    ProgressPhase,
    TransferStatus,
    UploadProgress,
    UploadResult
)

# State
from .core.state import (
    MetadataStore,
    UploadRecord,
    JSONMetadataStore,
    MemoryMetadataStore
)

from .core.exceptions import (
    SwarmException,
    UnreachableError,
    RemoteError,
    PreconditionFailedError,
    LocalIOError
)

__version__ = '1.0.0'


def setup_logging(level=logging.INFO):
    """
    Configure logging for swarmpy modules.

    Args:
        level: Logging level (default: logging.INFO)
    """
    loggers = [
        'swarmpy',
        'swarmpy.client',
        'swarmpy.api',
        'swarmpy.state',
        'swarmpy.upload.session',
        'swarmpy.upload.archive',
        'swarmpy.upload.file',
    ]

    for logger_name in loggers:
        logger = logging.getLogger(logger_name)
        logger.setLevel(level)
        logger.propagate = True


__all__ = [
    'SwarmClient',
    'KnownTransfer',
    'APIConfig',
    'TimeoutConfig',
    'AsyncAPIClient',
    'UploadFacade',
    'UploadSession',
    'SessionConfig',
    'SessionState',
    'ProgressPhase',
    'TransferStatus',
    'UploadProgress',
    'UploadResult',
    'MetadataStore',
    'UploadRecord',
    'JSONMetadataStore',
    'MemoryMetadataStore',
    'SwarmException',
    'UnreachableError',
    'RemoteError',
    'PreconditionFailedError',
    'LocalIOError',
    'setup_logging',
]

"""
SwarmClient - High-level async client for uploading to a local Bee node.

Example:
    >>> async with SwarmClient() as swarm:
    ...     session = swarm.start_file_upload("photo.jpg")
    ...     result = await session.wait()
    ...     print(result.reference)
"""
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, List, Union

from .core.api import AsyncAPIClient, APIConfig
from .core.upload import (
    UploadFacade,
    UploadSession,
    SessionConfig,
    TransferStatus,
    DirectoryScan,
    UploadSource
)
from .core.state import (
    MetadataStore,
    JSONMetadataStore,
    ConfigStore,
    UploadRecord,
    StatePaths,
    migrate_legacy_state
)
from .core.logging import get_logger


BATCH_ID_ENV = 'SWARM_BATCH_ID'
BATCH_ID_KEY = 'batchId'


@dataclass
class KnownTransfer:
    """
    One row of the transfer list.

    Attributes:
        handle: Tag uid
        status: Current counters from the node
        record: Local metadata, None for tags created by other tools
    """
    handle: int
    status: TransferStatus
    record: Optional[UploadRecord] = None

    @property
    def name(self) -> str:
        if self.record is not None and self.record.name:
            return self.record.name
        return '(unknown)'


class SwarmClient:
    """
    High-level async client for Swarm uploads.

    Owns the Bee API client, the persisted state and the upload facade.
    Holds the postage batch id for every upload it starts.

    Default state lives in ~/.config/swarmpy (override with SWARMPY_STATE_DIR):
        >>> async with SwarmClient() as swarm:
        ...     for transfer in await swarm.list_known_transfers():
        ...         print(transfer.name, transfer.status.sync_percent)

    With explicit configuration:
        >>> swarm = SwarmClient(
        ...     state_dir=Path("state"),
        ...     config=APIConfig.for_gateway("http://localhost:1633"),
        ...     batch_id="f00d..."
        ... )
    """

    def __init__(
        self,
        state_dir: Optional[Union[str, Path]] = None,
        *,
        config: Optional[APIConfig] = None,
        session_config: Optional[SessionConfig] = None,
        batch_id: Optional[str] = None,
        store: Optional[MetadataStore] = None,
        api_client: Optional[AsyncAPIClient] = None,
        migrate: bool = True
    ):
        """
        Initialize Swarm client.

        Args:
            state_dir: Directory holding config.json and uploads.json
            config: Bee API configuration
            session_config: Polling intervals and sync budget
            batch_id: Postage batch id (overrides environment and config file)
            store: Metadata store (defaults to uploads.json in state_dir)
            api_client: Bee API client (created from config if omitted)
            migrate: Copy legacy state files on first use
        """
        self._logger = get_logger('swarmpy.client')
        self._paths = (StatePaths(Path(state_dir)) if state_dir else StatePaths.default()).ensure()
        if migrate:
            migrate_legacy_state(self._paths)

        self._config_store = ConfigStore(self._paths.config)
        self._store = store or JSONMetadataStore(self._paths.uploads)
        self._api = api_client or AsyncAPIClient(config)
        self._uploads = UploadFacade(
            self._api,
            self._store,
            batch_id=batch_id or self._resolve_batch_id(),
            config=session_config
        )

    def _resolve_batch_id(self) -> str:
        """Environment first, then the config file."""
        return os.environ.get(BATCH_ID_ENV) or self._config_store.get(BATCH_ID_KEY) or ''

    @property
    def paths(self) -> StatePaths:
        return self._paths

    @property
    def store(self) -> MetadataStore:
        return self._store

    @property
    def api(self) -> AsyncAPIClient:
        return self._api

    @property
    def batch_id(self) -> str:
        return self._uploads.batch_id or ''

    def set_batch_id(self, batch_id: str, persist: bool = True) -> None:
        """
        Use batch_id for uploads started from now on.

        Args:
            batch_id: Postage batch id
            persist: Also save it to config.json
        """
        batch_id = batch_id.strip()
        self._uploads.batch_id = batch_id
        if persist:
            self._config_store.set(BATCH_ID_KEY, batch_id)
            self._logger.info(f"Batch id saved to {self._config_store.path}")

    async def __aenter__(self) -> 'SwarmClient':
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self):
        """Close the Bee API client."""
        await self._api.close()

    def scan_directory(self, path: Union[str, Path]) -> DirectoryScan:
        """File count, size and entry point of a directory, before uploading it."""
        return self._uploads.scan_directory(path)

    def start_file_upload(self, path: Union[str, Path], name: Optional[str] = None) -> UploadSession:
        """Start uploading a file. Returns the observable session."""
        return self._uploads.start_file_upload(path, name)

    def start_directory_upload(self, path: Union[str, Path], name: Optional[str] = None) -> UploadSession:
        """Start uploading a directory as a collection. Returns the observable session."""
        return self._uploads.start_directory_upload(path, name)

    def start_upload(self, path: Union[str, Path], name: Optional[str] = None) -> UploadSession:
        """Start a file or directory upload depending on what path is."""
        return self._uploads.start_upload(path, name)

    def create_session(self, path: Union[str, Path], name: Optional[str] = None) -> UploadSession:
        """Build an unstarted session for path (subscribe, then call start())."""
        source = UploadSource(path=Path(path), name=name, is_directory=Path(path).is_dir())
        return self._uploads.create_session(source)

    async def list_known_transfers(self) -> List[KnownTransfer]:
        """
        List every tag on the node with its local record, newest first.

        Raises:
            UnreachableError: If the node cannot be reached
        """
        tags = await self._api.list_transfers()
        records = self._store.all()
        transfers = [
            KnownTransfer(handle=tag.uid, status=tag, record=records.get(str(tag.uid)))
            for tag in tags
        ]
        transfers.sort(key=lambda t: t.handle, reverse=True)
        return transfers

    def get_record(self, handle: Union[int, str]) -> Optional[UploadRecord]:
        """Local metadata for a transfer handle."""
        return self._store.get(handle)

    async def get_status(self, handle: int) -> TransferStatus:
        """Current counters for a transfer handle."""
        return await self._api.fetch_status(handle)

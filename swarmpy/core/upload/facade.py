"""
Upload facade.

Provides a simplified interface for starting uploads.
Follows Facade Pattern - hides session wiring from callers.
"""
from pathlib import Path
from typing import Optional, Union

from .models import SessionConfig, UploadSource, DirectoryScan, to_path
from .protocols import TransportProtocol, ArchivePackagerProtocol
from .services import ArchivePackager, FileValidator
from .session import UploadSession
from ..state import MetadataStore


class UploadFacade:
    """
    Simplified interface for Swarm uploads.

    Holds what every session of one caller shares: the transport, the
    metadata store, the postage batch id and the timing configuration.

    Example:
        >>> uploads = UploadFacade(api_client, store, batch_id)
        >>> session = uploads.start_file_upload("photo.jpg")
        >>> session.on('progress', render)
        >>> result = await session.wait()
    """

    def __init__(
        self,
        transport: TransportProtocol,
        store: MetadataStore,
        batch_id: Optional[str] = None,
        config: Optional[SessionConfig] = None,
        packager: Optional[ArchivePackagerProtocol] = None
    ):
        """
        Initialize upload facade.

        Args:
            transport: Bee API client
            store: Metadata store
            batch_id: Postage batch id used by new sessions
            config: Session timing
            packager: Directory packager
        """
        self._transport = transport
        self._store = store
        self.batch_id = batch_id
        self._config = config or SessionConfig()
        self._packager = packager or ArchivePackager()

    @property
    def config(self) -> SessionConfig:
        return self._config

    def scan_directory(self, path: Union[str, Path]) -> DirectoryScan:
        """
        Preview a directory upload (file count, size, entry point).

        Raises:
            PreconditionFailedError: If path is not a directory
        """
        directory = FileValidator().validate_directory(path)
        return self._packager.scan(directory)

    def create_session(self, source: UploadSource) -> UploadSession:
        """Build an unstarted session for source."""
        return UploadSession(
            source,
            self._transport,
            self._store,
            self.batch_id,
            config=self._config,
            packager=self._packager
        )

    def start_file_upload(
        self,
        path: Union[str, Path],
        name: Optional[str] = None
    ) -> UploadSession:
        """
        Start uploading a single file.

        Args:
            path: File to upload
            name: Name on Swarm (defaults to the file name)

        Returns:
            Started, observable UploadSession
        """
        source = UploadSource(path=to_path(path), name=name, is_directory=False)
        return self.create_session(source).start()

    def start_directory_upload(
        self,
        path: Union[str, Path],
        name: Optional[str] = None
    ) -> UploadSession:
        """
        Start uploading a directory as a collection.

        Args:
            path: Directory to upload
            name: Name on Swarm (defaults to the directory name)

        Returns:
            Started, observable UploadSession
        """
        source = UploadSource(path=to_path(path), name=name, is_directory=True)
        return self.create_session(source).start()

    def start_upload(
        self,
        path: Union[str, Path],
        name: Optional[str] = None
    ) -> UploadSession:
        """Start a file or directory upload depending on what path is."""
        if to_path(path).is_dir():
            return self.start_directory_upload(path, name)
        return self.start_file_upload(path, name)

"""
Upload session.

One state machine per upload: creates the tag, uploads the payload while a
polling loop reconciles the tag counters, records the content address and
waits for the network to sync. The session can be detached at any time
while transferring or syncing: observation stops, the network work does not.
"""
import asyncio
import time
from typing import Callable, Optional

from .models import (
    SessionState,
    SessionConfig,
    TransferStatus,
    UploadProgress,
    UploadResult,
    UploadSource,
    DirectoryScan
)
from .protocols import (
    TransportProtocol,
    ArchivePackagerProtocol,
    ArchiveJobProtocol,
    FileReaderProtocol
)
from .reconciler import ProgressReconciler
from .services import FileValidator, AsyncFileReader, ArchivePackager
from ..api.events import EventEmitter
from ..exceptions import PreconditionFailedError
from ..logging import get_logger
from ..state import MetadataStore, partial, now_iso


logger = get_logger('swarmpy.upload.session')


class UploadSession:
    """
    Drives one upload from tag creation to network sync.

    States:
        INITIALIZING -> CREATING_TRANSFER -> TRANSFERRING -> SYNCING -> COMPLETED
        any of the first three -> FAILED
        TRANSFERRING | SYNCING -> DETACHED

    Events:
        state(SessionState), progress(UploadProgress), complete(UploadResult),
        error(SwarmException), detached(UploadResult)

    Example:
        >>> session = UploadSession(source, transport, store, batch_id)
        >>> session.on('progress', lambda p: print(p.label, p.percent))
        >>> result = await session.start().wait()
    """

    def __init__(
        self,
        source: UploadSource,
        transport: TransportProtocol,
        store: MetadataStore,
        batch_id: Optional[str],
        *,
        config: Optional[SessionConfig] = None,
        packager: Optional[ArchivePackagerProtocol] = None,
        file_reader: Optional[FileReaderProtocol] = None
    ):
        """
        Initialize upload session.

        Args:
            source: What to upload
            transport: Bee API client
            store: Metadata store shared with other sessions
            batch_id: Postage batch id
            config: Polling intervals and sync budget
            packager: Directory packager (collection uploads)
            file_reader: File reader for the payload
        """
        self._source = source
        self._transport = transport
        self._store = store
        self._batch_id = (batch_id or '').strip()
        self._config = config or SessionConfig()
        self._packager = packager or ArchivePackager()
        self._file_reader = file_reader or AsyncFileReader()
        self._validator = FileValidator()

        self._state = SessionState.INITIALIZING
        self._events = EventEmitter('swarmpy.upload.session')
        self._reconciler = ProgressReconciler()

        self._handle: Optional[int] = None
        self._reference: Optional[str] = None
        self._synced = False
        self._error: Optional[BaseException] = None
        self._scan: Optional[DirectoryScan] = None
        self._last_status: Optional[TransferStatus] = None

        self._stop_polling = asyncio.Event()
        self._poll_task: Optional[asyncio.Task] = None
        self._task: Optional[asyncio.Task] = None
        self._outcome: Optional[asyncio.Future] = None

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def source(self) -> UploadSource:
        return self._source

    @property
    def handle(self) -> Optional[int]:
        """Tag uid, once created."""
        return self._handle

    @property
    def reference(self) -> Optional[str]:
        """Content address, once the payload landed."""
        return self._reference

    @property
    def progress(self) -> Optional[UploadProgress]:
        """Latest reconciled progress."""
        return self._reconciler.last

    @property
    def last_status(self) -> Optional[TransferStatus]:
        return self._last_status

    @property
    def scan(self) -> Optional[DirectoryScan]:
        """Manifest of a directory upload."""
        return self._scan

    @property
    def error(self) -> Optional[BaseException]:
        return self._error

    @property
    def result(self) -> UploadResult:
        """Snapshot of the outcome so far."""
        return UploadResult(
            handle=self._handle,
            reference=self._reference,
            state=self._state,
            synced=self._synced,
            name=self._source.name,
            record=self._store.get(self._handle) if self._handle is not None else None,
        )

    def on(self, event: str, callback: Callable) -> 'UploadSession':
        """Register an observer."""
        self._events.on(event, callback)
        return self

    def off(self, event: str, callback: Optional[Callable] = None) -> 'UploadSession':
        """Remove an observer."""
        self._events.off(event, callback)
        return self

    def start(self) -> 'UploadSession':
        """
        Schedule the upload on the running event loop.

        Observers registered right after start() still see every event.

        Raises:
            RuntimeError: If the session was already started
        """
        if self._task is not None:
            raise RuntimeError("Upload session already started")
        self._outcome = asyncio.get_running_loop().create_future()
        self._task = asyncio.create_task(self._run())
        return self

    async def wait(self) -> UploadResult:
        """
        Wait for the outcome the caller observes.

        Returns:
            UploadResult in state COMPLETED or DETACHED

        Raises:
            SwarmException: If the session failed
        """
        if self._task is None:
            self.start()
        return await asyncio.shield(self._outcome)

    async def settled(self) -> UploadResult:
        """
        Wait for the background work to finish, even after detach.

        Never raises for upload failures; inspect error instead.
        """
        if self._task is None:
            self.start()
        await asyncio.shield(self._task)
        return self.result

    def detach(self) -> bool:
        """
        Stop observing the upload and let it finish in the background.

        The polling loop stops and observers are dropped. The in-flight
        payload request keeps running; its content address is still
        recorded and temporary archives are removed when it settles.

        Returns:
            True if the session moved to DETACHED
        """
        if not self._state.is_observable:
            return False

        self._state = SessionState.DETACHED
        self._stop_polling.set()
        result = self.result
        if self._outcome is not None and not self._outcome.done():
            self._outcome.set_result(result)
        self._events.emit('detached', result)
        self._events.clear()
        logger.info(f"Upload of {self._source.name} detached (tag {self._handle})")
        return True

    def _set_state(self, state: SessionState) -> None:
        if self._state is SessionState.DETACHED:
            return
        logger.debug(f"Session {self._source.name}: {self._state.value} -> {state.value}")
        self._state = state
        self._events.emit('state', state)

    async def _run(self) -> None:
        archive: Optional[ArchiveJobProtocol] = None
        try:
            archive = await self._prepare()
            data = await self._file_reader.read_file(
                archive.path if archive is not None else self._source.path
            )
            self._reconciler.total_bytes = len(data)

            self._set_state(SessionState.CREATING_TRANSFER)
            self._handle = await self._transport.create_transfer()
            self._store.put(self._handle, self._initial_record(len(data)))

            self._set_state(SessionState.TRANSFERRING)
            await self._transfer(data)
            if self._state is SessionState.DETACHED:
                return

            self._set_state(SessionState.SYNCING)
            await self._poll_task
            if self._state is SessionState.DETACHED:
                return

            self._complete()
        except asyncio.CancelledError:
            if self._outcome is not None and not self._outcome.done():
                self._outcome.cancel()
            raise
        except Exception as e:
            self._fail(e)
        finally:
            await self._stop_poll_loop()
            if archive is not None:
                archive.cleanup()
                logger.debug(f"Removed temporary archive {archive.path}")

    async def _prepare(self) -> Optional[ArchiveJobProtocol]:
        """
        Check preconditions and pack directories.

        Runs before any remote call.

        Returns:
            ArchiveJob for directory uploads, None for files
        """
        if not self._batch_id:
            raise PreconditionFailedError("Postage batch id is not set")

        if not self._source.is_directory:
            self._validator.validate(self._source.path)
            return None

        directory = self._validator.validate_directory(self._source.path)
        self._scan = self._packager.scan(directory)
        if self._scan.file_count == 0:
            raise PreconditionFailedError(f"Directory is empty: {directory}")
        return await self._packager.pack(self._scan)

    def _initial_record(self, size: int) -> dict:
        fields = dict(
            name=self._source.name,
            date=now_iso(),
            batch_id=self._batch_id,
            reference=None,
            size=size,
        )
        if self._scan is not None:
            fields.update(
                is_directory=True,
                file_count=self._scan.file_count,
                files=self._scan.files,
                entry_point=self._scan.entry_point,
            )
        return partial(**fields)

    async def _transfer(self, data: bytes) -> None:
        """Upload the payload while the poll loop runs alongside."""
        self._poll_task = asyncio.create_task(self._poll_loop())

        upload_start = time.time()
        self._reference = await self._transport.upload_payload(
            data,
            self._source.name,
            self._batch_id,
            self._handle,
            is_collection=self._scan is not None,
            entry_point=self._scan.entry_point if self._scan is not None else None
        )
        self._store.put(self._handle, partial(reference=self._reference))
        logger.info(
            f"Payload for {self._source.name} landed in {time.time() - upload_start:.2f}s: "
            f"{self._reference}"
        )

    async def _poll_loop(self) -> None:
        """
        Poll the tag until stopped, synced or out of sync budget.

        Failed polls are skipped. After a stop, an in-flight poll completes
        but its result is dropped.
        """
        sync_ticks = 0
        while True:
            syncing = self._state is SessionState.SYNCING
            interval = self._config.sync_poll_interval if syncing else self._config.poll_interval
            if await self._wait_stop(interval):
                return

            status = await self._poll_once()
            if self._stop_polling.is_set():
                return
            if status is not None:
                self._last_status = status
                self._events.emit('progress', self._reconciler.update(status))

            if self._state is SessionState.SYNCING:
                sync_ticks += 1
                if status is not None and status.is_synced:
                    self._synced = True
                    return
                if sync_ticks >= self._config.sync_max_ticks:
                    logger.info(
                        f"Sync of tag {self._handle} still running after "
                        f"{self._config.sync_budget:.0f}s"
                    )
                    return

    async def _wait_stop(self, timeout: float) -> bool:
        """Sleep for one tick. Returns True if polling was stopped meanwhile."""
        try:
            await asyncio.wait_for(self._stop_polling.wait(), timeout=timeout)
            return True
        except asyncio.TimeoutError:
            return False

    async def _poll_once(self) -> Optional[TransferStatus]:
        try:
            return await self._transport.fetch_status(self._handle)
        except Exception as e:
            logger.debug(f"Status poll for tag {self._handle} failed: {e}")
            return None

    async def _stop_poll_loop(self) -> None:
        self._stop_polling.set()
        if self._poll_task is not None and not self._poll_task.done():
            await self._poll_task

    def _complete(self) -> None:
        self._set_state(SessionState.COMPLETED)
        result = self.result
        if self._synced:
            logger.info(f"Synced: {self._source.name} -> {self._reference}")
        else:
            logger.info(f"Uploaded (still syncing): {self._source.name} -> {self._reference}")
        self._events.emit('complete', result)
        if self._outcome is not None and not self._outcome.done():
            self._outcome.set_result(result)

    def _fail(self, error: Exception) -> None:
        """Terminal failure. Records already written are left in place."""
        self._error = error
        if self._state is SessionState.DETACHED:
            logger.warning(f"Background upload of {self._source.name} failed: {error}")
            return

        logger.error(f"Upload of {self._source.name} failed: {error}")
        self._set_state(SessionState.FAILED)
        self._events.emit('error', error)
        if self._outcome is not None and not self._outcome.done():
            self._outcome.set_exception(error)

"""
Data models for upload module.

Uses dataclasses for immutable, type-safe data structures.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Any, Optional, List, Union
from pathlib import Path

from ...state.models import ManifestEntry, UploadRecord


class SessionState(str, Enum):
    """States of one upload session."""
    INITIALIZING = 'initializing'
    CREATING_TRANSFER = 'creating_transfer'
    TRANSFERRING = 'transferring'
    SYNCING = 'syncing'
    COMPLETED = 'completed'
    FAILED = 'failed'
    DETACHED = 'detached'

    @property
    def is_terminal(self) -> bool:
        """Returns True once the engine owns no further state."""
        return self in (SessionState.COMPLETED, SessionState.FAILED, SessionState.DETACHED)

    @property
    def is_observable(self) -> bool:
        """Returns True while progress is being polled."""
        return self in (SessionState.TRANSFERRING, SessionState.SYNCING)


class ProgressPhase(str, Enum):
    """User-facing propagation phase, ordered from least to most advanced."""
    PROCESSING = 'processing'
    UPLOADING = 'uploading'
    SYNCING = 'syncing'
    SYNCED = 'synced with network'

    @property
    def rank(self) -> int:
        """Position in the processing -> synced ordering."""
        return _PHASE_ORDER.index(self)


_PHASE_ORDER = [
    ProgressPhase.PROCESSING,
    ProgressPhase.UPLOADING,
    ProgressPhase.SYNCING,
    ProgressPhase.SYNCED,
]


@dataclass(frozen=True)
class TransferStatus:
    """
    Point-in-time snapshot of a Bee tag.

    Attributes:
        uid: Tag uid (the transfer handle)
        split: Total chunk count, 0 while chunking is not computed
        seen: Chunks already present locally
        stored: Chunks stored locally
        sent: Chunks pushed to the network
        synced: Chunks acknowledged by the network
        started_at: Tag creation time as reported by the node
    """
    uid: int
    split: int = 0
    seen: int = 0
    stored: int = 0
    sent: int = 0
    synced: int = 0
    started_at: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TransferStatus':
        """Create from a /tags response object. Missing counters read as 0."""
        return cls(
            uid=int(data.get('uid', 0)),
            split=int(data.get('split') or 0),
            seen=int(data.get('seen') or 0),
            stored=int(data.get('stored') or 0),
            sent=int(data.get('sent') or 0),
            synced=int(data.get('synced') or 0),
            started_at=data.get('startedAt'),
        )

    @property
    def is_synced(self) -> bool:
        """Returns True when every chunk is synced."""
        return self.split > 0 and self.synced >= self.split

    @property
    def sync_percent(self) -> int:
        """Synced share rounded to an integer percentage."""
        if self.split == 0:
            return 0
        return min(100, round(self.synced / self.split * 100))


@dataclass
class UploadProgress:
    """
    Reconciled upload progress.

    Attributes:
        phase: Most advanced phase with a non-zero counter
        percent: Progress percentage (0-100)
        transferred_bytes: Estimated bytes transferred
        total_bytes: Payload size
        seen: Seen chunk count
        synced: Synced chunk count
        split: Total chunk count
    """
    phase: ProgressPhase
    percent: float
    transferred_bytes: int = 0
    total_bytes: int = 0
    seen: int = 0
    synced: int = 0
    split: int = 0

    @property
    def is_complete(self) -> bool:
        """Returns True if every chunk is synced."""
        return self.phase is ProgressPhase.SYNCED

    @property
    def label(self) -> str:
        """Human-readable phase description with chunk counters."""
        if self.phase is ProgressPhase.SYNCED:
            return 'Synced with network'
        if self.phase is ProgressPhase.SYNCING:
            return f"Syncing ({self.synced}/{self.split} chunks)"
        if self.phase is ProgressPhase.UPLOADING:
            return f"Uploading ({self.seen}/{self.split} chunks)"
        if self.split:
            return f"Processing ({self.split} chunks)"
        return 'Processing'


@dataclass
class DirectoryScan:
    """
    Result of scanning a directory before packing.

    Attributes:
        root: Scanned directory
        files: Regular files with paths relative to root
        total_size: Sum of file sizes
        entry_point: Relative path of the detected index.html, if any
    """
    root: Path
    files: List[ManifestEntry] = field(default_factory=list)
    total_size: int = 0
    entry_point: Optional[str] = None

    @property
    def file_count(self) -> int:
        return len(self.files)

    @property
    def has_entry_point(self) -> bool:
        return self.entry_point is not None


@dataclass
class UploadSource:
    """
    What one session uploads.

    Attributes:
        path: File or directory to upload
        name: Name on Swarm (defaults to the path's base name)
        is_directory: Upload as a collection
    """
    path: Path
    name: Optional[str] = None
    is_directory: bool = False

    def __post_init__(self):
        """Normalize path and default name."""
        if isinstance(self.path, str):
            self.path = Path(self.path)
        if not self.name:
            self.name = self.path.resolve().name or str(self.path)


@dataclass(frozen=True)
class UploadResult:
    """
    Outcome of an upload session.

    Attributes:
        handle: Tag uid, None when the session failed before creating it
        reference: Content address, None until the payload landed
        state: Terminal session state
        synced: True if propagation reached 100% before the sync budget ran out
        name: Name on Swarm
        record: Persisted metadata at the time of the snapshot
    """
    handle: Optional[int]
    reference: Optional[str]
    state: SessionState
    synced: bool = False
    name: Optional[str] = None
    record: Optional[UploadRecord] = None

    @property
    def is_detached(self) -> bool:
        return self.state is SessionState.DETACHED


@dataclass
class SessionConfig:
    """
    Upload session timing.

    Attributes:
        poll_interval: Seconds between status polls while the payload is in flight
        sync_poll_interval: Seconds between status polls after the payload landed
        sync_max_ticks: Number of sync polls before giving up waiting
            (240 * 0.5s = two minutes)
    """
    poll_interval: float = 0.3
    sync_poll_interval: float = 0.5
    sync_max_ticks: int = 240

    @property
    def sync_budget(self) -> float:
        """Wall-clock ceiling of the sync wait in seconds."""
        return self.sync_poll_interval * self.sync_max_ticks


def to_path(value: Union[str, Path]) -> Path:
    """Coerce a str or Path to Path."""
    return Path(value) if isinstance(value, str) else value

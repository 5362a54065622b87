"""
JSON file storage for upload metadata and user configuration.

The whole table is rewritten on every change. Writes go to a temporary
file in the same directory and are moved into place with os.replace, so
readers never see a half-written table.
"""
import json
import os
import tempfile
import threading
from pathlib import Path
from typing import Optional, Union, Any, Dict, Mapping

from .protocols import MetadataStore, Handle
from .models import UploadRecord
from ..exceptions import LocalIOError
from ..logging import get_logger


logger = get_logger('swarmpy.state')

# One lock per table file, shared by every store instance in the process
_locks: Dict[str, threading.Lock] = {}
_locks_guard = threading.Lock()


def _lock_for(path: Path) -> threading.Lock:
    key = str(path.resolve())
    with _locks_guard:
        if key not in _locks:
            _locks[key] = threading.Lock()
        return _locks[key]


def read_table(path: Path) -> Dict[str, Any]:
    """
    Read a JSON object from path.

    Missing, unreadable or corrupt files read as an empty table.
    """
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except FileNotFoundError:
        return {}
    except (OSError, ValueError) as e:
        logger.warning(f"Ignoring unreadable table {path}: {e}")
        return {}
    if not isinstance(data, dict):
        logger.warning(f"Ignoring table {path}: expected an object, got {type(data).__name__}")
        return {}
    return data


def write_table(path: Path, data: Dict[str, Any]) -> None:
    """
    Atomically replace path with data serialized as JSON.

    Raises:
        LocalIOError: If the table cannot be written
    """
    tmp_path = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(prefix=f".{path.name}.", dir=str(path.parent))
        with os.fdopen(fd, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2)
        os.replace(tmp_path, path)
        tmp_path = None
    except OSError as e:
        raise LocalIOError(f"Could not write {path}: {e}") from e
    finally:
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                logger.debug(f"Could not remove temporary file {tmp_path}")


class JSONMetadataStore(MetadataStore):
    """
    JSON-file based upload metadata storage.

    Holds every transfer ever recorded, not only the current process's.
    Each put is a read-modify-write of the entire table under a lock.

    Example:
        >>> store = JSONMetadataStore("state/uploads.json")
        >>> store.put(42, {'name': 'photo.jpg', 'reference': None})
        >>> store.put(42, {'reference': 'ab12...'})
        >>> store.get(42).name
        'photo.jpg'
    """

    def __init__(self, path: Union[str, Path]):
        """
        Initialize JSON metadata storage.

        Args:
            path: Table file path (created on first write)
        """
        self._path = Path(path)
        self._lock = _lock_for(self._path)

    @property
    def path(self) -> Path:
        """Get table file path."""
        return self._path

    def put(self, handle: Handle, fields: Mapping[str, Any]) -> UploadRecord:
        """
        Merge fields into the record for handle and persist the table.

        Merge is a shallow field overwrite.

        Args:
            handle: Transfer handle
            fields: Partial record in persisted key layout

        Returns:
            The merged record

        Raises:
            LocalIOError: If the table cannot be written
        """
        key = str(handle)
        with self._lock:
            table = read_table(self._path)
            current = table.get(key)
            merged = {**(current if isinstance(current, dict) else {}), **fields}
            table[key] = merged
            write_table(self._path, table)
        logger.debug(f"Stored metadata for transfer {key}: {sorted(fields)}")
        return UploadRecord.from_dict(merged)

    def get(self, handle: Handle) -> Optional[UploadRecord]:
        """
        Get the record for handle.

        Returns:
            UploadRecord if known, None otherwise
        """
        data = read_table(self._path).get(str(handle))
        if not isinstance(data, dict):
            return None
        return UploadRecord.from_dict(data)

    def all(self) -> Dict[str, UploadRecord]:
        """Get every known record keyed by handle."""
        return {
            key: UploadRecord.from_dict(value)
            for key, value in read_table(self._path).items()
            if isinstance(value, dict)
        }


class ConfigStore:
    """
    JSON-file based user configuration (postage batch id).

    Example:
        >>> config = ConfigStore("state/config.json")
        >>> config.set('batchId', 'f00d...')
        >>> config.get('batchId')
        'f00d...'
    """

    def __init__(self, path: Union[str, Path]):
        self._path = Path(path)
        self._lock = _lock_for(self._path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Dict[str, Any]:
        """Load the whole configuration."""
        return read_table(self._path)

    def get(self, key: str, default: Any = None) -> Any:
        return self.load().get(key, default)

    def set(self, key: str, value: Any) -> None:
        """
        Persist one configuration value, keeping the others.

        Raises:
            LocalIOError: If the file cannot be written
        """
        with self._lock:
            config = read_table(self._path)
            config[key] = value
            write_table(self._path, config)

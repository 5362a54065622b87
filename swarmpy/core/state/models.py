"""
Upload metadata models.

Contains the persisted per-transfer record.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, List, Dict, Any
import json


@dataclass(frozen=True)
class ManifestEntry:
    """One regular file of a directory upload."""
    path: str
    size: int

    def to_dict(self) -> Dict[str, Any]:
        return {'path': self.path, 'size': self.size}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ManifestEntry':
        return cls(path=data['path'], size=int(data.get('size', 0)))


# Python attribute -> persisted key. Keys match tables written by older tools.
FIELD_KEYS = {
    'name': 'name',
    'date': 'date',
    'batch_id': 'batchId',
    'reference': 'reference',
    'is_directory': 'isDirectory',
    'file_count': 'fileCount',
    'files': 'files',
    'entry_point': 'entryPoint',
    'size': 'size',
}


@dataclass
class UploadRecord:
    """
    What was uploaded under one transfer handle.

    Attributes:
        name: Logical name on Swarm
        date: Creation timestamp (ISO-8601)
        batch_id: Postage batch id used for the upload
        reference: Content address, None until the payload landed
        is_directory: True for collection uploads
        file_count: Number of files in a collection
        files: Manifest of a collection
        entry_point: Index document of a collection, if any
        size: Payload size in bytes
    """
    name: Optional[str] = None
    date: Optional[str] = None
    batch_id: Optional[str] = None
    reference: Optional[str] = None
    is_directory: bool = False
    file_count: Optional[int] = None
    files: List[ManifestEntry] = field(default_factory=list)
    entry_point: Optional[str] = None
    size: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to the persisted dictionary layout.

        Directory-only fields are omitted for single-file records.
        """
        result: Dict[str, Any] = {
            'name': self.name,
            'date': self.date,
            'batchId': self.batch_id,
            'reference': self.reference,
        }
        if self.size is not None:
            result['size'] = self.size
        if self.is_directory:
            result['isDirectory'] = True
            result['fileCount'] = self.file_count
            result['files'] = [entry.to_dict() for entry in self.files]
            result['entryPoint'] = self.entry_point
        return result

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'UploadRecord':
        """
        Create from a persisted dictionary.

        Unknown keys are ignored so tables written by newer versions still load.
        """
        files = [
            ManifestEntry.from_dict(entry)
            for entry in data.get('files') or []
            if isinstance(entry, dict) and 'path' in entry
        ]
        return cls(
            name=data.get('name'),
            date=data.get('date'),
            batch_id=data.get('batchId'),
            reference=data.get('reference'),
            is_directory=bool(data.get('isDirectory', False)),
            file_count=data.get('fileCount'),
            files=files,
            entry_point=data.get('entryPoint'),
            size=data.get('size'),
        )

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @property
    def is_pending(self) -> bool:
        """Returns True while the content address is unknown."""
        return self.reference is None


def partial(**fields: Any) -> Dict[str, Any]:
    """
    Build a partial record update using attribute names.

    Example:
        >>> partial(reference='abcd', batch_id='42')
        {'reference': 'abcd', 'batchId': '42'}
    """
    result: Dict[str, Any] = {}
    for attr, value in fields.items():
        if attr not in FIELD_KEYS:
            raise KeyError(f"Unknown record field: {attr}")
        if attr == 'files':
            value = [entry.to_dict() if isinstance(entry, ManifestEntry) else entry for entry in value]
        result[FIELD_KEYS[attr]] = value
    return result


def now_iso() -> str:
    """Current UTC time in the record date format."""
    return datetime.now(timezone.utc).strftime('%Y-%m-%dT%H:%M:%S.%f')[:-3] + 'Z'

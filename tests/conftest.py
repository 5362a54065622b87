"""Pytest fixtures for swarmpy tests."""
import asyncio

import pytest

from swarmpy.core.exceptions import UnreachableError
from swarmpy.core.upload import SessionConfig, TransferStatus


@pytest.fixture
def state_dir(tmp_path, monkeypatch):
    """Isolated state directory with no legacy files around."""
    monkeypatch.setenv('HOME', str(tmp_path / 'home'))
    monkeypatch.delenv('SWARM_BATCH_ID', raising=False)
    path = tmp_path / 'state'
    monkeypatch.setenv('SWARMPY_STATE_DIR', str(path))
    return path


@pytest.fixture
def batch_id():
    """Returns a 64-hex postage batch id."""
    return 'ab' * 32


@pytest.fixture
def sample_tag_data():
    """Returns a tag object as served by GET /tags/{uid}."""
    return {
        'uid': 4242,
        'startedAt': '2024-05-01T10:00:00Z',
        'split': 20,
        'seen': 4,
        'stored': 20,
        'sent': 10,
        'synced': 8,
    }


@pytest.fixture
def session_config():
    """Fast polling so session tests finish in milliseconds."""
    return SessionConfig(poll_interval=0.01, sync_poll_interval=0.01, sync_max_ticks=5)


@pytest.fixture
def site_dir(tmp_path):
    """Small static site with a root index.html."""
    root = tmp_path / 'site'
    (root / 'css').mkdir(parents=True)
    (root / 'index.html').write_text('<h1>hi</h1>')
    (root / 'css' / 'style.css').write_text('body {}')
    (root / 'about.txt').write_text('about')
    return root


class FakeTransport:
    """
    In-process stand-in for the Bee API client.

    fetch_status walks through statuses and repeats the last one.
    upload_payload blocks until release is set.
    """

    REFERENCE = 'ef' * 32

    def __init__(self):
        self.uid = 77
        self.statuses = []
        self.fail_polls = False
        self.poll_error = None
        self.payload_error = None
        self.created = 0
        self.polls = 0
        self.uploads = []
        self.release = asyncio.Event()
        self.release.set()

    async def create_transfer(self):
        self.created += 1
        return self.uid

    async def fetch_status(self, uid):
        self.polls += 1
        if self.fail_polls:
            raise UnreachableError("connection refused")
        if self.poll_error is not None:
            raise self.poll_error
        if not self.statuses:
            return TransferStatus(uid=uid)
        return self.statuses[min(self.polls, len(self.statuses)) - 1]

    async def upload_payload(self, data, name, batch_id, uid, is_collection=False, entry_point=None):
        self.uploads.append({
            'data': data,
            'name': name,
            'batch_id': batch_id,
            'uid': uid,
            'is_collection': is_collection,
            'entry_point': entry_point,
        })
        await self.release.wait()
        if self.payload_error is not None:
            raise self.payload_error
        return self.REFERENCE

    async def list_transfers(self, page_size=None):
        return list(self.statuses)

    async def close(self):
        pass


@pytest.fixture
def transport():
    """Fake Bee transport that answers instantly."""
    return FakeTransport()

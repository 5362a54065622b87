"""Tests for upload models."""
from pathlib import Path

from swarmpy.core.upload.models import (
    SessionState,
    ProgressPhase,
    TransferStatus,
    UploadProgress,
    UploadSource,
    UploadResult,
    DirectoryScan,
    ManifestEntry,
    SessionConfig
)


class TestSessionState:
    """Tests for SessionState enum."""

    def test_observable_states(self):
        """Test only transferring and syncing are observable."""
        observable = {s for s in SessionState if s.is_observable}

        assert observable == {SessionState.TRANSFERRING, SessionState.SYNCING}

    def test_terminal_states(self):
        """Test terminal states."""
        assert SessionState.COMPLETED.is_terminal
        assert SessionState.FAILED.is_terminal
        assert SessionState.DETACHED.is_terminal
        assert not SessionState.SYNCING.is_terminal


class TestProgressPhase:
    """Tests for ProgressPhase ordering."""

    def test_rank_order(self):
        """Test phases rank from processing to synced."""
        ranks = [phase.rank for phase in ProgressPhase]

        assert ranks == sorted(ranks)
        assert ProgressPhase.SYNCED.rank > ProgressPhase.PROCESSING.rank

    def test_synced_value(self):
        """Test the user-facing value of the final phase."""
        assert ProgressPhase.SYNCED.value == 'synced with network'


class TestTransferStatus:
    """Tests for TransferStatus."""

    def test_from_dict(self, sample_tag_data):
        """Test parsing a tag object."""
        status = TransferStatus.from_dict(sample_tag_data)

        assert status.uid == 4242
        assert status.split == 20
        assert status.sent == 10
        assert status.synced == 8
        assert status.started_at == '2024-05-01T10:00:00Z'

    def test_missing_counters_read_as_zero(self):
        """Test partial tag objects."""
        status = TransferStatus.from_dict({'uid': 7, 'split': None})

        assert status.split == 0
        assert status.seen == 0
        assert status.synced == 0

    def test_sync_percent(self, sample_tag_data):
        """Test synced share as integer percentage."""
        assert TransferStatus.from_dict(sample_tag_data).sync_percent == 40
        assert TransferStatus(uid=1).sync_percent == 0

    def test_is_synced(self):
        """Test synced requires a known split."""
        assert TransferStatus(uid=1, split=3, synced=3).is_synced
        assert not TransferStatus(uid=1, split=0, synced=0).is_synced


class TestUploadProgress:
    """Tests for UploadProgress labels."""

    def test_labels(self):
        """Test label per phase."""
        assert UploadProgress(ProgressPhase.PROCESSING, 5.0).label == 'Processing'
        assert UploadProgress(ProgressPhase.UPLOADING, 40.0, seen=4, split=10).label == 'Uploading (4/10 chunks)'
        assert UploadProgress(ProgressPhase.SYNCING, 60.0, synced=6, split=10).label == 'Syncing (6/10 chunks)'
        assert UploadProgress(ProgressPhase.SYNCED, 100.0).label == 'Synced with network'


class TestUploadSource:
    """Tests for UploadSource defaults."""

    def test_default_name_is_base_name(self, tmp_path):
        """Test name falls back to the path's base name."""
        source = UploadSource(path=str(tmp_path / 'photo.jpg'))

        assert isinstance(source.path, Path)
        assert source.name == 'photo.jpg'

    def test_explicit_name(self, tmp_path):
        """Test an explicit name is kept."""
        source = UploadSource(path=tmp_path, name='my-site', is_directory=True)

        assert source.name == 'my-site'


class TestDirectoryScan:
    """Tests for DirectoryScan."""

    def test_counts(self, tmp_path):
        """Test file count and entry point flag."""
        scan = DirectoryScan(
            root=tmp_path,
            files=[ManifestEntry('a.txt', 1), ManifestEntry('index.html', 2)],
            total_size=3,
            entry_point='index.html'
        )

        assert scan.file_count == 2
        assert scan.has_entry_point


class TestUploadResult:
    """Tests for UploadResult."""

    def test_is_detached(self):
        """Test detached flag."""
        assert UploadResult(1, None, SessionState.DETACHED).is_detached
        assert not UploadResult(1, 'ref', SessionState.COMPLETED).is_detached


class TestSessionConfig:
    """Tests for SessionConfig."""

    def test_defaults(self):
        """Test default cadence and two-minute sync budget."""
        config = SessionConfig()

        assert config.poll_interval == 0.3
        assert config.sync_poll_interval == 0.5
        assert config.sync_max_ticks == 240
        assert config.sync_budget == 120.0

"""Tests for progress reconciliation."""
import pytest

from swarmpy.core.upload.models import TransferStatus, ProgressPhase
from swarmpy.core.upload.reconciler import (
    reconcile,
    ProgressReconciler,
    PROCESSING_PLACEHOLDER
)


def tag(split=0, seen=0, stored=0, sent=0, synced=0):
    return TransferStatus(uid=1, split=split, seen=seen, stored=stored, sent=sent, synced=synced)


class TestReconcile:
    """Tests for single-snapshot reconciliation."""

    def test_split_zero_is_processing_placeholder(self):
        """Test chunking not yet computed reports the placeholder."""
        progress = reconcile(tag(split=0, seen=3, sent=2), total_bytes=1000)

        assert progress.phase is ProgressPhase.PROCESSING
        assert progress.percent == PROCESSING_PLACEHOLDER
        assert progress.transferred_bytes == 0

    def test_fully_synced(self):
        """Test synced >= split is 100% regardless of other counters."""
        progress = reconcile(tag(split=10, seen=0, sent=0, synced=10), total_bytes=500)

        assert progress.phase is ProgressPhase.SYNCED
        assert progress.percent == 100.0
        assert progress.transferred_bytes == 500
        assert progress.is_complete

    def test_sent_means_syncing(self):
        """Test any sent chunk moves the phase to syncing."""
        progress = reconcile(tag(split=10, seen=2, sent=1, synced=0))

        assert progress.phase is ProgressPhase.SYNCING

    def test_seen_only_means_uploading(self):
        """Test seen without sent is uploading."""
        progress = reconcile(tag(split=10, seen=4))

        assert progress.phase is ProgressPhase.UPLOADING
        assert progress.percent == pytest.approx(40.0)

    def test_no_counters_is_processing(self):
        """Test split known but nothing moved yet."""
        progress = reconcile(tag(split=10))

        assert progress.phase is ProgressPhase.PROCESSING
        assert progress.percent == 0.0

    def test_percent_uses_most_advanced_counter(self):
        """Test counters reported out of order still give the max."""
        progress = reconcile(tag(split=10, seen=2, sent=7, synced=3))

        assert progress.percent == pytest.approx(70.0)

    def test_percent_is_clamped(self):
        """Test counters above split never exceed 100%."""
        progress = reconcile(tag(split=10, seen=25, synced=5))

        assert progress.percent == 100.0

    def test_byte_estimate(self):
        """Test transferred bytes follow the percentage."""
        progress = reconcile(tag(split=4, seen=1), total_bytes=1000)

        assert progress.transferred_bytes == 250
        assert progress.total_bytes == 1000


class TestProgressReconciler:
    """Tests for the monotonic session reconciler."""

    def test_last_starts_empty(self):
        """Test no progress before the first update."""
        assert ProgressReconciler().last is None

    def test_percent_never_decreases(self):
        """Test a stale poll does not move progress backwards."""
        reconciler = ProgressReconciler(total_bytes=100)

        reconciler.update(tag(split=10, seen=8))
        progress = reconciler.update(tag(split=10, seen=3))

        assert progress.percent == pytest.approx(80.0)
        assert progress.transferred_bytes == 80

    def test_phase_never_regresses(self):
        """Test syncing stays syncing when a later poll shows no sent chunks."""
        reconciler = ProgressReconciler()

        reconciler.update(tag(split=10, seen=5, sent=5))
        progress = reconciler.update(tag(split=10, seen=6))

        assert progress.phase is ProgressPhase.SYNCING

    def test_placeholder_after_real_progress_keeps_progress(self):
        """Test a split=0 poll after real counters keeps the earlier state."""
        reconciler = ProgressReconciler()

        reconciler.update(tag(split=10, seen=5, sent=3))
        progress = reconciler.update(tag(split=0))

        assert progress.phase is ProgressPhase.SYNCING
        assert progress.percent == pytest.approx(50.0)
        assert progress.split == 10

    def test_advances_to_synced(self):
        """Test the sequence ends at synced with network."""
        reconciler = ProgressReconciler()
        phases = [
            reconciler.update(status).phase
            for status in (
                tag(split=0),
                tag(split=10, seen=5),
                tag(split=10, seen=10, sent=4),
                tag(split=10, seen=10, sent=10, synced=10),
            )
        ]

        assert phases == [
            ProgressPhase.PROCESSING,
            ProgressPhase.UPLOADING,
            ProgressPhase.SYNCING,
            ProgressPhase.SYNCED,
        ]
        assert reconciler.last.is_complete

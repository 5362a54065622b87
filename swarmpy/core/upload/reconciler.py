"""
Progress reconciliation.

Turns raw tag counters into a phase, a percentage and a byte estimate.
The node does not guarantee seen -> sent -> synced ordering between polls,
so the phase is always the most advanced one whose counter is non-zero.
"""
from typing import Optional

from .models import TransferStatus, UploadProgress, ProgressPhase


# Shown while the node has not computed the chunk count yet
PROCESSING_PLACEHOLDER = 5.0


def reconcile(status: TransferStatus, total_bytes: int = 0) -> UploadProgress:
    """
    Reconcile one status snapshot.

    Args:
        status: Tag counters
        total_bytes: Payload size used for the byte estimate

    Returns:
        UploadProgress for this snapshot alone
    """
    if status.split == 0:
        return UploadProgress(
            phase=ProgressPhase.PROCESSING,
            percent=PROCESSING_PLACEHOLDER,
            transferred_bytes=0,
            total_bytes=total_bytes,
        )

    if status.synced >= status.split:
        return UploadProgress(
            phase=ProgressPhase.SYNCED,
            percent=100.0,
            transferred_bytes=total_bytes,
            total_bytes=total_bytes,
            seen=status.seen,
            synced=status.synced,
            split=status.split,
        )

    progress = max(status.seen, status.sent, status.synced)
    percent = min(100.0, 100.0 * progress / status.split)

    if status.sent > 0:
        phase = ProgressPhase.SYNCING
    elif status.seen > 0:
        phase = ProgressPhase.UPLOADING
    else:
        phase = ProgressPhase.PROCESSING

    return UploadProgress(
        phase=phase,
        percent=percent,
        transferred_bytes=round(percent / 100 * total_bytes),
        total_bytes=total_bytes,
        seen=status.seen,
        synced=status.synced,
        split=status.split,
    )


class ProgressReconciler:
    """
    Stateful reconciler for one session.

    Keeps a high-water mark of phase and percentage so that a stale poll
    never moves the displayed progress backwards.

    Example:
        >>> reconciler = ProgressReconciler(total_bytes=1024)
        >>> progress = reconciler.update(status)
        >>> progress.phase, progress.percent
    """

    def __init__(self, total_bytes: int = 0):
        self.total_bytes = total_bytes
        self._last: Optional[UploadProgress] = None

    @property
    def last(self) -> Optional[UploadProgress]:
        """Most recent reconciled progress."""
        return self._last

    def update(self, status: TransferStatus) -> UploadProgress:
        """
        Reconcile a snapshot against the previous ones.

        Args:
            status: Tag counters

        Returns:
            Monotonic UploadProgress
        """
        current = reconcile(status, self.total_bytes)
        previous = self._last

        if previous is not None:
            if previous.phase.rank > current.phase.rank:
                current.phase = previous.phase
            if previous.percent > current.percent:
                current.percent = previous.percent
                current.transferred_bytes = previous.transferred_bytes
            current.seen = max(current.seen, previous.seen)
            current.synced = max(current.synced, previous.synced)
            current.split = current.split or previous.split

        self._last = current
        return current

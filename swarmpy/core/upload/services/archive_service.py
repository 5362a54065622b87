"""
Directory packaging service.

Scans a directory into a manifest and packs it into a tar archive with
the external tar tool, with file contents at the archive root.
"""
import asyncio
import os
import stat
import tempfile
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, List

from ..models import DirectoryScan, ManifestEntry
from ...exceptions import LocalIOError
from ...logging import get_logger


ENTRY_POINT_NAME = 'index.html'


def _member_name(path: str) -> str:
    """File list entry for tar; a leading dash would read as an option."""
    return f"./{path}" if path.startswith('-') else path


@dataclass
class ArchiveJob:
    """
    A packed directory waiting to be uploaded.

    Attributes:
        path: Temporary tar file
        size: Archive size in bytes
        scan: Manifest the archive was built from
    """
    path: Path
    size: int
    scan: DirectoryScan

    def cleanup(self) -> None:
        """Remove the archive. Safe to call more than once."""
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass


class ArchivePackager:
    """
    Builds collection payloads from directories.

    Scanning and packing are separate so a caller can show the file count
    and size before any work starts.

    Example:
        >>> packager = ArchivePackager()
        >>> scan = packager.scan(Path("site"))
        >>> job = await packager.pack(scan)
        >>> try:
        ...     data = job.path.read_bytes()
        ... finally:
        ...     job.cleanup()
    """

    def __init__(self, tar_command: str = 'tar', temp_dir: Optional[Path] = None):
        """
        Initialize packager.

        Args:
            tar_command: Archive tool executable
            temp_dir: Directory for temporary archives (system default if None)
        """
        self._tar = tar_command
        self._temp_dir = temp_dir
        self._logger = get_logger('swarmpy.upload.archive')

    def scan(self, directory: Path) -> DirectoryScan:
        """
        Build the manifest of every regular file under directory.

        Symlinks, special files and unreadable entries are skipped.

        Args:
            directory: Directory to scan

        Returns:
            DirectoryScan with relative paths, total size and entry point
        """
        root = Path(directory)
        files: List[ManifestEntry] = []
        total = 0

        for dirpath, dirnames, filenames in os.walk(root, followlinks=False):
            dirnames.sort()
            for filename in sorted(filenames):
                full_path = os.path.join(dirpath, filename)
                try:
                    st = os.lstat(full_path)
                except OSError:
                    continue
                if not stat.S_ISREG(st.st_mode) or not os.access(full_path, os.R_OK):
                    continue
                relative = Path(full_path).relative_to(root).as_posix()
                files.append(ManifestEntry(path=relative, size=st.st_size))
                total += st.st_size

        entry_point = self._find_entry_point(files)
        self._logger.debug(
            f"Scanned {root}: {len(files)} files, {total} bytes, entry point {entry_point}"
        )
        return DirectoryScan(root=root, files=files, total_size=total, entry_point=entry_point)

    @staticmethod
    def _find_entry_point(files: List[ManifestEntry]) -> Optional[str]:
        """Shallowest index.html wins; root level first."""
        candidates = [
            entry.path for entry in files
            if entry.path.rsplit('/', 1)[-1] == ENTRY_POINT_NAME
        ]
        if not candidates:
            return None
        return min(candidates, key=lambda p: (p.count('/'), p))

    async def pack(self, scan: DirectoryScan) -> ArchiveJob:
        """
        Pack the scanned files into a temporary tar archive.

        Args:
            scan: Result of scan()

        Returns:
            ArchiveJob owning the temporary file

        Raises:
            LocalIOError: If tar is unavailable or exits non-zero
        """
        fd, tmp_name = tempfile.mkstemp(
            prefix='swarmpy-', suffix='.tar',
            dir=str(self._temp_dir) if self._temp_dir else None
        )
        os.close(fd)
        archive_path = Path(tmp_name)

        args = [self._tar, '-cf', str(archive_path), '-C', str(scan.root), '--null', '-T', '-']
        file_list = b''.join(os.fsencode(_member_name(entry.path)) + b'\0' for entry in scan.files)

        pack_start = time.time()
        self._logger.info(f"Packing {scan.file_count} files from {scan.root}")

        try:
            process = await asyncio.create_subprocess_exec(
                *args,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
                env={**os.environ, 'COPYFILE_DISABLE': '1'}
            )
            _, stderr = await process.communicate(input=file_list)
        except (FileNotFoundError, PermissionError) as e:
            archive_path.unlink(missing_ok=True)
            raise LocalIOError(f"Archive tool '{self._tar}' is not available: {e}") from e
        except OSError as e:
            archive_path.unlink(missing_ok=True)
            raise LocalIOError(f"Could not run '{self._tar}': {e}") from e
        except BaseException:
            archive_path.unlink(missing_ok=True)
            raise

        if process.returncode != 0:
            archive_path.unlink(missing_ok=True)
            message = stderr.decode(errors='replace').strip()
            raise LocalIOError(
                f"tar exited with code {process.returncode}: {message}",
                error_code=process.returncode
            )

        size = archive_path.stat().st_size
        pack_time = time.time() - pack_start
        self._logger.info(f"Packed {scan.root} into {archive_path} ({size} bytes) in {pack_time:.2f}s")
        return ArchiveJob(path=archive_path, size=size, scan=scan)

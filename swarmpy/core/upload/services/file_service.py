"""
File validation and reading services.

Single Responsibility: Each class handles one specific task.
"""
from pathlib import Path
from typing import Tuple, Union
import aiofiles

from ...exceptions import PreconditionFailedError, LocalIOError
from ...logging import get_logger


class FileValidator:
    """
    Validates paths before upload.

    Responsibilities:
    - Check path existence
    - Verify the path kind matches the upload kind
    - Get file size
    """

    def validate(self, file_path: Union[str, Path]) -> Tuple[Path, int]:
        """
        Validate a file for upload.

        Args:
            file_path: Path to the file

        Returns:
            Tuple of (validated Path, file size in bytes)

        Raises:
            PreconditionFailedError: If the path is missing or not a regular file
        """
        path = Path(file_path) if isinstance(file_path, str) else file_path

        if not path.exists():
            raise PreconditionFailedError(f"File not found: {path}")

        if not path.is_file():
            raise PreconditionFailedError(f"Path is not a file: {path}")

        return path, path.stat().st_size

    def validate_directory(self, dir_path: Union[str, Path]) -> Path:
        """
        Validate a directory for upload.

        Raises:
            PreconditionFailedError: If the path is missing or not a directory
        """
        path = Path(dir_path) if isinstance(dir_path, str) else dir_path

        if not path.exists():
            raise PreconditionFailedError(f"Directory not found: {path}")

        if not path.is_dir():
            raise PreconditionFailedError(f"Path is not a directory: {path}")

        return path


class AsyncFileReader:
    """
    Asynchronous file reader.

    Uses aiofiles for non-blocking I/O operations.
    """

    def __init__(self):
        """Initialize file reader."""
        self._logger = get_logger('swarmpy.upload.file')

    async def read_file(self, file_path: Path) -> bytes:
        """
        Read entire file.

        Args:
            file_path: Path to the file

        Returns:
            File data

        Raises:
            LocalIOError: If the file cannot be read
        """
        try:
            async with aiofiles.open(file_path, 'rb') as f:
                data = await f.read()
        except OSError as e:
            raise LocalIOError(f"Could not read {file_path}: {e}") from e
        self._logger.debug(f"Read {file_path} ({len(data)} bytes)")
        return data

"""
State directory layout and one-time legacy migration.
"""
import os
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, List, Tuple

from ..logging import get_logger


logger = get_logger('swarmpy.state')

STATE_DIR_ENV = 'SWARMPY_STATE_DIR'
CONFIG_FILE = 'config.json'
UPLOADS_FILE = 'uploads.json'


def default_state_dir() -> Path:
    """~/.config/swarmpy unless SWARMPY_STATE_DIR is set."""
    override = os.environ.get(STATE_DIR_ENV)
    if override:
        return Path(override).expanduser()
    return Path.home() / '.config' / 'swarmpy'


@dataclass
class StatePaths:
    """
    Locations of the two persisted tables.

    Attributes:
        root: State directory
    """
    root: Path

    @classmethod
    def default(cls) -> 'StatePaths':
        return cls(default_state_dir())

    @property
    def config(self) -> Path:
        return self.root / CONFIG_FILE

    @property
    def uploads(self) -> Path:
        return self.root / UPLOADS_FILE

    def ensure(self) -> 'StatePaths':
        """Create the state directory."""
        self.root.mkdir(parents=True, exist_ok=True)
        return self

    def legacy_sources(self, home: Optional[Path] = None) -> List[Tuple[Path, Path]]:
        """(legacy file, current file) pairs, in priority order."""
        home = home or Path.home()
        return [
            (home / '.swarm-commander.json', self.config),
            (home / '.swarm-commander-uploads.json', self.uploads),
            (home / '.swarm-uploader.json', self.config),
            (home / '.swarm-uploader-uploads.json', self.uploads),
        ]


def migrate_legacy_state(paths: StatePaths, home: Optional[Path] = None) -> List[Path]:
    """
    Copy legacy tables into the state directory.

    A legacy file is only copied when the current file does not exist yet,
    so the first matching legacy source wins and later runs are no-ops.

    Args:
        paths: Current state layout
        home: Home directory to look for legacy files in

    Returns:
        Current files that were populated by this call
    """
    migrated = []
    for source, target in paths.legacy_sources(home):
        if target.exists() or not source.exists():
            continue
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(source, target)
            migrated.append(target)
            logger.info(f"Migrated {source} -> {target}")
        except OSError as e:
            logger.warning(f"Could not migrate {source}: {e}")
    return migrated

"""
Config symlink reconciliation.

Each link under the root must be a real symlink whose target is exactly the
canonical source path. Three cases are handled separately: absent (create),
already correct (leave alone), anything else (remove, then create). A wrong
symlink is unlinked without touching whatever it pointed at.
"""
import os
import shutil
import logging
from pathlib import Path

from trifecta.report import StepStatus


logger = logging.getLogger(__name__)


class SymlinkError(Exception):
    """Raised when a config symlink cannot be reconciled."""
    pass


def points_to(link_path: Path, source_path: Path) -> bool:
    """True if link_path is a symlink whose stored target is source_path."""
    if not link_path.is_symlink():
        return False
    return Path(os.readlink(link_path)) == source_path


def remove_existing(path: Path):
    """
    Remove whatever occupies path.

    Symlinks (including links to directories) are unlinked, never followed.
    Real directories are removed recursively.
    """
    if path.is_symlink() or path.is_file():
        path.unlink()
    elif path.is_dir():
        shutil.rmtree(path)
    else:
        # Sockets, fifos and the like
        path.unlink()


def reconcile_symlink(link_path: Path, source_path: Path) -> StepStatus:
    """
    Make link_path a symlink to source_path.

    Args:
        link_path: Where the link lives (under the workspace root)
        source_path: Canonical artifact the link must point at

    Returns:
        StepStatus.CREATED if nothing was there, StepStatus.EXISTS if the
        link was already correct, StepStatus.REPLACED if something else had
        to be removed first

    Raises:
        SymlinkError: If source_path is missing or the filesystem refuses
    """
    if not source_path.exists():
        raise SymlinkError(f"Canonical source missing: {source_path}")

    occupied = link_path.exists() or link_path.is_symlink()

    if occupied and points_to(link_path, source_path):
        return StepStatus.EXISTS

    try:
        if occupied:
            logger.debug("Removing %s before linking to %s", link_path, source_path)
            remove_existing(link_path)

        link_path.symlink_to(source_path, target_is_directory=source_path.is_dir())
    except OSError as e:
        raise SymlinkError(f"Failed to link {link_path} -> {source_path}: {e}")

    return StepStatus.REPLACED if occupied else StepStatus.CREATED

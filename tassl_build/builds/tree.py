"""Scratch source tree management.

This module handles:
- Copying the vendored TASSL sources into a scratch build directory
- Removing stale build and install directories

Configure and make write into the tree they run in, so every build works
on a private copy of the vendored sources.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from tassl_build.errors import FilesystemFailure

logger = logging.getLogger(__name__)

# Version-control metadata never needed by the build.
VCS_DIRS = frozenset({".git", ".hg", ".svn"})


def copy_source_tree(
    source_dir: Path,
    dest_dir: Path,
    exclude: frozenset[str] = VCS_DIRS,
) -> int:
    """Recursively copy a source tree.

    Entries whose name is in ``exclude`` are skipped at every depth. A file
    already present at a destination path is removed and replaced, never
    merged.

    Args:
        source_dir: Vendored source directory.
        dest_dir: Destination directory; created if missing.
        exclude: Directory or file names to skip.

    Returns:
        Number of files copied.

    Raises:
        FilesystemFailure: If the source is missing or copying fails.
    """
    if not source_dir.is_dir():
        raise FilesystemFailure(f"Source directory does not exist: {source_dir}")

    copied = 0
    try:
        dest_dir.mkdir(parents=True, exist_ok=True)
        for item in sorted(source_dir.iterdir()):
            if item.name in exclude:
                logger.debug("Skipping %s", item)
                continue

            dest_path = dest_dir / item.name
            if item.is_dir() and not item.is_symlink():
                copied += copy_source_tree(item, dest_path, exclude)
            else:
                if dest_path.is_symlink() or dest_path.exists():
                    dest_path.unlink()
                shutil.copy2(item, dest_path)
                copied += 1
    except OSError as e:
        raise FilesystemFailure(
            f"Failed to copy {source_dir} -> {dest_dir}: {e}"
        ) from e

    return copied


def remove_tree(path: Path) -> bool:
    """Remove a directory tree if it exists.

    Returns:
        True if something was removed.

    Raises:
        FilesystemFailure: If removal fails.
    """
    if not path.exists():
        return False
    try:
        shutil.rmtree(path)
    except OSError as e:
        raise FilesystemFailure(f"Failed to remove {path}: {e}") from e
    logger.debug("Removed %s", path)
    return True


def create_dir(path: Path) -> Path:
    """Create a directory and its parents.

    Raises:
        FilesystemFailure: If creation fails.
    """
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FilesystemFailure(f"Failed to create {path}: {e}") from e
    return path


__all__ = ["VCS_DIRS", "copy_source_tree", "create_dir", "remove_tree"]

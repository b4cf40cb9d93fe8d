"""
File system utilities for govm.

This module provides the file operations the installation state machine is
built from:
- Archive verification and extraction (tar.gz)
- Atomic symlink replacement and atomic file writes
- Safe deletion and tree copies
- Free space and size queries

All destructive helpers refuse to operate outside an expected prefix when
one is given.
"""

import errno
import gzip
import logging
import os
import shutil
import sys
import tarfile
import tempfile
import zlib
from contextlib import contextmanager
from pathlib import Path
from typing import Optional, Union

from .exceptions import PermissionDeniedError

logger = logging.getLogger(__name__)

_VERIFY_CHUNK_SIZE = 1024 * 1024


# ============================================================================
# Errors
# ============================================================================


class FilesystemError(Exception):
    """Base exception for filesystem operations."""

    pass


class ArchiveExtractionError(FilesystemError):
    """Failed to extract an archive."""

    pass


class UnsupportedArchiveFormat(ArchiveExtractionError):
    """Archive format is not supported."""

    pass


class InsecureArchiveError(ArchiveExtractionError):
    """Archive contains insecure paths (directory traversal attempt)."""

    pass


@contextmanager
def permission_errors(path: Union[str, Path], action: str = "modify"):
    """
    Translate PermissionError raised inside the block to PermissionDeniedError.

    Example:
        >>> with permission_errors(install_root, "write to"):
        ...     staging.mkdir()
    """
    try:
        yield
    except PermissionError as e:
        raise PermissionDeniedError(path, action) from e
    except OSError as e:
        if e.errno in (errno.EACCES, errno.EPERM):
            raise PermissionDeniedError(path, action) from e
        raise


# ============================================================================
# Path Utilities
# ============================================================================


def is_relative_to(path: Path, parent: Path) -> bool:
    """
    Check if path is relative to parent.

    Args:
        path: Path to check
        parent: Potential parent path

    Returns:
        True if path is under parent
    """
    try:
        path.relative_to(parent)
        return True
    except ValueError:
        return False


def find_executable(
    name: str, search_paths: Optional[list[Path]] = None
) -> Optional[Path]:
    """
    Find an executable in the system PATH or provided search paths.

    Args:
        name: Executable name (e.g., 'go')
        search_paths: Optional list of directories to search

    Returns:
        Path to executable if found, None otherwise

    Example:
        >>> find_executable('go')
        PosixPath('/usr/local/go/bin/go')
    """
    if search_paths is None:
        path_env = os.environ.get("PATH", "")
        search_paths = [Path(p) for p in path_env.split(os.pathsep) if p]

    for directory in search_paths:
        exe_path = Path(directory) / name
        if is_executable_file(exe_path):
            return exe_path

    return None


def is_executable_file(path: Path) -> bool:
    """Check that path is a regular file (following links) with execute permission."""
    return path.is_file() and os.access(path, os.X_OK)


# ============================================================================
# Archive Verification / Extraction
# ============================================================================


def verify_archive(archive_path: Union[str, Path]) -> int:
    """
    Check that an archive is structurally readable.

    Decompresses the whole stream (checking the gzip trailer) and reads every
    member header, so a truncated or non-archive file fails here rather than
    during extraction.

    Args:
        archive_path: Path to a .tar.gz archive

    Returns:
        Number of members in the archive

    Raises:
        ArchiveExtractionError: If the file is not a readable, non-empty archive
    """
    archive_path = Path(archive_path)

    try:
        with gzip.open(archive_path, "rb") as stream:
            while stream.read(_VERIFY_CHUNK_SIZE):
                pass

        with tarfile.open(archive_path, "r:gz") as tar:
            count = 0
            for _ in tar:
                count += 1
    except (tarfile.TarError, zlib.error, EOFError, OSError) as e:
        raise ArchiveExtractionError(f"Unreadable archive {archive_path}: {e}") from e

    if count == 0:
        raise ArchiveExtractionError(f"Archive is empty: {archive_path}")

    return count


def _validate_archive_path(path: str, destination: Path) -> None:
    """
    Validate that an archive member path is safe to extract.

    Prevents directory traversal attacks (e.g., paths containing '../').

    Raises:
        InsecureArchiveError: If path attempts directory traversal
    """
    member_path = (destination / path).resolve()

    if not is_relative_to(member_path, destination.resolve()):
        raise InsecureArchiveError(
            f"Archive member '{path}' attempts directory traversal. "
            "This is a security risk and extraction has been blocked."
        )


def extract_archive(
    archive_path: Union[str, Path], destination: Union[str, Path]
) -> None:
    """
    Extract a .tar.gz archive to a destination directory.

    Validates all member paths before extracting anything.

    Args:
        archive_path: Path to the archive file
        destination: Directory to extract to (created if missing)

    Raises:
        UnsupportedArchiveFormat: If archive format is not recognized
        ArchiveExtractionError: If extraction fails
        InsecureArchiveError: If archive contains malicious paths
        OSError: If writing the extracted files fails (e.g. disk full)
    """
    archive_path = Path(archive_path)
    destination = Path(destination)

    if not archive_path.exists():
        raise ArchiveExtractionError(f"Archive not found: {archive_path}")

    archive_name = archive_path.name.lower()
    if not archive_name.endswith((".tar.gz", ".tgz")):
        raise UnsupportedArchiveFormat(
            f"Unsupported archive format: {archive_path.name}. Supported: .tar.gz"
        )

    destination.mkdir(parents=True, exist_ok=True)

    try:
        with tarfile.open(archive_path, "r:gz") as tar:
            members = tar.getmembers()
            for member in members:
                _validate_archive_path(member.name, destination)

            # Python 3.12+ filter; paths are already validated above
            if sys.version_info >= (3, 12):
                tar.extractall(destination, filter="data")
            else:
                tar.extractall(destination)
    except (tarfile.TarError, gzip.BadGzipFile, zlib.error, EOFError) as e:
        raise ArchiveExtractionError(f"Failed to extract {archive_path}: {e}") from e

    logger.debug(f"Extracted {len(members)} members to {destination}")


# ============================================================================
# Links
# ============================================================================


def replace_symlink(link_path: Path, target: Path) -> None:
    """
    Point link_path at target in a single rename.

    A temporary symlink is created beside link_path and renamed over it, so
    link_path is never absent. link_path must not be a real directory.

    Raises:
        OSError: If the link cannot be created or renamed into place
    """
    link_path = Path(link_path)
    tmp_link = link_path.with_name(f".{link_path.name}.{os.getpid()}.tmp")

    if tmp_link.is_symlink() or tmp_link.exists():
        tmp_link.unlink()

    os.symlink(target, tmp_link, target_is_directory=True)
    try:
        os.replace(tmp_link, link_path)
    except OSError:
        try:
            tmp_link.unlink()
        except OSError as cleanup_error:
            logger.debug(f"Failed to remove temporary link {tmp_link}: {cleanup_error}")
        raise


def read_link_target(link_path: Path) -> Optional[Path]:
    """
    Resolve a symlink to an absolute target path without requiring it to exist.

    Returns:
        Absolute target path, or None if link_path is not a symlink
    """
    if not link_path.is_symlink():
        return None

    target = Path(os.readlink(link_path))
    if not target.is_absolute():
        target = link_path.parent / target
    return Path(os.path.normpath(target))


# ============================================================================
# Safe File Operations
# ============================================================================


def atomic_write(
    file_path: Union[str, Path], content: Union[str, bytes], encoding: str = "utf-8"
) -> None:
    """
    Write file atomically using temp file + rename.

    If the write fails, the original file (if any) remains unchanged.

    Args:
        file_path: Path to write to
        content: Content to write (string or bytes)
        encoding: Text encoding (used only for string content)
    """
    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)

    # Temp file in the same directory keeps the rename on one filesystem
    temp_fd, temp_path_str = tempfile.mkstemp(
        dir=file_path.parent, prefix=f".{file_path.name}.", suffix=".tmp"
    )
    temp_path = Path(temp_path_str)

    try:
        if isinstance(content, str):
            with open(temp_fd, "w", encoding=encoding) as f:
                f.write(content)
        else:
            with open(temp_fd, "wb") as f:
                f.write(content)

        if file_path.exists():
            shutil.copymode(file_path, temp_path)

        temp_path.replace(file_path)

    except Exception:
        try:
            temp_path.unlink(missing_ok=True)
        except OSError:
            pass
        raise


def safe_rmtree(
    path: Union[str, Path], require_prefix: Optional[Union[str, Path]] = None
) -> None:
    """
    Safely remove a directory tree with safeguards.

    The path itself is not resolved, so passing a symlink is rejected
    instead of deleting the link target.

    Args:
        path: Directory to remove
        require_prefix: If specified, path must be under this directory

    Raises:
        ValueError: If path is not under require_prefix
        FilesystemError: If path is a symlink or not a directory
        PermissionError: If the tree cannot be removed due to permissions
    """
    path = Path(os.path.abspath(path))

    if require_prefix is not None:
        require_prefix = Path(os.path.abspath(require_prefix))
        if path == require_prefix or not is_relative_to(path, require_prefix):
            raise ValueError(
                f"Refusing to delete '{path}': not under required prefix '{require_prefix}'"
            )

    if path.is_symlink():
        raise FilesystemError(f"Refusing to delete symlink as a tree: {path}")

    if not path.exists():
        return

    if not path.is_dir():
        raise FilesystemError(f"Path is not a directory: {path}")

    try:
        shutil.rmtree(path)
    except PermissionError:
        raise
    except OSError as e:
        raise FilesystemError(f"Failed to remove directory '{path}': {e}") from e


def recursive_copy(source: Union[str, Path], destination: Union[str, Path]) -> None:
    """
    Recursively copy a directory tree, preserving symlinks and metadata.

    Args:
        source: Source directory
        destination: Destination directory (must not exist)

    Raises:
        FilesystemError: If source is missing or the copy fails
    """
    source = Path(source)
    destination = Path(destination)

    if not source.is_dir():
        raise FilesystemError(f"Source is not a directory: {source}")

    try:
        shutil.copytree(source, destination, symlinks=True)
    except PermissionError:
        raise
    except (shutil.Error, OSError) as e:
        raise FilesystemError(f"Failed to copy {source} to {destination}: {e}") from e


def directory_size(path: Union[str, Path]) -> int:
    """
    Calculate total size of a directory in bytes (symlinks not followed).

    Example:
        >>> size = directory_size('/usr/local/go-1.21.0')
        >>> print(f"Directory is {size / 1024 / 1024:.2f} MB")
    """
    path = Path(path)
    total_size = 0

    for root, _dirs, files in os.walk(path):
        for name in files:
            item = Path(root) / name
            try:
                if not item.is_symlink():
                    total_size += item.stat().st_size
            except OSError as e:
                logger.debug(f"Error reading size of {item}: {e}")

    return total_size


def free_space(path: Union[str, Path]) -> int:
    """
    Get free space in bytes available to unprivileged users at path.

    Args:
        path: Any existing path on the filesystem to inspect
    """
    stat = os.statvfs(path)
    return stat.f_bavail * stat.f_frsize


__all__ = [
    "FilesystemError",
    "ArchiveExtractionError",
    "UnsupportedArchiveFormat",
    "InsecureArchiveError",
    "permission_errors",
    "is_relative_to",
    "find_executable",
    "is_executable_file",
    "verify_archive",
    "extract_archive",
    "replace_symlink",
    "read_link_target",
    "atomic_write",
    "safe_rmtree",
    "recursive_copy",
    "directory_size",
    "free_space",
]

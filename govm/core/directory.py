"""
Installation directory layout for govm.

Layout under the install root (default /usr/local):

    go              : Active version pointer (symlink) or legacy installation
    go-1.21.0/      : Installed version directory, one per version
    go-1.22.5/
    .go-1.23.1.staging/ : Temporary extraction area (only during install)
    go.backup/      : Legacy backup (only during migration)

Every installation root holds the entry-point binary at bin/go.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

POINTER_NAME = "go"
VERSION_DIR_PREFIX = "go-"
BINARY_RELATIVE_PATH = Path("bin") / "go"


@dataclass(frozen=True)
class InstallLayout:
    """Paths of the govm filesystem layout under one install root."""

    install_root: Path

    @property
    def active_path(self) -> Path:
        """Well-known path of the active version pointer."""
        return self.install_root / POINTER_NAME

    @property
    def backup_path(self) -> Path:
        """Location of the legacy backup during migration."""
        return self.install_root / f"{POINTER_NAME}.backup"

    @property
    def active_bin_dir(self) -> Path:
        """Binary directory reached through the active pointer."""
        return self.active_path / BINARY_RELATIVE_PATH.parent

    def version_dir(self, version) -> Path:
        """Installed version directory for a bare version."""
        return self.install_root / f"{VERSION_DIR_PREFIX}{version}"

    def staging_dir(self, version) -> Path:
        """Temporary extraction directory for a version."""
        return self.install_root / f".{VERSION_DIR_PREFIX}{version}.staging"

    @staticmethod
    def binary_path(root: Path) -> Path:
        """Entry-point binary inside an installation root."""
        return root / BINARY_RELATIVE_PATH

    @staticmethod
    def version_from_dir_name(name: str) -> Optional[str]:
        """
        Extract the raw version suffix from a versioned directory name.

        Example:
            >>> InstallLayout.version_from_dir_name("go-1.21.0")
            '1.21.0'
        """
        if not name.startswith(VERSION_DIR_PREFIX):
            return None
        suffix = name[len(VERSION_DIR_PREFIX):]
        return suffix or None


def verify_directory_writable(path: Path) -> bool:
    """
    Verify that a directory exists and is writable.

    Args:
        path: Directory path to verify.

    Returns:
        bool: True if directory exists and is writable, False otherwise.
    """
    if not path.exists():
        return False

    if not path.is_dir():
        return False

    return os.access(path, os.W_OK | os.X_OK)

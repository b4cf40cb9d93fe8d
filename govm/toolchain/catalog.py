"""
Version catalog: discovery of installed and active Go versions.

The filesystem is the database: each installed version is a directory named
go-<version> under the install root, and the active version is whatever the
go symlink resolves to. Access to the versioned directories goes through the
VersionStore interface so catalog logic can be exercised against a fake
store.
"""

import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from ..core.directory import InstallLayout
from ..core.filesystem import find_executable, read_link_target, safe_rmtree
from .verifier import has_valid_binary, query_version
from .version import Version

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InstalledVersion:
    """An installed version directory."""

    version: Version
    path: Path
    valid: bool = True
    """Whether bin/go exists and is executable"""


@dataclass(frozen=True)
class ActiveVersion:
    """The Go installation currently in effect."""

    version: Version
    binary_path: Path
    install_root: Path
    legacy: bool = False
    """True when the well-known path is a pre-versioning directory"""


class VersionStore(ABC):
    """
    Repository of installed version directories.

    Implementations own the mapping between versions and storage; callers
    never build versioned paths themselves.
    """

    @abstractmethod
    def list(self) -> List[InstalledVersion]:
        """List valid installed versions (unordered)."""
        pass

    @abstractmethod
    def get(self, version: Version) -> Optional[InstalledVersion]:
        """
        Look up the directory for a version.

        Returns:
            Entry (possibly with valid=False), or None if no directory exists
        """
        pass

    @abstractmethod
    def create(self, version: Version, source: Path) -> InstalledVersion:
        """
        Move a prepared installation root into the store.

        Args:
            version: Version the root belongs to
            source: Directory to move; must be on the same filesystem

        Raises:
            FileExistsError: If the version is already present
        """
        pass

    @abstractmethod
    def remove(self, version: Version) -> bool:
        """
        Delete the directory for a version.

        Returns:
            True if something was removed
        """
        pass


class FilesystemVersionStore(VersionStore):
    """VersionStore backed by go-<version> directories under the install root."""

    def __init__(self, layout: InstallLayout):
        self.layout = layout

    def list(self) -> List[InstalledVersion]:
        root = self.layout.install_root
        if not root.is_dir():
            return []

        installed = []
        for entry in root.iterdir():
            raw = InstallLayout.version_from_dir_name(entry.name)
            if raw is None:
                continue
            version = Version.try_parse(raw)
            if version is None or str(version) != raw:
                continue
            if entry.is_symlink() or not entry.is_dir():
                continue
            if not has_valid_binary(entry):
                logger.debug(f"Ignoring {entry}: no executable bin/go")
                continue
            installed.append(InstalledVersion(version=version, path=entry))

        return installed

    def get(self, version: Version) -> Optional[InstalledVersion]:
        path = self.layout.version_dir(version)
        if path.is_symlink() or not path.is_dir():
            return None
        return InstalledVersion(version=version, path=path, valid=has_valid_binary(path))

    def create(self, version: Version, source: Path) -> InstalledVersion:
        path = self.layout.version_dir(version)
        if path.exists() or path.is_symlink():
            raise FileExistsError(f"Version directory already exists: {path}")

        os.rename(source, path)
        logger.debug(f"Moved {source} -> {path}")
        return InstalledVersion(version=version, path=path, valid=has_valid_binary(path))

    def remove(self, version: Version) -> bool:
        path = self.layout.version_dir(version)
        if not path.exists() and not path.is_symlink():
            return False

        safe_rmtree(path, require_prefix=self.layout.install_root)
        logger.info(f"Removed directory: {path}")
        return True


class VersionCatalog:
    """
    Read-only view of installed versions and the active version.

    Example:
        >>> catalog = VersionCatalog(InstallLayout(Path("/usr/local")))
        >>> active = catalog.active_version()
        >>> [str(v.version) for v in catalog.list_installed()]
        ['1.23.1', '1.22.5']
    """

    def __init__(
        self,
        layout: InstallLayout,
        store: Optional[VersionStore] = None,
        search_paths: Optional[List[Path]] = None,
    ):
        """
        Initialize catalog.

        Args:
            layout: Filesystem layout
            store: Version store (filesystem store if None)
            search_paths: Directories searched for `go` (uses PATH if None)
        """
        self.layout = layout
        self.store = store or FilesystemVersionStore(layout)
        self.search_paths = search_paths

    def active_version(self) -> Optional[ActiveVersion]:
        """
        Determine the Go installation currently in effect.

        Tries the command search path first, then the active pointer, then a
        legacy directory at the well-known path.

        Returns:
            ActiveVersion, or None if no installation is found
        """
        binary = find_executable("go", self.search_paths)
        if binary is not None:
            version = query_version(binary)
            if version is not None:
                root = Path(os.path.realpath(binary)).parent.parent
                logger.debug(f"Active version from PATH: {version} ({binary})")
                return ActiveVersion(version=version, binary_path=binary, install_root=root)

        active_path = self.layout.active_path

        if active_path.is_symlink():
            target = read_link_target(active_path)
            version = self._version_from_target(target)
            if version is not None:
                logger.debug(f"Active version from pointer: {version} ({target})")
                return ActiveVersion(
                    version=version,
                    binary_path=InstallLayout.binary_path(active_path),
                    install_root=target,
                )
            return None

        if active_path.is_dir() and has_valid_binary(active_path):
            binary = InstallLayout.binary_path(active_path)
            version = query_version(binary)
            if version is not None:
                logger.debug(f"Legacy installation at {active_path}: {version}")
                return ActiveVersion(
                    version=version,
                    binary_path=binary,
                    install_root=active_path,
                    legacy=True,
                )

        return None

    def list_installed(self) -> List[InstalledVersion]:
        """List valid installed versions, newest first."""
        return sorted(self.store.list(), key=lambda entry: entry.version, reverse=True)

    def get(self, version: Version) -> Optional[InstalledVersion]:
        """Look up the installed directory for a version."""
        return self.store.get(version)

    def is_installed(self, version: Version) -> bool:
        """Check that a valid installation exists for version."""
        entry = self.store.get(version)
        return entry is not None and entry.valid

    def pointer_target(self) -> Optional[Path]:
        """Target of the active pointer, or None if there is no pointer."""
        return read_link_target(self.layout.active_path)

    def pointer_version(self) -> Optional[Version]:
        """Version selected by the active pointer, or None."""
        target = self.pointer_target()
        if target is None:
            return None
        return self._version_from_target(target)

    def has_legacy_installation(self) -> bool:
        """Check whether the well-known path is a real directory."""
        active_path = self.layout.active_path
        return active_path.is_dir() and not active_path.is_symlink()

    def _version_from_target(self, target: Optional[Path]) -> Optional[Version]:
        if target is None:
            return None
        version = Version.try_parse(InstallLayout.version_from_dir_name(target.name))
        if version is not None:
            return version
        binary = InstallLayout.binary_path(target)
        if has_valid_binary(target):
            return query_version(binary)
        return None

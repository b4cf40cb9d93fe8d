"""
Cleanup of installed versions that are not in use.

The active version (and whatever the active pointer selects, when the two
differ) is never a removal candidate. Interactive selection indexes into the
removable list only, so the protected versions cannot be picked.
"""

import enum
import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Set

from ..core.filesystem import FilesystemError, directory_size, permission_errors
from .catalog import InstalledVersion, VersionCatalog
from .version import Version

logger = logging.getLogger(__name__)


class CleanupMode(enum.Enum):
    ALL = "all"
    SELECTED = "selected"
    NONE = "none"


@dataclass
class CleanupChoice:
    """Operator decision for an interactive cleanup."""

    mode: CleanupMode
    indices: List[int] = field(default_factory=list)
    """1-based positions in the removable list (SELECTED only)"""

    @classmethod
    def all(cls) -> "CleanupChoice":
        return cls(CleanupMode.ALL)

    @classmethod
    def none(cls) -> "CleanupChoice":
        return cls(CleanupMode.NONE)

    @classmethod
    def selected(cls, indices: List[int]) -> "CleanupChoice":
        return cls(CleanupMode.SELECTED, list(indices))


CleanupChooser = Callable[[List[InstalledVersion]], CleanupChoice]


@dataclass
class CleanupResult:
    """Result of cleanup operation."""

    removed: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    space_reclaimed: int = 0
    errors: List[str] = field(default_factory=list)


class VersionCleanupManager:
    """Removes installed versions other than the active one."""

    def __init__(self, catalog: VersionCatalog):
        """
        Initialize cleanup manager.

        Args:
            catalog: Version catalog to read installed and active versions from
        """
        self.catalog = catalog

    def protected_versions(self) -> Set[Version]:
        """Versions that must never be removed."""
        protected = set()

        active = self.catalog.active_version()
        if active is not None:
            protected.add(active.version)

        pointer_version = self.catalog.pointer_version()
        if pointer_version is not None:
            protected.add(pointer_version)

        return protected

    def _protection_reason(self, version: Version) -> str:
        if self.catalog.pointer_version() == version:
            return f"{self.catalog.layout.active_path} points to it"
        return "it is the active version"

    def removable_versions(self) -> List[InstalledVersion]:
        """
        List installed versions that may be removed, newest first.

        Returns:
            Installed versions minus the protected ones
        """
        protected = self.protected_versions()
        return [
            entry
            for entry in self.catalog.list_installed()
            if entry.version not in protected
        ]

    def cleanup(
        self,
        unattended: bool = False,
        chooser: Optional[CleanupChooser] = None,
        dry_run: bool = False,
    ) -> CleanupResult:
        """
        Remove unused versions.

        Args:
            unattended: Remove every removable version without asking
            chooser: Callback deciding which versions to remove in
                interactive mode (nothing is removed when None)
            dry_run: If True, only simulate removal

        Returns:
            CleanupResult with removal details
        """
        result = CleanupResult()
        removable = self.removable_versions()

        if not removable:
            logger.info("No unused versions to clean up")
            return result

        if unattended:
            candidates = removable
        else:
            choice = chooser(removable) if chooser is not None else CleanupChoice.none()
            candidates = self._select(removable, choice, result)

        for entry in candidates:
            self._remove(entry, result, dry_run)

        logger.info(
            f"Cleanup complete: {len(result.removed)} removed, "
            f"{len(result.skipped)} skipped, {len(result.failed)} failed"
        )
        return result

    def _select(
        self,
        removable: List[InstalledVersion],
        choice: CleanupChoice,
        result: CleanupResult,
    ) -> List[InstalledVersion]:
        if choice.mode is CleanupMode.ALL:
            return list(removable)

        if choice.mode is CleanupMode.NONE:
            logger.info("No versions selected for removal")
            return []

        selected = []
        for index in choice.indices:
            if not 1 <= index <= len(removable):
                logger.warning(f"Ignoring invalid selection: {index}")
                result.errors.append(f"Invalid selection: {index}")
                continue
            entry = removable[index - 1]
            if entry not in selected:
                selected.append(entry)
        return selected

    def _remove(self, entry: InstalledVersion, result: CleanupResult, dry_run: bool) -> None:
        version = str(entry.version)

        if entry.version in self.protected_versions():
            logger.warning(f"Skipping {version}: {self._protection_reason(entry.version)}")
            result.skipped.append(version)
            return

        if not entry.path.exists():
            logger.warning(f"Version directory doesn't exist: {entry.path}")
            result.skipped.append(version)
            return

        size = directory_size(entry.path)

        if dry_run:
            logger.info(f"[DRY RUN] Would remove: Go {version} ({size} bytes)")
            result.removed.append(version)
            result.space_reclaimed += size
            return

        try:
            with permission_errors(entry.path, "remove"):
                self.catalog.store.remove(entry.version)
        except (OSError, FilesystemError) as e:
            logger.error(f"Failed to remove Go {version}: {e}")
            result.failed.append(version)
            result.errors.append(f"{version}: {e}")
            return

        logger.info(f"Removed Go {version} ({size / 1024 / 1024:.2f} MB)")
        result.removed.append(version)
        result.space_reclaimed += size

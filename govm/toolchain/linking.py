"""
govm/toolchain/linking.py

Active version pointer management.

The active Go installation is selected by a single symlink at the
well-known path (e.g. /usr/local/go -> /usr/local/go-1.21.0). Repointing is
done with a rename over the existing link, so the well-known path always
resolves either to the old target or to the new one.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..core.directory import InstallLayout
from ..core.exceptions import (
    InvalidInstallationError,
    SwitchFailedError,
    VersionNotInstalledError,
)
from ..core.filesystem import permission_errors, read_link_target, replace_symlink
from .catalog import VersionCatalog
from .verifier import query_version
from .version import Version

logger = logging.getLogger(__name__)


@dataclass
class SwitchResult:
    """Result of a switch operation."""

    version: Version
    """Version the pointer now selects"""

    target: Path
    """Directory the pointer resolves to"""

    previous_target: Optional[Path]
    """Pointer target before the switch (None if there was no pointer)"""

    reported_version: Optional[Version]
    """Version reported by the newly active binary"""

    @property
    def confirmed(self) -> bool:
        """Whether the active binary reported the expected version."""
        return self.reported_version == self.version


class ActiveVersionSwitcher:
    """Repoints the active version symlink."""

    def __init__(self, catalog: VersionCatalog):
        """
        Initialize switcher.

        Args:
            catalog: Version catalog used for preconditions
        """
        self.catalog = catalog
        self.layout: InstallLayout = catalog.layout

    def current_target(self) -> Optional[Path]:
        """Directory the pointer currently resolves to, or None."""
        return read_link_target(self.layout.active_path)

    def is_valid_link(self) -> bool:
        """Check that the pointer exists and its target exists."""
        target = self.current_target()
        return target is not None and target.exists()

    def switch_to(self, version: Version) -> SwitchResult:
        """
        Make version the active Go installation.

        Args:
            version: Installed version to activate

        Returns:
            SwitchResult with the confirmed version

        Raises:
            VersionNotInstalledError: If no directory exists for version
            InvalidInstallationError: If the directory has no executable bin/go
            SwitchFailedError: If the pointer cannot be updated (left unchanged)
            PermissionDeniedError: If the install root is not writable
        """
        entry = self.catalog.get(version)
        if entry is None:
            raise VersionNotInstalledError(version)
        if not entry.valid:
            raise InvalidInstallationError(entry.path)

        active_path = self.layout.active_path
        if active_path.is_dir() and not active_path.is_symlink():
            raise SwitchFailedError(
                f"{active_path} is a legacy installation directory, not a version pointer",
                remedy="Run 'govm migrate' to convert it first",
            )

        previous_target = self.current_target()

        try:
            with permission_errors(self.layout.install_root, "update the active version in"):
                replace_symlink(active_path, entry.path)
        except OSError as e:
            raise SwitchFailedError(
                f"Failed to point {active_path} at {entry.path}: {e}"
            ) from e

        logger.info(f"Switched active version: {active_path} -> {entry.path}")

        reported = query_version(InstallLayout.binary_path(active_path))
        if reported != version:
            logger.warning(
                f"Active binary reports {reported}, expected {version}"
            )

        return SwitchResult(
            version=version,
            target=entry.path,
            previous_target=previous_target,
            reported_version=reported,
        )

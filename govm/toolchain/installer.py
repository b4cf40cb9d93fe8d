"""
Go version installer.

Installs one version as a multi-step transaction:

    1. Record the current pointer target and the version in the transaction
    2. Download and verify the archive
    3. Require free space >= 2x the archive size at the install root
    4. Extract into a staging directory under the install root
    5. Remove an existing directory for the version (reinstall)
    6. Move the staged root into go-<version>
    7. Remove the scratch archive
    8. Complete the transaction

The installer never touches the active pointer; switching is a separate
step. Undoing a failed install is the RollbackSupervisor's job.
"""

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..core.directory import InstallLayout, verify_directory_writable
from ..core.exceptions import (
    CorruptArchiveError,
    InstallationFailedError,
    InsufficientSpaceError,
    InvalidInstallationError,
    PermissionDeniedError,
)
from ..core.filesystem import (
    ArchiveExtractionError,
    FilesystemError,
    extract_archive,
    free_space,
    permission_errors,
    safe_rmtree,
)
from ..core.platform import PlatformInfo, detect_platform
from .catalog import VersionCatalog
from .downloader import ArchiveDownloader
from .transaction import InstallationTransaction
from .verifier import has_valid_binary
from .version import Version

logger = logging.getLogger(__name__)

SPACE_FACTOR = 2


@dataclass
class InstallResult:
    """Result of an install operation."""

    version: Version
    """Installed version"""

    path: Path
    """Installed version directory"""

    archive_size: int
    """Size of the downloaded archive in bytes"""

    reinstalled: bool
    """Whether an existing directory for the version was replaced"""

    install_time: float
    """Time spent downloading and extracting in seconds"""


class Installer:
    """
    Downloads and installs Go versions into versioned directories.

    Example:
        >>> installer = Installer(catalog, downloader)
        >>> transaction = InstallationTransaction()
        >>> with RollbackSupervisor(layout).guard(transaction):
        ...     result = installer.install(Version("1.23.1"), transaction)
        >>> print(result.path)
        /usr/local/go-1.23.1
    """

    def __init__(
        self,
        catalog: VersionCatalog,
        downloader: ArchiveDownloader,
        platform: Optional[PlatformInfo] = None,
    ):
        """
        Initialize installer.

        Args:
            catalog: Version catalog (provides layout and version store)
            downloader: Archive downloader
            platform: Target platform (detected if None)
        """
        self.catalog = catalog
        self.layout: InstallLayout = catalog.layout
        self.store = catalog.store
        self.downloader = downloader
        self.platform = platform

    def install(
        self, version: Version, transaction: InstallationTransaction
    ) -> InstallResult:
        """
        Install a version.

        Args:
            version: Version to install
            transaction: Transaction to record progress in

        Returns:
            InstallResult with installation details

        Raises:
            PermissionDeniedError: If the install root is not writable
            DownloadFailedError: If the download fails
            CorruptArchiveError: If the archive is unreadable or cannot be extracted
            InsufficientSpaceError: If free space is below twice the archive size
            InvalidInstallationError: If the archive holds no executable bin/go
            InstallationFailedError: If another filesystem step fails
        """
        install_root = self.layout.install_root
        platform = self.platform or detect_platform()
        start = time.time()

        self._ensure_install_root()

        transaction.begin(version, self.catalog.pointer_target())
        transaction.archive_path = self.downloader.scratch_path(version, platform)

        archive_path = self.downloader.fetch(version, platform)
        archive_size = archive_path.stat().st_size

        available = free_space(install_root)
        required = SPACE_FACTOR * archive_size
        if available < required:
            archive_path.unlink(missing_ok=True)
            raise InsufficientSpaceError(install_root, required, available)

        staging_dir = self.layout.staging_dir(version)
        transaction.staging_dir = staging_dir

        try:
            with permission_errors(install_root, "write to"):
                if staging_dir.exists() or staging_dir.is_symlink():
                    safe_rmtree(staging_dir, require_prefix=install_root)

                logger.info(f"Extracting to {staging_dir}...")
                try:
                    extract_archive(archive_path, staging_dir)
                except ArchiveExtractionError as e:
                    raise CorruptArchiveError(f"Failed to extract {archive_path.name}: {e}") from e

                staged_root = self._normalize_root_directory(staging_dir)
                if not has_valid_binary(staged_root):
                    raise InvalidInstallationError(staged_root)

                reinstalled = self.store.get(version) is not None
                transaction.owns_directory = True
                if reinstalled:
                    logger.info(f"Replacing existing installation of Go {version}")
                    self.store.remove(version)

                installed = self.store.create(version, staged_root)

                archive_path.unlink(missing_ok=True)
                if staging_dir.exists():
                    safe_rmtree(staging_dir, require_prefix=install_root)
        except (OSError, FilesystemError) as e:
            raise InstallationFailedError(f"Installation of Go {version} failed: {e}") from e

        transaction.complete()

        elapsed = time.time() - start
        logger.info(f"Installed Go {version} to {installed.path} in {elapsed:.2f}s")

        return InstallResult(
            version=version,
            path=installed.path,
            archive_size=archive_size,
            reinstalled=reinstalled,
            install_time=elapsed,
        )

    def _ensure_install_root(self) -> None:
        install_root = self.layout.install_root
        with permission_errors(install_root, "create"):
            install_root.mkdir(parents=True, exist_ok=True)
        if not verify_directory_writable(install_root):
            raise PermissionDeniedError(install_root, "write to")

    def _normalize_root_directory(self, extract_dir: Path) -> Path:
        """
        Normalize extracted directory structure.

        Go archives have a single go/ root folder; anything else is taken
        as extracted directly.

        Args:
            extract_dir: Directory where archive was extracted

        Returns:
            Path to the installation root directory
        """
        items = list(extract_dir.iterdir())

        if len(items) == 1 and items[0].is_dir() and not items[0].is_symlink():
            return items[0]

        return extract_dir

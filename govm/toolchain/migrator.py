"""
Legacy installation migration.

Converts a single-version layout (a real go/ directory at the well-known
path) into the multi-version layout: the directory becomes go-<version> and
the well-known path becomes a pointer to it. A copy of the legacy directory
is kept at go.backup until the migrated installation has been verified.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from ..core.directory import InstallLayout, verify_directory_writable
from ..core.exceptions import (
    MigrationFailedError,
    PermissionDeniedError,
    VersionUndeterminableError,
)
from ..core.filesystem import (
    FilesystemError,
    permission_errors,
    recursive_copy,
    replace_symlink,
    safe_rmtree,
)
from .catalog import VersionCatalog
from .transaction import InstallationTransaction
from .verifier import has_valid_binary, query_version, verify_installation
from .version import Version

logger = logging.getLogger(__name__)

ConfirmCallback = Callable[[Version, Path], bool]


@dataclass
class MigrationResult:
    """Result of a migration attempt."""

    version: Optional[Version] = None
    """Version of the legacy installation"""

    migrated: bool = False
    """Whether the layout was converted"""

    path: Optional[Path] = None
    """Versioned directory holding the former legacy installation"""

    backup_removed: bool = False


class LegacyMigrator:
    """
    Migrates a legacy installation into a versioned directory.

    Example:
        >>> migrator = LegacyMigrator(catalog)
        >>> transaction = InstallationTransaction()
        >>> with RollbackSupervisor(layout).guard(transaction):
        ...     result = migrator.migrate(transaction, unattended=True)
        >>> result.path
        PosixPath('/usr/local/go-1.20.0')
    """

    def __init__(self, catalog: VersionCatalog):
        self.catalog = catalog
        self.layout: InstallLayout = catalog.layout
        self.store = catalog.store

    def needs_migration(self) -> bool:
        """Check whether the well-known path holds a legacy installation."""
        return self.catalog.has_legacy_installation()

    def legacy_version(self) -> Version:
        """
        Determine the version of the legacy installation.

        Raises:
            VersionUndeterminableError: If the binary is missing or its
                output has no version
        """
        legacy_path = self.layout.active_path
        binary = InstallLayout.binary_path(legacy_path)

        if not has_valid_binary(legacy_path):
            raise VersionUndeterminableError(
                f"Legacy installation at {legacy_path} has no executable {binary}"
            )

        version = query_version(binary)
        if version is None:
            raise VersionUndeterminableError(
                f"Could not determine the version of the legacy installation at {legacy_path}"
            )
        return version

    def migrate(
        self,
        transaction: InstallationTransaction,
        unattended: bool = False,
        confirm: Optional[ConfirmCallback] = None,
    ) -> MigrationResult:
        """
        Migrate the legacy installation.

        Args:
            transaction: Transaction to record progress in
            unattended: Skip the confirmation step
            confirm: Callback asked for consent in interactive mode; receives
                the legacy version and path. Migration is declined when it is
                None or returns False.

        Returns:
            MigrationResult (migrated=False when there is nothing to migrate
            or the operator declined)

        Raises:
            VersionUndeterminableError: If the legacy version cannot be determined
            PermissionDeniedError: If the install root is not writable
            MigrationFailedError: If a step or the final verification fails
        """
        if not self.needs_migration():
            logger.debug(f"No legacy installation at {self.layout.active_path}")
            return MigrationResult()

        legacy_path = self.layout.active_path
        version = self.legacy_version()
        logger.info(f"Found legacy Go {version} installation at {legacy_path}")

        if not unattended:
            if confirm is None or not confirm(version, legacy_path):
                logger.info("Migration declined; legacy installation left unchanged")
                return MigrationResult(version=version)

        install_root = self.layout.install_root
        if not verify_directory_writable(install_root):
            raise PermissionDeniedError(install_root, "write to")

        backup_path = self.layout.backup_path
        if backup_path.exists() or backup_path.is_symlink():
            raise MigrationFailedError(
                f"A backup from an earlier migration already exists at {backup_path}",
                remedy=f"Inspect {backup_path} and remove it (or move it back to {legacy_path}) before retrying",
            )

        target_dir = self.layout.version_dir(version)
        transaction.begin(version, previous_target=None)

        try:
            with permission_errors(install_root, "migrate the installation in"):
                logger.info(f"Backing up {legacy_path} to {backup_path}...")
                transaction.backup_path = backup_path
                recursive_copy(legacy_path, backup_path)

                transaction.owns_directory = True
                if self.store.get(version) is not None:
                    logger.warning(f"Replacing existing directory {target_dir} with the legacy installation")
                    self.store.remove(version)

                os.rename(legacy_path, target_dir)
                logger.info(f"Moved {legacy_path} -> {target_dir}")

                replace_symlink(legacy_path, target_dir)
                logger.info(f"Created active version pointer: {legacy_path} -> {target_dir}")
        except (OSError, FilesystemError) as e:
            raise MigrationFailedError(f"Migration of Go {version} failed: {e}") from e

        check = verify_installation(legacy_path, expected=version)
        if not check.passed:
            raise MigrationFailedError(
                f"Migrated installation failed verification: {check.message}"
            )

        transaction.complete()

        result = MigrationResult(version=version, migrated=True, path=target_dir)
        try:
            safe_rmtree(backup_path, require_prefix=install_root)
            result.backup_removed = True
        except (OSError, FilesystemError) as e:
            logger.warning(f"Migration succeeded but the backup could not be removed: {backup_path} ({e})")

        logger.info(f"Migrated legacy Go {version} to {target_dir}")
        return result

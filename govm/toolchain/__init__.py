"""
Go toolchain management for govm.

This module provides functionality for:
- Version parsing and ordering
- Discovery of installed and active versions
- Archive download, installation and rollback
- Switching the active version
- Legacy layout migration and cleanup of unused versions
"""

from govm.toolchain.catalog import (
    ActiveVersion,
    FilesystemVersionStore,
    InstalledVersion,
    VersionCatalog,
    VersionStore,
)
from govm.toolchain.cleanup import (
    CleanupChoice,
    CleanupMode,
    CleanupResult,
    VersionCleanupManager,
)
from govm.toolchain.downloader import ArchiveDownloader, archive_name
from govm.toolchain.installer import InstallResult, Installer
from govm.toolchain.linking import ActiveVersionSwitcher, SwitchResult
from govm.toolchain.migrator import LegacyMigrator, MigrationResult
from govm.toolchain.remote import RemoteVersionOracle
from govm.toolchain.transaction import InstallationTransaction, RollbackSupervisor
from govm.toolchain.version import Version, is_valid_version, normalize_version

__all__ = [
    # Version
    "Version",
    "normalize_version",
    "is_valid_version",
    # Catalog
    "ActiveVersion",
    "InstalledVersion",
    "VersionStore",
    "FilesystemVersionStore",
    "VersionCatalog",
    # Remote / download
    "RemoteVersionOracle",
    "ArchiveDownloader",
    "archive_name",
    # Install / switch
    "Installer",
    "InstallResult",
    "ActiveVersionSwitcher",
    "SwitchResult",
    "InstallationTransaction",
    "RollbackSupervisor",
    # Migration / cleanup
    "LegacyMigrator",
    "MigrationResult",
    "VersionCleanupManager",
    "CleanupChoice",
    "CleanupMode",
    "CleanupResult",
]

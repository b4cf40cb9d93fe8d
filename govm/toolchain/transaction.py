"""
Installation transactions and rollback.

An InstallationTransaction records what an install or migration has changed
so far. RollbackSupervisor.guard() wraps the operation and, only when it
fails, undoes those changes:

    1. remove the staging directory
    2. remove the versioned directory if the transaction created it
    3. remove the scratch archive
    4. restore the legacy backup (migration) or the previous pointer target

Rollback is best-effort: failed removals are logged and not retried. A
migration whose backup cannot be restored raises
MigrationUnrecoverableError.
"""

import logging
import os
from contextlib import contextmanager
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Iterator, Optional

from ..core.directory import InstallLayout
from ..core.exceptions import MigrationUnrecoverableError
from ..core.filesystem import replace_symlink, safe_rmtree
from .version import Version

logger = logging.getLogger(__name__)


@dataclass
class InstallationTransaction:
    """Ephemeral record of an in-flight install or migration."""

    version: Optional[Version] = None
    previous_target: Optional[Path] = None
    """Pointer target before the operation began"""

    archive_path: Optional[Path] = None
    staging_dir: Optional[Path] = None

    owns_directory: bool = False
    """Set once the versioned directory holds this operation's content"""

    backup_path: Optional[Path] = None
    """Legacy backup to restore on failure (migration only)"""

    completed: bool = False

    def begin(self, version: Version, previous_target: Optional[Path]) -> None:
        """Start recording an operation for version."""
        self.clear()
        self.version = version
        self.previous_target = previous_target
        logger.debug(f"Transaction started for {version} (previous target: {previous_target})")

    def complete(self) -> None:
        """Mark the operation successful and drop the recorded state."""
        version = self.version
        self.clear()
        self.completed = True
        logger.debug(f"Transaction completed for {version}")

    def clear(self) -> None:
        """Reset every field to its default."""
        for f in fields(self):
            setattr(self, f.name, f.default)

    @property
    def active(self) -> bool:
        """True while an operation is recorded and not completed."""
        return self.version is not None and not self.completed


class RollbackSupervisor:
    """
    Undoes a failed install or migration from its transaction record.

    Example:
        >>> supervisor = RollbackSupervisor(layout)
        >>> transaction = InstallationTransaction()
        >>> with supervisor.guard(transaction):
        ...     installer.install(version, transaction)
    """

    def __init__(self, layout: InstallLayout):
        self.layout = layout

    @contextmanager
    def guard(self, transaction: InstallationTransaction) -> Iterator[InstallationTransaction]:
        """
        Run a block and roll the transaction back if the block fails.

        Any exception (including KeyboardInterrupt and SystemExit) triggers
        rollback; the original exception is re-raised afterwards. Successful
        blocks leave the filesystem untouched.
        """
        try:
            yield transaction
        except BaseException as e:
            if transaction.active:
                logger.warning(f"Operation failed ({type(e).__name__}), rolling back...")
                self.rollback(transaction)
            raise

    def rollback(self, transaction: InstallationTransaction) -> None:
        """
        Undo the changes recorded in a transaction.

        Raises:
            MigrationUnrecoverableError: If a legacy backup cannot be restored
        """
        version = transaction.version

        if transaction.staging_dir is not None:
            self._remove_tree(transaction.staging_dir, "staging directory")

        if version is not None and transaction.owns_directory:
            self._remove_tree(self.layout.version_dir(version), "partial installation")

        if transaction.archive_path is not None and transaction.archive_path.exists():
            try:
                transaction.archive_path.unlink()
                logger.warning(f"Removed scratch archive: {transaction.archive_path}")
            except OSError as e:
                logger.error(f"Failed to remove scratch archive {transaction.archive_path}: {e}")

        if transaction.backup_path is not None:
            self._restore_backup(transaction.backup_path)
        elif transaction.previous_target is not None:
            self._restore_pointer(transaction.previous_target)

        transaction.clear()

    def _remove_tree(self, path: Path, description: str) -> None:
        if not path.exists() or path.is_symlink():
            return
        try:
            safe_rmtree(path, require_prefix=self.layout.install_root)
            logger.warning(f"Removed {description}: {path}")
        except Exception as e:
            logger.error(f"Failed to remove {description} {path}: {e}")

    def _restore_pointer(self, previous_target: Path) -> None:
        active_path = self.layout.active_path
        try:
            replace_symlink(active_path, previous_target)
            logger.warning(f"Restored active version pointer: {active_path} -> {previous_target}")
        except OSError as e:
            logger.error(
                f"Failed to restore active version pointer {active_path} -> {previous_target}: {e}"
            )

    def _restore_backup(self, backup_path: Path) -> None:
        active_path = self.layout.active_path

        if not backup_path.exists():
            if active_path.is_dir() and not active_path.is_symlink():
                return
            raise MigrationUnrecoverableError(
                f"Migration failed and backup {backup_path} is missing; "
                f"{active_path} could not be restored",
                backup_path=backup_path,
            )

        if active_path.is_dir() and not active_path.is_symlink():
            # Legacy directory never moved; the backup is redundant
            self._remove_tree(backup_path, "redundant backup")
            return

        try:
            if active_path.is_symlink():
                active_path.unlink()
                logger.warning(f"Removed active version pointer: {active_path}")

            os.rename(backup_path, active_path)
            logger.warning(f"Restored legacy installation from backup: {backup_path} -> {active_path}")
        except Exception as e:
            raise MigrationUnrecoverableError(
                f"Migration failed and the legacy installation could not be restored: {e}",
                backup_path=backup_path,
            ) from e

"""
Migrate command implementation.

Converts a single-version Go installation into the versioned layout.
"""

import logging

from govm.cli.utils import (
    CommandContext,
    confirm_migration,
    load_context,
    print_warning,
    safe_print,
)
from govm.toolchain.transaction import InstallationTransaction

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the migrate command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    ctx = load_context(args)

    if not ctx.catalog.has_legacy_installation():
        safe_print(f"Nothing to migrate: {ctx.layout.active_path} is not a legacy installation")
        return 0

    return run_migration(ctx)


def run_migration(ctx: CommandContext) -> int:
    """
    Migrate the legacy installation under the rollback guard.

    Shared with the install command, which migrates instead of installing
    when it finds a legacy installation.

    Returns:
        Exit code (0 for success or when the operator declines)
    """
    migrator = ctx.migrator()
    transaction = InstallationTransaction()

    with ctx.supervisor().guard(transaction):
        result = migrator.migrate(
            transaction,
            unattended=ctx.unattended,
            confirm=confirm_migration,
        )

    if not result.migrated:
        safe_print("Migration cancelled; the existing installation was left unchanged")
        return 0

    safe_print(f"✓ Migrated Go {result.version} to {result.path}")
    safe_print(f"  {ctx.layout.active_path} -> {result.path}")
    if not result.backup_removed:
        print_warning(f"Backup left at {ctx.layout.backup_path}; remove it manually")
    return 0

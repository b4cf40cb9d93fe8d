"""
Cleanup command implementation.

Removes installed Go versions other than the active one.
"""

import logging

from govm.cli.utils import (
    CommandContext,
    format_size,
    load_context,
    print_error,
    prompt_cleanup_choice,
    safe_print,
)

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the cleanup command.

    Args:
        args: Parsed command-line arguments with:
            - dry_run: Only report what would be removed

    Returns:
        Exit code (0 for success, 1 if any removal failed)
    """
    ctx = load_context(args)
    return run_cleanup(ctx, dry_run=args.dry_run)


def run_cleanup(ctx: CommandContext, dry_run: bool = False) -> int:
    """Run cleanup with the context's unattended setting."""
    manager = ctx.cleanup_manager()

    result = manager.cleanup(
        unattended=ctx.unattended,
        chooser=prompt_cleanup_choice,
        dry_run=dry_run,
    )

    if not result.removed and not result.failed:
        safe_print("Nothing removed")
        return 0

    verb = "Would remove" if dry_run else "Removed"
    for version in result.removed:
        safe_print(f"✓ {verb} Go {version}")
    safe_print(f"Space reclaimed: {format_size(result.space_reclaimed)}")

    if result.failed:
        for error in result.errors:
            print_error(error)
        return 1
    return 0

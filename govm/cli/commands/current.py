"""
Current command implementation.

Shows the Go installation currently in effect.
"""

import logging

from govm.cli.utils import load_context, safe_print, warn_dangling_pointer

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the current command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 if an active version was found, 1 otherwise)
    """
    ctx = load_context(args)
    dangling = warn_dangling_pointer(ctx)
    active = ctx.catalog.active_version()

    if active is None:
        safe_print("No Go installation found")
        return 1

    if dangling and not active.binary_path.exists():
        safe_print(f"Go {active.version} is selected but not installed")
        safe_print(f"  Run 'govm install {active.version}' to restore it")
        return 1

    safe_print(f"Go {active.version}")
    safe_print(f"  Binary: {active.binary_path}")
    safe_print(f"  Root:   {active.install_root}")
    if active.legacy:
        safe_print("  Legacy single-version installation (run 'govm migrate')")
    return 0

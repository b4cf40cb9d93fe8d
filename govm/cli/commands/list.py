"""
List command implementation.

Lists installed Go versions, newest first, marking the active one.
"""

import logging

from govm.cli.utils import load_context, safe_print, warn_dangling_pointer
from govm.core.exceptions import RemoteUnavailableError

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the list command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success)
    """
    ctx = load_context(args)
    catalog = ctx.catalog
    warn_dangling_pointer(ctx)

    installed = catalog.list_installed()
    active = catalog.active_version()
    active_version = active.version if active is not None else None

    if not installed:
        safe_print(f"No Go versions installed under {ctx.layout.install_root}")
    else:
        safe_print(f"Installed Go versions ({ctx.layout.install_root}):")
        for entry in installed:
            marker = "*" if entry.version == active_version else " "
            safe_print(f"  {marker} {entry.version}")

    if active is not None and active.legacy:
        safe_print(f"  * {active.version} (legacy installation at {active.install_root})")

    try:
        latest = ctx.oracle().latest_version()
    except RemoteUnavailableError as e:
        logger.debug(f"Latest version unavailable: {e}")
    else:
        safe_print("")
        safe_print(f"Latest available: {latest}")

    return 0

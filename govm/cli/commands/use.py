"""
Use command implementation.

Switches the active Go version to an installed one.
"""

import logging

from govm.cli.utils import load_context, print_warning, safe_print
from govm.toolchain.version import Version

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the use command.

    Args:
        args: Parsed command-line arguments with:
            - version: Installed version to activate

    Returns:
        Exit code (0 for success)
    """
    version = Version.parse(args.version)
    ctx = load_context(args)

    result = ctx.switcher().switch_to(version)

    safe_print(f"✓ Now using Go {result.version} ({result.target})")
    if not result.confirmed:
        print_warning(
            f"{ctx.layout.active_path}/bin/go reports {result.reported_version}, "
            f"expected {result.version}"
        )
    return 0

"""
Install command implementation.

Installs a Go version (the latest published one by default), makes it the
active version and configures the shell environment for it.
"""

import logging

from govm.cli.commands.cleanup import run_cleanup
from govm.cli.commands.migrate import run_migration
from govm.cli.utils import (
    CommandContext,
    confirm,
    format_size,
    format_success_message,
    load_context,
    print_warning,
    safe_print,
)
from govm.core.environment import (
    configure_environment,
    detect_profile_file,
    export_lines,
    update_profile,
)
from govm.core.filesystem import permission_errors
from govm.toolchain.transaction import InstallationTransaction
from govm.toolchain.version import Version

logger = logging.getLogger(__name__)


def run(args) -> int:
    """
    Run the install command.

    Args:
        args: Parsed command-line arguments with:
            - version: Version to install (latest if None)
            - force: Reinstall an already installed version
            - no_profile: Skip shell profile edits

    Returns:
        Exit code (0 for success)
    """
    requested = Version.parse(args.version) if args.version else None
    ctx = load_context(args)
    catalog = ctx.catalog

    if catalog.has_legacy_installation():
        safe_print(
            f"{ctx.layout.active_path} is a single-version installation; "
            "it must be migrated before another version can be installed."
        )
        code = run_migration(ctx)
        if code == 0 and not catalog.has_legacy_installation():
            safe_print("Re-run the install command to continue.")
        return code

    if requested is None:
        safe_print("Looking up the latest Go version...")
        version = ctx.oracle().latest_version()
    else:
        version = requested

    active = catalog.active_version()
    if (
        active is not None
        and active.version == version
        and catalog.is_installed(version)
        and not args.force
    ):
        safe_print(f"✓ Go {version} is already installed and active")
        _configure_environment(ctx, args.no_profile)
        return 0

    installed = None
    if args.force or not catalog.is_installed(version):
        transaction = InstallationTransaction()
        with ctx.supervisor().guard(transaction):
            installed = ctx.installer().install(version, transaction)
    else:
        safe_print(f"Go {version} is already installed; switching to it")

    switch = ctx.switcher().switch_to(version)
    if not switch.confirmed:
        print_warning(
            f"Active binary reports {switch.reported_version}, expected {version}"
        )

    details = {
        "Version": str(version),
        "Location": str(switch.target),
        "Active link": f"{ctx.layout.active_path} -> {switch.target}",
    }
    if installed is not None:
        details["Archive size"] = format_size(installed.archive_size)
        if installed.reinstalled:
            details["Reinstalled"] = "yes"

    next_steps = _configure_environment(ctx, args.no_profile)
    safe_print(format_success_message(f"✓ Go {version} is ready", details, next_steps))

    if not ctx.unattended and ctx.cleanup_manager().removable_versions():
        if confirm("Remove other installed Go versions?", default=False):
            return run_cleanup(ctx)

    return 0


def _configure_environment(ctx: CommandContext, skip_profile: bool) -> list:
    """Apply the environment contract; return next steps for the operator."""
    configure_environment(ctx.settings)

    if skip_profile:
        return ['Set up your shell with: eval "$(govm env)"']

    profile = detect_profile_file()
    with permission_errors(profile, "update"):
        added = update_profile(profile, export_lines(ctx.settings))

    if added:
        return [f"Open a new shell or run: source {profile}"]
    return []

"""
Shared utilities for CLI commands.

Provides the command context (settings and the toolchain components built
from them), operator prompts and consistent output formatting.
"""

import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..core.config import Settings, load_settings
from ..core.directory import InstallLayout
from ..toolchain.catalog import InstalledVersion, VersionCatalog
from ..toolchain.cleanup import CleanupChoice, VersionCleanupManager
from ..toolchain.downloader import ArchiveDownloader
from ..toolchain.installer import Installer
from ..toolchain.linking import ActiveVersionSwitcher
from ..toolchain.migrator import LegacyMigrator
from ..toolchain.remote import RemoteVersionOracle
from ..toolchain.transaction import RollbackSupervisor
from ..toolchain.version import Version

logger = logging.getLogger(__name__)


# ============================================================================
# Command Context
# ============================================================================


@dataclass
class CommandContext:
    """Settings plus the components a command works with."""

    settings: Settings
    layout: InstallLayout
    catalog: VersionCatalog

    @property
    def unattended(self) -> bool:
        return self.settings.silent

    def oracle(self) -> RemoteVersionOracle:
        return RemoteVersionOracle(
            self.settings.index_url, timeout=self.settings.request_timeout
        )

    def downloader(self) -> ArchiveDownloader:
        return ArchiveDownloader(
            self.settings.scratch_dir,
            base_url=self.settings.download_base_url,
            timeout=self.settings.download_timeout,
            max_retries=self.settings.download_retries,
        )

    def installer(self) -> Installer:
        return Installer(self.catalog, self.downloader())

    def switcher(self) -> ActiveVersionSwitcher:
        return ActiveVersionSwitcher(self.catalog)

    def migrator(self) -> LegacyMigrator:
        return LegacyMigrator(self.catalog)

    def cleanup_manager(self) -> VersionCleanupManager:
        return VersionCleanupManager(self.catalog)

    def supervisor(self) -> RollbackSupervisor:
        return RollbackSupervisor(self.layout)


def load_context(args, search_paths: Optional[List[Path]] = None) -> CommandContext:
    """
    Build the command context from parsed global arguments.

    Args:
        args: Parsed arguments (config, install_root, silent)
        search_paths: Directories searched for `go` (uses PATH if None)

    Raises:
        ConfigurationError: If the configuration is invalid
    """
    settings = load_settings(
        config_file=getattr(args, "config", None),
        install_root=getattr(args, "install_root", None),
        silent=True if getattr(args, "silent", False) else None,
    )
    layout = InstallLayout(settings.install_root)
    catalog = VersionCatalog(layout, search_paths=search_paths)
    return CommandContext(settings=settings, layout=layout, catalog=catalog)


# ============================================================================
# Operator Prompts
# ============================================================================


def confirm(question: str, default: bool = True) -> bool:
    """
    Ask a yes/no question on the terminal.

    End of input is treated as "no".

    Args:
        question: Question text (without the [Y/n] suffix)
        default: Answer used for an empty response
    """
    suffix = "[Y/n]" if default else "[y/N]"
    try:
        response = input(f"{question} {suffix} ").strip().lower()
    except EOFError:
        print()
        return False

    if not response:
        return default
    return response in ("y", "yes")


def _parse_indices(text: str) -> List[int]:
    indices = []
    for token in text.replace(",", " ").split():
        try:
            indices.append(int(token))
        except ValueError:
            print_warning(f"Ignoring invalid selection: {token}")
    return indices


def prompt_cleanup_choice(removable: List[InstalledVersion]) -> CleanupChoice:
    """
    Ask which unused versions to remove.

    Entries are numbered from 1 in the order shown, which is the removable
    list only.
    """
    print("Installed versions that are not active:")
    for index, entry in enumerate(removable, start=1):
        print(f"  {index}) Go {entry.version}  ({entry.path})")
    print()

    try:
        response = input("Remove [a]ll, [s]elected, or [n]one? [n] ").strip().lower()
        if response in ("a", "all"):
            return CleanupChoice.all()
        if response in ("s", "selected"):
            selection = input("Numbers to remove (space or comma separated): ")
            return CleanupChoice.selected(_parse_indices(selection))
    except EOFError:
        print()

    return CleanupChoice.none()


def confirm_migration(version: Version, legacy_path: Path) -> bool:
    """Ask for consent to migrate a legacy installation."""
    print(f"Found a single-version Go {version} installation at {legacy_path}.")
    print("govm keeps each version in its own directory and selects one with a symlink.")
    return confirm(f"Move it to go-{version} and create the {legacy_path.name} symlink?")


# ============================================================================
# User Interface / Output Formatting
# ============================================================================


def format_success_message(
    title: str,
    details: Dict[str, Any],
    next_steps: Optional[list] = None,
    width: int = 70,
) -> str:
    """
    Format a standardized success message.

    Args:
        title: Success message title
        details: Key-value pairs to display
        next_steps: Optional list of next step instructions
        width: Width of message box

    Returns:
        Formatted message string
    """
    lines = []
    lines.append("=" * width)
    lines.append(title)
    lines.append("=" * width)
    lines.append("")

    for key, value in details.items():
        lines.append(f"{key}: {value}")

    if next_steps:
        lines.append("")
        lines.append("Next steps:")
        for step in next_steps:
            lines.append(f"  {step}")

    lines.append("")
    return "\n".join(lines)


def format_size(size: int) -> str:
    """Human-readable byte count."""
    return f"{size / 1024 / 1024:.1f} MB"


def print_error(message: str, details: Optional[str] = None):
    """
    Print error message to stderr in consistent format.

    Args:
        message: Main error message
        details: Optional additional details (e.g. the remedy)
    """
    print(f"ERROR: {message}", file=sys.stderr)
    if details:
        print(f"  {details}", file=sys.stderr)


def print_warning(message: str):
    """Print warning message to stderr."""
    print(f"WARNING: {message}", file=sys.stderr)


def warn_dangling_pointer(ctx: CommandContext) -> bool:
    """
    Warn when the active pointer resolves to a directory that is gone.

    Returns:
        True if a warning was printed
    """
    switcher = ctx.switcher()
    target = switcher.current_target()
    if target is None or switcher.is_valid_link():
        return False
    print_warning(f"{ctx.layout.active_path} points to {target}, which does not exist")
    return True


def safe_print(message: str, file=None):
    """
    Print message with safe encoding handling for limited consoles.

    Falls back to ASCII markers if Unicode symbols can't be encoded.

    Args:
        message: Message to print
        file: Output file (default: stdout)
    """
    try:
        print(message, file=file)
    except UnicodeEncodeError:
        safe_message = (
            message.replace("✓", "[OK]")
            .replace("✗", "[ERROR]")
            .replace("→", "->")
        )
        print(safe_message.encode("ascii", "replace").decode("ascii"), file=file)

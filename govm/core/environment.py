"""
Environment contract for the active Go installation.

Sets GOPATH/GOBIN for the current process, extends PATH with the active
binary directory and GOBIN, and appends the matching export lines to the
user's shell profile when they are not already present.
"""

import logging
import os
from pathlib import Path
from typing import Dict, List, MutableMapping, Optional

from .config import Settings
from .directory import InstallLayout
from .filesystem import atomic_write

logger = logging.getLogger(__name__)

PROFILE_MARKER = "# Added by govm"


def detect_profile_file(
    shell: Optional[str] = None, home: Optional[Path] = None
) -> Path:
    """
    Pick the shell initialization file for the user's login shell.

    Args:
        shell: Shell path (defaults to $SHELL)
        home: Home directory (defaults to the current user's)

    Returns:
        ~/.zshrc for zsh, ~/.bashrc for bash, ~/.profile otherwise
    """
    if shell is None:
        shell = os.environ.get("SHELL", "")
    if home is None:
        home = Path.home()

    shell_name = Path(shell).name
    if shell_name == "zsh":
        return home / ".zshrc"
    if shell_name == "bash":
        return home / ".bashrc"
    return home / ".profile"


def environment_variables(settings: Settings) -> Dict[str, str]:
    """Get the GOPATH/GOBIN values for the given settings."""
    return {
        "GOPATH": str(settings.gopath),
        "GOBIN": str(settings.gobin),
    }


def path_entries(settings: Settings) -> List[str]:
    """Directories that must be on PATH, in order."""
    layout = InstallLayout(settings.install_root)
    return [str(layout.active_bin_dir), str(settings.gobin)]


def export_lines(settings: Settings) -> List[str]:
    """
    Shell lines that reproduce the environment contract.

    Example:
        >>> export_lines(Settings(install_root=Path("/usr/local")))[0]
        'export GOPATH=/home/user/go'
    """
    lines = [f"export {name}={value}" for name, value in environment_variables(settings).items()]
    for entry in path_entries(settings):
        lines.append(f"export PATH=$PATH:{entry}")
    return lines


def configure_environment(
    settings: Settings, environ: Optional[MutableMapping[str, str]] = None
) -> MutableMapping[str, str]:
    """
    Apply the environment contract to a process environment.

    PATH entries are appended only when missing, so repeated calls are
    idempotent.

    Args:
        settings: Resolved settings
        environ: Environment to update (defaults to os.environ)

    Returns:
        The updated environment mapping
    """
    if environ is None:
        environ = os.environ

    environ.update(environment_variables(settings))

    current = [p for p in environ.get("PATH", "").split(os.pathsep) if p]
    for entry in path_entries(settings):
        if entry not in current:
            current.append(entry)
    environ["PATH"] = os.pathsep.join(current)

    logger.debug(f"Configured environment: GOPATH={environ['GOPATH']}")
    return environ


def update_profile(profile_path: Path, lines: List[str]) -> List[str]:
    """
    Append lines to a shell profile if they are not already present.

    Args:
        profile_path: Shell initialization file (created if missing)
        lines: Lines to ensure

    Returns:
        Lines that were actually appended (empty if nothing changed)
    """
    existing = ""
    if profile_path.exists():
        existing = profile_path.read_text(encoding="utf-8")

    present = {line.strip() for line in existing.splitlines()}
    missing = [line for line in lines if line.strip() not in present]

    if not missing:
        logger.debug(f"Profile already configured: {profile_path}")
        return []

    content = existing
    if content and not content.endswith("\n"):
        content += "\n"
    if PROFILE_MARKER not in present:
        content += f"\n{PROFILE_MARKER}\n"
    content += "\n".join(missing) + "\n"

    atomic_write(profile_path, content)
    logger.info(f"Updated {profile_path} ({len(missing)} line(s) added)")
    return missing

"""
Go installation verification.

An installation root is valid only when bin/go exists and is executable.
The version an installation reports is taken from `go version` output.
"""

import logging
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from ..core.directory import InstallLayout
from ..core.filesystem import is_executable_file
from .version import Version

logger = logging.getLogger(__name__)

VERSION_QUERY_TIMEOUT = 10


@dataclass
class CheckResult:
    """Result of a single verification check."""

    name: str
    passed: bool
    message: str
    version: Optional[Version] = None
    details: Dict[str, Any] = field(default_factory=dict)


def has_valid_binary(root: Path) -> bool:
    """Check the binary invariant for an installation root."""
    return is_executable_file(InstallLayout.binary_path(root))


def query_version(
    binary: Path, timeout: int = VERSION_QUERY_TIMEOUT
) -> Optional[Version]:
    """
    Ask a go binary for its self-reported version.

    Args:
        binary: Path to the go executable
        timeout: Seconds to wait for the command

    Returns:
        Parsed version, or None if the binary cannot run or its output
        has no version token
    """
    try:
        result = subprocess.run(
            [str(binary), "version"],
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired:
        logger.debug(f"'{binary} version' timed out after {timeout} seconds")
        return None
    except OSError as e:
        logger.debug(f"Failed to run '{binary} version': {e}")
        return None

    if result.returncode != 0:
        logger.debug(
            f"'{binary} version' exited with code {result.returncode}: {result.stderr.strip()}"
        )
        return None

    version = Version.from_text(result.stdout)
    if version is None:
        logger.debug(f"No version in output of '{binary} version': {result.stdout!r}")
    return version


def verify_installation(
    root: Path, expected: Optional[Version] = None
) -> CheckResult:
    """
    Verify an installation root runs and reports the expected version.

    Args:
        root: Installation root (or the active pointer path)
        expected: Version the binary must report, if known

    Returns:
        CheckResult with the reported version
    """
    binary = InstallLayout.binary_path(root)

    if not is_executable_file(binary):
        return CheckResult(
            name="binary",
            passed=False,
            message=f"Executable not found at expected location: {binary}",
        )

    reported = query_version(binary)
    if reported is None:
        return CheckResult(
            name="version",
            passed=False,
            message=f"Could not determine version reported by {binary}",
        )

    if expected is not None and reported != expected:
        return CheckResult(
            name="version",
            passed=False,
            message=f"Expected version {expected}, binary reports {reported}",
            version=reported,
        )

    return CheckResult(
        name="version",
        passed=True,
        message=f"Version {reported} confirmed",
        version=reported,
    )

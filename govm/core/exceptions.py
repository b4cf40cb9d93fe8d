"""
Centralized exception hierarchy for govm.

Every component raises one of these typed failures instead of terminating
the process. Only the CLI decides the exit status.
"""

from typing import Optional


# ============================================================================
# Base Exceptions
# ============================================================================


class GovmError(Exception):
    """Base exception for all govm errors."""

    remedy: Optional[str] = None

    def __init__(self, message: str, remedy: Optional[str] = None):
        super().__init__(message)
        if remedy is not None:
            self.remedy = remedy


class ConfigurationError(GovmError):
    """Raised when the configuration file cannot be read or parsed."""

    pass


# ============================================================================
# Platform / Input Exceptions
# ============================================================================


class UnsupportedArchitectureError(GovmError):
    """Host CPU or operating system has no Go distribution."""

    def __init__(self, machine: str):
        self.machine = machine
        super().__init__(f"Unsupported architecture: {machine}")


class InvalidVersionFormatError(GovmError):
    """Version string does not match major.minor[.patch]."""

    remedy = "Expected format: major.minor[.patch], e.g. 1.21.0 or go1.21.0"

    def __init__(self, value: str):
        self.value = value
        super().__init__(f"Invalid version format: '{value}'")


class PermissionDeniedError(GovmError):
    """Filesystem operation needs elevated privileges."""

    remedy = "Re-run with sufficient privileges (e.g. sudo) or choose a writable --install-root"

    def __init__(self, path, action: str = "modify"):
        self.path = path
        super().__init__(f"Permission denied: cannot {action} {path}")


# ============================================================================
# Network Exceptions
# ============================================================================


class RemoteUnavailableError(GovmError):
    """Latest version could not be determined from the remote index."""

    remedy = "Check your internet connection or pass an explicit version"


class DownloadFailedError(GovmError):
    """Archive download failed (network or HTTP error)."""

    remedy = "Check your internet connection or verify the version exists"


class CorruptArchiveError(GovmError):
    """Downloaded archive failed the structural integrity check."""

    remedy = "Re-run the command to download the archive again"


# ============================================================================
# Installation Exceptions
# ============================================================================


class InsufficientSpaceError(GovmError):
    """Not enough free space at the install root."""

    def __init__(self, path, required: int, available: int):
        self.path = path
        self.required = required
        self.available = available
        super().__init__(
            f"Insufficient disk space at {path}: "
            f"need {required / 1024**2:.1f} MB, have {available / 1024**2:.1f} MB"
        )


class VersionNotInstalledError(GovmError):
    """No installed version directory exists for the version."""

    remedy = "Install it first with 'govm install VERSION'"

    def __init__(self, version):
        self.version = version
        super().__init__(f"Go {version} is not installed")


class InstallationFailedError(GovmError):
    """A filesystem step of the install failed; the install was rolled back."""

    remedy = "Check the install root for stray files or links and re-run the command"


class InvalidInstallationError(GovmError):
    """Installed directory is missing an executable go binary."""

    def __init__(self, path):
        self.path = path
        super().__init__(f"Invalid installation (no executable bin/go): {path}")


class SwitchFailedError(GovmError):
    """Active version pointer could not be updated."""

    pass


# ============================================================================
# Migration Exceptions
# ============================================================================


class VersionUndeterminableError(GovmError):
    """Version of a legacy installation could not be determined."""

    pass


class MigrationFailedError(GovmError):
    """Migration failed; the legacy installation was restored."""

    pass


class MigrationUnrecoverableError(GovmError):
    """Migration failed and the legacy installation could not be restored."""

    def __init__(self, message: str, backup_path=None):
        self.backup_path = backup_path
        remedy = None
        if backup_path is not None:
            remedy = f"Manual intervention required: restore the backup at {backup_path}"
        super().__init__(message, remedy)

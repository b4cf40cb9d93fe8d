"""
Core functionality for govm.

This package contains the foundational modules that other components depend on.
"""

from .config import Settings, load_settings, load_yaml_config
from .directory import InstallLayout, verify_directory_writable
from .exceptions import (
    ConfigurationError,
    CorruptArchiveError,
    DownloadFailedError,
    GovmError,
    InsufficientSpaceError,
    InstallationFailedError,
    InvalidInstallationError,
    InvalidVersionFormatError,
    MigrationFailedError,
    MigrationUnrecoverableError,
    PermissionDeniedError,
    RemoteUnavailableError,
    SwitchFailedError,
    UnsupportedArchitectureError,
    VersionNotInstalledError,
    VersionUndeterminableError,
)
from .platform import PlatformInfo, clear_platform_cache, detect_platform

__all__ = [
    # Config
    "Settings",
    "load_settings",
    "load_yaml_config",
    # Layout
    "InstallLayout",
    "verify_directory_writable",
    # Platform
    "PlatformInfo",
    "detect_platform",
    "clear_platform_cache",
    # Exceptions
    "GovmError",
    "ConfigurationError",
    "UnsupportedArchitectureError",
    "InvalidVersionFormatError",
    "PermissionDeniedError",
    "RemoteUnavailableError",
    "DownloadFailedError",
    "CorruptArchiveError",
    "InsufficientSpaceError",
    "VersionNotInstalledError",
    "InstallationFailedError",
    "InvalidInstallationError",
    "SwitchFailedError",
    "VersionUndeterminableError",
    "MigrationFailedError",
    "MigrationUnrecoverableError",
]

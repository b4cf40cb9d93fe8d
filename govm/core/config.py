"""
Configuration loading for govm.

Settings are resolved from, in increasing priority:
    1. Built-in defaults
    2. YAML configuration file (--config, $GOVM_CONFIG, or
       ~/.config/govm/config.yaml)
    3. Environment variables ($GOVM_INSTALL_ROOT, $GOVM_SILENT, $GOPATH)
    4. Explicit overrides (command-line flags)

Example configuration file:

    install_root: /usr/local
    download_timeout: 300
    download_retries: 3
    gopath: ~/go
"""

import logging
import os
import tempfile
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_INDEX_URL = "https://go.dev/dl/"
DEFAULT_DOWNLOAD_BASE_URL = "https://go.dev/dl/"

_TRUTHY = {"1", "true", "yes", "on"}
_PATH_KEYS = {"install_root", "gopath", "scratch_dir"}


@dataclass
class Settings:
    """Resolved govm settings."""

    install_root: Path = Path("/usr/local")
    """Directory holding the active pointer and versioned installations"""

    index_url: str = DEFAULT_INDEX_URL
    """Page queried for the latest published version"""

    download_base_url: str = DEFAULT_DOWNLOAD_BASE_URL
    """Base URL archives are downloaded from"""

    download_timeout: int = 300
    """Per-attempt archive download timeout in seconds"""

    download_retries: int = 3
    """Number of archive download attempts"""

    request_timeout: int = 30
    """Timeout for the version index query in seconds"""

    gopath: Path = field(default_factory=lambda: Path.home() / "go")
    """Go workspace root exported as GOPATH"""

    scratch_dir: Path = field(default_factory=lambda: Path(tempfile.gettempdir()))
    """Where archives are downloaded before extraction"""

    silent: bool = False
    """Unattended mode: no prompts, default decisions"""

    @property
    def gobin(self) -> Path:
        """Binaries output directory nested under GOPATH."""
        return self.gopath / "bin"


def default_config_path() -> Path:
    """Get the default per-user configuration file path."""
    return Path.home() / ".config" / "govm" / "config.yaml"


def load_yaml_config(config_file: Path, required: bool = False) -> Dict[str, Any]:
    """
    Load and parse a YAML configuration file.

    Args:
        config_file: Path to YAML configuration file
        required: If True, raise error if file doesn't exist

    Returns:
        Configuration dictionary (empty dict if file doesn't exist and not required)

    Raises:
        ConfigurationError: If the file is required and missing, or is not valid YAML
    """
    if not config_file.exists():
        if required:
            raise ConfigurationError(f"Configuration file not found: {config_file}")
        logger.debug(f"Config file not found (optional): {config_file}")
        return {}

    logger.debug(f"Loading configuration from {config_file}")

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {config_file}: {e}") from e

    config = config or {}
    if not isinstance(config, dict):
        raise ConfigurationError(
            f"Invalid configuration in {config_file}: expected a mapping"
        )
    return config


def _coerce(key: str, value: Any) -> Any:
    """Convert a raw configuration value to the type of the Settings field."""
    if key in _PATH_KEYS:
        return Path(str(value)).expanduser()
    if key == "silent":
        if isinstance(value, bool):
            return value
        return str(value).strip().lower() in _TRUTHY
    if key in ("download_timeout", "download_retries", "request_timeout"):
        try:
            return int(value)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid value for {key}: {value!r}") from e
    return str(value)


def load_settings(
    config_file: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
    **overrides: Any,
) -> Settings:
    """
    Resolve settings from defaults, config file, environment and overrides.

    Args:
        config_file: Explicit configuration file (must exist if given)
        environ: Environment mapping (defaults to os.environ)
        **overrides: Settings fields to force; None values are ignored

    Returns:
        Resolved Settings

    Raises:
        ConfigurationError: If the configuration is invalid
    """
    if environ is None:
        environ = os.environ

    known = {f.name for f in fields(Settings)}
    values: Dict[str, Any] = {}

    required = config_file is not None
    if config_file is None and environ.get("GOVM_CONFIG"):
        config_file = Path(environ["GOVM_CONFIG"]).expanduser()
        required = True
    if config_file is None:
        config_file = default_config_path()

    for key, value in load_yaml_config(config_file, required=required).items():
        if key not in known:
            logger.warning(f"Ignoring unknown configuration key: {key}")
            continue
        values[key] = _coerce(key, value)

    if environ.get("GOVM_INSTALL_ROOT"):
        values["install_root"] = _coerce("install_root", environ["GOVM_INSTALL_ROOT"])
    if environ.get("GOVM_SILENT"):
        values["silent"] = _coerce("silent", environ["GOVM_SILENT"])
    if environ.get("GOPATH"):
        values["gopath"] = _coerce("gopath", environ["GOPATH"])

    for key, value in overrides.items():
        if value is None:
            continue
        if key not in known:
            raise ConfigurationError(f"Unknown setting: {key}")
        values[key] = _coerce(key, value)

    settings = replace(Settings(), **values)
    logger.debug(f"Resolved settings: {settings}")
    return settings

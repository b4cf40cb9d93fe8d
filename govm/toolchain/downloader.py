"""
Go archive downloader.

Builds the canonical archive name and URL for a (version, platform) pair,
downloads it to a scratch directory and checks that the result is a
readable archive before handing it to the installer.
"""

import logging
from pathlib import Path
from typing import Optional

from ..core.config import DEFAULT_DOWNLOAD_BASE_URL
from ..core.download import DownloadError, download_file
from ..core.exceptions import CorruptArchiveError, DownloadFailedError
from ..core.filesystem import ArchiveExtractionError, verify_archive
from ..core.platform import PlatformInfo, detect_platform
from .version import Version

logger = logging.getLogger(__name__)


def archive_name(version: Version, platform: PlatformInfo) -> str:
    """
    Canonical archive file name.

    Example:
        >>> archive_name(Version("1.21.0"), PlatformInfo("linux", "amd64"))
        'go1.21.0.linux-amd64.tar.gz'
    """
    return f"{version.tag}.{platform.platform_string()}.tar.gz"


class ArchiveDownloader:
    """Downloads and checks Go distribution archives."""

    def __init__(
        self,
        scratch_dir: Path,
        base_url: str = DEFAULT_DOWNLOAD_BASE_URL,
        timeout: int = 300,
        max_retries: int = 3,
    ):
        """
        Initialize downloader.

        Args:
            scratch_dir: Directory archives are downloaded into
            base_url: Base URL of the download site
            timeout: Per-attempt timeout in seconds
            max_retries: Number of download attempts
        """
        self.scratch_dir = Path(scratch_dir)
        self.base_url = base_url if base_url.endswith("/") else base_url + "/"
        self.timeout = timeout
        self.max_retries = max_retries

    def archive_url(self, version: Version, platform: PlatformInfo) -> str:
        """Download URL for the archive of a version."""
        return f"{self.base_url}{archive_name(version, platform)}"

    def scratch_path(self, version: Version, platform: Optional[PlatformInfo] = None) -> Path:
        """Where the archive for a version is downloaded to."""
        return self.scratch_dir / archive_name(version, platform or detect_platform())

    def fetch(self, version: Version, platform: Optional[PlatformInfo] = None) -> Path:
        """
        Download the archive for a version and verify it.

        Args:
            version: Version to download
            platform: Target platform (detected if None)

        Returns:
            Path to the verified archive in the scratch directory

        Raises:
            DownloadFailedError: On network/HTTP failure (no partial file left)
            CorruptArchiveError: If the archive is unreadable (file removed)
        """
        platform = platform or detect_platform()
        url = self.archive_url(version, platform)
        destination = self.scratch_path(version, platform)

        logger.info(f"Downloading Go {version} for {platform.arch}...")

        try:
            download_file(
                url=url,
                destination=destination,
                timeout=self.timeout,
                max_retries=self.max_retries,
            )
        except DownloadError as e:
            destination.unlink(missing_ok=True)
            raise DownloadFailedError(f"Failed to download Go {version}: {e}") from e
        except OSError as e:
            destination.unlink(missing_ok=True)
            raise DownloadFailedError(
                f"Failed to write {destination}: {e}"
            ) from e

        try:
            verify_archive(destination)
        except ArchiveExtractionError as e:
            destination.unlink(missing_ok=True)
            raise CorruptArchiveError(f"Downloaded file is corrupted: {e}") from e

        logger.info(f"Downloaded to {destination}")
        return destination

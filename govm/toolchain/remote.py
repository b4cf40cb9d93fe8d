"""
Remote version oracle.

Queries the Go download index for the newest published version. Every call
performs a fresh request.
"""

import logging

import requests

from ..core.config import DEFAULT_INDEX_URL
from ..core.exceptions import RemoteUnavailableError
from .version import Version

logger = logging.getLogger(__name__)


class RemoteVersionOracle:
    """
    Looks up the latest Go release from the download index page.

    Example:
        >>> oracle = RemoteVersionOracle()
        >>> oracle.latest_version()
        Version('1.23.1')
    """

    def __init__(self, index_url: str = DEFAULT_INDEX_URL, timeout: int = 30):
        self.index_url = index_url
        self.timeout = timeout

    def latest_version(self) -> Version:
        """
        Fetch the index and return the first version-shaped token.

        Raises:
            RemoteUnavailableError: If the request fails or no version is found
        """
        logger.debug(f"Querying {self.index_url} for latest version")

        try:
            response = requests.get(self.index_url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise RemoteUnavailableError(
                f"Failed to fetch the latest Go version from {self.index_url}: {e}"
            ) from e

        version = Version.from_text(response.text)
        if version is None:
            raise RemoteUnavailableError(
                f"No Go version found in response from {self.index_url}"
            )

        logger.info(f"Latest Go version: {version}")
        return version

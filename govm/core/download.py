"""
Network download manager with retry logic.

This module provides:
- HTTP/HTTPS downloads with TLS verification, streamed to disk
- Bounded per-attempt timeout
- Retry with exponential backoff for a fixed number of attempts
- Removal of partial files on failure
"""

import logging
import time
from pathlib import Path

import requests
from requests.exceptions import RequestException

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


class DownloadError(Exception):
    """Exception raised when download fails."""

    pass


def download_file(
    url: str,
    destination: Path,
    timeout: int = 300,
    max_retries: int = 3,
) -> Path:
    """
    Download file from URL to destination with retry logic.

    Args:
        url: URL to download from
        destination: Local path to save file
        timeout: Request timeout in seconds, per attempt
        max_retries: Maximum number of attempts

    Returns:
        Path to downloaded file

    Raises:
        DownloadError: If download fails after all attempts
        ValueError: If URL or destination is invalid

    Example:
        >>> from govm.core.download import download_file
        >>> download_file("https://go.dev/dl/go1.21.0.linux-amd64.tar.gz",
        ...               Path("/tmp/go1.21.0.linux-amd64.tar.gz"))
    """
    if not url:
        raise ValueError("URL cannot be empty")

    if not destination:
        raise ValueError("Destination path cannot be empty")

    if max_retries < 1:
        raise ValueError("max_retries must be at least 1")

    destination = Path(destination)
    destination.parent.mkdir(parents=True, exist_ok=True)

    for attempt in range(max_retries):
        try:
            return _download(url, destination, timeout)
        except RequestException as e:
            destination.unlink(missing_ok=True)

            if attempt == max_retries - 1:
                raise DownloadError(
                    f"Download failed after {max_retries} attempts: {e}"
                ) from e

            backoff_seconds = 2**attempt
            logger.warning(
                f"Download attempt {attempt + 1} failed: {e}. "
                f"Retrying in {backoff_seconds}s..."
            )
            time.sleep(backoff_seconds)

    # Should never reach here, but just in case
    raise DownloadError("Download failed for unknown reason")


def _download(url: str, destination: Path, timeout: int) -> Path:
    """
    Perform one streamed download attempt.

    Raises:
        RequestException: If the HTTP request fails or returns an error status
    """
    logger.info(f"Downloading from {url}")

    with requests.get(
        url, stream=True, timeout=timeout, allow_redirects=True
    ) as response:
        response.raise_for_status()

        downloaded = 0
        try:
            with open(destination, "wb") as f:
                for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                    if chunk:
                        f.write(chunk)
                        downloaded += len(chunk)
        except OSError:
            destination.unlink(missing_ok=True)
            raise

    logger.debug(f"Downloaded {downloaded} bytes to {destination}")
    return destination

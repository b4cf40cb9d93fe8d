"""
Go version identifiers.

Versions are kept in bare form ('1.21.0'); the distribution prefix ('go')
is stripped before any comparison, storage or path construction.
"""

import functools
import re
from typing import Optional, Tuple

from ..core.exceptions import InvalidVersionFormatError

VERSION_PREFIX = "go"

_VERSION_RE = re.compile(r"^(?:go)?(\d+)\.(\d+)(?:\.(\d+))?$")

# First version-shaped token in free text (index pages, `go version` output)
VERSION_TOKEN_RE = re.compile(r"go([0-9]+\.[0-9]+(?:\.[0-9]+)?)")


def normalize_version(value: str) -> str:
    """
    Strip whitespace and the distribution prefix from a version string.

    Example:
        >>> normalize_version("go1.21.0")
        '1.21.0'
        >>> normalize_version("1.21.0")
        '1.21.0'
    """
    value = value.strip()
    if value.startswith(VERSION_PREFIX):
        value = value[len(VERSION_PREFIX):]
    return value


def is_valid_version(value: str) -> bool:
    """Check a string against the major.minor[.patch] shape (prefix allowed)."""
    return _VERSION_RE.match(value.strip()) is not None


@functools.total_ordering
class Version:
    """
    Go release version with numeric ordering.

    The patch component is optional. A missing patch sorts before patch 0,
    so '1.20' < '1.20.0' < '1.20.1'; equality compares all three components.

    Example:
        >>> Version("1.9.0") < Version("go1.10.0")
        True
        >>> str(Version("go1.21.0"))
        '1.21.0'
    """

    __slots__ = ("major", "minor", "patch")

    def __init__(self, value: str):
        match = _VERSION_RE.match(value.strip())
        if not match:
            raise InvalidVersionFormatError(value)

        self.major = int(match.group(1))
        self.minor = int(match.group(2))
        self.patch: Optional[int] = (
            int(match.group(3)) if match.group(3) is not None else None
        )

    @classmethod
    def parse(cls, value: str) -> "Version":
        """Parse a version string, raising InvalidVersionFormatError on bad input."""
        return cls(value)

    @classmethod
    def try_parse(cls, value: Optional[str]) -> Optional["Version"]:
        """Parse a version string, returning None instead of raising."""
        if not value:
            return None
        try:
            return cls(value)
        except InvalidVersionFormatError:
            return None

    @classmethod
    def from_text(cls, text: str) -> Optional["Version"]:
        """
        Extract the first 'go<version>' token from free text.

        Example:
            >>> Version.from_text("go version go1.21.0 linux/amd64")
            Version('1.21.0')
        """
        match = VERSION_TOKEN_RE.search(text or "")
        if not match:
            return None
        return cls(match.group(1))

    def _key(self) -> Tuple[int, int, int]:
        return (self.major, self.minor, -1 if self.patch is None else self.patch)

    @property
    def tag(self) -> str:
        """Prefixed form used in archive names, e.g. 'go1.21.0'."""
        return f"{VERSION_PREFIX}{self}"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._key() == other._key()

    def __lt__(self, other: "Version") -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._key() < other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __str__(self) -> str:
        if self.patch is None:
            return f"{self.major}.{self.minor}"
        return f"{self.major}.{self.minor}.{self.patch}"

    def __repr__(self) -> str:
        return f"Version('{self}')"

"""
Core Interfaces for the chromium-fetcher Download Subsystem

This module defines the data structures passed between the release source,
the filter/mapper, the resolver and its collaborators, plus the abstract
interfaces of those collaborators.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import List, Optional, Union

from .version import ChromeVersion

Pathish = Union[str, Path]


class OnFail(str, Enum):
    """What the resolver does after a candidate turns out to have no binary."""

    NOTHING = "nothing"
    INCREASE = "increase"
    DECREASE = "decrease"


@dataclass(frozen=True)
class Release:
    """Represents a Chromium release record from the release dashboard."""

    version: ChromeVersion
    """The release version"""

    branch_position: Optional[int] = None
    """Position in the upstream source history, used to locate the snapshot build"""

    channel: Optional[str] = None
    """Release channel (Stable, Beta, Dev, ...)"""

    platform: Optional[str] = None
    """Dashboard platform name (Linux, Mac, Windows)"""


@dataclass(frozen=True)
class MappedVersion:
    """
    A candidate version together with its availability flag.

    Entries are immutable; `disable()` returns a new entry so the same object can
    be shared between the candidate list and the store write path safely.
    """

    version: ChromeVersion
    disabled: bool = False
    branch_position: Optional[int] = None

    @property
    def value(self) -> str:
        """Canonical version string."""
        return str(self.version)

    def disable(self) -> "MappedVersion":
        if self.disabled:
            return self
        return replace(self, disabled=True)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class OSSetting:
    """Segments identifying a platform in the snapshot bucket."""

    url: str
    """Bucket folder name (e.g. 'Linux_x64', 'Mac_Arm')"""

    filename: str
    """Archive name segment (e.g. 'linux' for chrome-linux.zip)"""


@dataclass
class DownloadReportEntry:
    """Outcome of checking one candidate for a binary."""

    version: str
    binary_exists: bool
    download: bool


@dataclass
class ResolveResult:
    """Result of a resolution run."""

    url: Optional[str] = None
    """Binary URL, or None when no usable binary was found"""

    selected: Optional[MappedVersion] = None
    """The candidate the URL belongs to (or the single-mode candidate)"""

    report: List[DownloadReportEntry] = field(default_factory=list)
    """One entry per remote existence check that was performed"""


class ReleaseSource(ABC):
    """
    Abstract base class for release sources.

    A ReleaseSource supplies the already-fetched list of releases the filter
    works on. Fetch failures must surface as an empty list.
    """

    @abstractmethod
    def get_releases(self, os: str, channel: str) -> List[Release]:
        """
        Retrieve available releases for an operating system and channel.

        Returns:
            List[Release]: Releases in source order; empty on any failure.
        """


class BinaryLocator(ABC):
    """
    Abstract base class for remote binary-existence checks.

    Calls are awaited one at a time by the resolver.
    """

    @abstractmethod
    async def find_binary_url(
        self, entry: MappedVersion, os_setting: OSSetting
    ) -> Optional[str]:
        """
        Look up the download URL of the binary for a candidate.

        Returns:
            Optional[str]: The binary URL, or None when no binary exists or the
            lookup failed.
        """

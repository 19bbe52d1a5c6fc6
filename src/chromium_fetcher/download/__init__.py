"""
chromium-fetcher Download Subsystem

Finds and downloads historical Chromium snapshot builds.

Core Components:
- version: Four-component Chromium version values
- interfaces: Entry types and collaborator interfaces
- store: Negative-hit store of versions known to have no binary
- releases: Filtering and ordering of the candidate list
- resolver: Selection and retry loop over the candidates
- chromium_source: Release dashboard client
- snapshot_client: Snapshot bucket lookups
- binary: Archive download and extraction
- orchestrator: Run coordination (imported directly, it depends on the config layer)
"""

from .binary import download_binary
from .chromium_source import ChromiumReleaseSource, check_valid_channel
from .interfaces import (
    BinaryLocator,
    DownloadReportEntry,
    MappedVersion,
    OnFail,
    OSSetting,
    Release,
    ReleaseSource,
    ResolveResult,
)
from .platforms import detect_os_setting, map_os
from .releases import map_releases
from .resolver import SelectionResolver, resolve
from .snapshot_client import AsyncSnapshotClient
from .store import Store, load_store, save_store, store_negative_hit
from .version import ChromeVersion, Compared

__all__ = [
    # Interfaces
    "BinaryLocator",
    "ReleaseSource",
    "DownloadReportEntry",
    "MappedVersion",
    "OnFail",
    "OSSetting",
    "Release",
    "ResolveResult",
    # Versions
    "ChromeVersion",
    "Compared",
    # Store
    "Store",
    "load_store",
    "save_store",
    "store_negative_hit",
    # Pipeline
    "map_releases",
    "resolve",
    "SelectionResolver",
    # Remote collaborators
    "ChromiumReleaseSource",
    "AsyncSnapshotClient",
    "check_valid_channel",
    "download_binary",
    # Platforms
    "detect_os_setting",
    "map_os",
]

"""
Download Orchestration for chromium-fetcher

Coordinates one run: load releases and the negative-hit store, build the
candidate list, resolve it to a binary URL and download the binary. Also hosts
the list mode and the store import/export commands.
"""

import json
import os
import shutil
from pathlib import Path
from typing import IO, Dict, List, Optional

import requests

from chromium_fetcher.config import Configuration, get_store_path
from chromium_fetcher.constants import LOCAL_STORE_FILE, MSG_NO_SELECTABLE_VERSION
from chromium_fetcher.exceptions import (
    NoBinaryForSingleVersion,
    NoLocalStoreError,
    StoreImportError,
)
from chromium_fetcher.log_utils import logger
from chromium_fetcher.menu_version import select_version
from chromium_fetcher.utils import make_api_request

from .binary import download_binary
from .chromium_source import ChromiumReleaseSource
from .interfaces import (
    BinaryLocator,
    DownloadReportEntry,
    MappedVersion,
    ReleaseSource,
)
from .platforms import detect_os_setting
from .releases import map_releases
from .resolver import PromptFunc, resolve
from .snapshot_client import AsyncSnapshotClient
from .store import Store, load_store, save_store


class DownloadOrchestrator:
    """
    Runs the download and list commands for one Configuration.

    The release source, binary locator and prompt can be injected; by default
    the release dashboard, the snapshot bucket client and the interactive
    version menu are used.
    """

    def __init__(
        self,
        config: Configuration,
        source: Optional[ReleaseSource] = None,
        locator: Optional[BinaryLocator] = None,
        prompt: Optional[PromptFunc] = None,
    ):
        self.config = config
        self.source = source or ChromiumReleaseSource()
        self.locator = locator
        self.prompt = prompt or select_version
        self.store_path = config.store_path or get_store_path()

    def _filter_store(self) -> Store:
        """Store used to mark candidates; single and ignore-store runs skip reading it."""
        if self.config.single is not None or self.config.ignore_store:
            return Store()
        return load_store(self.store_path)

    def _persist_store(self, filter_store: Store) -> Store:
        """Store that receives new negative hits; always the file contents so writes never drop entries."""
        if self.config.single is not None or self.config.ignore_store:
            return load_store(self.store_path)
        return filter_store

    def _map_candidates(self, filter_store: Store) -> List[MappedVersion]:
        releases = self.source.get_releases(self.config.os, self.config.channel)
        candidates = map_releases(releases, self.config, filter_store)
        logger.debug(
            f"total number of versions: {len(releases)}, filtered versions: {len(candidates)}"
        )
        return candidates

    def list_versions(self) -> List[MappedVersion]:
        """Log the candidate list; versions without a binary are logged as warnings."""
        candidates = self._map_candidates(self._filter_store())
        logger.info("versions:")
        for entry in candidates:
            if entry.disabled:
                logger.warning(entry.value)
            else:
                logger.info(entry.value)
        return candidates

    async def run(self) -> List[DownloadReportEntry]:
        """
        Resolve and download a binary.

        Returns:
            List[DownloadReportEntry]: One entry per candidate that was checked remotely.

        Raises:
            NoBinaryForSingleVersion: If a single-version run finds no binary.
            DownloadError: If downloading the resolved binary fails.
        """
        filter_store = self._filter_store()
        candidates = self._map_candidates(filter_store)

        persist_store = (
            self._persist_store(filter_store) if self.config.store else filter_store
        )

        if self.locator is not None:
            result = await resolve(
                self.config,
                candidates,
                locator=self.locator,
                prompt=self.prompt,
                store=persist_store,
                store_path=self.store_path,
            )
        else:
            async with AsyncSnapshotClient() as client:
                result = await resolve(
                    self.config,
                    candidates,
                    locator=client,
                    prompt=self.prompt,
                    store=persist_store,
                    store_path=self.store_path,
                )

        if self.config.single is not None and not result.url:
            raise NoBinaryForSingleVersion(str(self.config.single))

        if not result.url or result.selected is None:
            if self.config.single is None:
                logger.warning(MSG_NO_SELECTABLE_VERSION)
            return result.report

        if self.config.download:
            os_setting = detect_os_setting(self.config.os, self.config.arch)
            download_binary(result.url, self.config, result.selected.value, os_setting)

        return result.report


async def run_download(
    config: Configuration,
    source: Optional[ReleaseSource] = None,
    locator: Optional[BinaryLocator] = None,
    prompt: Optional[PromptFunc] = None,
) -> List[DownloadReportEntry]:
    """Run a full download for `config`. See DownloadOrchestrator.run."""
    orchestrator = DownloadOrchestrator(config, source, locator, prompt)
    return await orchestrator.run()


def list_versions(
    config: Configuration, source: Optional[ReleaseSource] = None
) -> List[MappedVersion]:
    return DownloadOrchestrator(config, source).list_versions()


def _is_url(source: str) -> bool:
    return source.startswith("http://") or source.startswith("https://")


def _store_url(url: str) -> str:
    if url.endswith(LOCAL_STORE_FILE):
        return url
    if not url.endswith("/"):
        url += "/"
    return f"{url}{LOCAL_STORE_FILE}"


def _read_remote_store(url: str) -> Store:
    store_url = _store_url(url)
    logger.info(f"Downloading store from {store_url}")
    try:
        response = make_api_request(store_url)
        data = response.json()
    except requests.RequestException as e:
        raise StoreImportError("Could not download store", store_url, str(e)) from e
    except ValueError as e:
        raise StoreImportError("Store is not valid JSON", store_url, str(e)) from e
    if not isinstance(data, dict):
        raise StoreImportError("Store must be a JSON object", store_url)
    return Store.load(data)


def _read_local_store(path: str) -> Store:
    logger.info(f"Reading store from {path}")
    try:
        with open(path, "r", encoding="utf-8") as f:
            content = f.read()
    except OSError as e:
        raise StoreImportError("Could not read store file", path, str(e)) from e
    try:
        data = json.loads(content)
    except ValueError as e:
        raise StoreImportError("Store is not valid JSON", path, str(e)) from e
    if not isinstance(data, dict):
        raise StoreImportError("Store must be a JSON object", path)
    return Store.load(data)


def import_store(source: str, store_path: Optional[str] = None) -> Dict[str, int]:
    """
    Merge a store from a URL or local file into the local store.

    URLs not ending in `localstore.json` get it appended.

    Returns:
        Dict[str, int]: Number of entries per operating system after the merge.

    Raises:
        StoreImportError: If the source cannot be read or is not a store.
    """
    target = store_path or get_store_path()
    imported = _read_remote_store(source) if _is_url(source) else _read_local_store(source)
    merged = load_store(target).merge(imported)
    if not save_store(merged, target):
        raise StoreImportError("Could not write local store", target)
    size = merged.size()
    logger.info(
        f"Successfully imported store. Linux: {size['linux']}, "
        f"Mac: {size['mac']}, Windows: {size['win']}"
    )
    return size


def export_store(store_path: Optional[str], stream: IO[str]) -> None:
    """
    Copy the local store file to `stream`.

    Raises:
        NoLocalStoreError: If there is no store file.
    """
    path = store_path or get_store_path()
    if not os.path.isfile(path):
        raise NoLocalStoreError(path)
    with open(Path(path), "r", encoding="utf-8") as f:
        shutil.copyfileobj(f, stream)

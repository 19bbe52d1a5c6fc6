"""
Asynchronous Snapshot Client

Resolves a Chromium version to its branch position via the release dashboard
and looks up the snapshot archive for that position in the public snapshot
bucket. Lookups never raise for network problems: a failure is reported as
"no binary".
"""

import asyncio
from typing import Any, Dict, Optional

import aiohttp
from aiohttp import ClientSession, ClientTimeout, TCPConnector

from chromium_fetcher.constants import (
    API_TIMEOUT,
    CHROMIUM_VERSION_URL,
    SNAPSHOT_BUCKET_URL,
    SNAPSHOT_LISTING_FIELDS,
)
from chromium_fetcher.log_utils import logger
from chromium_fetcher.utils import get_user_agent

from .interfaces import BinaryLocator, MappedVersion, OSSetting


def snapshot_object_name(branch_position: int, os_setting: OSSetting) -> str:
    return f"{os_setting.url}/{branch_position}/chrome-{os_setting.filename}.zip"


class AsyncSnapshotClient(BinaryLocator):
    """
    Asynchronous client for the release dashboard and the snapshot bucket.

    Example:
        async with AsyncSnapshotClient() as client:
            url = await client.find_binary_url(entry, os_setting)
    """

    def __init__(
        self,
        timeout: float = API_TIMEOUT,
        version_url: str = CHROMIUM_VERSION_URL,
        bucket_url: str = SNAPSHOT_BUCKET_URL,
    ) -> None:
        self.timeout = ClientTimeout(total=timeout)
        self.version_url = version_url
        self.bucket_url = bucket_url
        self._session: Optional[ClientSession] = None

    async def __aenter__(self) -> "AsyncSnapshotClient":
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def _ensure_session(self) -> ClientSession:
        if self._session is None or self._session.closed:
            connector = TCPConnector(limit=1, enable_cleanup_closed=True)
            self._session = ClientSession(
                connector=connector,
                timeout=self.timeout,
                headers={
                    "Accept": "application/json",
                    "User-Agent": get_user_agent(),
                },
            )
        return self._session

    async def close(self) -> None:
        """Close the client session and release resources."""
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None

    async def _get_json(self, url: str, params: Dict[str, Any]) -> Any:
        """
        GET a JSON document.

        Raises:
            aiohttp.ClientError: On connection problems or an error status.
        """
        session = await self._ensure_session()
        async with session.get(url, params=params) as response:
            response.raise_for_status()
            return await response.json(content_type=None)

    async def fetch_branch_position(self, version: str) -> Optional[int]:
        """
        Resolve a version string to its main branch position.

        Returns:
            Optional[int]: The branch position, or None when unknown or the lookup failed.
        """
        logger.debug(f"Resolving branch position for {version}")
        try:
            data = await self._get_json(self.version_url, {"version": version})
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.debug(f"Branch position lookup failed for {version}: {e}")
            return None

        if not isinstance(data, dict):
            return None
        position = data.get("chromium_main_branch_position")
        if position is None or isinstance(position, bool):
            return None
        try:
            return int(position)
        except (TypeError, ValueError):
            return None

    async def fetch_binary_url(
        self, branch_position: int, os_setting: OSSetting
    ) -> Optional[str]:
        """
        Look up the snapshot archive for a branch position.

        Returns:
            Optional[str]: The archive's media link, or None when the bucket has no matching archive.
        """
        prefix = f"{os_setting.url}/{branch_position}/"
        params = {
            "delimiter": "/",
            "prefix": prefix,
            "fields": SNAPSHOT_LISTING_FIELDS,
        }
        try:
            data = await self._get_json(self.bucket_url, params)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            logger.debug(f"Snapshot listing failed for {prefix}: {e}")
            return None

        if not isinstance(data, dict):
            return None
        expected_name = snapshot_object_name(branch_position, os_setting)
        for item in data.get("items") or []:
            if isinstance(item, dict) and item.get("name") == expected_name:
                return item.get("mediaLink")
        return None

    async def find_binary_url(
        self, entry: MappedVersion, os_setting: OSSetting
    ) -> Optional[str]:
        branch_position = entry.branch_position
        if branch_position is None:
            branch_position = await self.fetch_branch_position(entry.value)
        if branch_position is None:
            logger.debug(f"No branch position for {entry.value}")
            return None
        url = await self.fetch_binary_url(branch_position, os_setting)
        if url:
            logger.debug(f"Found binary for {entry.value}: {url}")
        else:
            logger.debug(f"No binary for {entry.value} at branch position {branch_position}")
        return url

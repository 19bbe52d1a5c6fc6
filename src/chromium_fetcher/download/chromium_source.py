"""
Chromium Release Source

Fetches release records from the Chromium release dashboard and maps them to
Release objects. Any fetch failure surfaces as an empty list.
"""

from typing import Any, Dict, List, Optional

import requests  # type: ignore[import-untyped]

from chromium_fetcher.constants import (
    CHROMIUM_RELEASES_URL,
    RELEASES_PER_REQUEST,
    VALID_CHANNELS,
)
from chromium_fetcher.log_utils import logger
from chromium_fetcher.utils import make_api_request

from .interfaces import Release, ReleaseSource
from .platforms import map_os_to_platform
from .releases import release_from_api


def check_valid_channel(channel: str, platform: str) -> bool:
    """Whether the dashboard publishes `channel` for `platform`."""
    return channel in VALID_CHANNELS.get(platform, set())


class ChromiumReleaseSource(ReleaseSource):
    """
    Release source backed by the Chromium release dashboard.

    Usage:
        source = ChromiumReleaseSource()
        releases = source.get_releases("linux", "Stable")
    """

    def __init__(
        self,
        releases_url: str = CHROMIUM_RELEASES_URL,
        num: int = RELEASES_PER_REQUEST,
    ):
        self.releases_url = releases_url
        self.num = num

    def get_releases(self, os: str, channel: str) -> List[Release]:
        """
        Fetch releases for an operating system and channel.

        Returns:
            List[Release]: Releases in dashboard order. Empty list on error or an unsupported channel.
        """
        platform = map_os_to_platform(os)
        if not check_valid_channel(channel, platform):
            logger.error(f"Channel {channel} is not available for {platform}")
            return []

        logger.debug(f"Loading releases for {os} {channel}...")
        releases_data = self._fetch_from_api(platform, channel)
        if releases_data is None or not isinstance(releases_data, list):
            logger.error("Invalid releases data received from the release dashboard")
            return []

        releases: List[Release] = []
        for release_data in releases_data:
            if not isinstance(release_data, dict):
                logger.warning(
                    "Skipping malformed release entry: expected dict, got %s",
                    type(release_data).__name__,
                )
                continue
            if not isinstance(release_data.get("version"), str):
                continue
            releases.append(release_from_api(release_data))

        logger.debug("Loaded %d releases for %s %s", len(releases), platform, channel)
        return releases

    def _fetch_from_api(self, platform: str, channel: str) -> Optional[Any]:
        params: Dict[str, Any] = {
            "channel": channel,
            "platform": platform,
            "num": self.num,
            "offset": 0,
        }
        try:
            response = make_api_request(self.releases_url, params=params)
            return response.json()
        except requests.RequestException as e:
            logger.error(f"Could not load releases from {self.releases_url}: {e}")
        except ValueError as e:
            logger.error(f"Invalid JSON in release dashboard response: {e}")
        return None

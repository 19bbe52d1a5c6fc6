import time
from unittest.mock import AsyncMock

import platformdirs
import pytest
import requests

_NETWORK_BLOCK_MSG = (
    "Network access is blocked during tests. Mock requests.* or Session.request."
)

_ASYNC_NETWORK_BLOCK_MSG = (
    "Async network access is blocked during tests. Mock aiohttp.ClientSession."
)


def _block_network(*_args, **_kwargs):
    """
    Prevent network calls in tests by raising a RuntimeError.

    Raises:
        RuntimeError: with `_NETWORK_BLOCK_MSG` indicating that network access is blocked during tests.
    """
    raise RuntimeError(_NETWORK_BLOCK_MSG)


async def _async_block_network(*_args, **_kwargs):
    """
    Prevent async network calls during tests by raising a RuntimeError.

    Raises:
        RuntimeError: `_ASYNC_NETWORK_BLOCK_MSG` explaining that async network access is blocked.
    """
    raise RuntimeError(_ASYNC_NETWORK_BLOCK_MSG)


def pytest_configure(config):
    """Register the markers used across the suite."""
    config.addinivalue_line("markers", "asyncio: mark test as an asyncio test")
    config.addinivalue_line("markers", "unit: fast isolated unit tests")
    config.addinivalue_line(
        "markers", "core_downloads: release filtering, resolution and download flow"
    )
    config.addinivalue_line(
        "markers", "user_interface: CLI, prompts and configuration handling"
    )


@pytest.fixture(autouse=True)
def _isolate_test_environment(tmp_path_factory, monkeypatch):
    """
    Point every platformdirs location used by chromium-fetcher at a temporary directory.

    The config file, the negative-hit store and the log directory therefore never touch the real
    user directories.
    """
    base = tmp_path_factory.mktemp("chromium-fetcher")
    cache_dir = base / "cache"
    config_dir = base / "config"
    log_dir = base / "log"

    for path in (cache_dir, config_dir, log_dir):
        path.mkdir(parents=True, exist_ok=True)

    monkeypatch.setenv("XDG_CACHE_HOME", str(cache_dir))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_dir))

    monkeypatch.setattr(
        platformdirs, "user_cache_dir", lambda *_args, **_kwargs: str(cache_dir)
    )
    monkeypatch.setattr(
        platformdirs, "user_config_dir", lambda *_args, **_kwargs: str(config_dir)
    )
    monkeypatch.setattr(
        platformdirs, "user_log_dir", lambda *_args, **_kwargs: str(log_dir)
    )


def pytest_runtest_setup():
    """
    Prevent real network requests during tests by replacing HTTP entry points with blocking callables.
    """
    requests.get = _block_network
    requests.post = _block_network
    requests.head = _block_network
    requests.Session.request = _block_network

    import aiohttp

    aiohttp.request = _async_block_network
    aiohttp.ClientSession.request = _async_block_network  # type: ignore[assignment]
    aiohttp.ClientSession.get = _async_block_network  # type: ignore[assignment]


@pytest.fixture(autouse=True)
def _mock_time_sleep(monkeypatch):
    """Make time.sleep instant for all tests to prevent delays."""
    monkeypatch.setattr(time, "sleep", lambda *_args, **_kwargs: None)


# =============================================================================
# Shared Fixtures
# =============================================================================


@pytest.fixture
def store_path(tmp_path):
    """Path of a store file inside the test's temporary directory."""
    return str(tmp_path / "localstore.json")


@pytest.fixture
def mock_logger(mocker):
    """A logger double for code that accepts an injected logger."""
    return mocker.MagicMock()


@pytest.fixture
def make_locator(mocker):
    """
    Factory for a binary locator double.

    `urls` maps canonical version strings to the URL the locator reports; every
    other version has no binary.
    """

    def _create(urls=None):
        urls = urls or {}
        locator = mocker.MagicMock()

        async def _find(entry, _os_setting):
            return urls.get(entry.value)

        locator.find_binary_url = AsyncMock(side_effect=_find)
        return locator

    return _create


@pytest.fixture
def make_prompt():
    """
    Factory for a scripted selection prompt.

    Returns the given answers one after another, then None.
    """

    def _create(*answers):
        remaining = list(answers)

        async def _prompt(_candidates, _config):
            return remaining.pop(0) if remaining else None

        return AsyncMock(side_effect=_prompt)

    return _create


@pytest.fixture
def dashboard_releases():
    """Release dashboard records as returned by fetch_releases."""
    return [
        {
            "channel": "Stable",
            "chromium_main_branch_position": 1217362,
            "milestone": 120,
            "platform": "Linux",
            "previous_version": "120.0.6099.71",
            "time": 1702425600000,
            "version": "120.0.6099.109",
        },
        {
            "channel": "Stable",
            "chromium_main_branch_position": 1208322,
            "milestone": 119,
            "platform": "Linux",
            "previous_version": "119.0.6045.159",
            "time": 1700611200000,
            "version": "119.0.6045.199",
        },
        {
            "channel": "Stable",
            "chromium_main_branch_position": 1192594,
            "milestone": 118,
            "platform": "Linux",
            "previous_version": "118.0.5993.88",
            "time": 1698192000000,
            "version": "118.0.5993.117",
        },
    ]

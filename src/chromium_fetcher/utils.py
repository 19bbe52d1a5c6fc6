# src/chromium_fetcher/utils.py
import importlib.metadata
import os
import time
import zipfile
from typing import Any, Dict, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry  # type: ignore

from chromium_fetcher.constants import (
    API_TIMEOUT,
    APP_NAME,
    DEFAULT_BACKOFF_FACTOR,
    DEFAULT_CHUNK_SIZE,
    DEFAULT_CONNECT_RETRIES,
    DEFAULT_REQUEST_TIMEOUT,
    ZIP_EXTENSION,
)
from chromium_fetcher.log_utils import logger

# Cache for the User-Agent string to avoid repeated metadata lookups
_USER_AGENT_CACHE = None


def get_user_agent() -> str:
    """
    Get the User-Agent string used for HTTP requests.

    Returns:
        The string `chromium-fetcher/{version}`, where `{version}` is the installed package version or `unknown`.
    """
    global _USER_AGENT_CACHE

    if _USER_AGENT_CACHE is None:
        try:
            app_version = importlib.metadata.version(APP_NAME)
        except importlib.metadata.PackageNotFoundError:
            app_version = "unknown"

        _USER_AGENT_CACHE = f"{APP_NAME}/{app_version}"

    return _USER_AGENT_CACHE


def make_api_request(
    url: str,
    params: Optional[Dict[str, Any]] = None,
    timeout: Optional[int] = None,
) -> requests.Response:
    """
    Perform a GET request against a JSON API with the package User-Agent.

    Raises:
        requests.HTTPError: For HTTP error responses.
        requests.RequestException: For lower-level network or request errors.
    """
    headers = {"User-Agent": get_user_agent(), "Accept": "application/json"}
    logger.debug(f"Making API request: {url} params={params}")
    response = requests.get(
        url, params=params, headers=headers, timeout=timeout or API_TIMEOUT
    )
    response.raise_for_status()
    return response


def _remove_quietly(path: str) -> None:
    if os.path.exists(path):
        try:
            os.remove(path)
        except (IOError, OSError) as e:
            logger.error(f"Error removing temporary file {path}: {e}")


def _is_valid_zip(path: str) -> bool:
    try:
        with zipfile.ZipFile(path, "r") as zf:
            return zf.testzip() is None
    except (zipfile.BadZipFile, IOError, OSError):
        return False


def download_file_with_retry(url: str, download_path: str) -> bool:
    """
    Download a remote file to disk and atomically move it into place.

    Streams the URL into a temporary file through a session with urllib3 retries,
    validates ZIP archives and replaces the destination only on success. An
    existing valid ZIP at the destination is kept.

    Returns:
        bool: `True` if the destination file is present and valid or was downloaded, `False` otherwise.
    """
    is_zip = download_path.lower().endswith(ZIP_EXTENSION)
    if os.path.exists(download_path):
        if is_zip and _is_valid_zip(download_path):
            logger.info(f"Skipped: {os.path.basename(download_path)} (already present)")
            return True
        logger.debug(f"Removing invalid existing file: {download_path}")
        try:
            os.remove(download_path)
        except (IOError, OSError) as e:
            logger.error(f"Error removing existing file {download_path}: {e}")
            return False

    temp_path = f"{download_path}.tmp.{os.getpid()}.{int(time.time() * 1000)}"
    session = requests.Session()
    response = None
    try:
        logger.debug(f"Attempting to download file from URL: {url} to temp path: {temp_path}")
        start_time = time.time()
        retry_strategy: Retry = Retry(
            total=DEFAULT_CONNECT_RETRIES,
            connect=DEFAULT_CONNECT_RETRIES,
            read=DEFAULT_CONNECT_RETRIES,
            status=DEFAULT_CONNECT_RETRIES,
            backoff_factor=DEFAULT_BACKOFF_FACTOR,
            status_forcelist=[408, 429, 500, 502, 503, 504],
            allowed_methods=frozenset({"GET", "HEAD"}),
            raise_on_status=False,
            respect_retry_after_header=True,
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        session.mount("https://", adapter)
        session.mount("http://", adapter)

        response = session.get(
            url,
            stream=True,
            timeout=DEFAULT_REQUEST_TIMEOUT,
            headers={"User-Agent": get_user_agent()},
        )
        logger.debug(f"Received HTTP response status code: {response.status_code} for URL: {url}")
        # Status-based retries were already applied by urllib3's Retry
        response.raise_for_status()

        downloaded_bytes = 0
        parent_dir = os.path.dirname(download_path)
        if parent_dir:
            os.makedirs(parent_dir, exist_ok=True)
        with open(temp_path, "wb") as file:
            for chunk in response.iter_content(chunk_size=DEFAULT_CHUNK_SIZE):
                if chunk:
                    file.write(chunk)
                    downloaded_bytes += len(chunk)

        logger.debug(
            "Downloaded %d bytes in %.2fs for %s",
            downloaded_bytes,
            time.time() - start_time,
            url,
        )

        if is_zip and not _is_valid_zip(temp_path):
            logger.error(f"Error: Downloaded zip file {url} is corrupted")
            _remove_quietly(temp_path)
            return False

        os.replace(temp_path, download_path)
        logger.info(
            f"Downloaded: {os.path.basename(download_path)} "
            f"({downloaded_bytes / (1024 * 1024):.1f} MB)"
        )
        return True
    except requests.exceptions.RequestException as e:
        logger.error(f"Network error downloading {url}: {e}")
    except (IOError, OSError) as e:
        logger.error(f"File error while downloading {url} to {download_path}: {e}")
    finally:
        if response is not None:
            response.close()
        session.close()
        _remove_quietly(temp_path)
    return False

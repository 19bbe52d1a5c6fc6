"""
Binary download for resolved snapshot archives.
"""

from pathlib import Path
from typing import Any

from chromium_fetcher.constants import ZIP_EXTENSION
from chromium_fetcher.exceptions import DownloadError
from chromium_fetcher.log_utils import logger
from chromium_fetcher.utils import download_file_with_retry

from .files import extract_archive, remove_file
from .interfaces import OSSetting


def archive_basename(os_setting: OSSetting, arch: str, version: str) -> str:
    """Name of the downloaded archive without extension, e.g. chrome-linux-x64-120.0.6099.109."""
    return f"chrome-{os_setting.filename}-{arch}-{version}"


def download_binary(url: str, config: Any, version: str, os_setting: OSSetting) -> Path:
    """
    Download the archive at `url` into the configured download folder.

    With `config.auto_unzip` the archive is extracted into a folder of the same
    name and the zip is removed afterwards.

    Returns:
        Path: The zip file, or the extraction folder when unzipping.

    Raises:
        DownloadError: If the download fails.
        ExtractionError: If the archive cannot be extracted.
    """
    folder = Path(config.download_folder) if config.download_folder else Path.cwd()
    folder.mkdir(parents=True, exist_ok=True)

    basename = archive_basename(os_setting, config.arch, version)
    zip_path = folder / f"{basename}{ZIP_EXTENSION}"

    logger.info(f"Downloading binary for {version}...")
    if not download_file_with_retry(url, str(zip_path)):
        raise DownloadError(f"Failed to download binary for {version}", url=url)

    if not config.auto_unzip:
        logger.info(f"Saved {zip_path}")
        return zip_path

    extract_dir = folder / basename
    extracted = extract_archive(str(zip_path), str(extract_dir))
    remove_file(str(zip_path))
    logger.info(f"Extracted {len(extracted)} files to {extract_dir}")
    return extract_dir
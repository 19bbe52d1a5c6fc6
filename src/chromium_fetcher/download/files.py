"""
File Operations for the chromium-fetcher Download Subsystem

This module provides atomic writes for the store file and safe extraction of
downloaded snapshot archives.
"""

import os
import shutil
import tempfile
import zipfile
from pathlib import Path
from typing import Any, Callable, List

from chromium_fetcher.exceptions import ExtractionError
from chromium_fetcher.log_utils import logger


def _atomic_write(
    file_path: str, writer_func: Callable[[Any], None], suffix: str = ".tmp"
) -> bool:
    """
    Write data to a file atomically by writing to a temporary file and replacing the target on success.

    Parameters:
        file_path (str): Destination file path to be written.
        writer_func (Callable[[Any], None]): Callable that receives an open text file-like object and writes the content.
        suffix (str): Suffix to use for the temporary file name (default ".tmp").

    Returns:
        bool: `True` if the temporary write and atomic replace succeeded, `False` on any error.
    """
    directory = os.path.dirname(file_path) or "."
    try:
        os.makedirs(directory, exist_ok=True)
        temp_fd, temp_path = tempfile.mkstemp(dir=directory, prefix="tmp-", suffix=suffix)
    except OSError as e:
        logger.error(f"Could not create temporary file for {file_path}: {e}")
        return False

    try:
        with os.fdopen(temp_fd, "w", encoding="utf-8") as temp_f:
            writer_func(temp_f)
        os.replace(temp_path, file_path)
    except (IOError, UnicodeEncodeError, OSError) as e:
        logger.error(f"Could not write to {file_path}: {e}")
        return False
    finally:
        if os.path.exists(temp_path):
            try:
                os.remove(temp_path)
            except OSError:
                pass
    return True


def _atomic_write_text(file_path: str, content: str) -> bool:
    """Atomically replace `file_path` with `content`."""
    return _atomic_write(file_path, lambda f: f.write(content), suffix=".json")


def _is_within_base(base_dir: str, candidate: str) -> bool:
    try:
        return os.path.commonpath([base_dir, candidate]) == base_dir
    except ValueError:
        # Different drives on Windows
        return False


def _is_safe_archive_member(member_name: str) -> bool:
    """
    Determine whether an archive member name is safe to extract.

    Returns:
        `True` if the member name contains no absolute paths, parent-directory references or null bytes.
    """
    if (
        not member_name
        or member_name.startswith("/")
        or member_name.startswith("\\")
        or "\x00" in member_name
    ):
        return False
    normalized = os.path.normpath(member_name)
    if os.path.isabs(normalized):
        return False
    if normalized == "..":
        return False
    if normalized.startswith(f"..{os.sep}"):
        return False
    if os.altsep and normalized.startswith(f"..{os.altsep}"):
        return False
    return True


def safe_extract_path(extract_dir: str, file_path: str) -> str:
    """
    Resolve a safe absolute extraction path and prevent directory traversal.

    Raises:
        ValueError: If the resolved path is outside extract_dir.
    """
    real_extract_dir = os.path.realpath(extract_dir)
    prospective_path = os.path.join(real_extract_dir, file_path)
    normalized_path = os.path.realpath(prospective_path)

    if not _is_within_base(real_extract_dir, normalized_path):
        raise ValueError(
            f"Unsafe extraction path '{file_path}' is outside base '{extract_dir}'"
        )

    return normalized_path


def extract_archive(zip_path: str, extract_dir: str) -> List[Path]:
    """
    Extract every safe member of a ZIP archive into `extract_dir`.

    Members with absolute or parent-relative names are skipped with a warning.
    Unix permission bits stored in the archive are restored so the browser
    binary stays executable.

    Returns:
        List[Path]: Paths of the extracted files.

    Raises:
        ExtractionError: If the archive is missing, corrupt or cannot be written out.
    """
    extracted_files: List[Path] = []
    try:
        os.makedirs(extract_dir, exist_ok=True)
        with zipfile.ZipFile(zip_path, "r") as zip_ref:
            for file_info in zip_ref.infolist():
                if file_info.is_dir():
                    continue

                file_name = file_info.filename
                if not _is_safe_archive_member(file_name):
                    logger.warning(
                        "Skipping unsafe archive member %s (possible traversal)",
                        file_name,
                    )
                    continue

                try:
                    extract_path = safe_extract_path(extract_dir, file_name)
                except ValueError as e:
                    logger.warning(f"Skipping unsafe extraction path: {e}")
                    continue

                os.makedirs(os.path.dirname(extract_path), exist_ok=True)
                with (
                    zip_ref.open(file_info) as source,
                    open(extract_path, "wb") as target,
                ):
                    shutil.copyfileobj(source, target)

                mode = (file_info.external_attr >> 16) & 0o777
                if os.name != "nt" and mode:
                    try:
                        os.chmod(extract_path, mode)
                    except OSError:
                        pass

                extracted_files.append(Path(extract_path))
                logger.debug(f"Extracted {file_name} to {extract_path}")
    except (zipfile.BadZipFile, IOError, OSError) as e:
        raise ExtractionError(
            "Error extracting archive", archive_path=zip_path, details=str(e)
        ) from e

    return extracted_files


def remove_file(file_path: str) -> bool:
    """Remove a file, logging instead of raising on failure."""
    try:
        os.remove(file_path)
        return True
    except FileNotFoundError:
        return False
    except OSError as e:
        logger.warning(f"Could not remove {file_path}: {e}")
        return False

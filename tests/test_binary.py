import io
import zipfile

import pytest

from chromium_fetcher.config import ALL_FALSE_CONFIG
from chromium_fetcher.download.binary import archive_basename, download_binary
from chromium_fetcher.download.interfaces import OSSetting
from chromium_fetcher.exceptions import DownloadError

pytestmark = [pytest.mark.unit, pytest.mark.core_downloads]

LINUX_X64 = OSSetting(url="Linux_x64", filename="linux")
URL = "https://example.org/chrome-linux.zip"


def _zip_bytes():
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as zf:
        zf.writestr("chrome-linux/chrome", b"binary")
    return buffer.getvalue()


@pytest.fixture
def fake_download(mocker):
    def _write(url, path):
        with open(path, "wb") as f:
            f.write(_zip_bytes())
        return True

    return mocker.patch(
        "chromium_fetcher.download.binary.download_file_with_retry", side_effect=_write
    )


def test_archive_basename():
    assert archive_basename(LINUX_X64, "x64", "120.0.6099.109") == (
        "chrome-linux-x64-120.0.6099.109"
    )


def test_download_into_folder(tmp_path, fake_download):
    config = ALL_FALSE_CONFIG.replace(download_folder=str(tmp_path / "downloads"))

    result = download_binary(URL, config, "120.0.6099.109", LINUX_X64)

    assert result == tmp_path / "downloads" / "chrome-linux-x64-120.0.6099.109.zip"
    assert result.exists()
    fake_download.assert_called_once_with(URL, str(result))


def test_download_defaults_to_working_directory(tmp_path, fake_download, monkeypatch):
    monkeypatch.chdir(tmp_path)

    result = download_binary(URL, ALL_FALSE_CONFIG, "1.0.0.0", LINUX_X64)

    assert result == tmp_path / "chrome-linux-x64-1.0.0.0.zip"


def test_download_with_unzip(tmp_path, fake_download):
    config = ALL_FALSE_CONFIG.replace(download_folder=str(tmp_path), auto_unzip=True)

    result = download_binary(URL, config, "1.0.0.0", LINUX_X64)

    assert result == tmp_path / "chrome-linux-x64-1.0.0.0"
    assert (result / "chrome-linux" / "chrome").read_bytes() == b"binary"
    assert not (tmp_path / "chrome-linux-x64-1.0.0.0.zip").exists()


def test_failed_download_raises(tmp_path, mocker):
    mocker.patch(
        "chromium_fetcher.download.binary.download_file_with_retry", return_value=False
    )
    config = ALL_FALSE_CONFIG.replace(download_folder=str(tmp_path))

    with pytest.raises(DownloadError) as exc_info:
        download_binary(URL, config, "1.0.0.0", LINUX_X64)

    assert exc_info.value.url == URL

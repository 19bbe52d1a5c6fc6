"""
Configuration for chromium-fetcher runs.

A run is described by an immutable Configuration value. Values come from the
built-in defaults, then the optional YAML config file, then the command line.
"""

import math
import os
from argparse import Namespace
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional, Union

import platformdirs
import yaml

from chromium_fetcher.constants import (
    APP_NAME,
    CONFIG_FILE_NAME,
    DEFAULT_CHANNEL,
    DEFAULT_MAX_RESULTS,
    DEFAULT_MAX_VERSION,
    DEFAULT_MIN_VERSION,
    LOCAL_STORE_FILE,
)
from chromium_fetcher.download.chromium_source import check_valid_channel
from chromium_fetcher.download.interfaces import OnFail
from chromium_fetcher.download.platforms import (
    detect_host_arch,
    detect_host_os,
    map_os,
    map_os_to_platform,
    validate_arch,
)
from chromium_fetcher.download.version import ChromeVersion, Compared
from chromium_fetcher.exceptions import (
    ConfigFileError,
    ConfigurationError,
    ConfigValidationError,
)
from chromium_fetcher.log_utils import logger

__all__ = [
    "ALL_FALSE_CONFIG",
    "Configuration",
    "OnFail",
    "build_configuration",
    "get_config_file_path",
    "get_log_dir",
    "get_store_path",
    "load_config",
]


def _host_os() -> str:
    try:
        return detect_host_os()
    except ConfigurationError:
        logger.debug("Unknown host operating system, defaulting to linux")
        return "linux"


@dataclass(frozen=True)
class Configuration:
    """
    Everything a download or list run needs to know.

    `min`/`max` are inclusive bounds; a major of +/- infinity leaves a side
    open. `results` may be `math.inf` for an unlimited candidate list.
    """

    min: ChromeVersion = ChromeVersion.from_string(DEFAULT_MIN_VERSION)
    max: ChromeVersion = ChromeVersion.from_string(DEFAULT_MAX_VERSION)
    results: Union[int, float] = DEFAULT_MAX_RESULTS
    os: str = field(default_factory=_host_os)
    arch: str = "x64"
    channel: str = DEFAULT_CHANNEL
    on_fail: OnFail = OnFail.NOTHING
    interactive: bool = True
    only_newest_major: bool = False
    hide_negative_hits: bool = False
    inverse: bool = False
    single: Optional[ChromeVersion] = None
    store: bool = True
    download: bool = True
    download_folder: Optional[str] = None
    auto_unzip: bool = False
    ignore_store: bool = False
    store_path: Optional[str] = None

    def replace(self, **overrides: Any) -> "Configuration":
        return replace(self, **overrides)


ALL_FALSE_CONFIG = Configuration(
    min=ChromeVersion(-math.inf),
    max=ChromeVersion(math.inf),
    results=math.inf,
    os="linux",
    arch="x64",
    on_fail=OnFail.NOTHING,
    interactive=False,
    only_newest_major=False,
    hide_negative_hits=False,
    inverse=False,
    single=None,
    store=False,
    download=False,
    auto_unzip=False,
)


def get_config_file_path() -> str:
    return os.path.join(platformdirs.user_config_dir(APP_NAME), CONFIG_FILE_NAME)


def get_store_path() -> str:
    """Location of the negative-hit store file in the user cache directory."""
    return os.path.join(platformdirs.user_cache_dir(APP_NAME), LOCAL_STORE_FILE)


def get_log_dir() -> str:
    return platformdirs.user_log_dir(APP_NAME)


def load_config(path: Optional[str] = None) -> Optional[Dict[str, Any]]:
    """
    Load the YAML configuration file.

    Parameters:
        path (Optional[str]): Explicit config file; defaults to the platformdirs location.

    Returns:
        dict | None: The parsed mapping (empty for an empty file), or None if no file exists.

    Raises:
        ConfigFileError: If the file cannot be read, is not valid YAML or is not a mapping.
    """
    config_path = path or get_config_file_path()
    if not os.path.exists(config_path):
        return None

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigFileError(f"Invalid YAML in {config_path}", details=str(e)) from e
    except OSError as e:
        raise ConfigFileError(f"Could not read {config_path}", details=str(e)) from e

    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ConfigFileError(
            f"Configuration in {config_path} must be a mapping",
            details=f"got {type(config).__name__}",
        )
    logger.debug(f"Loaded configuration from {config_path}")
    return config


def _pick(cli_value: Any, file_config: Dict[str, Any], key: str) -> Any:
    if cli_value is not None:
        return cli_value
    return file_config.get(key)


def _as_bool(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def _parse_version(value: Any, field_name: str) -> ChromeVersion:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        value = str(value)
    if not isinstance(value, str):
        raise ConfigValidationError(f"Invalid version for {field_name}: {value!r}")
    return ChromeVersion.from_string(value)


def _parse_results(value: Any) -> Union[int, float]:
    if isinstance(value, str) and value.strip().lower() in ("inf", "infinity", "all"):
        return math.inf
    try:
        results = int(value)
    except (TypeError, ValueError) as e:
        raise ConfigValidationError(f"Invalid max results: {value!r}") from e
    if results < 1:
        raise ConfigValidationError(f"Max results must be >= 1, got {results}")
    return results


def _parse_on_fail(
    increase: bool, decrease: bool, file_value: Any
) -> OnFail:
    if increase:
        return OnFail.INCREASE
    if decrease:
        return OnFail.DECREASE
    if file_value is None:
        return OnFail.NOTHING
    try:
        return OnFail(str(file_value).strip().lower())
    except ValueError as e:
        raise ConfigValidationError(
            f"Invalid ON_FAIL value: {file_value!r}. "
            f"Valid values: {', '.join(member.value for member in OnFail)}"
        ) from e


def build_configuration(
    args: Optional[Namespace] = None, file_config: Optional[Dict[str, Any]] = None
) -> Configuration:
    """
    Merge defaults, the config file and command line arguments into a Configuration.

    Command line values win over file values. Unset arguments are None.

    Raises:
        ConfigValidationError: For unknown OS, architecture, channel or on-fail values.
    """
    args = args or Namespace()
    file_config = file_config or {}

    def arg(name: str) -> Any:
        return getattr(args, name, None)

    explicit_os = _pick(arg("os"), file_config, "OS")
    os_name = map_os(explicit_os) if explicit_os else _host_os()

    explicit_arch = _pick(arg("arch"), file_config, "ARCH")
    if explicit_arch and not explicit_os:
        logger.warning('Setting "--arch" has no effect, when "--os" is not set!')
        arch = detect_host_arch(os_name)
    elif explicit_arch:
        arch = validate_arch(os_name, str(explicit_arch).strip().lower())
    elif explicit_os:
        arch = "x64"
    else:
        arch = detect_host_arch(os_name)

    channel = str(_pick(arg("channel"), file_config, "CHANNEL") or DEFAULT_CHANNEL)
    if not check_valid_channel(channel, map_os_to_platform(os_name)):
        raise ConfigValidationError(
            f"Channel {channel} is not available for {map_os_to_platform(os_name)}"
        )

    min_value = _pick(arg("min"), file_config, "MIN_VERSION")
    max_value = _pick(arg("max"), file_config, "MAX_VERSION")
    min_version = _parse_version(
        DEFAULT_MIN_VERSION if min_value is None else min_value, "min"
    )
    max_version = _parse_version(
        DEFAULT_MAX_VERSION if max_value is None else max_value, "max"
    )

    results_value = _pick(arg("max_results"), file_config, "MAX_RESULTS")
    min_is_set = min_version.compare(ChromeVersion()) is Compared.GREATER
    if results_value is not None:
        results = _parse_results(results_value)
    elif min_is_set:
        results = math.inf
    else:
        results = DEFAULT_MAX_RESULTS

    on_fail = _parse_on_fail(
        bool(arg("increase_on_fail")),
        bool(arg("decrease_on_fail")),
        file_config.get("ON_FAIL"),
    )

    non_interactive = bool(arg("non_interactive"))
    if non_interactive and on_fail is not OnFail.DECREASE:
        logger.warning(
            'Setting "--non-interactive" has no effect, when "--decrease-on-fail" is not set!'
        )

    single_value = arg("single")
    single = _parse_version(single_value, "single") if single_value else None

    return Configuration(
        min=min_version,
        max=max_version,
        results=results,
        os=os_name,
        arch=arch,
        channel=channel,
        on_fail=on_fail,
        interactive=not non_interactive,
        only_newest_major=_as_bool(
            _pick(arg("only_newest_major"), file_config, "ONLY_NEWEST_MAJOR"), False
        ),
        hide_negative_hits=_as_bool(
            _pick(arg("hide_negative_hits"), file_config, "HIDE_NEGATIVE_HITS"), False
        ),
        inverse=_as_bool(_pick(arg("inverse"), file_config, "INVERSE"), False),
        single=single,
        store=_as_bool(_pick(arg("store"), file_config, "STORE"), True),
        download=_as_bool(arg("download"), True),
        download_folder=_pick(arg("folder"), file_config, "DOWNLOAD_FOLDER"),
        auto_unzip=_as_bool(_pick(arg("unzip"), file_config, "UNZIP"), False),
        ignore_store=bool(arg("ignore_store")),
        store_path=get_store_path(),
    )

# src/chromium_fetcher/cli.py

import argparse
import asyncio
import importlib.metadata
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from chromium_fetcher import log_utils
from chromium_fetcher.config import (
    build_configuration,
    get_log_dir,
    get_store_path,
    load_config,
)
from chromium_fetcher.constants import APP_NAME, DEFAULT_CHANNEL
from chromium_fetcher.download import orchestrator
from chromium_fetcher.exceptions import ChromiumFetcherError, NoBinaryForSingleVersion

COMMANDS = ("download", "list", "import-store", "export-store", "version")
DEFAULT_COMMAND = "download"


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--debug", action="store_true", help="Enable debug logging"
    )
    parser.add_argument(
        "--quiet", "-q", action="store_true", help="Only log errors"
    )
    parser.add_argument(
        "--config", dest="config_file", help="Use this config file instead of the default"
    )
    parser.add_argument(
        "--log-file",
        action="store_true",
        help="Also write logs to a rotating file in the user log directory",
    )


def _add_filter_arguments(parser: argparse.ArgumentParser) -> None:
    """Arguments shared by the download and list commands; unset values stay None."""
    parser.add_argument("--min", "-m", help="The minimum version (inclusive)")
    parser.add_argument(
        "--max", "-M", help="The maximum version (inclusive). Newest if not set"
    )
    parser.add_argument(
        "--max-results",
        "-r",
        dest="max_results",
        help="The maximum amount of versions to choose from",
    )
    parser.add_argument(
        "--os", "-o", help="Operating system of the binary (linux, win, mac)"
    )
    parser.add_argument(
        "--arch",
        "-a",
        help='Architecture of the binary ("x64", "x86", "arm"). Only works when --os is also set',
    )
    parser.add_argument(
        "--channel",
        "-c",
        help=f"Release channel to load versions from (default: {DEFAULT_CHANNEL})",
    )
    parser.add_argument(
        "--decrease-on-fail",
        "-d",
        action="store_true",
        default=None,
        help="If a binary does not exist, try the next lower version",
    )
    parser.add_argument(
        "--increase-on-fail",
        "-i",
        action="store_true",
        default=None,
        help='If a binary does not exist, try the next higher version. Overrides "--decrease-on-fail"',
    )
    parser.add_argument(
        "--non-interactive",
        "-n",
        action="store_true",
        default=None,
        help="Don't show the selection menu. Only works with --decrease-on-fail",
    )
    parser.add_argument(
        "--no-store",
        "-t",
        dest="store",
        action="store_false",
        default=None,
        help="Don't store negative hits in the local store file",
    )
    parser.add_argument(
        "--ignore-store",
        action="store_true",
        default=None,
        help="Don't use the local store to mark versions without a binary",
    )
    parser.add_argument(
        "--hide-negative-hits",
        "-H",
        action="store_true",
        default=None,
        help="Hide versions known to have no binary",
    )
    parser.add_argument(
        "--only-newest-major",
        "-O",
        action="store_true",
        default=None,
        help="Show only the newest version of each major version",
    )
    parser.add_argument(
        "--inverse",
        "-v",
        action="store_true",
        default=None,
        help="Sort the selectable versions ascending",
    )


def _add_download_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--single",
        "-s",
        help="Download exactly this version, even if the store lists it as missing",
    )
    parser.add_argument(
        "--no-download",
        "-l",
        dest="download",
        action="store_false",
        default=None,
        help="Don't download the binary; keeps walking versions on fail (builds up the store)",
    )
    parser.add_argument(
        "--unzip",
        "-z",
        action="store_true",
        default=None,
        help="Unzip the downloaded archive and delete the zip afterwards",
    )
    parser.add_argument("--folder", "-f", help="Set the download folder")


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    _add_common_arguments(common)

    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description="chromium-fetcher - Download historical Chromium snapshot builds",
    )
    subparsers = parser.add_subparsers(dest="command")

    download_parser = subparsers.add_parser(
        "download", parents=[common], help="Select and download a Chromium binary (default)"
    )
    _add_filter_arguments(download_parser)
    _add_download_arguments(download_parser)

    list_parser = subparsers.add_parser(
        "list", parents=[common], help="List the versions matching the filters"
    )
    _add_filter_arguments(list_parser)

    import_parser = subparsers.add_parser(
        "import-store",
        parents=[common],
        help="Merge a localstore.json from a URL or file into the local store",
    )
    import_parser.add_argument(
        "source", help='URL (starting with "http://" or "https://") or file path'
    )

    export_parser = subparsers.add_parser(
        "export-store", parents=[common], help="Write the local store to stdout"
    )
    export_parser.add_argument(
        "--path", help="Export this store file instead of the local store"
    )

    subparsers.add_parser(
        "version", parents=[common], help="Display chromium-fetcher version"
    )
    return parser


def _normalize_argv(argv: List[str]) -> List[str]:
    """Insert the default command when none is given."""
    if argv and (argv[0] in COMMANDS or argv[0] in ("-h", "--help")):
        return argv
    return [DEFAULT_COMMAND, *argv]


def _configure_logging(args: argparse.Namespace, file_config: Dict[str, Any]) -> None:
    if args.debug:
        log_utils.set_log_level("DEBUG")
    elif args.quiet:
        log_utils.set_log_level("ERROR")
    elif file_config.get("LOG_LEVEL"):
        log_utils.set_log_level(str(file_config["LOG_LEVEL"]))

    if args.log_file:
        log_utils.add_file_logging(
            Path(get_log_dir()), "DEBUG" if args.debug else "INFO"
        )


def display_version() -> Optional[str]:
    try:
        return importlib.metadata.version(APP_NAME)
    except importlib.metadata.PackageNotFoundError:
        return None


def _run(args: argparse.Namespace, file_config: Dict[str, Any]) -> int:
    if args.command == "version":
        version = display_version()
        log_utils.logger.info(f"{APP_NAME} v{version or 'unknown'}")
        return 0

    if args.command == "import-store":
        orchestrator.import_store(args.source, get_store_path())
        return 0

    if args.command == "export-store":
        orchestrator.export_store(args.path or get_store_path(), sys.stdout)
        return 0

    config = build_configuration(args, file_config)
    log_utils.logger.debug(f"Configuration: {config}")

    if args.command == "list":
        orchestrator.list_versions(config)
        return 0

    asyncio.run(orchestrator.run_download(config))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """
    Entry point for the chromium-fetcher command-line interface.

    Dispatches the download (default), list, import-store, export-store and
    version commands. Application errors are logged and turn into exit code 1.
    """
    parser = build_parser()
    args = parser.parse_args(_normalize_argv(list(sys.argv[1:] if argv is None else argv)))

    try:
        file_config = load_config(args.config_file) or {}
        _configure_logging(args, file_config)
        return _run(args, file_config)
    except NoBinaryForSingleVersion as e:
        log_utils.logger.error(str(e))
        return 1
    except ChromiumFetcherError as e:
        log_utils.logger.error(f"Error: {e}")
        return 1
    except KeyboardInterrupt:
        log_utils.logger.info("Aborted by user.")
        return 130


if __name__ == "__main__":
    sys.exit(main())

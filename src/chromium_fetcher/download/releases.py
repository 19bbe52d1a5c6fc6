"""
Release Filter/Mapper for the chromium-fetcher Download Subsystem

Turns the raw release list into the ordered candidate list shown to the user
or walked by the resolver. Everything here is pure: no network and no file
access.
"""

import logging
import math
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Union

from chromium_fetcher.exceptions import InvalidVersionInput
from chromium_fetcher.log_utils import logger as default_logger

from .interfaces import MappedVersion, Release
from .store import Store
from .version import ChromeVersion, Compared

RawRelease = Union[str, ChromeVersion, Release, MappedVersion, Mapping[str, Any]]


def _coerce_branch_position(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def release_from_api(record: Mapping[str, Any]) -> Release:
    """
    Build a Release from a release dashboard record.

    Only `version` and `chromium_main_branch_position` are required to be
    meaningful; a missing version degrades to 0.0.0.0.
    """
    version_text = record.get("version")
    version = (
        ChromeVersion.from_string(version_text)
        if isinstance(version_text, str)
        else ChromeVersion()
    )
    return Release(
        version=version,
        branch_position=_coerce_branch_position(
            record.get("chromium_main_branch_position")
        ),
        channel=record.get("channel"),
        platform=record.get("platform"),
    )


def to_release(raw: RawRelease) -> Release:
    """
    Normalize one raw entry (dotted string, version, Release, MappedVersion or API record).

    Raises:
        InvalidVersionInput: If the entry has none of the accepted shapes.
    """
    if isinstance(raw, Release):
        return raw
    if isinstance(raw, MappedVersion):
        return Release(version=raw.version, branch_position=raw.branch_position)
    if isinstance(raw, ChromeVersion):
        return Release(version=raw)
    if isinstance(raw, str):
        return Release(version=ChromeVersion.from_string(raw))
    if isinstance(raw, Mapping):
        return release_from_api(raw)
    raise InvalidVersionInput(
        f"Cannot map release entry of type {type(raw).__name__}",
        field="release",
        value=raw,
    )


def _limit(entries: List[MappedVersion], results: Any) -> List[MappedVersion]:
    if results is None:
        return entries
    if isinstance(results, float) and math.isinf(results):
        return entries if results > 0 else []
    return entries[: max(int(results), 0)]


def _within_bounds(
    version: ChromeVersion, minimum: ChromeVersion, maximum: ChromeVersion
) -> bool:
    return (
        version.compare(minimum) is not Compared.LESS
        and version.compare(maximum) is not Compared.GREATER
    )


def newest_per_major(entries: Sequence[MappedVersion]) -> List[MappedVersion]:
    """
    Keep one representative per major version, in the current order.

    The representative is the first enabled entry of its major, or the first
    entry when every entry of that major is disabled. A disabled entry never
    causes a second representative of the same major to be kept.
    """
    representatives: dict = {}
    order: List[Any] = []
    for entry in entries:
        major = entry.version.major
        current = representatives.get(major)
        if current is None:
            representatives[major] = entry
            order.append(major)
        elif current.disabled and not entry.disabled:
            representatives[major] = entry
    return [representatives[major] for major in order]


def _single_candidate(
    single: Any, releases: Iterable[Release]
) -> List[MappedVersion]:
    version = ChromeVersion.parse(single)
    branch_position = next(
        (
            release.branch_position
            for release in releases
            if release.version == version and release.branch_position is not None
        ),
        None,
    )
    return [MappedVersion(version, disabled=False, branch_position=branch_position)]


def map_releases(
    raw: Iterable[RawRelease],
    config: Any,
    store: Store,
    log: Optional[logging.Logger] = None,
) -> List[MappedVersion]:
    """
    Filter, annotate, order and limit the raw release list.

    Steps, in order:
        1. a single-version run returns exactly that version, enabled, whatever
           the raw list or the store contain;
        2. every release is mapped with `disabled` set from the store;
        3. disabled entries are dropped when hide_negative_hits is set;
        4. entries outside [min, max] are dropped (bounds inclusive);
        5. entries are sorted newest first;
        6. the order is reversed when inverse is set;
        7. with only_newest_major one entry per major is kept and the list is
           cut to `results` majors, otherwise to `results` entries.

    Parameters:
        raw: Releases as dotted strings, ChromeVersion, Release objects or dashboard records.
        config: Run configuration (see chromium_fetcher.config.Configuration).
        store: Negative-hit store consulted for the configured os/arch.
        log: Logger for debug notices; defaults to the package logger.

    Returns:
        List[MappedVersion]: The candidates in presentation order.
    """
    log = log or default_logger
    releases = [to_release(entry) for entry in raw]

    if config.single is not None:
        log.debug(f"Single version requested: {config.single}")
        return _single_candidate(config.single, releases)

    mapped = [
        MappedVersion(
            release.version,
            disabled=store.has(config.os, config.arch, release.version),
            branch_position=release.branch_position,
        )
        for release in releases
    ]

    if config.hide_negative_hits:
        mapped = [entry for entry in mapped if not entry.disabled]

    mapped = [
        entry
        for entry in mapped
        if _within_bounds(entry.version, config.min, config.max)
    ]

    mapped.sort(key=lambda entry: entry.version, reverse=True)

    if config.inverse:
        mapped.reverse()

    if config.only_newest_major:
        mapped = _limit(newest_per_major(mapped), config.results)
    else:
        mapped = _limit(mapped, config.results)

    log.debug(f"{len(mapped)} candidate versions after filtering")
    return mapped

from typing import Any, List, Optional, Sequence

from pick import pick

from chromium_fetcher.constants import (
    MSG_ALL_DISABLED,
    MSG_NO_BINARY_LABEL,
    MSG_SELECT_VERSION,
)
from chromium_fetcher.download.interfaces import MappedVersion
from chromium_fetcher.log_utils import logger


def _format_option(entry: MappedVersion) -> str:
    if entry.disabled:
        return f"{entry.value} {MSG_NO_BINARY_LABEL}"
    return entry.value


def build_options(candidates: Sequence[MappedVersion]) -> List[str]:
    return [_format_option(entry) for entry in candidates]


def _default_index(candidates: Sequence[MappedVersion]) -> int:
    for index, entry in enumerate(candidates):
        if not entry.disabled:
            return index
    return 0


async def select_version(
    candidates: Sequence[MappedVersion], config: Any
) -> Optional[str]:
    """
    Ask the user which candidate version to try.

    Returns the canonical version string of the choice, or None when there is
    nothing selectable. With `results == 1` the first candidate is returned
    without showing the menu. Entries without a binary are listed but choosing
    one shows the menu again.
    """
    if not candidates or all(entry.disabled for entry in candidates):
        logger.warning(MSG_ALL_DISABLED)
        return None

    if config.results == 1:
        first = candidates[0]
        return None if first.disabled else first.value

    title = f"{MSG_SELECT_VERSION} for {config.os} {config.arch}"
    options = build_options(candidates)
    default_index = _default_index(candidates)

    while True:
        _, index = pick(options, title, indicator="*", default_index=default_index)
        chosen = candidates[index]
        if not chosen.disabled:
            return chosen.value
        logger.warning(f"Version {chosen.value} has no binary, choose another one")
        default_index = index

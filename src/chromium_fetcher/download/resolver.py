"""
Selection Resolver for the chromium-fetcher Download Subsystem

Walks the candidate list until a version with a downloadable binary is found.
A candidate is chosen by the user (or automatically), checked against the
snapshot bucket and, on a miss, marked disabled and written to the negative-hit
store before the on-fail policy decides which candidate comes next.

Remote checks are awaited strictly one after another: each outcome decides
whether another check is needed and every miss mutates the store.
"""

import logging
from typing import Any, Awaitable, Callable, List, Optional, Sequence

from chromium_fetcher.constants import (
    MSG_AUTO_SEARCH,
    MSG_CONTINUE_HIGHER,
    MSG_CONTINUE_LOWER,
    MSG_NOT_DOWNLOADING,
)
from chromium_fetcher.log_utils import logger as default_logger

from .interfaces import (
    BinaryLocator,
    DownloadReportEntry,
    MappedVersion,
    OnFail,
    OSSetting,
    ResolveResult,
)
from .platforms import detect_os_setting
from .store import Store, store_negative_hit

PromptFunc = Callable[[Sequence[MappedVersion], Any], Awaitable[Optional[str]]]


class SelectionResolver:
    """
    State machine driving one resolution run.

    States: SELECT (prompt or auto-pick), CHECK (remote lookup), ADVANCE (apply
    the on-fail policy), DONE (URL found) and EXHAUSTED (no further candidate).
    """

    def __init__(
        self,
        config: Any,
        candidates: Sequence[MappedVersion],
        *,
        locator: BinaryLocator,
        prompt: PromptFunc,
        store: Optional[Store] = None,
        store_path: Optional[str] = None,
        log: Optional[logging.Logger] = None,
    ):
        self.config = config
        self.candidates: List[MappedVersion] = list(candidates)
        self.locator = locator
        self.prompt = prompt
        self.store = store
        self.store_path = store_path
        self.log = log or default_logger
        self.report: List[DownloadReportEntry] = []
        self._os_setting: Optional[OSSetting] = None

    @property
    def os_setting(self) -> OSSetting:
        if self._os_setting is None:
            self._os_setting = detect_os_setting(self.config.os, self.config.arch)
        return self._os_setting

    @property
    def on_fail(self) -> OnFail:
        return OnFail(self.config.on_fail)

    @property
    def auto_search(self) -> bool:
        return not self.config.interactive and self.on_fail is OnFail.DECREASE

    async def run(self) -> ResolveResult:
        if self.config.single is not None:
            return await self._run_single()

        index = await self._select_first()
        while index is not None:
            entry = self.candidates[index]
            if not entry.disabled:
                url = await self._check(index)
                if url and self.config.download:
                    return ResolveResult(
                        url=url, selected=self.candidates[index], report=self.report
                    )
                if url:
                    self.log.warning(MSG_NOT_DOWNLOADING)
            index = await self._advance(index)

        return ResolveResult(url=None, selected=None, report=self.report)

    async def _run_single(self) -> ResolveResult:
        if not self.candidates:
            return ResolveResult(report=self.report)
        url = await self._check(0)
        if url and not self.config.download:
            self.log.warning(MSG_NOT_DOWNLOADING)
        return ResolveResult(url=url, selected=self.candidates[0], report=self.report)

    async def _select_first(self) -> Optional[int]:
        if self.auto_search:
            if not self.candidates:
                return None
            self.log.info(MSG_AUTO_SEARCH.format(version=self.candidates[0].value))
            return 0
        return await self._prompt_index()

    async def _prompt_index(self) -> Optional[int]:
        choice = await self.prompt(self.candidates, self.config)
        if choice is None:
            return None
        for index, entry in enumerate(self.candidates):
            if entry.value == choice:
                return index
        self.log.debug(f"Selected version {choice} is not a candidate")
        return None

    async def _check(self, index: int) -> Optional[str]:
        """Look up the binary of a candidate and record a negative hit on a miss."""
        entry = self.candidates[index]
        url = await self.locator.find_binary_url(entry, self.os_setting)
        self.report.append(
            DownloadReportEntry(
                version=entry.value,
                binary_exists=bool(url),
                download=bool(url) and bool(self.config.download),
            )
        )
        if not url:
            self.candidates[index] = entry.disable()
            self._persist_negative_hit(entry)
        return url

    def _persist_negative_hit(self, entry: MappedVersion) -> None:
        if not self.config.store or self.store is None:
            return
        if self.store_path:
            store_negative_hit(
                self.store,
                self.config.os,
                self.config.arch,
                entry.version,
                self.store_path,
            )
        else:
            self.store.add(self.config.os, self.config.arch, entry.version)

    async def _advance(self, index: int) -> Optional[int]:
        on_fail = self.on_fail
        if on_fail is OnFail.NOTHING:
            return await self._prompt_index()

        if on_fail is OnFail.INCREASE:
            next_index = index - 1
            message = MSG_CONTINUE_HIGHER
        else:
            next_index = index + 1
            message = MSG_CONTINUE_LOWER

        if next_index < 0 or next_index >= len(self.candidates):
            return None

        next_entry = self.candidates[next_index]
        if not next_entry.disabled:
            self.log.info(message.format(version=next_entry.value))
        return next_index


async def resolve(
    config: Any,
    candidates: Sequence[MappedVersion],
    *,
    locator: BinaryLocator,
    prompt: PromptFunc,
    store: Optional[Store] = None,
    store_path: Optional[str] = None,
    log: Optional[logging.Logger] = None,
) -> ResolveResult:
    """
    Resolve the candidate list to a binary URL.

    Returns:
        ResolveResult: `url` and `selected` are set when a binary was found and
        downloading is enabled. When every candidate is exhausted both are None.
        For a single-version run `selected` is always the requested version and
        `url` is None when it has no binary; the caller reports that case.
    """
    resolver = SelectionResolver(
        config,
        candidates,
        locator=locator,
        prompt=prompt,
        store=store,
        store_path=store_path,
        log=log,
    )
    return await resolver.run()

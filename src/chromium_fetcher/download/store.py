"""
Negative-Hit Store for the chromium-fetcher Download Subsystem

The store records, per operating system and architecture, the versions that
were confirmed to have no snapshot binary. It is a best-effort cache: reading a
missing or corrupt store file yields an empty store, and writes replace the
whole file.
"""

import json
import os
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set, Union

from chromium_fetcher.constants import STORE_JSON_INDENT, STORE_OS_ARCHS
from chromium_fetcher.exceptions import UnsupportedCombination
from chromium_fetcher.log_utils import logger

from .files import _atomic_write_text
from .version import ChromeVersion

VersionLike = Union[ChromeVersion, str]

StoreData = Dict[str, Dict[str, List[str]]]


def _canonical(version: VersionLike) -> str:
    return str(ChromeVersion.parse(version))


def _sort_key(entry: str) -> ChromeVersion:
    return ChromeVersion.from_string(entry)


class Store:
    """
    In-memory negative-hit store partitioned by OS and architecture.

    Only the six pairs in STORE_OS_ARCHS exist; any other pair raises
    UnsupportedCombination instead of reading as empty.
    """

    def __init__(self, data: Optional[Mapping[str, Any]] = None):
        self._buckets: Dict[str, Dict[str, Set[str]]] = {
            os_name: {arch: set() for arch in archs}
            for os_name, archs in STORE_OS_ARCHS.items()
        }
        if data:
            self.merge(data)

    def get_bucket(self, os: str, arch: str) -> Set[str]:
        """
        Return the live set of canonical versions for an OS/arch pair.

        Raises:
            UnsupportedCombination: If the pair is not one of the supported buckets.
        """
        archs = self._buckets.get(os)
        if archs is None or arch not in archs:
            raise UnsupportedCombination(os, arch)
        return archs[arch]

    def has(self, os: str, arch: str, version: VersionLike) -> bool:
        return _canonical(version) in self.get_bucket(os, arch)

    def add(self, os: str, arch: str, version: VersionLike) -> "Store":
        """Record a negative hit. Adding an existing entry is a no-op."""
        self.get_bucket(os, arch).add(_canonical(version))
        return self

    def merge(self, other: Union["Store", Mapping[str, Any]]) -> "Store":
        """
        Union another store (or raw bucket mapping) into this one, bucket by bucket.

        Unknown OS or architecture keys in a raw mapping are skipped with a debug
        message; entries that are not strings are ignored.
        """
        if isinstance(other, Store):
            for os_name, arch, bucket in other._iter_buckets():
                self._buckets[os_name][arch].update(bucket)
            return self

        for os_name, archs in other.items():
            if os_name not in self._buckets or not isinstance(archs, Mapping):
                logger.debug(f"Ignoring unknown store section: {os_name}")
                continue
            for arch, entries in archs.items():
                if arch not in self._buckets[os_name]:
                    logger.debug(f"Ignoring unknown store bucket: {os_name}/{arch}")
                    continue
                if not isinstance(entries, Iterable) or isinstance(entries, str):
                    continue
                self._buckets[os_name][arch].update(
                    _canonical(entry) for entry in entries if isinstance(entry, str)
                )
        return self

    def size(self) -> Dict[str, int]:
        """Number of stored entries per operating system."""
        return {
            os_name: sum(len(bucket) for bucket in archs.values())
            for os_name, archs in self._buckets.items()
        }

    def to_dict(self) -> StoreData:
        """Bucket contents with fixed key order and entries sorted ascending."""
        return {
            os_name: {
                arch: sorted(self._buckets[os_name][arch], key=_sort_key)
                for arch in archs
            }
            for os_name, archs in STORE_OS_ARCHS.items()
        }

    def serialize(self) -> str:
        return json.dumps(self.to_dict(), indent=STORE_JSON_INDENT)

    @classmethod
    def load(cls, raw: Union[str, bytes, Mapping[str, Any], None]) -> "Store":
        """
        Build a store from serialized JSON or an already-parsed mapping.

        Never raises for bad content: unparsable JSON or a non-mapping document
        yields an empty store.
        """
        if raw is None:
            return cls()
        data: Any = raw
        if isinstance(raw, (str, bytes)):
            try:
                data = json.loads(raw)
            except (ValueError, UnicodeDecodeError) as e:
                logger.debug(f"Could not parse store content: {e}")
                return cls()
        if not isinstance(data, Mapping):
            logger.debug(f"Unexpected store content type: {type(data).__name__}")
            return cls()
        return cls(data)

    def _iter_buckets(self):
        for os_name, archs in self._buckets.items():
            for arch, bucket in archs.items():
                yield os_name, arch, bucket

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Store):
            return NotImplemented
        return self._buckets == other._buckets

    def __repr__(self) -> str:
        return f"Store({self.size()})"


def load_store(path: str) -> Store:
    """
    Read the store file at `path`.

    A missing, unreadable or corrupt file yields an empty store.
    """
    if not os.path.exists(path):
        logger.debug(f"No store file at {path}, starting with an empty store")
        return Store()
    try:
        with open(path, "r", encoding="utf-8") as f:
            content = f.read()
    except (IOError, OSError, UnicodeDecodeError) as e:
        logger.debug(f"Could not read store file {path}: {e}")
        return Store()
    return Store.load(content)


def save_store(store: Store, path: str) -> bool:
    """Atomically overwrite the store file with the serialized store."""
    saved = _atomic_write_text(path, store.serialize())
    if saved:
        logger.debug(f"Store saved to {path}")
    return saved


def store_negative_hit(
    store: Store, os: str, arch: str, version: VersionLike, path: str
) -> Store:
    """Record a missing binary in memory and write the store through to disk."""
    store.add(os, arch, version)
    save_store(store, path)
    return store

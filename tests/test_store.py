"""
Tests for the negative-hit store.
"""

import json
import os

import pytest

from chromium_fetcher.download.store import (
    Store,
    load_store,
    save_store,
    store_negative_hit,
)
from chromium_fetcher.download.version import ChromeVersion
from chromium_fetcher.exceptions import UnsupportedCombination

pytestmark = [pytest.mark.unit, pytest.mark.core_downloads]


def _full_store():
    return Store(
        {
            "linux": {"x64": ["10.0.0.0"], "x86": ["11.0.0.0"]},
            "mac": {"arm": ["12.0.0.0"], "x64": ["13.0.0.0"]},
            "win": {"x64": ["14.0.0.0"], "x86": ["15.0.0.0"]},
        }
    )


class TestBuckets:
    def test_get_bucket_for_every_supported_pair(self):
        store = _full_store()

        assert store.get_bucket("linux", "x64") == {"10.0.0.0"}
        assert store.get_bucket("linux", "x86") == {"11.0.0.0"}
        assert store.get_bucket("mac", "arm") == {"12.0.0.0"}
        assert store.get_bucket("mac", "x64") == {"13.0.0.0"}
        assert store.get_bucket("win", "x64") == {"14.0.0.0"}
        assert store.get_bucket("win", "x86") == {"15.0.0.0"}

    @pytest.mark.parametrize(
        "os_name, arch",
        [("linux", "arm"), ("mac", "x86"), ("win", "arm"), ("linux", "foo"), ("bsd", "x64")],
    )
    def test_unsupported_combination_raises(self, os_name, arch):
        with pytest.raises(UnsupportedCombination) as exc_info:
            Store().get_bucket(os_name, arch)

        assert str(exc_info.value) == f"Unsupported os/arch combination: {os_name}/{arch}"
        assert exc_info.value.os == os_name
        assert exc_info.value.arch == arch

    def test_has_only_matches_its_bucket(self):
        store = Store({"linux": {"x64": ["10.0.0.0"], "x86": []}})
        version = ChromeVersion(10, 0, 0, 0)

        assert store.has("linux", "x64", version) is True
        assert store.has("linux", "x86", version) is False
        assert store.has("win", "x64", version) is False
        assert store.has("mac", "x64", version) is False
        assert store.has("linux", "x64", ChromeVersion(11, 0, 0, 0)) is False

    def test_has_accepts_strings(self):
        store = Store({"linux": {"x64": ["10.0.0.0"]}})

        assert store.has("linux", "x64", "10.0.0.0") is True

    def test_has_with_unsupported_pair_raises(self):
        with pytest.raises(UnsupportedCombination):
            Store().has("mac", "x86", ChromeVersion(10))


class TestMutation:
    def test_add_is_idempotent(self):
        once = Store().add("linux", "x64", ChromeVersion(10, 0, 0, 0))
        twice = (
            Store()
            .add("linux", "x64", ChromeVersion(10, 0, 0, 0))
            .add("linux", "x64", ChromeVersion(10, 0, 0, 0))
        )

        assert once.get_bucket("linux", "x64") == twice.get_bucket("linux", "x64")
        assert once == twice

    def test_add_returns_self(self):
        store = Store()

        assert store.add("win", "x86", "10.0.0.0") is store

    def test_add_stores_canonical_strings(self):
        store = Store().add("linux", "x64", "10.1")

        assert store.get_bucket("linux", "x64") == {"10.1.0.0"}

    def test_merge_with_store(self):
        store = Store({"linux": {"x64": ["10.0.0.0"], "x86": []}})
        other = Store(
            {
                "win": {"x64": ["10.0.0.0"], "x86": ["11.0.0.0"]},
                "linux": {"x64": ["12.0.0.0"], "x86": ["15.0.0.0"]},
            }
        )

        merged = store.merge(other)

        assert merged is store
        assert merged == Store(
            {
                "win": {"x64": ["10.0.0.0"], "x86": ["11.0.0.0"]},
                "linux": {"x64": ["10.0.0.0", "12.0.0.0"], "x86": ["15.0.0.0"]},
            }
        )

    def test_merge_with_raw_mapping_does_not_duplicate(self):
        store = Store({"linux": {"x64": ["10.0.0.0"]}})

        store.merge({"linux": {"x64": ["10.0.0.0", "11.0.0.0"]}})

        assert store.get_bucket("linux", "x64") == {"10.0.0.0", "11.0.0.0"}

    def test_merge_skips_unknown_sections(self):
        store = Store().merge(
            {"bsd": {"x64": ["1.0.0.0"]}, "linux": {"arm": ["2.0.0.0"], "x64": "3.0.0.0"}}
        )

        assert store == Store()

    def test_size_counts_entries_per_os(self):
        store = _full_store().add("linux", "x64", "16.0.0.0")

        assert store.size() == {"linux": 3, "mac": 2, "win": 2}


class TestSerialization:
    def test_serialize_uses_fixed_order_and_sorted_entries(self):
        store = Store(
            {
                "win": {"x86": ["9.0.0.0"]},
                "linux": {"x64": ["100.0.0.0", "20.0.0.0", "3.0.0.0"]},
            }
        )

        data = json.loads(store.serialize())

        assert list(data) == ["linux", "mac", "win"]
        assert list(data["linux"]) == ["x64", "x86"]
        assert list(data["mac"]) == ["arm", "x64"]
        assert data["linux"]["x64"] == ["3.0.0.0", "20.0.0.0", "100.0.0.0"]

    def test_serialize_is_byte_identical_for_equal_stores(self):
        first = Store().add("linux", "x64", "2.0.0.0").add("linux", "x64", "1.0.0.0")
        second = Store().add("linux", "x64", "1.0.0.0").add("linux", "x64", "2.0.0.0")

        assert first.serialize() == second.serialize()

    def test_serialize_load_round_trip(self):
        store = _full_store().add("mac", "arm", "120.0.6099.109")

        assert Store.load(json.loads(store.serialize())) == store
        assert Store.load(store.serialize()) == store

    @pytest.mark.parametrize("raw", ["{not json", "[1, 2, 3]", "42", b"\xff\xfe", None])
    def test_load_degrades_to_empty_store(self, raw):
        assert Store.load(raw) == Store()

    def test_load_treats_missing_buckets_as_empty(self):
        store = Store.load('{"linux": {"x64": ["10.0.0.0"]}}')

        assert store.get_bucket("linux", "x86") == set()
        assert store.get_bucket("mac", "arm") == set()


class TestPersistence:
    def test_load_store_missing_file(self, store_path):
        assert load_store(store_path) == Store()

    def test_load_store_corrupt_file(self, store_path):
        with open(store_path, "w", encoding="utf-8") as f:
            f.write("{corrupt")

        assert load_store(store_path) == Store()

    def test_load_store_with_oversized_component(self, store_path):
        with open(store_path, "w", encoding="utf-8") as f:
            json.dump({"linux": {"x64": ["1" * 5000 + ".0.0.0"]}}, f)

        store = load_store(store_path)

        assert store.size() == {"linux": 1, "mac": 0, "win": 0}
        assert store.has("linux", "x64", "0.0.0.0")

    def test_save_and_load(self, store_path):
        store = _full_store()

        assert save_store(store, store_path) is True
        assert load_store(store_path) == store
        with open(store_path, encoding="utf-8") as f:
            assert f.read() == store.serialize()

    def test_save_overwrites_whole_file(self, store_path):
        save_store(_full_store(), store_path)
        save_store(Store().add("win", "x64", "1.0.0.0"), store_path)

        assert load_store(store_path).size() == {"linux": 0, "mac": 0, "win": 1}

    def test_save_leaves_no_temp_files(self, tmp_path):
        path = str(tmp_path / "localstore.json")

        save_store(_full_store(), path)

        assert os.listdir(tmp_path) == ["localstore.json"]

    def test_store_negative_hit_writes_through(self, store_path):
        store = Store()

        store_negative_hit(store, "linux", "x64", ChromeVersion(10, 1, 2, 3), store_path)

        assert store.has("linux", "x64", "10.1.2.3")
        assert load_store(store_path).has("linux", "x64", "10.1.2.3")

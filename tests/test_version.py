"""
Tests for the ChromeVersion value type.
"""

import math
from itertools import product

import pytest

from chromium_fetcher.download.version import (
    ChromeVersion,
    Compared,
    sort_ascending,
    sort_descending,
)
from chromium_fetcher.exceptions import InvalidVersionInput

pytestmark = [pytest.mark.unit, pytest.mark.core_downloads]


class TestParsing:
    def test_from_string_full(self):
        version = ChromeVersion.from_string("120.0.6099.109")

        assert version.as_tuple() == (120, 0, 6099, 109)

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("10.a.1", (10, 0, 1, 0)),
            ("10", (10, 0, 0, 0)),
            ("", (0, 0, 0, 0)),
            ("10a.2b.3.4", (10, 2, 3, 4)),
            ("1.2.3.4.5", (1, 2, 3, 4)),
            ("x.y.z.w", (0, 0, 0, 0)),
        ],
    )
    def test_from_string_is_permissive(self, text, expected):
        assert ChromeVersion.from_string(text).as_tuple() == expected

    def test_oversized_component_degrades_to_zero(self):
        text = "1" * 5000 + ".2.3.4"

        assert ChromeVersion.from_string(text).as_tuple() == (0, 2, 3, 4)

    def test_from_parts_defaults_to_zero(self):
        assert ChromeVersion.from_parts(10) == ChromeVersion(10, 0, 0, 0)
        assert ChromeVersion.from_parts(10, 1, 2, 3) == ChromeVersion(10, 1, 2, 3)

    def test_from_record(self):
        version = ChromeVersion.from_record({"major": 10, "minor": 1, "branch": 2})

        assert version == ChromeVersion(10, 1, 2, 0)

    def test_constructor_normalises_float_parts(self):
        version = ChromeVersion(10.0, 1.9, float("nan"))

        assert version.as_tuple() == (10, 1, 0, 0)
        assert all(type(part) is int for part in version.as_tuple())
        assert str(ChromeVersion(10.0)) == "10.0.0.0"
        assert hash(ChromeVersion(10.0)) == hash(ChromeVersion(10))

    def test_constructor_rejects_non_numeric_part(self):
        with pytest.raises(InvalidVersionInput) as exc_info:
            ChromeVersion(10, "1")

        assert exc_info.value.field == "minor"

    def test_parse_dispatches_on_shape(self):
        expected = ChromeVersion(10, 1, 2, 3)

        assert ChromeVersion.parse("10.1.2.3") == expected
        assert ChromeVersion.parse(10, 1, 2, 3) == expected
        assert ChromeVersion.parse(
            {"major": 10, "minor": 1, "branch": 2, "patch": 3}
        ) == expected
        assert ChromeVersion.parse(expected) is expected

    @pytest.mark.parametrize("value", [None, [10, 1], True, object(), 1.5j])
    def test_parse_rejects_wrong_shapes(self, value):
        with pytest.raises(InvalidVersionInput):
            ChromeVersion.parse(value)

    def test_parse_rejects_too_many_parts(self):
        with pytest.raises(InvalidVersionInput):
            ChromeVersion.parse(1, 2, 3, 4, 5)

    def test_from_record_rejects_non_numeric_component(self):
        with pytest.raises(InvalidVersionInput) as exc_info:
            ChromeVersion.from_record({"major": "ten"})

        assert exc_info.value.field == "major"

    def test_from_string_rejects_non_string(self):
        with pytest.raises(InvalidVersionInput):
            ChromeVersion.from_string(10)


class TestRendering:
    def test_str_is_canonical(self):
        assert str(ChromeVersion(10, 0, 0, 0)) == "10.0.0.0"
        assert str(ChromeVersion.from_string("10.a.1")) == "10.0.1.0"

    @pytest.mark.parametrize(
        "parts", list(product([0, 1, 99], [0, 7], [0, 6099], [0, 1, 217]))
    )
    def test_round_trip_through_string(self, parts):
        version = ChromeVersion.from_parts(*parts)

        assert ChromeVersion.parse(str(version)) == version

    def test_infinity_sentinels_round_trip(self):
        upper = ChromeVersion(math.inf)
        lower = ChromeVersion(-math.inf)

        assert str(upper) == "Infinity.0.0.0"
        assert str(lower) == "-Infinity.0.0.0"
        assert upper.major == math.inf
        assert ChromeVersion.parse(str(upper)) == upper
        assert ChromeVersion.parse(str(lower)) == lower


class TestComparison:
    def test_compare_is_lexicographic(self):
        base = ChromeVersion(10, 1, 2, 3)

        assert base.compare(ChromeVersion(10, 1, 2, 3)) is Compared.EQUAL
        assert base.compare(ChromeVersion(10, 1, 2, 4)) is Compared.LESS
        assert base.compare(ChromeVersion(10, 1, 3, 0)) is Compared.LESS
        assert base.compare(ChromeVersion(9, 99, 99, 99)) is Compared.GREATER
        assert base.compare(ChromeVersion(10, 2, 0, 0)) is Compared.LESS

    def test_compare_is_antisymmetric(self):
        versions = [
            ChromeVersion(10, 0, 0, 0),
            ChromeVersion(10, 0, 0, 1),
            ChromeVersion(20, 0, 0, 0),
            ChromeVersion(math.inf),
            ChromeVersion(-math.inf),
        ]
        for a, b in product(versions, versions):
            forward = a.compare(b)
            backward = b.compare(a)
            if forward is Compared.GREATER:
                assert backward is Compared.LESS
            elif forward is Compared.LESS:
                assert backward is Compared.GREATER
            else:
                assert backward is Compared.EQUAL
                assert a == b

    def test_sentinels_bound_everything(self):
        version = ChromeVersion(120, 0, 6099, 109)

        assert ChromeVersion(-math.inf) < version < ChromeVersion(math.inf)

    def test_sort_helpers(self):
        versions = [
            ChromeVersion(10, 0, 0, 0),
            ChromeVersion(20, 0, 0, 0),
            ChromeVersion(10, 0, 0, 1),
        ]

        assert [str(v) for v in sort_descending(versions)] == [
            "20.0.0.0",
            "10.0.0.1",
            "10.0.0.0",
        ]
        assert [str(v) for v in sort_ascending(versions)] == [
            "10.0.0.0",
            "10.0.0.1",
            "20.0.0.0",
        ]

    def test_versions_are_hashable_and_immutable(self):
        version = ChromeVersion(10, 0, 0, 0)

        assert {version, ChromeVersion.from_string("10.0.0.0")} == {version}
        with pytest.raises(AttributeError):
            version.major = 11

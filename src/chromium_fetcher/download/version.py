"""
Version handling for the chromium-fetcher download subsystem.

Chromium versions have four numeric components (major.minor.branch.patch).
Parsing is permissive: a missing or non-numeric component becomes 0. The
canonical string form is the key used by the negative-hit store.
"""

import math
import re
from dataclasses import dataclass
from enum import Enum
from numbers import Real
from typing import Any, Iterable, List, Mapping, Union

from chromium_fetcher.exceptions import InvalidVersionInput

Component = Union[int, float]

_LEADING_DIGITS_RX = re.compile(r"^\s*(\d+)")
_INFINITY_TOKENS = {"infinity": math.inf, "inf": math.inf}
_NEG_INFINITY_TOKENS = {"-infinity": -math.inf, "-inf": -math.inf}


class Compared(Enum):
    """Result of comparing two versions."""

    LESS = -1
    EQUAL = 0
    GREATER = 1


def _parse_component(token: str) -> Component:
    """Parse one dotted component; anything unparsable becomes 0."""
    stripped = token.strip().lower()
    if stripped in _INFINITY_TOKENS:
        return _INFINITY_TOKENS[stripped]
    if stripped in _NEG_INFINITY_TOKENS:
        return _NEG_INFINITY_TOKENS[stripped]
    match = _LEADING_DIGITS_RX.match(token)
    if not match:
        return 0
    try:
        return int(match.group(1))
    except ValueError:
        # digit run longer than the interpreter allows for int()
        return 0


def _coerce_part(name: str, value: Any) -> Component:
    """Accept numeric parts; None or 0-like falls back to 0, other shapes are rejected."""
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, Real):
        raise InvalidVersionInput(
            f"Version component '{name}' must be a number",
            field=name,
            value=value,
        )
    if isinstance(value, float):
        if math.isinf(value):
            return value
        if math.isnan(value):
            return 0
        return int(value)
    return int(value)


def _render_component(value: Component) -> str:
    if isinstance(value, float) and math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    return str(value)


@dataclass(frozen=True, order=True)
class ChromeVersion:
    """
    Immutable four-component Chromium version.

    Ordering is lexicographic over (major, minor, branch, patch). `major` may be
    +/- infinity when the version is used as an open-ended bound.
    """

    major: Component = 0
    minor: Component = 0
    branch: Component = 0
    patch: Component = 0

    def __post_init__(self):
        for name in ("major", "minor", "branch", "patch"):
            object.__setattr__(self, name, _coerce_part(name, getattr(self, name)))

    @classmethod
    def from_string(cls, text: str) -> "ChromeVersion":
        """
        Parse a dotted version string.

        Components beyond the fourth are ignored; missing or non-numeric
        components become 0 ("10.a.1" -> 10.0.1.0).
        """
        if not isinstance(text, str):
            raise InvalidVersionInput(
                "Version string expected", field="version", value=text
            )
        parts = text.split(".")
        components = [_parse_component(part) for part in parts[:4]]
        components.extend([0] * (4 - len(components)))
        return cls(*components)

    @classmethod
    def from_parts(
        cls,
        major: Component,
        minor: Component = 0,
        branch: Component = 0,
        patch: Component = 0,
    ) -> "ChromeVersion":
        """Build a version from positional numbers."""
        return cls(major, minor, branch, patch)

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "ChromeVersion":
        """Build a version from a mapping with major/minor/branch/patch keys."""
        if not isinstance(record, Mapping):
            raise InvalidVersionInput(
                "Version record must be a mapping", field="version", value=record
            )
        return cls.from_parts(
            record.get("major", 0),
            record.get("minor", 0),
            record.get("branch", 0),
            record.get("patch", 0),
        )

    @classmethod
    def parse(cls, value: Any, *parts: Component) -> "ChromeVersion":
        """
        Build a version from a string, a mapping, positional numbers or another version.

        Raises:
            InvalidVersionInput: If `value` has none of the accepted shapes.
        """
        if isinstance(value, ChromeVersion) and not parts:
            return value
        if isinstance(value, str) and not parts:
            return cls.from_string(value)
        if isinstance(value, Mapping) and not parts:
            return cls.from_record(value)
        if isinstance(value, Real) and not isinstance(value, bool):
            if len(parts) > 3:
                raise InvalidVersionInput(
                    "At most four version components are allowed",
                    field="version",
                    value=(value, *parts),
                )
            return cls.from_parts(value, *parts)
        raise InvalidVersionInput(
            f"Cannot build a version from {type(value).__name__}",
            field="version",
            value=value,
        )

    def compare(self, other: "ChromeVersion") -> Compared:
        if self.as_tuple() < other.as_tuple():
            return Compared.LESS
        if self.as_tuple() > other.as_tuple():
            return Compared.GREATER
        return Compared.EQUAL

    def as_tuple(self):
        return (self.major, self.minor, self.branch, self.patch)

    def __str__(self) -> str:
        return ".".join(_render_component(part) for part in self.as_tuple())


def sort_descending(versions: Iterable[ChromeVersion]) -> List[ChromeVersion]:
    """Return the versions newest first."""
    return sorted(versions, reverse=True)


def sort_ascending(versions: Iterable[ChromeVersion]) -> List[ChromeVersion]:
    """Return the versions oldest first."""
    return sorted(versions)

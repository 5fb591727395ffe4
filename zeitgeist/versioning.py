"""Semantic version parsing, ordering and range matching."""

from __future__ import annotations

import operator
import string
from dataclasses import dataclass
from functools import total_ordering
from typing import Callable, Union

PrereleaseId = Union[int, str]

_DIGITS = frozenset(string.digits)
_ALPHANUM = frozenset(string.ascii_letters + string.digits + "-")

_OPERATORS: dict[str, Callable[[object, object], bool]] = {
    "": operator.eq,
    "=": operator.eq,
    "==": operator.eq,
    "!": operator.ne,
    "!=": operator.ne,
    ">": operator.gt,
    ">=": operator.ge,
    "<": operator.lt,
    "<=": operator.le,
}


class VersionError(ValueError):
    """Raised when a version or a version range cannot be parsed."""


def _cmp(left: object, right: object) -> int:
    return (left > right) - (left < right)  # type: ignore[operator]


def _compare_identifiers(left: PrereleaseId, right: PrereleaseId) -> int:
    if isinstance(left, int) and isinstance(right, int):
        return _cmp(left, right)
    if isinstance(left, int):
        return -1
    if isinstance(right, int):
        return 1
    return _cmp(left, right)


@total_ordering
@dataclass(frozen=True, eq=False)
class Version:
    """A semantic version; build metadata takes no part in comparisons."""

    major: int = 0
    minor: int = 0
    patch: int = 0
    pre: tuple[PrereleaseId, ...] = ()
    build: tuple[str, ...] = ()

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.pre:
            text += "-" + ".".join(str(part) for part in self.pre)
        if self.build:
            text += "+" + ".".join(self.build)
        return text

    def _compare(self, other: Version) -> int:
        core = _cmp(
            (self.major, self.minor, self.patch),
            (other.major, other.minor, other.patch),
        )
        if core:
            return core
        if not self.pre and not other.pre:
            return 0
        if not self.pre:
            return 1
        if not other.pre:
            return -1
        for mine, theirs in zip(self.pre, other.pre):
            result = _compare_identifiers(mine, theirs)
            if result:
                return result
        return _cmp(len(self.pre), len(other.pre))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._compare(other) == 0

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._compare(other) < 0

    def __hash__(self) -> int:
        return hash((self.major, self.minor, self.patch, self.pre))


def _parse_number(text: str, label: str) -> int:
    if not text or not set(text) <= _DIGITS:
        raise VersionError(f"invalid character(s) found in {label} number {text!r}")
    if len(text) > 1 and text.startswith("0"):
        raise VersionError(f"{label} number must not contain leading zeroes: {text!r}")
    return int(text)


def _parse_prerelease(text: str) -> PrereleaseId:
    if not text:
        raise VersionError("prerelease identifier is empty")
    if set(text) <= _DIGITS:
        if len(text) > 1 and text.startswith("0"):
            raise VersionError(
                f"numeric prerelease identifier must not contain leading zeroes: {text!r}"
            )
        return int(text)
    if set(text) <= _ALPHANUM:
        return text
    raise VersionError(f"invalid character(s) found in prerelease identifier {text!r}")


def _parse_build(text: str) -> str:
    if not text:
        raise VersionError("build metadata is empty")
    if not set(text) <= _ALPHANUM:
        raise VersionError(f"invalid character(s) found in build metadata {text!r}")
    return text


def parse_version(text: str) -> Version:
    """Parse a strict ``MAJOR.MINOR.PATCH[-pre][+build]`` version."""
    if not text:
        raise VersionError("version string empty")
    parts = text.split(".", 2)
    if len(parts) != 3:
        raise VersionError(f"no Major.Minor.Patch elements found in {text!r}")
    major = _parse_number(parts[0], "major")
    minor = _parse_number(parts[1], "minor")

    rest, has_build, build_text = parts[2].partition("+")
    patch_text, has_pre, pre_text = rest.partition("-")
    patch = _parse_number(patch_text, "patch")
    pre = tuple(_parse_prerelease(p) for p in pre_text.split(".")) if has_pre else ()
    build = tuple(_parse_build(b) for b in build_text.split(".")) if has_build else ()
    return Version(major, minor, patch, pre, build)


def parse_tolerant(text: str) -> Version:
    """Parse a version, allowing surrounding spaces, a leading ``v`` and missing parts."""
    text = text.strip().removeprefix("v")
    parts = text.split(".", 2)
    if len(parts) < 3:
        if any(marker in parts[-1] for marker in "+-"):
            raise VersionError("short version cannot contain prerelease/build metadata")
        parts.extend(["0"] * (3 - len(parts)))
        text = ".".join(parts)
    return parse_version(text)


@dataclass(frozen=True)
class VersionRange:
    """Alternatives joined by ``||``, each a set of comparators that must all hold."""

    alternatives: tuple[tuple[tuple[str, Version], ...], ...]

    def __contains__(self, version: object) -> bool:
        if isinstance(version, str):
            version = parse_version(version)
        if not isinstance(version, Version):
            return False
        return any(
            all(_OPERATORS[op](version, bound) for op, bound in group)
            for group in self.alternatives
        )


def _split_comparator(token: str) -> tuple[str, str]:
    for index, char in enumerate(token):
        if char in _DIGITS:
            return token[:index].strip(), token[index:]
    raise VersionError(f"could not get version from string: {token!r}")


def _tokenize(text: str) -> list[str]:
    tokens: list[str] = []
    current = ""
    for char in text:
        if char == " ":
            if current and current[-1] not in "<>=":
                tokens.append(current)
                current = ""
            continue
        current += char
    if current:
        tokens.append(current)
    return tokens


def _split_alternatives(tokens: list[str]) -> list[list[str]]:
    if not tokens:
        raise VersionError("version range is empty")
    groups: list[list[str]] = [[]]
    for position, token in enumerate(tokens):
        if token == "||":
            if position == 0:
                raise VersionError("first element in range is '||'")
            groups.append([])
        else:
            groups[-1].append(token)
    if not groups[-1]:
        raise VersionError("last element in range is '||'")
    if any(not group for group in groups):
        raise VersionError("empty alternative in version range")
    return groups


def _flatten_wildcard(version_text: str) -> str:
    flat = version_text.replace(".x.x", ".x", 1).replace(".x", ".0", 1)
    if len(flat.split(".")) == 2:
        flat += ".0"
    return flat


def _expand_wildcard(token: str) -> list[str]:
    op, version_text = _split_comparator(token)
    parts = version_text.split(".")
    kind = {2: "minor", 3: "patch"}.get(len(parts)) if parts[-1] == "x" else None
    flat = _flatten_wildcard(version_text)

    expanded: list[str] = []
    if op == ">":
        result_op, increment = ">=", True
    elif op == ">=":
        result_op, increment = ">=", False
    elif op == "<":
        result_op, increment = "<", False
    elif op == "<=":
        result_op, increment = "<", True
    elif op in ("", "=", "=="):
        expanded.append(">=" + flat)
        result_op, increment = "<", True
    elif op in ("!", "!="):
        expanded.append("<" + flat)
        result_op, increment = ">=", True
    else:
        raise VersionError(f"could not parse comparator {op!r} in {token!r}")

    if not increment:
        expanded.append(result_op + flat)
        return expanded
    if kind is None:
        raise VersionError(f"invalid wildcard version in {token!r}")
    base = parse_version(flat)
    if kind == "patch":
        bumped = Version(base.major, base.minor + 1, base.patch)
    else:
        bumped = Version(base.major + 1, base.minor, base.patch)
    expanded.append(result_op + str(bumped))
    return expanded


def parse_range(text: str) -> VersionRange:
    """Parse a range such as ``>=1.0.0 <2.0.0 || 3.x``."""
    alternatives = []
    for group in _split_alternatives(_tokenize(text)):
        comparators = []
        for raw in group:
            expanded = _expand_wildcard(raw) if "x" in raw else [raw]
            for token in expanded:
                op, version_text = _split_comparator(token)
                if op not in _OPERATORS:
                    raise VersionError(f"could not parse comparator {op!r} in {token!r}")
                comparators.append((op, parse_version(version_text)))
        alternatives.append(tuple(comparators))
    return VersionRange(tuple(alternatives))
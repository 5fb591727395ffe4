"""Common upstream definition and the set of supported flavours."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, TypeVar

import yaml

DEFAULT_SEMVER_CONSTRAINTS = ">= 0.0.0"

_T = TypeVar("_T", bound="Base")


class UpstreamError(Exception):
    """Raised when an upstream cannot be read or yields no version."""


class Flavour(str, Enum):
    """Supported upstream kinds, by their configuration name."""

    GITHUB = "github"
    GITLAB = "gitlab"
    AMI = "ami"
    HELM = "helm"
    CONTAINER = "container"
    EKS = "eks"
    DUMMY = "dummy"


def _normalise(key: str) -> str:
    return key.lower().replace("_", "")


def _to_flavour(value: Any) -> Flavour:
    try:
        return Flavour(value)
    except ValueError as exc:
        raise UpstreamError(f"unknown upstream flavour: {value!r}") from exc


@dataclass(kw_only=True)
class Base:
    """An upstream identified only by its flavour."""

    flavour: Flavour | None = None

    @classmethod
    def from_dict(cls: type[_T], data: Mapping[str, Any]) -> _T:
        """Build an upstream from a mapping; keys match fields case-insensitively."""
        if not isinstance(data, Mapping):
            raise UpstreamError("upstream definition must be a mapping")
        known = {
            _normalise(f.name): f
            for f in fields(cls)
            if f.init and f.metadata.get("config", True)
        }
        values: dict[str, Any] = {}
        for key, value in data.items():
            target = known.get(_normalise(str(key)))
            if target is None or value is None:
                continue
            if isinstance(value, (Mapping, list)):
                raise UpstreamError(f"field {key!r} must be a scalar value")
            if target.name == "flavour":
                values["flavour"] = _to_flavour(value)
            else:
                values[target.name] = value if isinstance(value, str) else str(value)
        return cls(**values)

    @classmethod
    def from_yaml(cls: type[_T], text: str) -> _T:
        """Build an upstream from a YAML document."""
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise UpstreamError(f"invalid upstream yaml: {exc}") from exc
        return cls.from_dict(data if data is not None else {})

    def latest_version(self) -> str:
        """Always fails: the base only tells which concrete upstream to use."""
        raise UpstreamError("cannot determine latest version for Base")
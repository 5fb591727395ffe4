"""Helm chart repository upstream."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from functools import cmp_to_key
from typing import Any
from urllib.parse import urlsplit, urlunsplit

import requests
import yaml

from zeitgeist.upstream.base import Base, UpstreamError
from zeitgeist.versioning import VersionError, VersionRange, parse_range, parse_tolerant, parse_version

log = logging.getLogger(__name__)

PRERELEASE_ANNOTATION = "artifacthub.io/prerelease"
_SUPPORTED_SCHEMES = ("http", "https", "oci")
_TRUE = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE = {"0", "f", "F", "FALSE", "false", "False"}


@dataclass(frozen=True)
class ChartVersion:
    """One published version of a chart in a repository index."""

    version: str
    annotations: Mapping[str, str] = field(default_factory=dict)


def _parse_bool(text: str) -> bool | None:
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    return None


def _scalar(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return "" if value is None else str(value)


def _compare(left: ChartVersion, right: ChartVersion) -> int:
    try:
        a, b = parse_tolerant(left.version), parse_tolerant(right.version)
    except VersionError:
        a_text, b_text = left.version, right.version
        return (a_text > b_text) - (a_text < b_text)
    return (a > b) - (a < b)


def _chart_version(item: Any) -> ChartVersion | None:
    if not isinstance(item, Mapping) or item.get("version") in (None, ""):
        log.debug("Skipping chart entry without a version")
        return None
    annotations = item.get("annotations") or {}
    if not isinstance(annotations, Mapping):
        annotations = {}
    return ChartVersion(
        version=_scalar(item["version"]),
        annotations={str(key): _scalar(value) for key, value in annotations.items()},
    )


def load_index(text: str) -> dict[str, list[ChartVersion]]:
    """Parse a repository index into chart versions, highest version first."""
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise UpstreamError(f"invalid helm repository index: {exc}") from exc
    if not isinstance(data, Mapping):
        raise UpstreamError("invalid helm repository index: expected a mapping")
    if not data.get("apiVersion"):
        raise UpstreamError("invalid helm repository index: no API version specified")
    entries = data.get("entries") or {}
    if not isinstance(entries, Mapping):
        raise UpstreamError("invalid helm repository index: entries must be a mapping")

    index: dict[str, list[ChartVersion]] = {}
    for name, items in entries.items():
        if not items:
            continue
        if not isinstance(items, list):
            raise UpstreamError(f"invalid helm repository index: entry {name!r} must be a list")
        charts = [chart for chart in map(_chart_version, items) if chart is not None]
        index[str(name)] = sorted(charts, key=cmp_to_key(_compare), reverse=True)
    return index


def _index_url(repo: str) -> str:
    parts = urlsplit(repo)
    path = parts.path.rstrip("/") + "/index.yaml"
    return urlunsplit((parts.scheme, parts.netloc, path, parts.query, ""))


@dataclass(kw_only=True)
class Helm(Base):
    """Latest non-prerelease version of a chart in a Helm repository."""

    # Repository URL, e.g. "https://grafana.github.io/helm-charts".
    repo: str = ""
    # Chart name in this repository.
    chart: str = ""
    # Optional semver constraints, e.g. "< 2.0.0".
    constraints: str = ""

    def latest_version(self) -> str:
        """Return the highest chart version that is no prerelease and meets the constraints."""
        log.debug("Using Helm flavour")
        if not self.repo:
            raise UpstreamError("invalid helm upstream: missing repo argument")
        if not self.chart:
            raise UpstreamError("invalid helm upstream: missing chart argument")
        try:
            scheme = urlsplit(self.repo).scheme
        except ValueError as exc:
            raise UpstreamError(f"invalid helm repo url: {self.repo}") from exc
        if scheme not in _SUPPORTED_SCHEMES:
            raise UpstreamError(
                f"invalid helm repo: {self.repo}, only http, https and oci are supported"
            )

        expected: VersionRange | None = None
        if self.constraints:
            try:
                expected = parse_range(self.constraints)
            except VersionError as exc:
                raise UpstreamError(
                    f"invalid semver constraints range: {self.constraints!r}"
                ) from exc

        index = load_index(self._download_index(scheme))
        versions = index.get(self.chart)
        if versions is None:
            raise UpstreamError(f"no chart for {self.chart} found in repository {self.repo}")

        for chart_version in versions:
            text = chart_version.version.removeprefix("v")
            if _parse_bool(chart_version.annotations.get(PRERELEASE_ANNOTATION, "")):
                log.debug("Skipping annotated prerelease: %s", text)
                continue
            try:
                version = parse_version(text)
            except VersionError as exc:
                log.debug("Error parsing version %s (%s), cannot validate constraints", text, exc)
                return text
            if version.pre:
                log.debug("Skipping semver prerelease: %s", text)
                continue
            if expected is not None and version not in expected:
                log.debug("Skipping release not matching constraints (%s): %s", self.constraints, text)
                continue
            log.debug("Found latest matching release: %s", text)
            return text

        raise UpstreamError("no potential version found")

    def _download_index(self, scheme: str) -> str:
        if scheme == "oci":
            raise UpstreamError(
                f"failed to download index file for repo {self.repo}: "
                "oci registries do not serve a repository index"
            )
        url = _index_url(self.repo)
        log.debug("Downloading repo index for %s...", self.repo)
        try:
            response = requests.get(url, timeout=30)
            response.raise_for_status()
        except requests.RequestException as exc:
            log.error("failed to download index file for repo %s", self.repo)
            raise UpstreamError(f"failed to download index file for repo {self.repo}: {exc}") from exc
        return response.text
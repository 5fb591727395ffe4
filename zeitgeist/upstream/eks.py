"""Elastic Kubernetes Service upstream."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

import requests

from zeitgeist.upstream.base import DEFAULT_SEMVER_CONSTRAINTS, Base, UpstreamError
from zeitgeist.versioning import VersionError, VersionRange, parse_range, parse_version

log = logging.getLogger(__name__)

EKS_DOCS_URL = "https://docs.aws.amazon.com/eks/latest/userguide/kubernetes-versions.html"

# Versions are listed as semver within a <p> tag.
_VERSION_PATTERN = re.compile(r"<p>([0-9]+.[0-9]+.[0-9]+)</p>")


def _expected_range(constraints: str) -> VersionRange:
    try:
        return parse_range(constraints or DEFAULT_SEMVER_CONSTRAINTS)
    except VersionError as exc:
        raise UpstreamError(f"invalid semver constraints range: {constraints}") from exc


def find_eks_version(html: str, constraints: str) -> str:
    """Return the first version listed in the page that meets the constraints."""
    expected = _expected_range(constraints)
    for match in _VERSION_PATTERN.finditer(html):
        text = match.group(1)
        try:
            version = parse_version(text)
        except VersionError as exc:
            log.debug("Error parsing version %s (%s), cannot validate constraints", text, exc)
            return text
        if version not in expected:
            log.debug("Skipping version not matching constraints (%s): %s", constraints, text)
            continue
        log.debug("Found latest matching release: %s", version)
        return str(version)
    raise UpstreamError("no matching EKS version found")


@dataclass(kw_only=True)
class EKS(Base):
    """Latest EKS version, read from the published list of supported versions."""

    # Optional semver constraints, e.g. "< 1.16.0".
    constraints: str = ""

    def latest_version(self) -> str:
        """Fetch the EKS documentation page and return the newest matching version."""
        log.debug("Using EKS upstream")
        _expected_range(self.constraints)

        log.debug("Retrieving EKS releases from %s...", EKS_DOCS_URL)
        try:
            response = requests.get(EKS_DOCS_URL, timeout=30)
        except requests.RequestException as exc:
            raise UpstreamError(f"retrieving EKS releases: {exc}") from exc
        return find_eks_version(response.text, self.constraints)
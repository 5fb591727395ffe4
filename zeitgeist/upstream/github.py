"""GitHub releases, tags and branches upstream."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from zeitgeist import github as github_api
from zeitgeist.upstream.base import DEFAULT_SEMVER_CONSTRAINTS, Base, UpstreamError
from zeitgeist.versioning import VersionError, parse_range, parse_version

log = logging.getLogger(__name__)


@dataclass(kw_only=True)
class Github(Base):
    """Latest non-draft release of a GitHub repository, or latest commit on a branch.

    Set GITHUB_ACCESS_TOKEN to authenticate and avoid strict rate limits.
    """

    # Repository, e.g. "helm/helm".
    url: str = ""
    # Optional semver constraints, e.g. "< 2.0.0".
    constraints: str = ""
    # When set, the version is the SHA of the branch head.
    branch: str = ""
    client: github_api.GitHubClient | None = field(
        default=None, repr=False, compare=False, metadata={"config": False}
    )

    def latest_version(self) -> str:
        """Return the latest matching release, or the branch head when a branch is set."""
        log.debug("Using GitHub flavour")
        if not self.branch:
            return self._latest_release()
        return self._latest_commit()

    def _api(self) -> github_api.GitHubClient:
        return self.client if self.client is not None else github_api.GitHubClient()

    def _owner_repo(self) -> tuple[str, str]:
        if "/" not in self.url:
            raise UpstreamError(
                f"invalid github repo: {self.url}\n"
                "Github repo should be in the form owner/repo e.g., kubernetes/kubernetes"
            )
        owner, repo = self.url.split("/")[:2]
        return owner, repo

    def _latest_release(self) -> str:
        owner, repo = self._owner_repo()
        try:
            expected = parse_range(self.constraints or DEFAULT_SEMVER_CONSTRAINTS)
        except VersionError as exc:
            raise UpstreamError(f"invalid semver constraints range: {self.constraints!r}") from exc

        api = self._api()
        log.debug("Retrieving repository information for %s/%s...", owner, repo)
        try:
            repository = api.get_repository(owner, repo)
        except github_api.GitHubError as exc:
            raise UpstreamError(f"retrieving GitHub repository: {exc}") from exc
        if repository.archived:
            log.warning("GitHub repository %s/%s is archived", owner, repo)

        # All releases are needed: the most recent by date is not always the highest version.
        log.debug("Retrieving releases for %s/%s...", owner, repo)
        try:
            releases = api.releases(owner, repo, False)
        except github_api.GitHubError as exc:
            raise UpstreamError(f"retrieving GitHub releases: {exc}") from exc

        if releases:
            tags = []
            for release in releases:
                if not release.tag_name:
                    log.debug("Skipping release without TagName")
                    continue
                if release.draft:
                    log.debug("Skipping draft release: %s", release.tag_name)
                    continue
                tags.append(release.tag_name)
        else:
            # Projects without releases may publish versions as plain tags.
            try:
                tags = list(api.list_tags(owner, repo))
            except github_api.GitHubError as exc:
                raise UpstreamError(f"retrieving GitHub tags: {exc}") from exc

        for tag in tags:
            try:
                version = parse_version(tag.strip("v"))
            except VersionError as exc:
                log.debug("Error parsing version %s (%s), cannot validate constraints", tag, exc)
                return tag
            if version not in expected:
                log.debug("Skipping release not matching constraints (%s): %s", self.constraints, tag)
                continue
            log.debug("Found latest matching release: %s", version)
            return str(version)

        raise UpstreamError("no potential version found")

    def _latest_commit(self) -> str:
        owner, repo = self._owner_repo()
        try:
            branches = self._api().list_branches(owner, repo)
        except github_api.GitHubError as exc:
            raise UpstreamError(f"retrieving GitHub branches: {exc}") from exc
        for branch in branches:
            if branch.name == self.branch:
                return branch.commit_sha
        raise UpstreamError(f"branch '{self.branch}' not found")
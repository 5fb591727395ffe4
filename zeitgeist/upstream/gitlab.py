"""GitLab releases, tags and branches upstream."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from zeitgeist import gitlab as gitlab_api
from zeitgeist.upstream.base import DEFAULT_SEMVER_CONSTRAINTS, Base, UpstreamError
from zeitgeist.versioning import VersionError, parse_range, parse_version

log = logging.getLogger(__name__)


@dataclass(kw_only=True)
class GitLab(Base):
    """Latest release of a GitLab project, or latest commit on a branch."""

    # Self-hosted server URL; empty means gitlab.com.
    server: str = ""
    # Project path, e.g. "owner/repo".
    url: str = ""
    # Optional semver constraints, e.g. "< 2.0.0".
    constraints: str = ""
    # When set, the version is the SHA of the branch head.
    branch: str = ""
    client: gitlab_api.GitLab | None = field(
        default=None, repr=False, compare=False, metadata={"config": False}
    )

    def latest_version(self) -> str:
        """Return the latest matching release, or the branch head when a branch is set."""
        log.debug("Using GitLab flavour")
        if not self.branch:
            return self._latest_release()
        return self._latest_commit()

    def _api(self) -> gitlab_api.GitLab:
        if self.client is not None:
            return self.client
        api = gitlab_api.new() if not self.server else gitlab_api.new_private(self.server)
        if api is None:
            raise UpstreamError(
                "cannot configure a GitLab client, make sure you have exported the GITLAB_TOKEN"
            )
        return api

    def _owner_repo(self) -> tuple[str, str]:
        owner, _, repo = self.url.partition("/")
        return owner, repo

    def _latest_release(self) -> str:
        api = self._api()
        if "/" not in self.url:
            raise UpstreamError(
                f"invalid gitlab repo: {self.url}\n"
                "GitLab repo should be in the form owner/repo e.g., kubernetes/kubernetes"
            )
        try:
            expected = parse_range(self.constraints or DEFAULT_SEMVER_CONSTRAINTS)
        except VersionError as exc:
            raise UpstreamError(f"invalid semver constraints range: {self.constraints!r}") from exc

        owner, repo = self._owner_repo()
        log.debug("Retrieving releases for %s/%s...", owner, repo)
        try:
            releases = api.releases(owner, repo)
        except gitlab_api.GitLabError as exc:
            raise UpstreamError(f"retrieving GitLab releases: {exc}") from exc

        if releases:
            tags = []
            for release in releases:
                if not release.tag_name:
                    log.debug("Skipping release without TagName")
                    continue
                tags.append(release.tag_name)
        else:
            try:
                tags = [tag.name for tag in api.list_tags(owner, repo)]
            except gitlab_api.GitLabError as exc:
                raise UpstreamError(f"retrieving GitLab tags: {exc}") from exc

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
        api = self._api()
        owner, repo = self._owner_repo()

        log.debug("Retrieving repository information for %s/%s...", owner, repo)
        try:
            project = api.get_repository(owner, repo)
        except gitlab_api.GitLabError as exc:
            raise UpstreamError(f"retrieving GitLab repository: {exc}") from exc
        if project.archived:
            log.warning("GitLab repository %s/%s is archived", owner, repo)

        try:
            branches = api.branches(owner, repo)
        except gitlab_api.GitLabError as exc:
            raise UpstreamError(f"retrieving GitLab branches: {exc}") from exc
        for branch in branches:
            if branch.name == self.branch:
                return branch.commit.id
        raise UpstreamError(f"branch '{self.branch}' not found")
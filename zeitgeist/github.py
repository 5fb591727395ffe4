"""Thin GitHub API access: repositories, releases, tags and branches."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

import requests

log = logging.getLogger(__name__)

# Environment variable holding the token used to authenticate API requests.
TOKEN_ENV_KEY = "GITHUB_ACCESS_TOKEN"
DEFAULT_API_URL = "https://api.github.com/"
_PAGE_SIZE = 100


class GitHubError(Exception):
    """Raised when the GitHub API cannot be queried or answers unexpectedly."""


@dataclass(frozen=True)
class Repository:
    """A GitHub repository."""

    name: str = ""
    full_name: str = ""
    archived: bool = False


@dataclass(frozen=True)
class Release:
    """A GitHub release."""

    tag_name: str = ""
    name: str = ""
    draft: bool = False
    prerelease: bool = False


@dataclass(frozen=True)
class Branch:
    """A branch and the SHA of the commit at its head."""

    name: str = ""
    commit_sha: str = ""


def _repo_path(owner: str, repo: str) -> str:
    return f"repos/{quote(owner, safe='')}/{quote(repo, safe='')}"


class GitHubClient:
    """A client for the GitHub REST API.

    Requests are unauthenticated unless a token is given or found in
    the GITHUB_ACCESS_TOKEN environment variable.
    """

    def __init__(self, token: str | None = None, base_url: str = DEFAULT_API_URL) -> None:
        if token is None:
            token = os.environ.get(TOKEN_ENV_KEY, "")
        self.base_url = base_url if base_url.endswith("/") else base_url + "/"
        self._session = requests.Session()
        self._session.headers["Accept"] = "application/vnd.github+json"
        if token:
            self._session.headers["Authorization"] = f"Bearer {token}"
        else:
            log.debug("No %s configured, using unauthenticated requests", TOKEN_ENV_KEY)

    def _fetch(self, url: str, params: dict[str, str] | None = None) -> requests.Response:
        try:
            response = self._session.get(url, params=params, timeout=30)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise GitHubError(str(exc)) from exc
        return response

    @staticmethod
    def _payload(response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise GitHubError(f"invalid JSON response from {response.url}") from exc

    def _get_all(self, path: str) -> list[dict[str, Any]]:
        items: list[dict[str, Any]] = []
        url: str | None = self.base_url + path
        params: dict[str, str] | None = {"per_page": str(_PAGE_SIZE)}
        while url:
            response = self._fetch(url, params)
            payload = self._payload(response)
            if not isinstance(payload, list):
                raise GitHubError(f"unexpected response from {path}: expected a list")
            items.extend(payload)
            url = response.links.get("next", {}).get("url")
            params = None
        return items

    def get_repository(self, owner: str, repo: str) -> Repository:
        """Return the repository ``owner/repo``."""
        payload = self._payload(self._fetch(self.base_url + _repo_path(owner, repo)))
        if not isinstance(payload, dict):
            raise GitHubError(f"unexpected repository response for {owner}/{repo}")
        return Repository(
            name=payload.get("name") or "",
            full_name=payload.get("full_name") or "",
            archived=bool(payload.get("archived", False)),
        )

    def releases(
        self, owner: str, repo: str, include_prereleases: bool = False
    ) -> list[Release]:
        """Return every release of ``owner/repo``, prereleases only on request."""
        releases = [
            Release(
                tag_name=item.get("tag_name") or "",
                name=item.get("name") or "",
                draft=bool(item.get("draft", False)),
                prerelease=bool(item.get("prerelease", False)),
            )
            for item in self._get_all(_repo_path(owner, repo) + "/releases")
        ]
        if include_prereleases:
            return releases
        return [release for release in releases if not release.prerelease]

    def list_tags(self, owner: str, repo: str) -> list[str]:
        """Return the tag names of ``owner/repo``."""
        return [item.get("name") or "" for item in self._get_all(_repo_path(owner, repo) + "/tags")]

    def list_branches(self, owner: str, repo: str) -> list[Branch]:
        """Return the branches of ``owner/repo``."""
        branches = []
        for item in self._get_all(_repo_path(owner, repo) + "/branches"):
            commit = item.get("commit") or {}
            branches.append(Branch(name=item.get("name") or "", commit_sha=commit.get("sha") or ""))
        return branches
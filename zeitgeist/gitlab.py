"""Thin GitLab API access: releases, tags, branches and project lookup."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Protocol
from urllib.parse import quote

import requests

log = logging.getLogger(__name__)

# Environment variable holding the token for gitlab.com.
TOKEN_ENV_KEY = "GITLAB_TOKEN"
# Environment variable holding the token for a self-hosted GitLab server.
PRIVATE_TOKEN_ENV_KEY = "GITLAB_PRIVATE_TOKEN"
API_VERSION_PATH = "api/v4/"
DEFAULT_BASE_URL = "https://gitlab.com/" + API_VERSION_PATH


class GitLabError(Exception):
    """Raised when the GitLab API cannot be queried or answers unexpectedly."""


@dataclass(frozen=True)
class Release:
    """A GitLab release."""

    tag_name: str = ""
    name: str = ""


@dataclass(frozen=True)
class Tag:
    """A git tag in a GitLab project."""

    name: str = ""


@dataclass(frozen=True)
class Commit:
    """A commit, identified by its SHA."""

    id: str = ""


@dataclass(frozen=True)
class Branch:
    """A branch and the commit at its head."""

    name: str = ""
    commit: Commit = field(default_factory=Commit)


@dataclass(frozen=True)
class Project:
    """A GitLab project."""

    id: int = 0
    name: str = ""
    archived: bool = False
    path_with_namespace: str = ""


class Client(Protocol):
    """The GitLab operations the wrapper relies on."""

    def list_projects(self, search: str, search_namespaces: bool) -> list[Project]:
        """Return the projects matching ``search``."""

    def list_releases(self, owner: str, repo: str) -> list[Release]:
        """Return the releases of ``owner/repo``."""

    def list_branches(self, owner: str, repo: str) -> list[Branch]:
        """Return the branches of ``owner/repo``."""

    def list_tags(self, owner: str, repo: str) -> list[Tag]:
        """Return the tags of ``owner/repo``."""


def _project_path(owner: str, repo: str) -> str:
    return quote(f"{owner}/{repo}", safe="")


def _release(data: dict[str, Any]) -> Release:
    return Release(tag_name=data.get("tag_name") or "", name=data.get("name") or "")


def _tag(data: dict[str, Any]) -> Tag:
    return Tag(name=data.get("name") or "")


def _branch(data: dict[str, Any]) -> Branch:
    commit = data.get("commit") or {}
    return Branch(name=data.get("name") or "", commit=Commit(id=commit.get("id") or ""))


def _project(data: dict[str, Any]) -> Project:
    return Project(
        id=int(data.get("id") or 0),
        name=data.get("name") or "",
        archived=bool(data.get("archived", False)),
        path_with_namespace=data.get("path_with_namespace") or "",
    )


class HTTPClient:
    """A client talking to the GitLab REST API with a private token."""

    def __init__(self, token: str, base_url: str = DEFAULT_BASE_URL) -> None:
        self.base_url = base_url if base_url.endswith("/") else base_url + "/"
        self._session = requests.Session()
        self._session.headers["PRIVATE-TOKEN"] = token

    def _get(self, path: str, params: dict[str, str] | None = None) -> list[dict[str, Any]]:
        try:
            response = self._session.get(self.base_url + path, params=params, timeout=30)
            response.raise_for_status()
            payload = response.json()
        except (requests.RequestException, ValueError) as exc:
            raise GitLabError(str(exc)) from exc
        if not isinstance(payload, list):
            raise GitLabError(f"unexpected response from {path}: expected a list")
        return payload

    def list_projects(self, search: str, search_namespaces: bool) -> list[Project]:
        """Return the projects matching ``search``."""
        params = {"search": search, "search_namespaces": "true" if search_namespaces else "false"}
        return [_project(item) for item in self._get("projects", params)]

    def list_releases(self, owner: str, repo: str) -> list[Release]:
        """Return the releases of ``owner/repo``."""
        return [_release(item) for item in self._get(f"projects/{_project_path(owner, repo)}/releases")]

    def list_branches(self, owner: str, repo: str) -> list[Branch]:
        """Return the branches of ``owner/repo``."""
        path = f"projects/{_project_path(owner, repo)}/repository/branches"
        return [_branch(item) for item in self._get(path)]

    def list_tags(self, owner: str, repo: str) -> list[Tag]:
        """Return the tags of ``owner/repo``."""
        path = f"projects/{_project_path(owner, repo)}/repository/tags"
        return [_tag(item) for item in self._get(path)]


class GitLab:
    """GitLab operations built on a replaceable client."""

    def __init__(self, client: Client) -> None:
        self.client = client

    def releases(self, owner: str, repo: str) -> list[Release]:
        """Return the releases of ``owner/repo``."""
        try:
            return list(self.client.list_releases(owner, repo))
        except GitLabError as exc:
            raise GitLabError(
                f"unable to retrieve GitLab releases for {owner}/{repo}: {exc}"
            ) from exc

    def branches(self, owner: str, repo: str) -> list[Branch]:
        """Return the branches of ``owner/repo``."""
        try:
            return list(self.client.list_branches(owner, repo))
        except GitLabError as exc:
            raise GitLabError(
                f"unable to retrieve GitLab branches for {owner}/{repo}: {exc}"
            ) from exc

    def get_repository(self, owner: str, repo: str) -> Project:
        """Return the single project found for ``owner/repo``."""
        try:
            projects = list(self.client.list_projects(f"{owner}/{repo}", True))
        except GitLabError as exc:
            raise GitLabError(
                f"unable to retrieve GitLab projects for {owner}/{repo}: {exc}"
            ) from exc
        if len(projects) > 1:
            raise GitLabError(f"expected one project got {len(projects)}")
        if not projects:
            raise GitLabError("no project found")
        return projects[0]

    def list_tags(self, owner: str, repo: str) -> list[Tag]:
        """Return the tags of ``owner/repo``."""
        try:
            return list(self.client.list_tags(owner, repo))
        except GitLabError as exc:
            raise GitLabError(
                f"unable to retrieve GitLab tags for {owner}/{repo}: {exc}"
            ) from exc


def new() -> GitLab | None:
    """Return a gitlab.com client, or None when GITLAB_TOKEN is not set."""
    token = os.environ.get(TOKEN_ENV_KEY, "")
    if not token:
        log.debug("No %s configured", TOKEN_ENV_KEY)
        return None
    log.debug("Using GitLab client")
    return GitLab(HTTPClient(token))


def new_private(base_url: str) -> GitLab | None:
    """Return a client for a self-hosted server, or None when GITLAB_PRIVATE_TOKEN is not set."""
    token = os.environ.get(PRIVATE_TOKEN_ENV_KEY, "")
    if not token:
        log.debug("No %s configured", PRIVATE_TOKEN_ENV_KEY)
        return None
    log.debug("Using GitLab client")
    return GitLab(HTTPClient(token, base_url + API_VERSION_PATH))
import pytest

from zeitgeist import gitlab as gitlab_api
from zeitgeist.gitlab import Branch, Commit, GitLabError, Project, Release, Tag
from zeitgeist.upstream.base import Flavour, UpstreamError
from zeitgeist.upstream.gitlab import GitLab


class FakeClient:
    def __init__(self, releases=(), branches=(), projects=(), tags=(), error=None):
        self.releases = list(releases)
        self.branches = list(branches)
        self.projects = list(projects)
        self.tags = list(tags)
        self.error = error

    def _answer(self, value):
        if self.error is not None:
            raise self.error
        return value

    def list_projects(self, search, search_namespaces):
        return self._answer(self.projects)

    def list_releases(self, owner, repo):
        return self._answer(self.releases)

    def list_branches(self, owner, repo):
        return self._answer(self.branches)

    def list_tags(self, owner, repo):
        return self._answer(self.tags)


def make(**kwargs):
    return gitlab_api.GitLab(FakeClient(**kwargs))


def test_unserialise_gitlab():
    upstream = GitLab.from_yaml("flavour: gitlab\nurl: helm/helm\nconstraints: <1.0.0")
    assert upstream.flavour is Flavour.GITLAB
    assert upstream.url == "helm/helm"
    assert upstream.constraints == "<1.0.0"
    assert upstream.server == ""


def test_unserialise_gitlab_with_server():
    upstream = GitLab.from_yaml(
        "flavour: gitlab\nurl: helm/helm\nserver: https://mygitlab.example.com/\nconstraints: <1.0.0"
    )
    assert upstream.server == "https://mygitlab.example.com/"
    assert upstream.url == "helm/helm"


def test_missing_token_is_an_error(monkeypatch):
    monkeypatch.delenv("GITLAB_TOKEN", raising=False)
    with pytest.raises(UpstreamError, match="GITLAB_TOKEN"):
        GitLab(url="helm/helm").latest_version()


def test_missing_private_token_is_an_error(monkeypatch):
    monkeypatch.delenv("GITLAB_PRIVATE_TOKEN", raising=False)
    with pytest.raises(UpstreamError, match="cannot configure a GitLab client"):
        GitLab(url="helm/helm", server="https://mygitlab.example.com/").latest_version()


def test_invalid_url():
    with pytest.raises(UpstreamError, match="invalid gitlab repo: test"):
        GitLab(url="test", client=make()).latest_version()


def test_invalid_constraints():
    with pytest.raises(UpstreamError, match="invalid semver constraints range"):
        GitLab(url="a/b", constraints="invalid-constraint", client=make()).latest_version()


def test_first_release_matching_constraints():
    client = make(releases=[Release(tag_name="v2.0.0"), Release(tag_name="v1.2.0")])
    upstream = GitLab(url="a/b", constraints="< 2.0.0", client=client)
    assert upstream.latest_version() == "1.2.0"


def test_first_release_without_constraints():
    client = make(releases=[Release(tag_name="v2.0.0"), Release(tag_name="v1.2.0")])
    assert GitLab(url="a/b", client=client).latest_version() == "2.0.0"


def test_falls_back_to_tags_when_no_releases():
    client = make(releases=[], tags=[Tag(name="v3.1.4"), Tag(name="v3.0.0")])
    assert GitLab(url="group/sub/repo", client=client).latest_version() == "3.1.4"


def test_unparseable_tag_is_returned_as_is():
    client = make(releases=[Release(tag_name="latest-build")])
    assert GitLab(url="a/b", client=client).latest_version() == "latest-build"


def test_no_matching_version():
    client = make(releases=[Release(tag_name="v1.0.0")])
    with pytest.raises(UpstreamError, match="no potential version found"):
        GitLab(url="a/b", constraints="> 5.0.0", client=client).latest_version()


def test_release_lookup_failure():
    client = make(error=GitLabError("boom"))
    with pytest.raises(UpstreamError, match="retrieving GitLab releases"):
        GitLab(url="a/b", client=client).latest_version()


def test_branch_head_commit():
    client = make(
        projects=[Project(id=1, name="b")],
        branches=[
            Branch(name="dev", commit=Commit(id="111")),
            Branch(name="main", commit=Commit(id="abc123")),
        ],
    )
    assert GitLab(url="a/b", branch="main", client=client).latest_version() == "abc123"


def test_branch_not_found():
    client = make(projects=[Project(id=1, name="b")], branches=[Branch(name="dev")])
    with pytest.raises(UpstreamError, match="branch 'main' not found"):
        GitLab(url="a/b", branch="main", client=client).latest_version()


def test_branch_repository_not_found():
    client = make(projects=[])
    with pytest.raises(UpstreamError, match="no project found"):
        GitLab(url="a/b", branch="main", client=client).latest_version()
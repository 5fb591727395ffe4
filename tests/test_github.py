import pytest
import responses

from zeitgeist.github import (
    TOKEN_ENV_KEY,
    Branch,
    GitHubClient,
    GitHubError,
    Release,
    Repository,
)

API = "https://api.github.com/"


@pytest.fixture
def mocked():
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        yield rsps


def test_get_repository_parses_fields(mocked):
    mocked.add(
        responses.GET,
        API + "repos/helm/helm",
        json={"name": "helm", "full_name": "helm/helm", "archived": True},
    )
    client = GitHubClient(token="token")
    repository = client.get_repository("helm", "helm")
    assert repository == Repository(name="helm", full_name="helm/helm", archived=True)
    assert mocked.calls[0].request.headers["Authorization"] == "Bearer token"


def test_no_token_sends_no_authorization(mocked, monkeypatch):
    monkeypatch.delenv(TOKEN_ENV_KEY, raising=False)
    mocked.add(responses.GET, API + "repos/o/r", json={"name": "r", "full_name": "o/r"})
    repository = GitHubClient().get_repository("o", "r")
    assert repository.archived is False
    assert "Authorization" not in mocked.calls[0].request.headers


def test_token_read_from_environment(mocked, monkeypatch):
    monkeypatch.setenv(TOKEN_ENV_KEY, "token")
    mocked.add(responses.GET, API + "repos/o/r", json={"name": "r", "full_name": "o/r"})
    repository = GitHubClient().get_repository("o", "r")
    assert repository.name == "r"
    assert repository.full_name == "o/r"
    assert mocked.calls[0].request.headers["Authorization"] == "Bearer token"


def test_releases_exclude_prereleases_by_default(mocked):
    mocked.add(
        responses.GET,
        API + "repos/o/r/releases",
        json=[
            {"tag_name": "v2.0.0-rc.1", "prerelease": True},
            {"tag_name": "v1.0.0", "draft": True},
        ],
    )
    client = GitHubClient(token="token")
    assert [r.tag_name for r in client.releases("o", "r", False)] == ["v1.0.0"]
    every = client.releases("o", "r", True)
    assert [r.tag_name for r in every] == ["v2.0.0-rc.1", "v1.0.0"]
    assert every[1] == Release(tag_name="v1.0.0", draft=True)


def test_releases_follow_pagination(mocked):
    mocked.add(
        responses.GET,
        API + "repos/o/r/releases",
        json=[{"tag_name": "v2.0.0"}],
        headers={"Link": f'<{API}repositories/7/releases?page=2>; rel="next"'},
    )
    mocked.add(responses.GET, API + "repositories/7/releases", json=[{"tag_name": "v1.0.0"}])
    releases = GitHubClient(token="token").releases("o", "r", False)
    assert [r.tag_name for r in releases] == ["v2.0.0", "v1.0.0"]
    assert len(mocked.calls) == 2


def test_list_tags_returns_names(mocked):
    mocked.add(
        responses.GET,
        API + "repos/o/r/tags",
        json=[{"name": "v1.18.0"}, {"name": "v1.17.0"}],
    )
    assert GitHubClient(token="token").list_tags("o", "r") == ["v1.18.0", "v1.17.0"]


def test_list_branches_returns_head_commits(mocked):
    mocked.add(
        responses.GET,
        API + "repos/o/r/branches",
        json=[{"name": "main", "commit": {"sha": "abc123"}}, {"name": "dev"}],
    )
    branches = GitHubClient(token="token").list_branches("o", "r")
    assert branches == [Branch(name="main", commit_sha="abc123"), Branch(name="dev")]


def test_missing_repository_raises(mocked):
    mocked.add(responses.GET, API + "repos/Pluies/doesnotexist", status=404, json={})
    with pytest.raises(GitHubError):
        GitHubClient(token="token").get_repository("Pluies", "doesnotexist")


def test_non_list_payload_raises(mocked):
    mocked.add(responses.GET, API + "repos/o/r/tags", json={"message": "nope"})
    with pytest.raises(GitHubError, match="expected a list"):
        GitHubClient(token="token").list_tags("o", "r")
# zeitgeist

`zeitgeist` finds the latest available version of a dependency. It asks
the place the dependency comes from, which is called its *upstream*. Each
kind of upstream has a *flavour* (`zeitgeist.upstream.base.Flavour`):

| Flavour  | Class                              | Looks at                                        |
|----------|------------------------------------|-------------------------------------------------|
| `github` | `zeitgeist.upstream.github.Github` | GitHub releases or tags, or a branch head       |
| `gitlab` | `zeitgeist.upstream.gitlab.GitLab` | GitLab releases or tags, or a branch head       |
| `helm`   | `zeitgeist.upstream.helm.Helm`     | chart versions in a Helm repository index       |
| `ami`    | `zeitgeist.upstream.ami.AMI`       | machine images, newest by creation date         |
| `eks`    | `zeitgeist.upstream.eks.EKS`       | Kubernetes versions on the EKS documentation page |
| `dummy`  | `zeitgeist.upstream.dummy.Dummy`   | always answers `1.0.0`, for testing             |

## Installation

```
pip install .
```

To run the test suite, install the test extra as well:

```
pip install ".[test]"
pytest
```

## Usage

You can build an upstream directly with keyword arguments. You can also
build it from a mapping with `from_dict`, or from a YAML snippet with
`from_yaml`. Mapping keys match field names without regard to case or
underscores. Keys that do not match a field are ignored. Then call
`latest_version()`.

Failures raise `zeitgeist.upstream.base.UpstreamError`. This covers bad
settings, network errors and the case where no version matches. The base
class `Base` only holds the flavour, so its `latest_version()` always
raises.

```python
from zeitgeist.upstream.dummy import Dummy

assert Dummy.from_yaml("flavour: dummy").latest_version() == "1.0.0"
```

```python
from zeitgeist.upstream.helm import Helm

chart = Helm.from_yaml(
    "flavour: helm\n"
    "repo: https://charts.example.com\n"
    "chart: example\n"
    "constraints: < 2.0.0\n"
)
print(chart.latest_version())
```

### GitHub and GitLab

Both upstreams take these fields:

- `url`: the repository, in the form `owner/repo`.
- `constraints`: optional.
- `branch`: optional.

If `branch` is set, the result is the SHA of the commit at the head of
that branch. If it is not set, the upstream reads the releases and skips
any without a tag name. GitHub draft releases and prereleases are skipped
as well. If the repository has no releases, its tags are used instead.

The first tag that matches the constraints is returned, with any leading
or trailing `v` removed. A tag that is not a valid semantic version is
returned as it is.

`GitLab` also has a `server` field for self-hosted instances. The
default is gitlab.com.

Both classes accept a ready-made API client in their `client` field:

- for GitHub, a `zeitgeist.github.GitHubClient`;
- for GitLab, a `zeitgeist.gitlab.GitLab` built around any object with
  `list_projects`, `list_releases`, `list_branches` and `list_tags`
  methods.

### Helm

`Helm` needs `repo` and `chart`. The repository URL must use `http`,
`https` or `oci`. However, an `oci` repository has no index to download,
so it ends in an error.

The upstream downloads `index.yaml` and reads it with
`zeitgeist.upstream.helm.load_index`, which sorts versions highest first.
It then returns the first version that passes all of these checks:

- it is not a semantic-version prerelease;
- it is not annotated with `artifacthub.io/prerelease: true`;
- it matches `constraints`, if that field is set.

### AMI

`AMI` takes `owner` and `name`. The name may contain wildcards. The
upstream asks an image service for matching images and returns the
`image_id` of the most recently created one. This package has no
built-in AWS client. Pass any object with a `describe_images(owners,
filters)` method that returns `zeitgeist.upstream.ami.Image` objects:

```python
from zeitgeist.upstream.ami import AMI, Image

class StaticImages:
    def describe_images(self, owners, filters):
        return [Image(image_id="ami-0001", creation_date="2024-01-01T00:00:00.000Z")]

assert AMI(owner="amazon", name="example-*", service_client=StaticImages()).latest_version() == "ami-0001"
```

### EKS

`EKS` fetches the EKS Kubernetes versions documentation page. It returns
the first version listed there that matches `constraints`. To run the
same matching on HTML you already have, call
`zeitgeist.upstream.eks.find_eks_version(html, constraints)`.

### Semantic version constraints

Most flavours take an optional `constraints` field, such as `< 2.0.0` or
`>= 1.2.0 < 1.4.0`. Alternatives are joined with `||`, and wildcards
such as `1.x` are allowed. If `constraints` is empty, every version is
allowed. An invalid range raises an error.

The helpers live in `zeitgeist.versioning`:

- `parse_version`: strict parsing.
- `parse_tolerant`: also accepts a leading `v` and missing parts.
- `parse_range`: parses a range.
- `VersionError`: raised by all three on bad input.

```python
from zeitgeist.versioning import parse_range, parse_version

allowed = parse_range(">= 1.0.0 < 2.0.0")
assert parse_version("1.4.2") in allowed
```

### Authentication

- **GitHub:** set `GITHUB_ACCESS_TOKEN`, or pass a token to
  `GitHubClient`. Without a token, requests are unauthenticated and
  limited to a low rate.
- **GitLab:** set `GITLAB_TOKEN` for gitlab.com. For a server given in
  `server`, set `GITLAB_PRIVATE_TOKEN` instead. `zeitgeist.gitlab.new()`
  and `new_private(base_url)` return `None` when the token is missing. In
  that case the upstream raises an error.

## What this package does not do

- It has no command-line tool. It also does not read a file that lists
  dependencies and check them all. It only finds the latest version for
  one upstream at a time, from Python code.
- `Flavour` includes `container`, but there is no upstream class for
  container image registries.
- There is no built-in client for Amazon's image API (see AMI above).
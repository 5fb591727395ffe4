import pytest

from zeitgeist.upstream.ami import AMI, Image
from zeitgeist.upstream.base import UpstreamError


class FakeImageService:
    def __init__(self, images=(), error=None):
        self.images = list(images)
        self.error = error
        self.calls = []

    def describe_images(self, owners, filters):
        self.calls.append((list(owners), {k: list(v) for k, v in filters.items()}))
        if self.error is not None:
            raise self.error
        return list(self.images)


EXISTING = [
    Image(
        creation_date="2019-05-10T13:17:12.000Z",
        image_id="ami-123oldimage",
        name="amazon-eks-node-1.13-honk",
    ),
    Image(
        creation_date="2019-05-12T13:17:12.000Z",
        image_id="ami-honk",
        name="amazon-eks-node-1.13-old",
    ),
]


def test_ami_exists():
    service = FakeImageService(EXISTING)
    upstream = AMI(owner="amazon", name="amazon-eks-node-1.13-*", service_client=service)
    assert upstream.latest_version() == "ami-honk"
    assert service.calls == [(["amazon"], {"name": ["amazon-eks-node-1.13-*"]})]


def test_ami_does_not_exist():
    upstream = AMI(
        owner="honk",
        name="this-ami-doesnt-exist-zeitgeist",
        service_client=FakeImageService([]),
    )
    with pytest.raises(UpstreamError) as excinfo:
        upstream.latest_version()
    assert str(excinfo.value) == "no AMI found for upstream this-ami-doesnt-exist-zeitgeist"


def test_service_error_propagates():
    upstream = AMI(
        owner="amazon", name="x", service_client=FakeImageService(error=RuntimeError("boom"))
    )
    with pytest.raises(RuntimeError, match="boom"):
        upstream.latest_version()


def test_missing_service_client():
    with pytest.raises(UpstreamError, match="no image service"):
        AMI(owner="amazon", name="x").latest_version()


def test_ami_from_yaml_ignores_service_client():
    upstream = AMI.from_yaml("flavour: ami\nowner: amazon\nname: eks-*\nserviceclient: nope")
    assert (upstream.owner, upstream.name) == ("amazon", "eks-*")
    assert upstream.service_client is None
"""Amazon Machine Image upstream."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Protocol

from zeitgeist.upstream.base import Base, UpstreamError

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Image:
    """A machine image as listed by the image service."""

    image_id: str
    creation_date: str
    name: str = ""


class ImageService(Protocol):
    """Anything able to list machine images."""

    def describe_images(
        self, owners: Sequence[str], filters: Mapping[str, Sequence[str]]
    ) -> list[Image]:
        """Return the images owned by ``owners`` that match every filter."""


@dataclass(kw_only=True)
class AMI(Base):
    """Latest image, by creation date, among those matching owner and name."""

    # Owner alias (such as "amazon") or owner id.
    owner: str = ""
    # Name pattern; wildcards are allowed.
    name: str = ""
    service_client: ImageService | None = field(
        default=None, repr=False, compare=False, metadata={"config": False}
    )

    def latest_version(self) -> str:
        """Return the id of the most recently created matching image."""
        log.debug("Using AMI upstream")
        if self.service_client is None:
            raise UpstreamError("no image service configured for AMI upstream")

        images = self.service_client.describe_images(
            owners=[self.owner], filters={"name": [self.name]}
        )
        images = sorted(images, key=lambda image: image.creation_date, reverse=True)
        log.debug("Matched AMIs: %s", images)

        if not images:
            raise UpstreamError(f"no AMI found for upstream {self.name}")

        latest = images[0]
        log.debug("Latest AMI: %s", latest)
        return latest.image_id
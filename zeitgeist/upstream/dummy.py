"""An upstream for testing that always reports the same version."""

from __future__ import annotations

from dataclasses import dataclass

from zeitgeist.upstream.base import Base


@dataclass(kw_only=True)
class Dummy(Base):
    """Needs no parameters; its latest version is always 1.0.0."""

    def latest_version(self) -> str:
        """Return 1.0.0."""
        return "1.0.0"
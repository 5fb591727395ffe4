"""Find the latest available version of a dependency in its upstream source."""

__version__ = "0.1.0"
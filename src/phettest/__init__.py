"""phettest: multi-repository sync, build and status server for the dev dashboard."""

__version__ = "0.2.0"

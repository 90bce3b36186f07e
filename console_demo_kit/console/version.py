from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

DEFAULT_DISTRIBUTION = "console-demo-kit"
DEV_VERSION = "0.0.0-dev"


class AppVersionProvider:
    """Resolves the version string shown by `--version` and the V menu action."""

    def __init__(self, distribution: str = DEFAULT_DISTRIBUTION, *, fallback: str = DEV_VERSION) -> None:
        self._distribution = distribution
        self._fallback = fallback

    def get_version(self) -> str:
        try:
            return version(self._distribution)
        except PackageNotFoundError:
            return self._fallback

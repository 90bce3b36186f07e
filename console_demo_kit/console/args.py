from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

HELP_FLAGS = frozenset({"-h", "--help"})
VERSION_FLAGS = frozenset({"-v", "--version"})


@dataclass(frozen=True, slots=True)
class ArgsOptions:
    help_requested: bool = False
    version_requested: bool = False

    @property
    def should_exit(self) -> bool:
        return self.help_requested or self.version_requested


def parse_args(argv: Sequence[str] | None) -> ArgsOptions:
    """Recognize help/version flags; anything else is ignored."""
    if not argv:
        return ArgsOptions()
    help_requested = False
    version_requested = False
    for arg in argv:
        if arg in HELP_FLAGS:
            help_requested = True
        elif arg in VERSION_FLAGS:
            version_requested = True
    return ArgsOptions(help_requested=help_requested, version_requested=version_requested)

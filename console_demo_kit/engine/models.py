from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal, Protocol, runtime_checkable

from console_demo_kit.engine.errors import ConfigurationError

if TYPE_CHECKING:
    from console_demo_kit.engine.cancellation import CancellationToken

MenuEntryKind = Literal["scenario", "action"]


@runtime_checkable
class Scenario(Protocol):
    """A selectable unit of interactive work.

    `run` must return (or raise `OperationCancelledError`) once the token is
    cancelled, and raise for unrecoverable conditions.
    """

    @property
    def name(self) -> str: ...

    async def run(self, token: CancellationToken) -> None: ...


def normalize_key(key: str) -> str:
    return key.strip().casefold()


@dataclass(frozen=True, slots=True)
class MenuAction:
    """A keyed menu command that is not a scenario (help, version, ...)."""

    key: str
    label: str
    invoke: Callable[[], None]

    @property
    def normalized_key(self) -> str:
        return normalize_key(self.key)


@dataclass(frozen=True, slots=True)
class ScenarioDescriptor:
    name: str
    scenario: Scenario

    @classmethod
    def of(cls, scenario: Scenario | ScenarioDescriptor) -> ScenarioDescriptor:
        if isinstance(scenario, ScenarioDescriptor):
            return scenario
        return cls(name=str(getattr(scenario, "name", "") or type(scenario).__name__), scenario=scenario)


@dataclass(frozen=True, slots=True)
class MenuEntry:
    """Tagged menu item: either a numbered scenario or a keyed action."""

    kind: MenuEntryKind
    key: str
    label: str
    scenario: ScenarioDescriptor | None = None
    action: MenuAction | None = None

    @classmethod
    def for_scenario(cls, ordinal: int, descriptor: ScenarioDescriptor) -> MenuEntry:
        return cls(kind="scenario", key=str(ordinal), label=descriptor.name, scenario=descriptor)

    @classmethod
    def for_action(cls, action: MenuAction) -> MenuEntry:
        return cls(kind="action", key=action.key.strip(), label=action.label, action=action)


class MenuModel:
    """Validated menu: numbered scenarios, keyed actions and the quit key.

    The key -> entry mapping is built once here, so selection is a single
    dict lookup.

    Raises:
        ConfigurationError: blank, duplicate (case-insensitive) or reserved keys,
            or a scenario without a usable `run`.
    """

    def __init__(
        self,
        scenarios: Iterable[Scenario | ScenarioDescriptor],
        actions: Iterable[MenuAction] = (),
        *,
        quit_key: str = "Q",
        quit_label: str = "Quit",
    ) -> None:
        if scenarios is None:
            raise ConfigurationError("scenarios must not be None")

        self.quit_key = quit_key.strip()
        self.quit_label = quit_label
        self._quit_normalized = normalize_key(quit_key)

        descriptors = [ScenarioDescriptor.of(s) for s in scenarios]
        for descriptor in descriptors:
            if not callable(getattr(descriptor.scenario, "run", None)):
                raise ConfigurationError(f"Scenario {descriptor.name!r} has no run() operation")
            if not descriptor.name.strip():
                raise ConfigurationError("Scenario names must not be blank")

        scenario_entries = [
            MenuEntry.for_scenario(ordinal, descriptor)
            for ordinal, descriptor in enumerate(descriptors, start=1)
        ]
        action_entries = [MenuEntry.for_action(a) for a in self._validate_actions(actions)]

        self._scenario_entries: tuple[MenuEntry, ...] = tuple(scenario_entries)
        self._action_entries: tuple[MenuEntry, ...] = tuple(action_entries)
        self._by_key: dict[str, MenuEntry] = {
            normalize_key(entry.key): entry for entry in (*scenario_entries, *action_entries)
        }

    def _validate_actions(self, actions: Iterable[MenuAction]) -> list[MenuAction]:
        validated: list[MenuAction] = []
        seen: dict[str, MenuAction] = {}
        for action in actions or ():
            key = action.normalized_key
            if not key:
                raise ConfigurationError(f"Menu action {action.label!r} has a blank key")
            if key.isdigit():
                raise ConfigurationError(
                    f"Menu action key {action.key!r} is reserved for scenario numbers"
                )
            if key == self._quit_normalized:
                raise ConfigurationError(f"Menu action key {action.key!r} is reserved for quit")
            if key in seen:
                raise ConfigurationError(
                    f"Duplicate menu action key {action.key!r} "
                    f"({seen[key].label!r} and {action.label!r})"
                )
            seen[key] = action
            validated.append(action)
        return validated

    @property
    def scenario_entries(self) -> Sequence[MenuEntry]:
        return self._scenario_entries

    @property
    def action_entries(self) -> Sequence[MenuEntry]:
        return self._action_entries

    @property
    def entries(self) -> Sequence[MenuEntry]:
        return (*self._scenario_entries, *self._action_entries)

    def is_quit(self, raw: str) -> bool:
        return normalize_key(raw) == self._quit_normalized

    def resolve(self, raw: str) -> MenuEntry | None:
        key = normalize_key(raw)
        if not key:
            return None
        if key.isdecimal():
            # "01" selects scenario 1
            key = key.lstrip("0") or "0"
        return self._by_key.get(key)

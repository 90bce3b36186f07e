from __future__ import annotations

from dataclasses import dataclass

from console_demo_kit.engine.errors import ConfigurationError


@dataclass(frozen=True, slots=True)
class ConsoleDemoOptions:
    """不可变的控制台引擎配置，整个会话期间只读。"""

    title: str = "Console Demo"

    # Ctrl+C
    handle_interrupt: bool = True
    exit_on_interrupt_when_idle: bool = True
    idle_exit_code: int = 130

    # Menu keys
    quit_key: str = "Q"
    help_key: str = "H"
    version_key: str = "V"

    # Prompts
    menu_prompt: str = "Select an option: "
    pause_prompt: str = "Press any key to return to the menu..."

    def __post_init__(self) -> None:
        for field_name in ("quit_key", "help_key", "version_key"):
            value = getattr(self, field_name)
            if not isinstance(value, str) or not value.strip():
                raise ConfigurationError(f"{field_name} must be a non-empty string")
            if value.strip().isdigit():
                raise ConfigurationError(f"{field_name}={value!r} collides with scenario numbers")
            object.__setattr__(self, field_name, value.strip())

        keys = [self.quit_key.casefold(), self.help_key.casefold(), self.version_key.casefold()]
        if len(set(keys)) != len(keys):
            raise ConfigurationError(
                f"quit/help/version keys must differ: {self.quit_key!r}, {self.help_key!r}, {self.version_key!r}"
            )
        if not 0 <= self.idle_exit_code <= 255:
            raise ConfigurationError(f"idle_exit_code must be in 0..255, got {self.idle_exit_code}")

"""Settings 配置文件加载

从 ~/.console_demo_kit/settings.json（user级）和
{project_root}/.console_demo_kit/settings.json（project级）加载引擎配置，支持分层覆盖。

优先级（从高到低）：
    代码参数 > 环境变量 > project settings.json > user settings.json > 默认值

无效的文件或字段只记录 warning 并跳过，不抛异常。
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Literal

from console_demo_kit.engine.errors import ConfigurationError
from console_demo_kit.engine.options import ConsoleDemoOptions

logger = logging.getLogger(__name__)

SettingSource = Literal["user", "project"]
DEFAULT_SETTING_SOURCES: tuple[SettingSource, ...] = ("user", "project")

SETTINGS_DIR_NAME = ".console_demo_kit"
USER_SETTINGS_PATH: Path = Path.home() / SETTINGS_DIR_NAME / "settings.json"

ENV_HANDLE_INTERRUPT = "CONSOLE_DEMO_HANDLE_INTERRUPT"
ENV_EXIT_ON_INTERRUPT_WHEN_IDLE = "CONSOLE_DEMO_EXIT_ON_INTERRUPT_WHEN_IDLE"
ENV_IDLE_EXIT_CODE = "CONSOLE_DEMO_IDLE_EXIT_CODE"

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


@dataclass
class SettingsConfig:
    """从 settings.json 加载的配置，None 表示该字段未配置"""

    title: str | None = None
    handle_interrupt: bool | None = None
    exit_on_interrupt_when_idle: bool | None = None
    idle_exit_code: int | None = None
    quit_key: str | None = None
    help_key: str | None = None
    version_key: str | None = None
    menu_prompt: str | None = None
    pause_prompt: str | None = None

    def merged_with(self, override: SettingsConfig) -> SettingsConfig:
        """override 中非 None 的字段覆盖 self"""
        values = {
            f.name: getattr(override, f.name) if getattr(override, f.name) is not None else getattr(self, f.name)
            for f in fields(self)
        }
        return SettingsConfig(**values)

    def as_options_kwargs(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self) if getattr(self, f.name) is not None}


_STR_FIELDS = ("title", "quit_key", "help_key", "version_key", "menu_prompt", "pause_prompt")
_BOOL_FIELDS = ("handle_interrupt", "exit_on_interrupt_when_idle")


def load_settings_file(path: Path) -> SettingsConfig | None:
    """从 settings.json 文件加载配置

    文件不存在或解析失败时返回 None，不抛异常。

    Args:
        path: settings.json 的路径

    Returns:
        解析后的 SettingsConfig，或 None（没有任何有效字段）
    """
    resolved = path.expanduser()
    if not resolved.exists():
        logger.debug(f"settings.json 不存在，跳过: {resolved}")
        return None

    if not resolved.is_file():
        logger.warning(f"settings.json 路径不是文件: {resolved}")
        return None

    try:
        data = json.loads(resolved.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as e:
        logger.warning(f"读取/解析 settings.json 失败 {resolved}: {e}")
        return None

    if not isinstance(data, dict):
        logger.warning(f"settings.json 内容不是 JSON 对象: {resolved}")
        return None

    values: dict[str, Any] = {}
    for name in _STR_FIELDS:
        raw = data.get(name)
        if raw is None:
            continue
        if not isinstance(raw, str):
            logger.warning(f"settings.json {name} 不是字符串，跳过: {resolved}")
            continue
        values[name] = raw

    for name in _BOOL_FIELDS:
        raw = data.get(name)
        if raw is None:
            continue
        if not isinstance(raw, bool):
            logger.warning(f"settings.json {name} 不是布尔值，跳过: {resolved}")
            continue
        values[name] = raw

    raw_code = data.get("idle_exit_code")
    if raw_code is not None:
        # bool 是 int 的子类，需要单独排除
        if isinstance(raw_code, bool) or not isinstance(raw_code, int) or not 0 <= raw_code <= 255:
            logger.warning(f"settings.json idle_exit_code 必须是 0..255 的整数，跳过: {resolved}")
        else:
            values["idle_exit_code"] = raw_code

    if not values:
        return None
    return SettingsConfig(**values)


def resolve_settings(
    sources: tuple[SettingSource, ...] | None,
    project_root: Path | None,
    *,
    user_settings_path: Path | None = None,
) -> SettingsConfig | None:
    """按优先级加载并合并 settings

    合并策略：逐字段覆盖，project 中配置了的字段覆盖 user。

    Args:
        sources: 要加载的配置源，None 或空 tuple 表示不加载任何配置
        project_root: 项目根目录，None 时使用 cwd
        user_settings_path: user 级配置路径，None 时使用 USER_SETTINGS_PATH

    Returns:
        合并后的 SettingsConfig，或 None（无有效配置）
    """
    if not sources:
        logger.debug("setting_sources 为空，不加载 settings")
        return None

    root = (project_root or Path.cwd()).expanduser()

    user_settings: SettingsConfig | None = None
    project_settings: SettingsConfig | None = None

    if "user" in sources:
        user_path = user_settings_path or USER_SETTINGS_PATH
        user_settings = load_settings_file(user_path)
        if user_settings:
            logger.debug(f"加载 user settings: {user_path}")

    if "project" in sources:
        project_path = root / SETTINGS_DIR_NAME / "settings.json"
        project_settings = load_settings_file(project_path)
        if project_settings:
            logger.debug(f"加载 project settings: {project_path}")

    if project_settings is None:
        return user_settings
    if user_settings is None:
        return project_settings
    return user_settings.merged_with(project_settings)


def read_env_bool(name: str, default: bool | None, env: Mapping[str, str] | None = None) -> bool | None:
    source = os.environ if env is None else env
    raw = source.get(name)
    if raw is None or not raw.strip():
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    logger.warning(f"Invalid env var {name}={raw!r}; using default {default}.")
    return default


def read_env_int(
    name: str,
    default: int | None,
    env: Mapping[str, str] | None = None,
    *,
    minimum: int = 0,
    maximum: int = 255,
) -> int | None:
    source = os.environ if env is None else env
    raw = source.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw.strip())
    except ValueError:
        logger.warning(f"Invalid env var {name}={raw!r}; using default {default}.")
        return default
    if not minimum <= value <= maximum:
        logger.warning(f"Invalid env var {name}={raw!r}; using default {default}.")
        return default
    return value


def _apply_env(settings: SettingsConfig, env: Mapping[str, str] | None) -> SettingsConfig:
    return SettingsConfig(
        **{
            **{f.name: getattr(settings, f.name) for f in fields(settings)},
            "handle_interrupt": read_env_bool(ENV_HANDLE_INTERRUPT, settings.handle_interrupt, env),
            "exit_on_interrupt_when_idle": read_env_bool(
                ENV_EXIT_ON_INTERRUPT_WHEN_IDLE, settings.exit_on_interrupt_when_idle, env
            ),
            "idle_exit_code": read_env_int(ENV_IDLE_EXIT_CODE, settings.idle_exit_code, env),
        }
    )


def load_options(
    project_root: Path | None = None,
    *,
    setting_sources: tuple[SettingSource, ...] | None = DEFAULT_SETTING_SOURCES,
    env: Mapping[str, str] | None = None,
    user_settings_path: Path | None = None,
    **overrides: Any,
) -> ConsoleDemoOptions:
    """构建 ConsoleDemoOptions：默认值 < settings.json < 环境变量 < 代码参数

    Raises:
        ConfigurationError: 代码参数本身无效（未知字段或校验失败）
    """
    known = {f.name for f in fields(ConsoleDemoOptions)}
    unknown = sorted(set(overrides) - known)
    if unknown:
        raise ConfigurationError(f"Unknown option(s): {', '.join(unknown)}")
    explicit = {k: v for k, v in overrides.items() if v is not None}

    settings = resolve_settings(setting_sources, project_root, user_settings_path=user_settings_path)
    settings = _apply_env(settings or SettingsConfig(), env)
    layered = settings.as_options_kwargs()
    if layered:
        logger.info(f"✅ settings 已加载: {sorted(layered)}")

    try:
        return ConsoleDemoOptions(**{**layered, **explicit})
    except ConfigurationError as e:
        if not layered:
            raise
        # 文件/环境变量组合出的配置无效时忽略它们，只保留代码参数
        logger.warning(f"settings 配置无效，已忽略: {e}")
        return ConsoleDemoOptions(**explicit)

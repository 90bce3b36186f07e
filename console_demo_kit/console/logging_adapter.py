"""Console logging adapter - 将日志输出到 rich 控制台而不打乱菜单"""
from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path

from rich.console import Console
from rich.text import Text

DEFAULT_LOG_DIR = Path.home() / ".console_demo_kit" / "logs"
LOG_FILE_NAME = "demo.log"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class ConsoleLoggingHandler(logging.Handler):
    """自定义 logging handler，将 WARNING/ERROR 友好地显示在控制台

    特性：
    - 只显示 WARNING 及以上
    - 首次显示机制：相同消息只显示一次
    - 不输出 traceback（完整信息在日志文件里）
    - extra={"console": False} 的记录只写文件（界面已自行展示）
    """

    def __init__(self, console: Console, *, max_len: int = 100) -> None:
        super().__init__(level=logging.WARNING)
        self._console = console
        self._max_len = max_len
        self._shown_messages: set[str] = set()

    def emit(self, record: logging.LogRecord) -> None:
        try:
            if record.levelno < logging.WARNING:
                return
            if getattr(record, "console", True) is False:
                return

            msg_key = f"{record.name}:{record.getMessage()[:50]}"
            if msg_key in self._shown_messages:
                return
            self._shown_messages.add(msg_key)

            is_error = record.levelno >= logging.ERROR
            prefix = "❌" if is_error else "⚠️"
            style = "red" if is_error else "yellow"
            self._console.print(Text(f"{prefix} {self._simplify_message(record.getMessage())}", style=style))
        except Exception:
            self.handleError(record)

    def _simplify_message(self, msg: str) -> str:
        # 去掉 key=value 形式的技术参数
        for marker in ("duration_ms=", "exc_type="):
            if marker in msg:
                msg = msg.split(marker)[0].rstrip(": ,")
        if len(msg) > self._max_len:
            msg = msg[: self._max_len] + "..."
        return msg


def setup_console_logging(
    console: Console,
    *,
    log_dir: Path | None = None,
    level: int | str | None = None,
) -> Path:
    """统一日志初始化：文件 + 控制台双通道。

    - 所有日志（含 traceback）写入 ~/.console_demo_kit/logs/demo.log（RotatingFileHandler）
    - WARNING/ERROR 以用户友好格式显示在控制台
    - 清除 root logger 默认的 stderr handler，阻止 traceback 打乱菜单

    Returns:
        日志文件路径
    """
    resolved_dir = (log_dir or DEFAULT_LOG_DIR).expanduser()
    resolved_dir.mkdir(parents=True, exist_ok=True)
    log_path = resolved_dir / LOG_FILE_NAME

    file_handler = RotatingFileHandler(
        log_path, maxBytes=10 * 1024 * 1024, backupCount=3, encoding="utf-8",
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(file_handler)
    root.setLevel(level or os.getenv("LOG_LEVEL", "DEBUG"))

    root.addHandler(ConsoleLoggingHandler(console))
    return log_path

"""
日志工具模块
============

提供统一的日志配置和管理。

控制台输出使用 Rich，文件输出使用按大小轮转的日志文件。
各模块通过 get_logger(__name__) 获取日志器，日志行以组件前缀开头，
例如 "[Node] detect_intent"、"[Route] social_intent -> social_post_selector"。
"""

import logging
import sys
from pathlib import Path
from datetime import datetime
from typing import Dict, Optional
from logging.handlers import RotatingFileHandler

from rich.logging import RichHandler
from rich.console import Console

_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_RICH_FORMAT = "%(message)s"

_LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}

# 第三方库只保留警告以上
_NOISY_LIBRARIES = (
    "httpx",
    "httpcore",
    "openai",
    "anthropic",
    "urllib3",
    "langchain",
    "langgraph",
)

_loggers: Dict[str, logging.Logger] = {}
_initialized = False


def setup_logger(
    log_dir: str = "logs",
    log_file: Optional[str] = None,
    level: str = "info",
    debug: bool = False,
    use_rich: bool = True,
    use_file: bool = True,
    max_file_size: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5,
) -> None:
    """
    设置全局日志配置

    只在进程内生效一次，重复调用直接返回。

    Args:
        log_dir: 日志目录
        log_file: 日志文件名，None 自动生成
        level: 日志级别
        debug: 是否启用调试模式（覆盖 level）
        use_rich: 是否使用 Rich 美化输出
        use_file: 是否写入日志文件
        max_file_size: 单个日志文件最大大小
        backup_count: 保留的备份文件数
    """
    global _initialized

    if _initialized:
        return

    log_level = logging.DEBUG if debug else _LOG_LEVELS.get(level.lower(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    if use_rich:
        console_handler: logging.Handler = RichHandler(
            console=Console(stderr=True),
            show_time=True,
            show_path=debug,
            rich_tracebacks=True,
            markup=False,
        )
        console_handler.setFormatter(logging.Formatter(_RICH_FORMAT))
    else:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(logging.Formatter(_LOG_FORMAT, _LOG_DATE_FORMAT))

    console_handler.setLevel(log_level)
    root_logger.addHandler(console_handler)

    log_file_path = None
    if use_file:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)
        if log_file is None:
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            log_file = f"feedmind_{timestamp}.log"
        log_file_path = log_path / log_file

        file_handler = RotatingFileHandler(
            log_file_path,
            maxBytes=max_file_size,
            backupCount=backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(logging.Formatter(_LOG_FORMAT, _LOG_DATE_FORMAT))
        file_handler.setLevel(logging.DEBUG)  # 文件记录所有级别
        root_logger.addHandler(file_handler)

    for lib in _NOISY_LIBRARIES:
        logging.getLogger(lib).setLevel(logging.WARNING)

    _initialized = True

    root_logger.info(f"日志系统初始化完成，文件: {log_file_path or '未启用'}")


def get_logger(name: str) -> logging.Logger:
    """
    获取日志器实例

    Args:
        name: 日志器名称

    Returns:
        Logger 实例
    """
    if name not in _loggers:
        _loggers[name] = logging.getLogger(name)
    return _loggers[name]


class SessionLoggerAdapter(logging.LoggerAdapter):
    """在每条日志前附加会话 ID，便于在并发会话的日志中追踪同一轮对话"""

    def process(self, msg, kwargs):
        return f"[{self.extra['session_id']}] {msg}", kwargs


def session_logger(name: str, session_id: str) -> SessionLoggerAdapter:
    """
    获取绑定会话的日志器

    Args:
        name: 日志器名称
        session_id: 会话 ID

    Returns:
        LoggerAdapter 实例
    """
    return SessionLoggerAdapter(get_logger(name), {"session_id": session_id})

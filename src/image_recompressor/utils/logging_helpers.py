"""日志工具模块。

提供统一的日志记录器获取方式，以及服务启动时的日志配置。
"""

import inspect
import logging
from logging.handlers import RotatingFileHandler

from ..config import LoggingDefaults


def get_logger(name: str | None = None) -> logging.Logger:
    """获取标准化配置的日志记录器。

    Args:
        name: 日志记录器名称，默认使用调用模块的 __name__

    Returns:
        logging.Logger: 日志记录器
    """
    if name is None:
        frame = inspect.currentframe()
        if frame and frame.f_back:
            name = frame.f_back.f_globals.get("__name__", "unknown")
        else:
            name = "unknown"

    return logging.getLogger(name)


def configure_logging(defaults: LoggingDefaults) -> None:
    """按配置初始化根日志记录器。

    Args:
        defaults: 日志配置
    """
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if defaults.ENABLE_FILE_LOGGING:
        handlers.append(
            RotatingFileHandler(
                defaults.LOG_FILE_PATH,
                maxBytes=defaults.LOG_FILE_MAX_SIZE,
                backupCount=defaults.LOG_FILE_BACKUP_COUNT,
                encoding="utf-8",
            )
        )

    logging.basicConfig(
        level=getattr(logging, defaults.LOG_LEVEL, logging.INFO),
        format=defaults.LOG_FORMAT,
        handlers=handlers,
        force=True,
    )

"""工具模块包。

提供纯工具函数，不包含业务逻辑。
"""

from .logging_helpers import configure_logging, get_logger
from .message_formatter import MessageFormatter
from .naming_helpers import (
    NamingPolicy,
    download_filename,
    ensure_unique_path,
    output_path_beside,
)


__all__ = [
    "MessageFormatter",
    "NamingPolicy",
    "configure_logging",
    "download_filename",
    "ensure_unique_path",
    "get_logger",
    "output_path_beside",
]

"""重新编码异常处理模块。

定义三类终止性错误，以及把 Pillow 异常转换为对应错误的装饰器。
"""

from collections.abc import Callable
from functools import wraps
from typing import TypeVar

from PIL.Image import DecompressionBombError, UnidentifiedImageError

from .utils.logging_helpers import get_logger


logger = get_logger()
T = TypeVar("T")


class RecompressionError(Exception):
    """重新编码错误基类"""

    def __init__(self, message: str, mime_type: str | None = None):
        super().__init__(message)
        self.message = message
        self.mime_type = mime_type


class InvalidInputError(RecompressionError):
    """调用方输入无效：类型不是图像或质量越界"""

    pass


class DecodeError(RecompressionError):
    """输入字节无法解码为像素"""

    pass


class EncodeError(RecompressionError):
    """像素无法编码为目标格式"""

    pass


def handle_codec_errors(
    error_cls: type[RecompressionError], operation_name: str
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """把编解码过程中的 Pillow/系统异常统一转换为 error_cls

    Args:
        error_cls: 转换后的错误类型（DecodeError 或 EncodeError）
        operation_name: 操作名称，用于日志记录
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args, **kwargs) -> T:
            try:
                return func(*args, **kwargs)
            except RecompressionError:
                raise
            except UnidentifiedImageError as e:
                logger.warning(f"{operation_name} - 无法识别图像格式: {e}")
                raise error_cls(f"无法识别的图像数据: {e}") from e
            except DecompressionBombError as e:
                logger.warning(f"{operation_name} - 图像过大: {e}")
                raise error_cls(f"图像像素过多，可能存在安全风险: {e}") from e
            except OSError as e:
                logger.warning(f"{operation_name} - 数据损坏或编码器错误: {e}")
                raise error_cls(f"{operation_name}失败: {e}") from e
            except (ValueError, TypeError, KeyError) as e:
                logger.warning(f"{operation_name} - 参数错误: {e}")
                raise error_cls(f"{operation_name}失败: {e}") from e
            except Exception as e:
                logger.error(f"{operation_name} - 未知错误: {e}")
                raise error_cls(f"{operation_name}失败: {e}") from e

        return wrapper

    return decorator

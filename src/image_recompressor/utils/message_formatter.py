"""消息格式化工具模块。

提供统一的错误消息、日志消息格式化功能。
"""

from pathlib import Path


class MessageFormatter:
    """统一的消息格式化器"""

    @staticmethod
    def file_not_found(file_path: str | Path) -> str:
        """文件不存在错误消息"""
        return f"文件不存在: {file_path}"

    @staticmethod
    def path_not_file(path: str | Path) -> str:
        """路径不是文件错误消息"""
        return f"路径不是文件: {path}"

    @staticmethod
    def operation_failed(
        operation: str, target: str | Path, error: Exception | None = None
    ) -> str:
        """操作失败消息"""
        msg = f"{operation}失败: {target}"
        if error:
            msg += f" - {error}"
        return msg

    @staticmethod
    def recompressed(
        mime_type: str, width: int, height: int, original_size: int, new_size: int
    ) -> str:
        """重新编码完成消息"""
        return (
            f"重新编码完成 [{mime_type}] {width}×{height} px, "
            f"{original_size} → {new_size} bytes"
        )

    @staticmethod
    def dimensions(width: int, height: int) -> str:
        """尺寸显示文本"""
        return f"{width}×{height} px"

"""图像重新编码 MCP 服务器。

对外提供两个工具：重新编码并对比、获取图片信息。
"""

from pathlib import Path
from typing import Any

from fastmcp import FastMCP

from . import __version__
from .config import get_config
from .core.codecs import select_codec
from .exceptions import (
    DecodeError,
    EncodeError,
    InvalidInputError,
    RecompressionError,
)
from .models import InputImage, format_size
from .utils.logging_helpers import configure_logging, get_logger
from .utils.message_formatter import MessageFormatter
from .utils.naming_helpers import NamingPolicy, ensure_unique_path, output_path_beside
from .workflow import compress_session, load_image, save_result


MCPResponse = dict[str, Any]

logger = get_logger()


class MCPResponseBuilder:
    """MCP 服务器响应构建器"""

    @staticmethod
    def error(
        message: str,
        error_type: str = "general",
        details: dict[str, Any] | None = None,
    ) -> MCPResponse:
        result: MCPResponse = {
            "success": False,
            "error": message,
            "error_type": error_type,
        }
        if details:
            result["details"] = details
        return result

    @staticmethod
    def file_error(message: str, file_path: str | None = None) -> MCPResponse:
        details = {"file_path": file_path} if file_path else None
        return MCPResponseBuilder.error(message, "file", details)

    @staticmethod
    def from_exception(error: Exception, input_path: str) -> MCPResponse:
        """按错误类型构建响应"""
        match error:
            case InvalidInputError() as e:
                return MCPResponseBuilder.error(
                    e.message, "validation", {"mime_type": e.mime_type}
                )
            case DecodeError() | EncodeError() as e:
                return MCPResponseBuilder.error(
                    e.message, "processing", {"stage": type(e).__name__}
                )
            case FileNotFoundError() | IsADirectoryError() | PermissionError():
                return MCPResponseBuilder.file_error(str(error), input_path)
            case _:
                return MCPResponseBuilder.error(
                    MessageFormatter.operation_failed("处理", input_path, error),
                    "processing",
                )


def _resolve_input(input_path: str) -> Path:
    path = Path(input_path)
    if not path.exists():
        raise FileNotFoundError(MessageFormatter.file_not_found(input_path))
    if not path.is_file():
        raise IsADirectoryError(MessageFormatter.path_not_file(input_path))
    return path


async def recompress_file(
    input_path: str,
    quality: int | None = None,
    output_path: str | None = None,
    keep_original_extension: bool = False,
) -> MCPResponse:
    """重新编码一个文件并写出结果，返回对比信息"""
    try:
        path = _resolve_input(input_path)
        policy = (
            NamingPolicy.PRESERVE_ORIGINAL
            if keep_original_extension
            else NamingPolicy.RESOLVED_CODEC
        )

        session = await load_image(InputImage.from_path(path))
        session = await compress_session(session, quality)
        result = session.result
        if result is None:
            raise EncodeError("重新编码未产生结果")

        target = (
            Path(output_path)
            if output_path
            else ensure_unique_path(output_path_beside(path, result.codec, policy))
        )
        saved = await save_result(session, target)
        comparison = session.comparison()

        return {
            "success": True,
            "input_path": str(path),
            "output_path": str(saved),
            "mime_type": result.mime_type,
            "quality": session.quality_percent,
            "original_size": comparison.original_size,
            "compressed_size": comparison.compressed_size,
            "original_dimensions": list(comparison.original_dimensions),
            "compressed_dimensions": list(comparison.compressed_dimensions),
            "savings_percentage": comparison.get_savings_percentage(),
            "summary": comparison.get_summary(),
            "error": None,
        }

    except (RecompressionError, OSError) as e:
        logger.error(MessageFormatter.operation_failed("重新编码", input_path, e))
        return MCPResponseBuilder.from_exception(e, input_path)


async def describe_file(input_path: str) -> MCPResponse:
    """读取文件的声明类型、大小和尺寸"""
    try:
        path = _resolve_input(input_path)
        session = await load_image(InputImage.from_path(path))
        width, height = session.original_dimensions or (0, 0)

        return {
            "success": True,
            "file_path": str(path),
            "mime_type": session.mime_type,
            "file_size": session.original_size,
            "file_size_human": format_size(session.original_size),
            "width": width,
            "height": height,
            "output_mime_type": select_codec(session.mime_type or "").mime_type,
            "error": None,
        }

    except (RecompressionError, OSError) as e:
        logger.error(MessageFormatter.operation_failed("获取图片信息", input_path, e))
        return MCPResponseBuilder.from_exception(e, input_path)


mcp: FastMCP[Any] = FastMCP("图像重新编码服务")


@mcp.tool()
async def recompress_image(
    input_path: str,
    quality: int = 80,
    output_path: str | None = None,
    keep_original_extension: bool = False,
) -> MCPResponse:
    """以指定质量重新编码图片，并对比原图与结果

    输出格式由文件扩展名决定：PNG → PNG，WEBP → WEBP，其他图片 → JPEG。
    PNG 为无损编码，质量参数对其无效。

    Args:
        input_path: 输入图片路径
        quality: 质量 1-100
        output_path: 输出路径（可选，默认在输入文件旁生成 *_compressed.*）
        keep_original_extension: 是否沿用原文件扩展名命名结果

    Returns:
        dict: 输出路径、大小与尺寸对比、节省比例
    """
    return await recompress_file(
        input_path, quality, output_path, keep_original_extension
    )


@mcp.tool()
async def get_image_info(input_path: str) -> MCPResponse:
    """获取图片的声明类型、文件大小、像素尺寸和重新编码后的输出类型

    Args:
        input_path: 输入图片路径
    """
    return await describe_file(input_path)


def main() -> None:
    """启动 MCP 服务器"""
    configure_logging(get_config().logging)
    logger.info(f"启动图像重新编码 MCP 服务器 {__version__}")
    mcp.run()


if __name__ == "__main__":
    main()

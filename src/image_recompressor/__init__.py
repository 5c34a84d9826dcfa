"""图像重新编码库。

以指定质量重新编码图片，并对比原图与结果，基于 Pillow。
"""

__version__ = "0.1.0"

from .core.recompressor import (
    Recompressor,
    quality_from_percent,
    recompress,
    recompress_sync,
)
from .exceptions import (
    DecodeError,
    EncodeError,
    InvalidInputError,
    RecompressionError,
)
from .models import (
    Comparison,
    CompressionSession,
    InputImage,
    OutputCodec,
    RecompressionResult,
)


__all__ = [
    "Comparison",
    "CompressionSession",
    "DecodeError",
    "EncodeError",
    "InputImage",
    "InvalidInputError",
    "OutputCodec",
    "RecompressionError",
    "RecompressionResult",
    "Recompressor",
    "get_version",
    "quality_from_percent",
    "recompress",
    "recompress_sync",
]


def get_version() -> str:
    """获取版本号。"""
    return __version__

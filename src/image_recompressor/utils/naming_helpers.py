"""文件命名工具模块。

提供结果文件的命名策略和唯一路径生成功能。
"""

import itertools
from enum import Enum
from pathlib import Path

from ..models.constants import OutputCodec


DOWNLOAD_STEM = "compressed"


class NamingPolicy(str, Enum):
    """结果文件扩展名策略"""

    # 按实际输出编码器命名（GIF 输入得到 .jpg）
    RESOLVED_CODEC = "resolved_codec"
    # 沿用原文件扩展名，即使内容已是其他格式
    PRESERVE_ORIGINAL = "preserve_original"


def download_filename(
    original_name: str | None,
    codec: OutputCodec,
    policy: NamingPolicy = NamingPolicy.RESOLVED_CODEC,
) -> str:
    """生成结果文件名，形如 compressed.jpg

    Args:
        original_name: 原始文件名
        codec: 实际输出编码器
        policy: 扩展名策略

    Returns:
        str: 文件名（不含路径）
    """
    if policy == NamingPolicy.PRESERVE_ORIGINAL and original_name:
        # 与 name.split('.').pop() 相同：没有点号时整个名字就是扩展名
        extension = original_name.rsplit(".", 1)[-1].lower()
        return f"{DOWNLOAD_STEM}.{extension}"

    return f"{DOWNLOAD_STEM}{codec.extension}"


def output_path_beside(
    input_path: Path,
    codec: OutputCodec,
    policy: NamingPolicy = NamingPolicy.RESOLVED_CODEC,
) -> Path:
    """在输入文件旁生成结果路径，形如 photo_compressed.jpg"""
    if policy == NamingPolicy.PRESERVE_ORIGINAL and input_path.suffix:
        suffix = input_path.suffix.lower()
    else:
        suffix = codec.extension
    return input_path.parent / f"{input_path.stem}_{DOWNLOAD_STEM}{suffix}"


def ensure_unique_path(path: Path) -> Path:
    """确保路径唯一，如果文件已存在则添加数字后缀"""
    if not path.exists():
        return path

    base = path.stem
    suffix = path.suffix
    parent = path.parent

    for counter in itertools.count(1):
        new_path = parent / f"{base}_{counter}{suffix}"
        if not new_path.exists():
            return new_path

    return path  # pragma: no cover

"""图像编码相关常量定义。

输出编码器由声明的 MIME 类型决定，扩展名与 MIME 映射基于 Pillow 的动态注册表。
"""

from enum import Enum
from typing import Final

from PIL import Image


class OutputCodec(str, Enum):
    """输出编码器枚举，取值为 Pillow 的格式名"""

    JPEG = "JPEG"
    PNG = "PNG"
    WEBP = "WEBP"

    @property
    def mime_type(self) -> str:
        return f"image/{self.value.lower()}"

    @property
    def extension(self) -> str:
        return ImageFormats.get_extension(self.value)

    @property
    def is_lossless(self) -> bool:
        """PNG 编码始终无损，质量参数对其无效"""
        return self is OutputCodec.PNG


# 声明类型精确匹配，其余 image/* 一律回退到 JPEG
CODEC_BY_MIME_TYPE: Final[dict[str, OutputCodec]] = {
    "image/png": OutputCodec.PNG,
    "image/webp": OutputCodec.WEBP,
}
DEFAULT_CODEC: Final[OutputCodec] = OutputCodec.JPEG

IMAGE_MIME_PREFIX: Final[str] = "image/"
UNKNOWN_MIME_TYPE: Final[str] = "application/octet-stream"


class ImageFormats:
    """基于 Pillow 的动态图像格式管理"""

    ALIASES: Final[dict[str, str]] = {
        "JPG": "JPEG",
    }

    # Pillow 格式名与 IANA 类型不一致的情况
    SPECIAL_MIME_TYPES: Final[dict[str, str]] = {
        "ICO": "image/x-icon",
        "PPM": "image/x-portable-pixmap",
        "PGM": "image/x-portable-graymap",
        "PBM": "image/x-portable-bitmap",
        "JPEG2000": "image/jp2",
    }

    PREFERRED_EXTENSIONS: Final[dict[str, str]] = {
        "JPEG": ".jpg",
        "PNG": ".png",
        "WEBP": ".webp",
        "TIFF": ".tiff",
    }

    @classmethod
    def get_mime_type(cls, format_name: str) -> str:
        format_upper = cls.ALIASES.get(format_name.upper(), format_name.upper())
        if format_upper in cls.SPECIAL_MIME_TYPES:
            return cls.SPECIAL_MIME_TYPES[format_upper]
        return f"image/{format_upper.lower()}"

    @classmethod
    def get_extension(cls, format_name: str) -> str:
        """获取格式的首选扩展名"""
        format_upper = cls.ALIASES.get(format_name.upper(), format_name.upper())
        if format_upper in cls.PREFERRED_EXTENSIONS:
            return cls.PREFERRED_EXTENSIONS[format_upper]

        for ext, fmt in Image.registered_extensions().items():
            if fmt and fmt.upper() == format_upper:
                return ext.lower()

        return f".{format_upper.lower()}"

    @classmethod
    def mime_type_for_extension(cls, suffix: str) -> str:
        """根据文件扩展名声明 MIME 类型，不读取文件内容

        Args:
            suffix: 扩展名，如 ".png"

        Returns:
            str: MIME 类型，未注册的扩展名返回 application/octet-stream
        """
        format_name = Image.registered_extensions().get(suffix.lower())
        if not format_name:
            return UNKNOWN_MIME_TYPE
        return cls.get_mime_type(format_name)


class QualityLimits:
    """质量参数范围"""

    # 质量因子（编码器使用）
    MIN_QUALITY: Final[float] = 0.01
    MAX_QUALITY: Final[float] = 1.0

    # 滑块百分比（调用方使用）
    MIN_PERCENT: Final[int] = 1
    MAX_PERCENT: Final[int] = 100


def codec_for_mime_type(mime_type: str) -> OutputCodec:
    """根据声明的 MIME 类型选择输出编码器"""
    return CODEC_BY_MIME_TYPE.get(mime_type, DEFAULT_CODEC)


def is_image_mime_type(mime_type: str) -> bool:
    """检查声明的类型是否为 image/*"""
    return mime_type.startswith(IMAGE_MIME_PREFIX)

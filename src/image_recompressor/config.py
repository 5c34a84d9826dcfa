"""统一配置管理模块。

提供重新编码的默认参数与日志配置，支持环境变量覆盖。
"""

import os
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class RecompressDefaults:
    """重新编码相关的默认配置"""

    # JPEG 不支持透明度，透明像素合成到该背景色上
    JPEG_BACKGROUND: tuple[int, int, int] = (255, 255, 255)

    # 编码器参数
    WEBP_METHOD: int = 6
    PNG_COMPRESS_LEVEL: int = 9

    # 解码时按 EXIF 方向旋转，与浏览器的显示行为一致
    APPLY_EXIF_ORIENTATION: bool = True

    # 滑块默认值（百分比）
    DEFAULT_QUALITY_PERCENT: int = 80

    def get_codec_defaults(self, codec_name: str) -> dict[str, Any]:
        """获取编码器特定的默认参数（不含质量）"""
        defaults = {
            "JPEG": {},
            "WEBP": {"method": self.WEBP_METHOD},
            "PNG": {"compress_level": self.PNG_COMPRESS_LEVEL},
        }
        return dict(defaults.get(codec_name, {}))


@dataclass(frozen=True)
class LoggingDefaults:
    """日志相关的默认配置"""

    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # 文件日志
    ENABLE_FILE_LOGGING: bool = False
    LOG_FILE_PATH: str = "image_recompressor.log"
    LOG_FILE_MAX_SIZE: int = 10 * 1024 * 1024  # 10MB
    LOG_FILE_BACKUP_COUNT: int = 5


def _parse_bool(value: str) -> bool:
    return value.lower() in ("true", "1", "yes")


class AppConfig:
    """应用程序配置管理器

    支持环境变量覆盖默认配置
    """

    def __init__(self):
        self.recompress = RecompressDefaults()
        self.logging = LoggingDefaults()

        self._load_from_env()

    def _load_from_env(self):
        """从环境变量加载配置"""
        if webp_method := os.getenv("IMGRC_WEBP_METHOD"):
            object.__setattr__(self.recompress, "WEBP_METHOD", int(webp_method))

        if compress_level := os.getenv("IMGRC_PNG_COMPRESS_LEVEL"):
            object.__setattr__(
                self.recompress, "PNG_COMPRESS_LEVEL", int(compress_level)
            )

        if exif_orientation := os.getenv("IMGRC_EXIF_ORIENTATION"):
            object.__setattr__(
                self.recompress,
                "APPLY_EXIF_ORIENTATION",
                _parse_bool(exif_orientation),
            )

        if log_level := os.getenv("IMGRC_LOG_LEVEL"):
            object.__setattr__(self.logging, "LOG_LEVEL", log_level.upper())

        if enable_file_log := os.getenv("IMGRC_ENABLE_FILE_LOGGING"):
            object.__setattr__(
                self.logging, "ENABLE_FILE_LOGGING", _parse_bool(enable_file_log)
            )


# 全局配置实例
config = AppConfig()


def get_config() -> AppConfig:
    """获取全局配置实例"""
    return config


def reset_config():
    """重置配置（主要用于测试）"""
    global config
    config = AppConfig()

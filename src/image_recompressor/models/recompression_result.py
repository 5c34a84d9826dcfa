"""重新编码结果模型。

定义单次重新编码的结果，以及原图与结果之间的对比数据。
"""

from humanize import naturalsize
from pydantic import BaseModel, ConfigDict, Field

from .constants import DEFAULT_CODEC, OutputCodec


def format_size(size_bytes: int) -> str:
    """格式化文件大小为人类可读格式"""
    return naturalsize(size_bytes, binary=True)


class RecompressionResult(BaseModel):
    """单次重新编码结果，所有权完全交给调用方"""

    model_config = ConfigDict(frozen=True)

    encoded_bytes: bytes = Field(description="编码后的字节")
    mime_type: str = Field(description="输出 MIME 类型")
    width: int = Field(gt=0, description="像素宽度")
    height: int = Field(gt=0, description="像素高度")

    @property
    def size(self) -> int:
        return len(self.encoded_bytes)

    @property
    def dimensions(self) -> tuple[int, int]:
        return (self.width, self.height)

    @property
    def codec(self) -> OutputCodec:
        for codec in OutputCodec:
            if codec.mime_type == self.mime_type:
                return codec
        return DEFAULT_CODEC

    @property
    def extension(self) -> str:
        return self.codec.extension

    def get_size_human(self) -> str:
        return format_size(self.size)


class Comparison(BaseModel):
    """原图与重新编码结果的对比"""

    model_config = ConfigDict(frozen=True)

    original_size: int = Field(ge=0, description="原始字节数")
    compressed_size: int = Field(ge=0, description="重新编码后字节数")
    original_dimensions: tuple[int, int] = Field(description="原始尺寸")
    compressed_dimensions: tuple[int, int] = Field(description="重新编码后尺寸")

    @classmethod
    def between(
        cls,
        original_size: int,
        original_dimensions: tuple[int, int],
        result: RecompressionResult,
    ) -> "Comparison":
        return cls(
            original_size=original_size,
            compressed_size=result.size,
            original_dimensions=original_dimensions,
            compressed_dimensions=result.dimensions,
        )

    def get_size_saved(self) -> int:
        """节省的字节数（结果变大时为负数）"""
        return self.original_size - self.compressed_size

    def get_savings_percentage(self) -> float:
        """节省比例（百分比，保留一位小数）"""
        if self.original_size == 0:
            return 0.0
        return round(self.get_size_saved() / self.original_size * 100, 1)

    def get_original_size_human(self) -> str:
        return format_size(self.original_size)

    def get_compressed_size_human(self) -> str:
        return format_size(self.compressed_size)

    def get_summary(self) -> str:
        """对比摘要，结果变大时报告增长比例"""
        pct = self.get_savings_percentage()
        change = "smaller" if pct >= 0 else "larger"
        return (
            f"{self.get_original_size_human()} → {self.get_compressed_size_human()} "
            f"({abs(pct):.1f}% {change})"
        )

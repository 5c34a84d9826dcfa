"""压缩会话模型。

调用方持有的状态快照：已加载的原图、当前质量和最近一次结果。
每次操作返回新的会话，失败时旧会话保持不变。
"""

from pydantic import BaseModel, ConfigDict, Field

from .input_image import InputImage
from .recompression_result import Comparison, RecompressionResult


class CompressionSession(BaseModel):
    """压缩会话"""

    model_config = ConfigDict(frozen=True)

    original_bytes: bytes | None = Field(None, description="原图字节")
    mime_type: str | None = Field(None, description="原图声明的 MIME 类型")
    filename: str | None = Field(None, description="原图文件名")
    original_dimensions: tuple[int, int] | None = Field(None, description="原图尺寸")
    quality_percent: int = Field(ge=1, le=100, description="当前质量百分比")
    result: RecompressionResult | None = Field(None, description="最近一次结果")

    @property
    def is_loaded(self) -> bool:
        return self.original_bytes is not None

    @property
    def has_result(self) -> bool:
        return self.result is not None

    @property
    def original_size(self) -> int:
        return len(self.original_bytes) if self.original_bytes is not None else 0

    def input_image(self) -> InputImage:
        """以已加载的字节构造新的输入图像"""
        if self.original_bytes is None or self.mime_type is None:
            raise ValueError("会话中没有已加载的图像")
        return InputImage.from_bytes(
            self.original_bytes, self.mime_type, filename=self.filename
        )

    def comparison(self) -> Comparison:
        """原图与最近一次结果的对比"""
        if self.result is None or self.original_dimensions is None:
            raise ValueError("会话中没有可对比的结果")
        return Comparison.between(
            self.original_size, self.original_dimensions, self.result
        )

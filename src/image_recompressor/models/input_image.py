"""输入图像模型。

封装待重新编码的字节来源及其声明的 MIME 类型。
"""

import asyncio
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .constants import ImageFormats, is_image_mime_type


class InputImage(BaseModel):
    """输入图像

    source 可以是字节串、带 read() 方法的二进制文件对象或文件路径。
    mime_type 是调用方声明的类型，不做内容检测。
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    source: Any = Field(description="字节来源")
    mime_type: str = Field(description="声明的 MIME 类型")
    filename: str | None = Field(None, description="原始文件名")

    @field_validator("source")
    @classmethod
    def validate_source(cls, v: Any) -> Any:
        if isinstance(v, bytes | bytearray | memoryview | Path):
            return v
        if callable(getattr(v, "read", None)):
            return v
        raise ValueError(f"不支持的字节来源类型: {type(v).__name__}")

    @field_validator("mime_type")
    @classmethod
    def normalize_mime_type(cls, v: str) -> str:
        return v.strip().lower()

    @classmethod
    def from_path(cls, path: str | Path, mime_type: str | None = None) -> "InputImage":
        """从文件路径创建输入图像

        未指定 mime_type 时按扩展名声明类型（与浏览器 File.type 的推断方式一致）。
        """
        path = Path(path)
        declared = mime_type or ImageFormats.mime_type_for_extension(path.suffix)
        return cls(source=path, mime_type=declared, filename=path.name)

    @classmethod
    def from_bytes(
        cls, data: bytes, mime_type: str, filename: str | None = None
    ) -> "InputImage":
        return cls(source=bytes(data), mime_type=mime_type, filename=filename)

    @property
    def is_image(self) -> bool:
        return is_image_mime_type(self.mime_type)

    async def read(self) -> bytes:
        """读取完整的字节内容

        Raises:
            OSError: 文件不存在或无法读取
            TypeError: 文件对象的 read() 没有返回字节
        """
        match self.source:
            case bytes() as data:
                return data
            case bytearray() | memoryview() as data:
                return bytes(data)
            case Path() as path:
                return await asyncio.to_thread(path.read_bytes)
            case stream:
                data = await asyncio.to_thread(stream.read)
                if not isinstance(data, bytes | bytearray | memoryview):
                    raise TypeError(f"read() 返回了 {type(data).__name__}，需要字节")
                return bytes(data)

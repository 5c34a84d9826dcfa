"""编码器处理模块。

声明类型到输出编码器的映射、编码前的色彩模式准备，以及 Pillow 保存参数。
"""

from typing import Any

from PIL import Image

from ..config import RecompressDefaults
from ..models.constants import OutputCodec, QualityLimits, codec_for_mime_type
from ..utils.logging_helpers import get_logger


logger = get_logger()


def select_codec(mime_type: str) -> OutputCodec:
    """按声明的 MIME 类型精确匹配输出编码器

    image/png → PNG，image/webp → WEBP，其他 image/*（包括 image/gif）→ JPEG。
    """
    return codec_for_mime_type(mime_type)


def _expand_palette(img: Image.Image) -> Image.Image:
    """调色板模式展开为 RGB，带透明色时展开为 RGBA"""
    if "transparency" in img.info:
        return img.convert("RGBA")
    return img.convert("RGB")


def to_pillow_quality(quality: float) -> int:
    """把 [0.01, 1.0] 的质量因子映射到 Pillow 的整数质量"""
    return max(1, min(100, round(quality * QualityLimits.MAX_PERCENT)))


class CodecProcessor:
    """编码器处理器

    只持有不可变配置，可被并发调用共享。
    """

    def __init__(self, defaults: RecompressDefaults) -> None:
        self.defaults = defaults

    def prepare_for_codec(self, img: Image.Image, codec: OutputCodec) -> Image.Image:
        """为目标编码器准备图片

        Args:
            img: 已解码的图片
            codec: 输出编码器

        Returns:
            Image.Image: 色彩模式符合编码器要求的图片
        """
        match codec:
            case OutputCodec.JPEG:
                return self._prepare_for_jpeg(img)
            case OutputCodec.PNG:
                return self._prepare_for_png(img)
            case OutputCodec.WEBP:
                return self._prepare_for_webp(img)

    def _prepare_for_jpeg(self, img: Image.Image) -> Image.Image:
        """JPEG 不支持透明度，透明像素合成到背景色上"""
        if img.mode == "P":
            img = _expand_palette(img)

        if img.mode in ("RGBA", "LA", "PA"):
            rgba = img.convert("RGBA")
            background = Image.new("RGB", rgba.size, self.defaults.JPEG_BACKGROUND)
            background.paste(rgba, mask=rgba.getchannel("A"))
            return background

        if img.mode in ("RGB", "L"):
            return img

        # CMYK、I;16、1 等其他模式
        return img.convert("RGB")

    def _prepare_for_png(self, img: Image.Image) -> Image.Image:
        if img.mode == "P":
            return _expand_palette(img)
        if img.mode == "PA":
            return img.convert("RGBA")
        if img.mode == "CMYK":
            return img.convert("RGB")
        # PNG 灰度最多 16 位，32 位整数和浮点截断到 0-65535
        if img.mode == "F":
            img = img.convert("I")
        if img.mode == "I":
            return img.convert("I;16")
        return img

    def _prepare_for_webp(self, img: Image.Image) -> Image.Image:
        # WebP 只支持 RGB 和 RGBA
        if img.mode in ("RGB", "RGBA"):
            return img
        if img.mode in ("LA", "PA") or "transparency" in img.info:
            return img.convert("RGBA")
        return img.convert("RGB")

    def get_save_parameters(self, codec: OutputCodec, quality: float) -> dict[str, Any]:
        """获取 Pillow 保存参数

        PNG 始终无损，质量参数被接受但不产生影响。
        """
        params: dict[str, Any] = {"format": codec.value}
        params.update(self.defaults.get_codec_defaults(codec.value))

        match codec:
            case OutputCodec.JPEG:
                params["quality"] = to_pillow_quality(quality)
            case OutputCodec.WEBP:
                params["quality"] = to_pillow_quality(quality)
            case OutputCodec.PNG:
                logger.debug(f"PNG 为无损编码，忽略质量参数 {quality}")

        return params

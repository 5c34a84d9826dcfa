"""核心功能测试。

测试编码器选择和重新编码引擎。
"""

import asyncio
import io
import logging
import math
from pathlib import Path

import pytest
from PIL import Image

from image_recompressor.config import RecompressDefaults
from image_recompressor.core.codecs import (
    CodecProcessor,
    select_codec,
    to_pillow_quality,
)
from image_recompressor.core.recompressor import (
    Recompressor,
    quality_from_percent,
    recompress,
    recompress_sync,
    validate_request,
)
from image_recompressor.exceptions import (
    DecodeError,
    EncodeError,
    InvalidInputError,
    RecompressionError,
)
from image_recompressor.models import InputImage, OutputCodec


class ExplodingStream:
    """read() 被调用即失败，用于确认前置检查发生在读取之前"""

    def read(self) -> bytes:
        raise AssertionError("输入不应被读取")


class TextStream:
    """read() 返回文本而不是字节"""

    def read(self) -> str:
        return "not bytes"


def _run(image: InputImage, quality: float):
    return asyncio.run(recompress(image, quality))


def _open(data: bytes) -> Image.Image:
    img = Image.open(io.BytesIO(data))
    img.load()
    return img


class TestCodecSelection:
    """编码器选择测试"""

    @pytest.mark.parametrize(
        ("mime_type", "expected"),
        [
            ("image/png", OutputCodec.PNG),
            ("image/webp", OutputCodec.WEBP),
            ("image/jpeg", OutputCodec.JPEG),
            ("image/gif", OutputCodec.JPEG),
            ("image/bmp", OutputCodec.JPEG),
            ("image/tiff", OutputCodec.JPEG),
            ("image/svg+xml", OutputCodec.JPEG),
        ],
    )
    def test_mapping_is_exact_match_with_jpeg_fallback(self, mime_type, expected):
        assert select_codec(mime_type) is expected

    def test_codec_mime_types(self):
        assert OutputCodec.JPEG.mime_type == "image/jpeg"
        assert OutputCodec.PNG.mime_type == "image/png"
        assert OutputCodec.WEBP.mime_type == "image/webp"

    @pytest.mark.parametrize(
        ("quality", "expected"),
        [(0.01, 1), (0.5, 50), (0.9, 90), (1.0, 100), (0.333, 33)],
    )
    def test_pillow_quality_mapping(self, quality, expected):
        assert to_pillow_quality(quality) == expected


class TestCodecProcessor:
    """编码前色彩模式处理测试"""

    @pytest.fixture
    def processor(self):
        return CodecProcessor(RecompressDefaults())

    def test_jpeg_flattens_alpha_onto_background(self, processor):
        img = Image.new("RGBA", (4, 4), color=(0, 0, 0, 0))
        prepared = processor.prepare_for_codec(img, OutputCodec.JPEG)
        assert prepared.mode == "RGB"
        assert prepared.getpixel((0, 0)) == (255, 255, 255)

    def test_jpeg_uses_configured_background(self):
        processor = CodecProcessor(RecompressDefaults(JPEG_BACKGROUND=(0, 0, 0)))
        img = Image.new("LA", (4, 4), color=(200, 0))
        prepared = processor.prepare_for_codec(img, OutputCodec.JPEG)
        assert prepared.getpixel((1, 1)) == (0, 0, 0)

    def test_jpeg_converts_cmyk(self, processor):
        img = Image.new("CMYK", (4, 4))
        assert processor.prepare_for_codec(img, OutputCodec.JPEG).mode == "RGB"

    def test_png_keeps_alpha(self, processor):
        img = Image.new("RGBA", (4, 4), color=(1, 2, 3, 4))
        assert processor.prepare_for_codec(img, OutputCodec.PNG).mode == "RGBA"

    @pytest.mark.parametrize("mode", ["I", "F"])
    def test_png_narrows_wide_grayscale_to_16_bit(self, processor, mode):
        img = Image.new(mode, (4, 4), 1234)
        prepared = processor.prepare_for_codec(img, OutputCodec.PNG)
        assert prepared.mode == "I;16"
        assert prepared.getpixel((0, 0)) == 1234

    def test_webp_expands_grayscale(self, processor):
        img = Image.new("L", (4, 4))
        assert processor.prepare_for_codec(img, OutputCodec.WEBP).mode == "RGB"

    def test_png_parameters_ignore_quality(self, processor):
        low = processor.get_save_parameters(OutputCodec.PNG, 0.1)
        high = processor.get_save_parameters(OutputCodec.PNG, 0.9)
        assert low == high
        assert "quality" not in low
        assert low["format"] == "PNG"

    def test_png_ignored_quality_is_logged(self, processor, caplog):
        with caplog.at_level(logging.DEBUG, logger="image_recompressor.core.codecs"):
            processor.get_save_parameters(OutputCodec.PNG, 0.3)
        assert [r.name for r in caplog.records] == ["image_recompressor.core.codecs"]
        assert "0.3" in caplog.records[0].getMessage()

    def test_lossy_parameters_carry_quality(self, processor):
        params = processor.get_save_parameters(OutputCodec.WEBP, 0.42)
        assert params["quality"] == 42
        assert params["method"] == RecompressDefaults().WEBP_METHOD


class TestPreconditions:
    """前置条件测试"""

    @pytest.mark.parametrize(
        "mime_type", ["text/plain", "application/pdf", "", "video/mp4", "imagex/png"]
    )
    def test_non_image_type_rejected_before_read(self, mime_type):
        image = InputImage(source=ExplodingStream(), mime_type=mime_type)
        with pytest.raises(InvalidInputError, match="not an image"):
            _run(image, 0.5)

    @pytest.mark.parametrize("quality", [0.0, 0.009, -1.0, 1.0001, 2, math.nan])
    def test_quality_out_of_range_rejected(self, quality, jpeg_bytes):
        image = InputImage.from_bytes(jpeg_bytes, "image/jpeg")
        with pytest.raises(InvalidInputError, match="quality out of range"):
            _run(image, quality)

    def test_quality_rejected_regardless_of_input(self):
        image = InputImage(source=ExplodingStream(), mime_type="image/png")
        with pytest.raises(InvalidInputError, match="quality out of range"):
            _run(image, 1.5)

    @pytest.mark.parametrize("quality", ["0.5", None, True])
    def test_non_numeric_quality_rejected(self, quality):
        with pytest.raises(InvalidInputError):
            validate_request("image/jpeg", quality)

    @pytest.mark.parametrize("quality", [0.01, 1.0, 1, 0.5])
    def test_boundaries_accepted(self, quality):
        validate_request("image/jpeg", quality)

    def test_quality_from_percent(self):
        assert quality_from_percent(1) == 0.01
        assert quality_from_percent(80) == 0.8
        assert quality_from_percent(100) == 1.0

    @pytest.mark.parametrize("percent", [0, 101, -5, 50.5, True])
    def test_quality_from_percent_out_of_range(self, percent):
        with pytest.raises(InvalidInputError):
            quality_from_percent(percent)


class TestRecompression:
    """重新编码测试"""

    def test_jpeg_scenario(self, large_jpeg_bytes):
        image = InputImage.from_bytes(large_jpeg_bytes, "image/jpeg", "photo.jpg")
        result = _run(image, 0.5)

        assert result.width == 800
        assert result.height == 600
        assert result.mime_type == "image/jpeg"
        assert 0 < result.size < len(large_jpeg_bytes)
        assert result.encoded_bytes[:2] == b"\xff\xd8"

    def test_png_scenario_is_lossless(self, png_bytes, scene_image):
        image = InputImage.from_bytes(png_bytes, "image/png")
        low = _run(image, 0.2)
        high = _run(image, 0.9)

        assert low.mime_type == "image/png"
        assert (low.width, low.height) == scene_image.size
        # 质量对 PNG 无效
        assert low.encoded_bytes == high.encoded_bytes
        with _open(low.encoded_bytes) as decoded:
            assert decoded.format == "PNG"
            assert list(decoded.convert("RGB").getdata()) == list(
                scene_image.getdata()
            )

    def test_webp_input_stays_webp(self, webp_bytes):
        result = _run(InputImage.from_bytes(webp_bytes, "image/webp"), 0.7)
        assert result.mime_type == "image/webp"
        with _open(result.encoded_bytes) as decoded:
            assert decoded.format == "WEBP"

    def test_gif_input_becomes_jpeg(self, gif_bytes, scene_image):
        result = _run(InputImage.from_bytes(gif_bytes, "image/gif"), 0.8)
        assert result.mime_type == "image/jpeg"
        assert result.dimensions == scene_image.size
        with _open(result.encoded_bytes) as decoded:
            assert decoded.format == "JPEG"

    def test_declared_type_wins_over_content(self, png_bytes):
        # PNG 内容声明为 JPEG，按声明输出 JPEG
        result = _run(InputImage.from_bytes(png_bytes, "image/jpeg"), 0.8)
        assert result.mime_type == "image/jpeg"

    def test_transparent_png_to_jpeg_uses_white_background(
        self, transparent_png_bytes
    ):
        result = _run(InputImage.from_bytes(transparent_png_bytes, "image/bmp"), 1.0)
        with _open(result.encoded_bytes) as decoded:
            r, g, b = decoded.getpixel((2, 2))
            assert min(r, g, b) >= 245

    def test_transparent_png_keeps_alpha(self, transparent_png_bytes):
        result = _run(InputImage.from_bytes(transparent_png_bytes, "image/png"), 0.5)
        with _open(result.encoded_bytes) as decoded:
            assert decoded.mode == "RGBA"
            assert decoded.getpixel((0, 0))[3] == 0

    def test_dimensions_stable_across_calls(self, jpeg_bytes):
        image = InputImage.from_bytes(jpeg_bytes, "image/jpeg")
        dimensions = {_run(image, 0.6).dimensions for _ in range(3)}
        assert dimensions == {(320, 240)}

    @pytest.mark.parametrize(
        ("fixture_name", "mime_type"),
        [("jpeg_bytes", "image/jpeg"), ("webp_bytes", "image/webp")],
    )
    def test_size_grows_with_quality(self, request, fixture_name, mime_type):
        data = request.getfixturevalue(fixture_name)
        image = InputImage.from_bytes(data, mime_type)
        sizes = [_run(image, q).size for q in (0.1, 0.5, 0.9)]

        # 编码器相关的软性质，允许少量误差
        for smaller, larger in zip(sizes, sizes[1:]):
            assert larger >= smaller * 0.95

    def test_reads_path_and_stream_sources(self, jpeg_bytes, image_file):
        path = image_file("photo.jpg", jpeg_bytes)
        from_path = _run(InputImage.from_path(path), 0.5)
        from_stream = _run(
            InputImage(source=io.BytesIO(jpeg_bytes), mime_type="image/jpeg"), 0.5
        )
        assert from_path.dimensions == from_stream.dimensions == (320, 240)

    def test_exif_orientation_applied(self, encode_image):
        img = Image.new("RGB", (40, 20), color="green")
        exif = Image.Exif()
        exif[0x0112] = 6
        data = encode_image(img, "JPEG", exif=exif)

        rotated = _run(InputImage.from_bytes(data, "image/jpeg"), 0.8)
        assert rotated.dimensions == (20, 40)

        raw = Recompressor(RecompressDefaults(APPLY_EXIF_ORIENTATION=False))
        unrotated = asyncio.run(
            raw.recompress(InputImage.from_bytes(data, "image/jpeg"), 0.8)
        )
        assert unrotated.dimensions == (40, 20)

    def test_concurrent_calls_are_independent(self, jpeg_bytes, large_jpeg_bytes):
        async def both():
            return await asyncio.gather(
                recompress(InputImage.from_bytes(jpeg_bytes, "image/jpeg"), 0.5),
                recompress(InputImage.from_bytes(large_jpeg_bytes, "image/png"), 0.5),
            )

        small, large = asyncio.run(both())
        assert small.dimensions == (320, 240)
        assert small.mime_type == "image/jpeg"
        assert large.dimensions == (800, 600)
        assert large.mime_type == "image/png"

    @pytest.mark.filterwarnings("error::DeprecationWarning")
    @pytest.mark.parametrize("mode", ["I", "F"])
    @pytest.mark.parametrize("mime_type", ["image/png", "image/jpeg", "image/webp"])
    def test_high_bit_depth_input(self, encode_image, mode, mime_type):
        data = encode_image(Image.new(mode, (16, 8), 300), "TIFF")
        # 同步调用，弃用警告在当前线程内转为错误
        result = Recompressor().recompress_bytes(data, mime_type, 0.8)

        assert result.mime_type == mime_type
        assert result.dimensions == (16, 8)
        with _open(result.encoded_bytes) as decoded:
            assert decoded.size == (16, 8)
            if mime_type == "image/png":
                assert decoded.getpixel((3, 3)) == 300

    def test_sync_variant(self, png_bytes):
        result = recompress_sync(InputImage.from_bytes(png_bytes, "image/png"), 0.5)
        assert result.mime_type == "image/png"


class TestFailures:
    """错误处理测试"""

    def test_garbage_bytes_raise_decode_error(self):
        image = InputImage.from_bytes(b"not really a jpeg", "image/jpeg")
        with pytest.raises(DecodeError):
            _run(image, 0.5)

    def test_empty_input_raises_decode_error(self):
        with pytest.raises(DecodeError):
            _run(InputImage.from_bytes(b"", "image/png"), 0.5)

    def test_missing_path_raises_decode_error(self, tmp_path: Path):
        image = InputImage.from_path(tmp_path / "gone.jpg")
        with pytest.raises(DecodeError) as exc_info:
            _run(image, 0.5)
        assert isinstance(exc_info.value, RecompressionError)
        assert isinstance(exc_info.value.__cause__, FileNotFoundError)
        assert exc_info.value.mime_type == "image/jpeg"

    def test_non_bytes_stream_raises_decode_error(self):
        image = InputImage(source=TextStream(), mime_type="image/png")
        with pytest.raises(DecodeError) as exc_info:
            _run(image, 0.5)
        assert isinstance(exc_info.value.__cause__, TypeError)

    def test_truncated_jpeg_raises_decode_error(self, large_jpeg_bytes):
        truncated = large_jpeg_bytes[: len(large_jpeg_bytes) // 2]
        with pytest.raises(DecodeError) as exc_info:
            _run(InputImage.from_bytes(truncated, "image/jpeg"), 0.5)
        assert exc_info.value.__cause__ is not None

    def test_encoder_failure_raises_encode_error(self, jpeg_bytes):
        recompressor = Recompressor()
        # JPEG 无法写入浮点模式
        recompressor.codec_processor.prepare_for_codec = (
            lambda img, codec: Image.new("F", img.size)
        )
        with pytest.raises(EncodeError):
            asyncio.run(
                recompressor.recompress(
                    InputImage.from_bytes(jpeg_bytes, "image/jpeg"), 0.5
                )
            )

    def test_empty_encoder_output_raises_encode_error(self, jpeg_bytes, monkeypatch):
        recompressor = Recompressor()
        monkeypatch.setattr(Image.Image, "save", lambda self, fp, **kwargs: None)
        with pytest.raises(EncodeError):
            recompressor.recompress_bytes(jpeg_bytes, "image/jpeg", 0.5)

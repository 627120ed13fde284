import io

import httpx
import pytest
from PIL import Image

from site_agent.delegates import ocr_delegate
from site_agent.delegates.ocr_delegate import OCRDelegate
from site_agent.errors import OcrError
from site_agent.models import ImageResult
from site_agent.pipeline.image_text import recognize_images


def _png_bytes(size=(40, 20)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, "white").save(buffer, format="PNG")
    return buffer.getvalue()


def _routes(request: httpx.Request) -> httpx.Response:
    if request.url.path == "/ok.png":
        return httpx.Response(200, content=_png_bytes(), headers={"content-type": "image/png"})
    if request.url.path == "/huge.png":
        return httpx.Response(200, content=_png_bytes((400, 400)), headers={"content-type": "image/png"})
    if request.url.path == "/garbage.png":
        return httpx.Response(200, content=b"definitely not an image")
    return httpx.Response(404)


@pytest.fixture
async def ocr():
    async with OCRDelegate() as delegate:
        await delegate.client.aclose()
        delegate.client = httpx.AsyncClient(transport=httpx.MockTransport(_routes))
        yield delegate


async def test_recognize_downloads_and_transcribes(ocr, monkeypatch):
    seen = {}

    def fake_image_to_string(image, lang=None, config=None):
        seen.update(mode=image.mode, lang=lang, config=config)
        return "Hello world\n"

    monkeypatch.setattr(ocr_delegate.pytesseract, "image_to_string", fake_image_to_string)

    text = await ocr.recognize("https://cdn.example/ok.png")

    assert text == "Hello world\n"
    assert seen == {"mode": "L", "lang": "eng", "config": ocr.tesseract_config}


async def test_http_error_is_an_ocr_error(ocr):
    with pytest.raises(OcrError, match="HTTP 404"):
        await ocr.recognize("https://cdn.example/missing.png")


async def test_unreadable_image_is_an_ocr_error(ocr):
    with pytest.raises(OcrError, match="Unreadable image"):
        await ocr.recognize("https://cdn.example/garbage.png")


async def test_oversized_image_is_an_ocr_error(ocr, monkeypatch):
    # 400x400 is more than twice the lowered limit, so PIL refuses to decode it.
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 10_000)

    with pytest.raises(OcrError, match="too large"):
        await ocr.recognize("https://cdn.example/huge.png")


async def test_invalid_url_is_an_ocr_error(ocr):
    with pytest.raises(OcrError, match="Invalid image URL"):
        await ocr.recognize("https://cdn.example/bad\x00name.png")


async def test_oversized_image_is_skipped_by_the_image_loop(ocr, monkeypatch):
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 10_000)
    monkeypatch.setattr(ocr_delegate.pytesseract, "image_to_string",
                        lambda image, lang=None, config=None: "Fine print")

    results = await recognize_images([
        "https://cdn.example/huge.png",
        "https://cdn.example/ok.png",
    ], ocr)

    assert results == [ImageResult(image_url="https://cdn.example/ok.png", text="Fine print")]


async def test_tesseract_failure_is_an_ocr_error(ocr, monkeypatch):
    def broken(image, lang=None, config=None):
        raise ocr_delegate.pytesseract.TesseractNotFoundError()

    monkeypatch.setattr(ocr_delegate.pytesseract, "image_to_string", broken)

    with pytest.raises(OcrError, match="Tesseract failed"):
        await ocr.recognize("https://cdn.example/ok.png")


async def test_client_is_released_on_exit():
    delegate = OCRDelegate()
    async with delegate:
        assert delegate.client is not None
    assert delegate.client is None


async def test_recognize_outside_context_manager():
    with pytest.raises(OcrError):
        await OCRDelegate().recognize("https://cdn.example/ok.png")

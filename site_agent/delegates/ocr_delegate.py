# site_agent/delegates/ocr_delegate.py
import asyncio
import io
import logging
from typing import Optional

import httpx
import pytesseract
from PIL import Image, ImageEnhance, ImageFilter

from .. import config
from ..errors import OcrError

logger = logging.getLogger(__name__)


def configure_tesseract(tesseract_cmd: Optional[str]):
    """Points pytesseract at a non-default tesseract binary. Called once, when the agent starts."""
    if tesseract_cmd:
        pytesseract.pytesseract.tesseract_cmd = tesseract_cmd
        logger.info("Using tesseract binary at %s", tesseract_cmd)


class OCRDelegate:
    """
    Downloads page images and transcribes them with Tesseract.
    The HTTP client is the engine's only resource; it lives for one `async with` block.
    """
    def __init__(self, user_agent: str = config.USER_AGENT, language: str = config.OCR_LANGUAGE,
                 tesseract_config: str = config.TESSERACT_PRIMARY_CONFIG,
                 download_timeout: float = config.IMAGE_DOWNLOAD_TIMEOUT):
        self.user_agent = user_agent
        self.language = language
        self.tesseract_config = tesseract_config
        self.download_timeout = download_timeout
        self.client: Optional[httpx.AsyncClient] = None # Will be initialized in __aenter__

    async def __aenter__(self):
        self.client = httpx.AsyncClient(headers={"User-Agent": self.user_agent}, follow_redirects=True)
        logger.debug("OCRDelegate httpx.AsyncClient initialized.")
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self.client:
            await self.client.aclose()
            self.client = None
            logger.debug("OCRDelegate httpx.AsyncClient closed.")

    def _preprocess_image(self, image: Image.Image) -> Image.Image:
        gray = image.convert('L')
        contrast = ImageEnhance.Contrast(gray).enhance(1.5)
        return contrast.filter(ImageFilter.SHARPEN)

    async def _download_image(self, image_url: str) -> bytes:
        if not self.client:
            raise OcrError("HTTP client not initialized. Use OCRDelegate as an async context manager.")
        try:
            response = await self.client.get(image_url, timeout=self.download_timeout)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise OcrError(f"HTTP {e.response.status_code} downloading {image_url}") from e
        except httpx.RequestError as e:
            raise OcrError(f"Network error downloading {image_url}: {e}") from e
        except httpx.InvalidURL as e:
            raise OcrError(f"Invalid image URL {image_url}: {e}") from e
        logger.debug("Downloaded %d bytes from %s", len(response.content), image_url)
        return response.content

    def _image_to_text(self, payload: bytes) -> str:
        try:
            with Image.open(io.BytesIO(payload)) as image:
                # Animated formats (GIF, WebP) are read from their first frame only.
                image.seek(0)
                processed_image = self._preprocess_image(image)
        except Image.DecompressionBombError as e:
            raise OcrError(f"Image too large to process: {e}") from e
        # PIL reports truncated or malformed files as OSError, ValueError or SyntaxError depending on the plugin.
        except (OSError, ValueError, SyntaxError) as e:
            raise OcrError(f"Unreadable image data: {e}") from e
        try:
            return pytesseract.image_to_string(processed_image, lang=self.language, config=self.tesseract_config)
        except (pytesseract.TesseractError, pytesseract.TesseractNotFoundError) as e:
            raise OcrError(f"Tesseract failed: {e}") from e

    async def recognize(self, image_url: str) -> str:
        """Returns the raw Tesseract transcript of the image at `image_url`."""
        payload = await self._download_image(image_url)
        # pytesseract shells out to the tesseract binary; keep it off the event loop.
        return await asyncio.to_thread(self._image_to_text, payload)

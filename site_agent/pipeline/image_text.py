# site_agent/pipeline/image_text.py
import logging
from typing import List, Optional

from ..delegates import LoadedPage, OCRDelegate
from ..errors import FetchError, OcrError
from ..models import ImageResult
from .dom_rules import IMAGE_SOURCES_SCRIPT

logger = logging.getLogger(__name__)


def is_http_url(url: str) -> bool:
    return url.startswith(("http://", "https://"))


async def collect_image_urls(page: LoadedPage, selector: Optional[str] = None) -> List[str]:
    """
    Returns the resolved src of every <img> matching `selector` (all images when
    omitted), in document order, keeping only http(s) sources.
    """
    sources = await page.evaluate(IMAGE_SOURCES_SCRIPT, selector or None)
    if not isinstance(sources, list):
        raise FetchError(f"Unexpected image script result: {type(sources).__name__}")
    image_urls = [src for src in sources if isinstance(src, str) and is_http_url(src)]
    logger.info("Found %d usable images (of %d matched) on %s", len(image_urls), len(sources), page.url)
    return image_urls


async def recognize_images(image_urls: List[str], ocr: OCRDelegate) -> List[ImageResult]:
    """
    Runs OCR on each image one after another. A failing image is logged and
    skipped; images that yield only whitespace are dropped.
    """
    results: List[ImageResult] = []
    for index, image_url in enumerate(image_urls, start=1):
        logger.debug("OCR %d/%d: %s", index, len(image_urls), image_url)
        try:
            text = await ocr.recognize(image_url)
        except OcrError as e:
            logger.error("Failed to process image %s: %s", image_url, e)
            continue
        except Exception as e:
            logger.error("Unexpected error processing image %s: %s", image_url, e, exc_info=True)
            continue
        text = (text or "").strip()
        if text:
            results.append(ImageResult(image_url=image_url, text=text))
        else:
            logger.debug("No text found in %s", image_url)
    logger.info("Extracted text from %d of %d images.", len(results), len(image_urls))
    return results


def format_image_results(results: List[ImageResult]) -> str:
    return "\n\n".join(f"Image {result.image_url}:\n{result.text}" for result in results)

# site_agent/pipeline/capabilities.py
import logging
from dataclasses import dataclass
from functools import partial
from typing import Awaitable, Callable, List, Type

from pydantic import BaseModel

from ..delegates import OCRDelegate, PageFetcherDelegate
from ..errors import SiteAgentError
from ..models import AnalyzeSiteRequest, ExtractTextRequest
from .extraction import extract_site_snapshot
from .image_text import collect_image_urls, format_image_results, recognize_images
from .summary import format_summary

logger = logging.getLogger(__name__)

FetcherFactory = Callable[[], PageFetcherDelegate]
OcrFactory = Callable[[], OCRDelegate]


@dataclass(frozen=True)
class Capability:
    """A named operation the agent exposes, with the schema its input must satisfy."""
    name: str
    description: str
    schema: Type[BaseModel]
    run: Callable[[BaseModel], Awaitable[str]]


def _error_message(error: BaseException) -> str:
    return str(error) or "Unknown error occurred"


async def analyze_site(request: AnalyzeSiteRequest, fetcher_factory: FetcherFactory) -> str:
    """
    Loads the page, extracts its structure and returns the text report.
    `include_products` is validated but not consulted; products are always extracted.
    Failures come back as "Error analyzing site: <message>"; the browser is closed either way.
    """
    url = str(request.url)
    logger.info("--- ANALYZE SITE: %s ---", url)
    try:
        async with fetcher_factory() as fetcher:
            page = await fetcher.fetch(url)
            snapshot = await extract_site_snapshot(page)
    except SiteAgentError as e:
        logger.error("Site analysis failed for %s: %s", url, e)
        return f"Error analyzing site: {_error_message(e)}"
    except Exception as e:
        logger.error("Unexpected error analyzing %s: %s", url, e, exc_info=True)
        return f"Error analyzing site: {_error_message(e)}"

    return format_summary(snapshot)


async def extract_text_from_image(request: ExtractTextRequest, fetcher_factory: FetcherFactory,
                                  ocr_factory: OcrFactory) -> str:
    """
    Collects the page's image URLs, closes the browser, then OCRs the images one by one.
    Returns the joined transcripts (empty string when nothing was read) or "Error: <message>".
    """
    url = str(request.url)
    logger.info("--- EXTRACT TEXT FROM IMAGES: %s (selector: %s) ---", url, request.image_selector or "img")
    try:
        async with fetcher_factory() as fetcher:
            page = await fetcher.fetch(url)
            image_urls = await collect_image_urls(page, request.image_selector)

        if not image_urls:
            return ""

        async with ocr_factory() as ocr:
            results = await recognize_images(image_urls, ocr)
    except SiteAgentError as e:
        logger.error("Image text extraction failed for %s: %s", url, e)
        return f"Error: {_error_message(e)}"
    except Exception as e:
        logger.error("Unexpected error extracting image text from %s: %s", url, e, exc_info=True)
        return f"Error: {_error_message(e)}"

    return format_image_results(results)


def make_capabilities(fetcher_factory: FetcherFactory, ocr_factory: OcrFactory) -> List[Capability]:
    return [
        Capability(
            name="analyzeSite",
            description="Analyzes website content and structure, extracting product information and categories",
            schema=AnalyzeSiteRequest,
            run=partial(analyze_site, fetcher_factory=fetcher_factory),
        ),
        Capability(
            name="extractTextFromImage",
            description="Extracts text from images on a webpage using OCR",
            schema=ExtractTextRequest,
            run=partial(extract_text_from_image, fetcher_factory=fetcher_factory, ocr_factory=ocr_factory),
        ),
    ]

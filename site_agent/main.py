# site_agent/main.py
import logging
from pathlib import Path
from typing import Any, Callable, Mapping, Optional

from .agent import SiteAgent
from .config import Settings, load_settings
from .delegates import OCRDelegate, PageFetcherDelegate
from .delegates.ocr_delegate import configure_tesseract
from .pipeline.capabilities import FetcherFactory, OcrFactory, make_capabilities
from .pipeline.extraction import extract_snapshot_from_html
from .pipeline.summary import format_summary

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are a web crawling agent that:
1. Creates structured summaries of websites
2. Extracts and organizes product information
3. Performs price comparisons and analysis
4. Identifies key navigation elements and site structure
5. Makes websites accessible through clear text descriptions"""


def build_agent(settings_loader: Callable[[], Settings] = load_settings,
                fetcher_factory: Optional[FetcherFactory] = None,
                ocr_factory: Optional[OcrFactory] = None) -> SiteAgent:
    """
    Creates the agent with both capabilities registered. The default factories
    build a fresh browser / OCR delegate per request from the started agent's settings.
    """
    def load_and_configure() -> Settings:
        settings = settings_loader()
        configure_tesseract(settings.tesseract_cmd)
        return settings

    agent = SiteAgent(system_prompt=SYSTEM_PROMPT, settings_loader=load_and_configure)

    def default_fetcher_factory() -> PageFetcherDelegate:
        settings = agent.settings or Settings()
        return PageFetcherDelegate(timeout=settings.request_timeout, headless=settings.headless)

    def default_ocr_factory() -> OCRDelegate:
        return OCRDelegate()

    for capability in make_capabilities(fetcher_factory or default_fetcher_factory,
                                        ocr_factory or default_ocr_factory):
        agent.add_capability(capability)
    return agent


async def run_capability(name: str, args: Mapping[str, Any], agent: Optional[SiteAgent] = None) -> str:
    """Starts an agent, runs one capability and stops the agent again."""
    agent = agent or build_agent()
    agent.start()
    try:
        return await agent.dispatch(name, args)
    finally:
        agent.stop()


def analyze_html_file(path: Path, include_products: bool = True) -> str:
    """Builds the same report as analyzeSite from a saved HTML file, without a browser."""
    logger.info("Analyzing saved HTML document: %s", path)
    html = path.read_text(encoding="utf-8-sig", errors="replace")
    snapshot = extract_snapshot_from_html(html, include_products=include_products)
    return format_summary(snapshot)

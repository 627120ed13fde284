# site_agent/config.py

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# --- File Path Settings ---
# The 'site_agent' package directory, and the project root one level above it.
PACKAGE_PATH = Path(__file__).parent
PROJECT_PATH = PACKAGE_PATH.parent
# The .env file with credentials is looked up in the project root.
ENV_FILE = PROJECT_PATH / ".env"
# Log file written by the command line runner (DEBUG and above).
LOG_FILE = Path("site_agent.log")

# --- Browser/Network Settings ---
# The User-Agent string tells the website what kind of browser we are. We use a common one to avoid being blocked.
USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
# The size of the virtual browser window.
VIEWPORT = {"width": 1920, "height": 1080}
# The maximum time (in milliseconds) to wait for a page to reach network idle before giving up.
REQUEST_TIMEOUT = 60000 # 60 seconds
HEADLESS = True

# --- OCR Settings ---
# Language pack handed to Tesseract.
OCR_LANGUAGE = "eng"
# --oem 3: Use the default, most modern OCR engine.
# --psm 3: Fully automatic page segmentation; page images are arbitrary screenshots, banners and scans.
TESSERACT_PRIMARY_CONFIG = r'--oem 3 --psm 3'
# Seconds allowed for downloading a single image before it is skipped.
IMAGE_DOWNLOAD_TIMEOUT = 20


@dataclass(frozen=True)
class Settings:
    """Process-wide settings read from the environment once, at agent start."""
    openserv_api_key: Optional[str] = None
    openai_api_key: Optional[str] = None
    headless: bool = HEADLESS
    request_timeout: int = REQUEST_TIMEOUT
    tesseract_cmd: Optional[str] = None


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def load_settings(env_file: Optional[Path] = ENV_FILE) -> Settings:
    """Loads the .env file (if any) into the environment and builds a Settings object."""
    if env_file is not None and env_file.exists():
        load_dotenv(env_file)
        logger.debug("Loaded environment from %s", env_file)

    timeout_raw = os.getenv("SITE_AGENT_REQUEST_TIMEOUT_MS")
    try:
        request_timeout = int(timeout_raw) if timeout_raw else REQUEST_TIMEOUT
    except ValueError:
        logger.warning("Ignoring non-numeric SITE_AGENT_REQUEST_TIMEOUT_MS=%r, using %s ms", timeout_raw, REQUEST_TIMEOUT)
        request_timeout = REQUEST_TIMEOUT

    settings = Settings(
        openserv_api_key=os.getenv("OPENSERV_API_KEY") or None,
        openai_api_key=os.getenv("OPENAI_API_KEY") or None,
        headless=_env_flag("SITE_AGENT_HEADLESS", HEADLESS),
        request_timeout=request_timeout,
        tesseract_cmd=os.getenv("TESSERACT_CMD") or None,
    )

    for key_name, value in (("OPENSERV_API_KEY", settings.openserv_api_key), ("OPENAI_API_KEY", settings.openai_api_key)):
        if not value:
            logger.warning("%s is not set; only local capability dispatch will work.", key_name)
    return settings

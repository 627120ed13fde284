# site_agent/delegates/__init__.py

# Makes the delegate classes directly available from the 'delegates' package:
# from site_agent.delegates import PageFetcherDelegate

from .page_fetcher_delegate import PageFetcherDelegate, LoadedPage
from .ocr_delegate import OCRDelegate

# site_agent/__init__.py

# Single-page site analysis agent: structure extraction, text summaries and image OCR.

__version__ = "0.1.0"

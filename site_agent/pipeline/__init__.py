# site_agent/pipeline/__init__.py

# Makes the pipeline entry points directly available from the 'pipeline' package.
from .extraction import clean_text, extract_site_snapshot, extract_snapshot_from_html
from .summary import format_summary
from .image_text import collect_image_urls, recognize_images, format_image_results
from .capabilities import Capability, analyze_site, extract_text_from_image, make_capabilities

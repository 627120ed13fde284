# site_agent/models/__init__.py

# Re-exports so callers can write: from site_agent.models import SiteSnapshot

from .site_models import Product, Category, NavigationLink, SiteSnapshot, PriceSample, ImageResult
from .requests import AnalyzeSiteRequest, ExtractTextRequest

# site_agent/models/requests.py

# Input schemas for the two capabilities. Payloads arrive in camelCase from the
# hosting side, so every field accepts its alias as well as its Python name.

from typing import Optional

from pydantic import AnyUrl, BaseModel, ConfigDict, Field


class AnalyzeSiteRequest(BaseModel):
    """Input of the analyzeSite capability."""
    model_config = ConfigDict(populate_by_name=True)

    url: AnyUrl = Field(description="Absolute URL of the page to analyze")
    include_products: Optional[bool] = Field(
        default=None,
        alias="includeProducts",
        description="Accepted for compatibility; products are always extracted when present",
    )


class ExtractTextRequest(BaseModel):
    """Input of the extractTextFromImage capability."""
    model_config = ConfigDict(populate_by_name=True)

    url: AnyUrl = Field(description="Absolute URL of the page holding the images")
    image_selector: Optional[str] = Field(
        default=None,
        alias="imageSelector",
        description="CSS selector restricting which <img> elements are read",
    )

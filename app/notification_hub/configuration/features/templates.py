"""Template resolution settings."""

from pathlib import Path
from typing import List, Optional

from pydantic import Field

from notification_hub.configuration.base import FeatureSettings


class TemplateSettings(FeatureSettings):
    """Template language fallback and loading.

    Environment Variables:
        TEMPLATE_DEFAULT_LANGUAGE: Language used when the requested one is missing
        TEMPLATE_SUPPORTED_LANGUAGES: Languages templates are authored in
        TEMPLATE_DIRECTORY: Directory of YAML templates (default: packaged defaults)
    """

    TEMPLATE_DEFAULT_LANGUAGE: str = Field(
        default="en-US", alias="TEMPLATE_DEFAULT_LANGUAGE"
    )
    TEMPLATE_SUPPORTED_LANGUAGES: List[str] = Field(
        default_factory=lambda: ["en-US", "fr-FR"],
        alias="TEMPLATE_SUPPORTED_LANGUAGES",
    )
    TEMPLATE_DIRECTORY: Optional[Path] = Field(default=None, alias="TEMPLATE_DIRECTORY")

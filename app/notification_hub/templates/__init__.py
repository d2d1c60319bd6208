"""Localized notification templates.

Exports the template models, the store contract with its in-memory
implementation, the renderer and the YAML loader.
"""

from notification_hub.templates.models import (
    NotificationTemplate,
    TemplatePreview,
    TemplateStatistics,
    TemplateSyntaxIssue,
    TemplateValidationResult,
)
from notification_hub.templates.store import InMemoryTemplateStore, TemplateStore
from notification_hub.templates.renderer import TemplateRenderer, substitute
from notification_hub.templates.loader import DEFAULT_TEMPLATES_DIR, YAMLTemplateLoader

__all__ = [
    "NotificationTemplate",
    "TemplatePreview",
    "TemplateStatistics",
    "TemplateSyntaxIssue",
    "TemplateValidationResult",
    "TemplateStore",
    "InMemoryTemplateStore",
    "TemplateRenderer",
    "substitute",
    "DEFAULT_TEMPLATES_DIR",
    "YAMLTemplateLoader",
]

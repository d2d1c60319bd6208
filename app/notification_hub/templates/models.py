"""Template models."""

from datetime import datetime, timezone
from typing import Any, Dict, List

from pydantic import BaseModel, Field, field_validator

# Template body fields that go through placeholder substitution
TEMPLATE_FIELDS = ("subject", "html", "text", "sms", "push_title", "push_body")


class NotificationTemplate(BaseModel):
    """A localized notification template.

    Identified by the composite key (key, language). Each body field may
    contain ``{{ path }}`` or ``{{ path | filter }}`` placeholders.

    Attributes:
        key: Logical template identifier, independent of language
        language: Language tag, e.g. "en-US"
        name: Display name
        description: Free-form description for authors
        category: Grouping used in statistics (e.g. "onboarding")
        subject: Email subject
        html: Email HTML body
        text: Plain text body
        sms: SMS body, falls back to text when empty
        push_title: Push title, falls back to subject when empty
        push_body: Push body, falls back to text when empty
        is_active: Inactive templates are ignored when resolving
        required_fields: Data paths a caller must supply
        sample_data: Data used by preview when none is given
        version: Incremented on every update
    """

    key: str
    language: str
    name: str = ""
    description: str = ""
    category: str = "general"
    subject: str = ""
    html: str = ""
    text: str = ""
    sms: str = ""
    push_title: str = ""
    push_body: str = ""
    is_active: bool = True
    required_fields: List[str] = Field(default_factory=list)
    sample_data: Dict[str, Any] = Field(default_factory=dict)
    version: int = 1
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @field_validator("key", "language")
    @classmethod
    def validate_identifier(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Template key and language cannot be empty")
        return v


class TemplatePreview(BaseModel):
    """Rendered preview of a template for authoring tools."""

    template_key: str
    language: str
    subject: str
    html: str
    text: str
    sms: str
    push: str


class TemplateSyntaxIssue(BaseModel):
    """A syntax problem found in one template field.

    Attributes:
        field: Template field name (subject, html, ...)
        line: Line number of the problem within the field (1-based)
        message: Description of the problem
    """

    field: str
    line: int
    message: str


class TemplateValidationResult(BaseModel):
    """Outcome of a template dry run."""

    is_valid: bool = True
    errors: List[TemplateSyntaxIssue] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    missing_fields: List[str] = Field(default_factory=list)
    unused_fields: List[str] = Field(default_factory=list)


class TemplateStatistics(BaseModel):
    total: int = 0
    active: int = 0
    by_language: Dict[str, int] = Field(default_factory=dict)
    by_category: Dict[str, int] = Field(default_factory=dict)


def template_id(key: str, language: str) -> str:
    """Composite identifier used in logs and error messages."""
    return f"{key}:{language}"
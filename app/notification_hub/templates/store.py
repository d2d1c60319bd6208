"""Template storage interface and in-memory implementation."""

import threading
from abc import ABC, abstractmethod
from collections import Counter
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

import structlog

from notification_hub.errors import NotFoundError, ValidationError
from notification_hub.templates.models import (
    NotificationTemplate,
    TemplateStatistics,
    template_id,
)

logger = structlog.get_logger()


class TemplateStore(ABC):
    """Abstract base for template storage.

    Implementations persist templates by (key, language). Cloning,
    bulk import/export and statistics are derived from the primitives.
    """

    @abstractmethod
    def get(self, key: str, language: str) -> Optional[NotificationTemplate]:
        """Return the template for (key, language), or None."""
        pass

    @abstractmethod
    def create_or_update(self, template: NotificationTemplate) -> NotificationTemplate:
        """Store a template, bumping its version if it already exists."""
        pass

    @abstractmethod
    def delete(self, key: str, language: str) -> bool:
        """Delete a template. Returns False if it did not exist."""
        pass

    @abstractmethod
    def list_all(self) -> List[NotificationTemplate]:
        """Every template, sorted by key then language."""
        pass

    def list_by_key(self, key: str) -> List[NotificationTemplate]:
        """Every language variant of ``key``, sorted by language."""
        return [template for template in self.list_all() if template.key == key]

    def clone(
        self, key: str, from_language: str, to_language: str
    ) -> NotificationTemplate:
        """Copy a template into another language as a new version 1 template.

        Raises:
            NotFoundError: If the source template does not exist.
            ValidationError: If the target language already exists.
        """
        source = self.get(key, from_language)
        if source is None:
            raise NotFoundError(f"Template {template_id(key, from_language)} not found")
        if self.get(key, to_language) is not None:
            raise ValidationError(
                f"Template {template_id(key, to_language)} already exists"
            )

        now = datetime.now(timezone.utc)
        clone = source.model_copy(
            deep=True,
            update={
                "language": to_language,
                "version": 1,
                "created_at": now,
                "updated_at": now,
            },
        )
        logger.info(
            "template_cloned",
            key=key,
            from_language=from_language,
            to_language=to_language,
        )
        return self.create_or_update(clone)

    def import_templates(
        self, templates: List[NotificationTemplate], overwrite: bool = False
    ) -> int:
        """Import templates, skipping existing ones unless ``overwrite``.

        Returns:
            Number of templates written.
        """
        imported = 0
        for template in templates:
            if not overwrite and self.get(template.key, template.language) is not None:
                logger.debug(
                    "template_import_skipped",
                    template=template_id(template.key, template.language),
                )
                continue
            self.create_or_update(template)
            imported += 1

        logger.info(
            "templates_imported",
            imported=imported,
            skipped=len(templates) - imported,
            overwrite=overwrite,
        )
        return imported

    def export(self) -> List[NotificationTemplate]:
        return self.list_all()

    def get_statistics(self) -> TemplateStatistics:
        templates = self.list_all()
        return TemplateStatistics(
            total=len(templates),
            active=sum(1 for t in templates if t.is_active),
            by_language=dict(Counter(t.language for t in templates)),
            by_category=dict(Counter(t.category for t in templates)),
        )


class InMemoryTemplateStore(TemplateStore):
    """Thread-safe, process-local template store. Not durable."""

    def __init__(self, templates: Optional[List[NotificationTemplate]] = None):
        self._templates: Dict[Tuple[str, str], NotificationTemplate] = {}
        self._lock = threading.Lock()
        for template in templates or []:
            self.create_or_update(template)

    def get(self, key: str, language: str) -> Optional[NotificationTemplate]:
        with self._lock:
            template = self._templates.get((key, language))
            return template.model_copy(deep=True) if template else None

    def create_or_update(self, template: NotificationTemplate) -> NotificationTemplate:
        with self._lock:
            existing = self._templates.get((template.key, template.language))
            stored = template.model_copy(deep=True)
            if existing is not None:
                stored.version = existing.version + 1
                stored.created_at = existing.created_at
                stored.updated_at = datetime.now(timezone.utc)
            self._templates[(stored.key, stored.language)] = stored

        logger.debug(
            "template_saved",
            template=template_id(stored.key, stored.language),
            version=stored.version,
        )
        return stored.model_copy(deep=True)

    def delete(self, key: str, language: str) -> bool:
        with self._lock:
            removed = self._templates.pop((key, language), None)
        if removed is not None:
            logger.info("template_deleted", template=template_id(key, language))
        return removed is not None

    def list_all(self) -> List[NotificationTemplate]:
        with self._lock:
            return [
                self._templates[k].model_copy(deep=True)
                for k in sorted(self._templates)
            ]

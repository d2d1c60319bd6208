"""YAML template loading.

Templates live in files named ``<key>.<language>.yml``, one template per
file. ``key`` and ``language`` may be omitted from the file body, in
which case they are taken from the file name.
"""

from pathlib import Path
from typing import List, Optional

import structlog
import yaml
from pydantic import ValidationError as PydanticValidationError

from notification_hub.templates.models import NotificationTemplate
from notification_hub.templates.store import TemplateStore

logger = structlog.get_logger()

DEFAULT_TEMPLATES_DIR = Path(__file__).parent / "defaults"


class YAMLTemplateLoader:
    """Loader for YAML template files.

    Attributes:
        templates_dir: Directory containing ``*.yml`` template files.
    """

    def __init__(self, templates_dir: Optional[Path] = None):
        """Initialize the loader.

        Args:
            templates_dir: Directory to read. Defaults to the packaged templates.

        Raises:
            ValueError: If the directory does not exist.
        """
        self.templates_dir = Path(templates_dir or DEFAULT_TEMPLATES_DIR)
        if not self.templates_dir.exists():
            raise ValueError(f"Templates directory not found: {self.templates_dir}")

    def load(self, language: Optional[str] = None) -> List[NotificationTemplate]:
        """Load templates, optionally only those for one language.

        Raises:
            ValueError: If a file cannot be parsed or is not a valid template.
        """
        pattern = f"*.{language}.yml" if language else "*.yml"
        templates = [
            self._load_file(path) for path in sorted(self.templates_dir.glob(pattern))
        ]
        logger.info(
            "loaded_templates",
            templates_dir=str(self.templates_dir),
            language=language,
            count=len(templates),
        )
        return templates

    def load_into(self, store: TemplateStore, overwrite: bool = False) -> int:
        """Load every template and import it into ``store``."""
        return store.import_templates(self.load(), overwrite=overwrite)

    def _load_file(self, path: Path) -> NotificationTemplate:
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            logger.error("yaml_parse_error", file=str(path), error=str(e))
            raise ValueError(f"Failed to parse {path}: {e}") from e

        if not isinstance(data, dict):
            raise ValueError(f"Template file {path} must contain a mapping")

        key, _, language = path.name[: -len(".yml")].partition(".")
        data.setdefault("key", key)
        if language:
            data.setdefault("language", language)

        try:
            return NotificationTemplate(**data)
        except PydanticValidationError as e:
            raise ValueError(f"Invalid template in {path}: {e}") from e

"""Template rendering, preview and validation.

Template bodies are Jinja2 templates rendered in a sandboxed environment.
Placeholders take the form ``{{ path }}`` or ``{{ path | filter }}``
where ``path`` is a dotted lookup into the request data
(``user.first_name``, ``items.0.name``). Rendering never fails because
of missing data: a placeholder that cannot be resolved is rendered back
verbatim, and a body that does not compile is returned unchanged. The
only rendering failure is a missing template.

Only the HTML body is autoescaped.

Usage:
    renderer = TemplateRenderer(store, default_language="en-US")

    content = renderer.render("welcome", {"user": {"first_name": "John"}}, "fr-FR")
    preview = renderer.preview("welcome")
    report = renderer.validate(template)
"""

from collections.abc import Mapping, Sequence
from decimal import Decimal
from functools import lru_cache
from typing import Any, Callable, Dict, List, Optional, Set, Tuple

from jinja2 import (
    Template,
    TemplateError,
    TemplateSyntaxError,
    Undefined,
    UndefinedError,
    nodes,
)
from jinja2.meta import find_undeclared_variables
from jinja2.sandbox import SandboxedEnvironment
from jinja2.utils import missing
from markupsafe import escape

from notification_hub.errors import TemplateNotFoundError
from notification_hub.logging import get_module_logger
from notification_hub.models import RenderedContent
from notification_hub.templates.models import (
    TEMPLATE_FIELDS,
    NotificationTemplate,
    TemplatePreview,
    TemplateSyntaxIssue,
    TemplateValidationResult,
)
from notification_hub.templates.store import TemplateStore

logger = get_module_logger()

_MISSING = object()


class _DataMapping(Mapping):
    """Read-only view over request data that remembers its dotted path."""

    __slots__ = ("_data", "_path")

    def __init__(self, data: Mapping, path: str):
        self._data = data
        self._path = path

    def __getitem__(self, key: Any) -> Any:
        return _wrap(self._data[key], f"{self._path}.{key}")

    def __iter__(self):
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __str__(self) -> str:
        return str(self._data)


class _DataSequence(Sequence):
    """List counterpart of _DataMapping; items are addressed by index."""

    __slots__ = ("_data", "_path")

    def __init__(self, data: Sequence, path: str):
        self._data = data
        self._path = path

    def __getitem__(self, index: Any) -> Any:
        value = self._data[index]
        if isinstance(index, int):
            return _wrap(value, f"{self._path}.{index}")
        return value

    def __len__(self) -> int:
        return len(self._data)

    def __str__(self) -> str:
        return str(self._data)


def _wrap(value: Any, path: str) -> Any:
    if isinstance(value, Mapping) and not isinstance(value, _DataMapping):
        return _DataMapping(value, path)
    if isinstance(value, (list, tuple)):
        return _DataSequence(value, path)
    return value


class _Placeholder(Undefined):
    """Undefined value that renders back as its own ``{{ path }}`` placeholder.

    Attribute and item access on a placeholder yield a longer placeholder,
    and filters applied to it are remembered so the output matches the
    template source.
    """

    __slots__ = ("_filters",)

    def __init__(
        self,
        hint: Optional[str] = None,
        obj: Any = missing,
        name: Optional[Any] = None,
        exc: Any = UndefinedError,
        filters: Tuple[str, ...] = (),
    ):
        super().__init__(hint, obj, name, exc)
        self._filters = tuple(filters)

    @property
    def _placeholder_path(self) -> str:
        parent = self._undefined_obj
        if isinstance(parent, _Placeholder):
            return f"{parent._placeholder_path}.{self._undefined_name}"
        if isinstance(parent, (_DataMapping, _DataSequence)):
            return f"{parent._path}.{self._undefined_name}"
        if self._undefined_name is None:
            return ""
        return str(self._undefined_name)

    def _with_filter(self, name: str) -> "_Placeholder":
        return _Placeholder(
            obj=self._undefined_obj,
            name=self._undefined_name,
            filters=self._filters + (name,),
        )

    def __getattr__(self, name: str) -> Any:
        if name[:2] == "__":
            raise AttributeError(name)
        return _Placeholder(obj=self, name=name)

    def __getitem__(self, key: Any) -> "_Placeholder":
        return _Placeholder(obj=self, name=key)

    def __str__(self) -> str:
        expression = " | ".join((self._placeholder_path,) + self._filters)
        return "{{ " + expression + " }}"


def _to_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _currency(value: Any) -> str:
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, str):
        try:
            value = Decimal(value)
        except ArithmeticError:
            return value
    if isinstance(value, (int, float, Decimal)):
        return f"${value:,.2f}"
    return str(value)


FILTERS: Dict[str, Callable[[Any], Any]] = {
    "upcase": lambda value: _to_text(value).upper(),
    "downcase": lambda value: _to_text(value).lower(),
    "capitalize": lambda value: _to_text(value).capitalize(),
    "strip": lambda value: _to_text(value).strip(),
    "escape": lambda value: escape(_to_text(value)),
    "currency": _currency,
}


def _keeps_placeholder(name: str, func: Callable[[Any], Any]) -> Callable[[Any], Any]:
    def apply(value: Any) -> Any:
        if isinstance(value, _Placeholder):
            return value._with_filter(name)
        return func(value)

    return apply


def _finalize(value: Any) -> Any:
    return "" if value is None else value


def _build_environment(autoescape: bool) -> SandboxedEnvironment:
    env = SandboxedEnvironment(
        autoescape=autoescape,
        undefined=_Placeholder,
        finalize=_finalize,
        keep_trailing_newline=True,
    )
    for name, func in FILTERS.items():
        env.filters[name] = _keeps_placeholder(name, func)
    return env


_TEXT_ENV = _build_environment(autoescape=False)
_HTML_ENV = _build_environment(autoescape=True)


@lru_cache(maxsize=512)
def _compile(source: str, escape_html: bool) -> Optional[Template]:
    env = _HTML_ENV if escape_html else _TEXT_ENV
    try:
        return env.from_string(source)
    except TemplateError as e:
        logger.warning("template_compile_failed", error=str(e))
        return None


def substitute(text: str, data: Dict[str, Any], escape_html: bool = False) -> str:
    """Render one template body against ``data``.

    Args:
        text: Template body
        data: Substitution data
        escape_html: Autoescape substituted values (used for the html body)

    Returns:
        The rendered string. Unresolvable placeholders are kept verbatim
        and a body that fails to compile or render is returned unchanged.
    """
    if not text:
        return ""

    template = _compile(text, escape_html)
    if template is None:
        return text

    context = {key: _wrap(value, str(key)) for key, value in data.items()}
    try:
        return template.render(context)
    except TemplateError as e:
        logger.warning("template_render_failed", error=str(e))
        return text


def find_syntax_issues(text: str, field: str) -> List[TemplateSyntaxIssue]:
    """Compile one template field and report what Jinja rejects.

    Unknown filters are caught at compile time. A ``}}`` that Jinja keeps
    as literal text is reported as a stray delimiter.
    """
    try:
        _TEXT_ENV.compile(text)
    except TemplateSyntaxError as e:
        issue = TemplateSyntaxIssue(
            field=field, line=e.lineno or 1, message=e.message or str(e)
        )
        return [issue]

    issues: List[TemplateSyntaxIssue] = []
    for lineno, token_type, value in _TEXT_ENV.lex(text):
        if token_type == "data" and "}}" in value:
            offset = value[: value.index("}}")].count("\n")
            issues.append(
                TemplateSyntaxIssue(
                    field=field,
                    line=lineno + offset,
                    message="Unexpected '}}' without matching '{{'",
                )
            )
    return issues


def _path_of(node: nodes.Node) -> Optional[str]:
    if isinstance(node, nodes.Name):
        return node.name
    if isinstance(node, nodes.Getattr):
        parent = _path_of(node.node)
        return f"{parent}.{node.attr}" if parent else None
    if isinstance(node, nodes.Getitem) and isinstance(node.arg, nodes.Const):
        parent = _path_of(node.node)
        return f"{parent}.{node.arg.value}" if parent else None
    return None


def _collect_paths(node: nodes.Node, paths: List[str]) -> None:
    path = _path_of(node)
    if path is not None:
        paths.append(path)
        return
    for child in node.iter_child_nodes():
        _collect_paths(child, paths)


def referenced_paths(text: str) -> List[str]:
    """Dotted data paths a template body reads, in source order."""
    try:
        ast = _TEXT_ENV.parse(text or "")
    except TemplateSyntaxError:
        return []

    roots = find_undeclared_variables(ast)
    paths: List[str] = []
    _collect_paths(ast, paths)
    return [path for path in paths if path.split(".")[0] in roots]


def _lookup(data: Any, path: str) -> Any:
    """Walk a dotted path through sample data for validation warnings."""
    current = data
    for segment in path.split("."):
        if isinstance(current, Mapping):
            if segment not in current:
                return _MISSING
            current = current[segment]
        elif isinstance(current, (list, tuple)) and segment.isdigit():
            index = int(segment)
            if index >= len(current):
                return _MISSING
            current = current[index]
        elif not segment.startswith("_") and hasattr(current, segment):
            current = getattr(current, segment)
        else:
            return _MISSING
    return current


class TemplateRenderer:
    """Resolves templates by key and language and renders them.

    Language resolution order: the exact (key, language) template, then
    the default language, then the first remaining language in
    lexicographic order. Inactive templates are ignored.

    Attributes:
        store: TemplateStore to read templates from
        default_language: Fallback language tag
    """

    def __init__(self, store: TemplateStore, default_language: str = "en-US"):
        self.store = store
        self.default_language = default_language

    def resolve_template(
        self, template_key: str, language: Optional[str] = None
    ) -> NotificationTemplate:
        """Find the best template for ``template_key`` in ``language``.

        Raises:
            TemplateNotFoundError: If no active template exists for the key.
        """
        requested = language or self.default_language
        for candidate in (requested, self.default_language):
            template = self.store.get(template_key, candidate)
            if template is not None and template.is_active:
                if candidate != requested:
                    logger.info(
                        "template_language_fallback",
                        template_key=template_key,
                        requested_language=requested,
                        used_language=candidate,
                    )
                return template

        remaining = sorted(
            (t for t in self.store.list_by_key(template_key) if t.is_active),
            key=lambda t: t.language,
        )
        if remaining:
            logger.info(
                "template_language_fallback",
                template_key=template_key,
                requested_language=requested,
                used_language=remaining[0].language,
            )
            return remaining[0]

        raise TemplateNotFoundError(template_key)

    def render(
        self,
        template_key: str,
        data: Optional[Dict[str, Any]] = None,
        language: Optional[str] = None,
    ) -> RenderedContent:
        """Render ``template_key`` with ``data`` in the best available language.

        Raises:
            TemplateNotFoundError: If no template exists in any language.
        """
        template = self.resolve_template(template_key, language)
        return self.render_template(template, data or {})

    def render_template(
        self, template: NotificationTemplate, data: Dict[str, Any]
    ) -> RenderedContent:
        """Render an already-resolved template."""
        subject = substitute(template.subject, data)
        text = substitute(template.text, data)
        sms = substitute(template.sms, data) if template.sms else text
        push_title = (
            substitute(template.push_title, data) if template.push_title else subject
        )
        push_body = (
            substitute(template.push_body, data) if template.push_body else text
        )

        return RenderedContent(
            subject=subject,
            html=substitute(template.html, data, escape_html=True),
            text=text,
            sms=sms,
            push_title=push_title,
            push_body=push_body,
            template_key=template.key,
            language=template.language,
            data=dict(data),
        )

    def preview(
        self,
        template_key: str,
        data: Optional[Dict[str, Any]] = None,
        language: Optional[str] = None,
    ) -> TemplatePreview:
        """Render a template for authoring, using its sample data by default."""
        template = self.resolve_template(template_key, language)
        content = self.render_template(
            template, data if data is not None else template.sample_data
        )
        return TemplatePreview(
            template_key=template.key,
            language=template.language,
            subject=content.subject,
            html=content.html,
            text=content.text,
            sms=content.sms,
            push=f"{content.push_title} - {content.push_body}",
        )

    def validate(
        self,
        template: NotificationTemplate,
        sample_data: Optional[Dict[str, Any]] = None,
    ) -> TemplateValidationResult:
        """Dry-run a template and report problems without raising.

        Syntax issues make the template invalid. Required fields missing
        from the sample data, placeholders the sample data cannot resolve
        and sample keys no placeholder uses are reported as warnings.
        """
        data = sample_data if sample_data is not None else template.sample_data
        errors: List[TemplateSyntaxIssue] = []
        warnings: List[str] = []
        paths: List[Tuple[str, str]] = []

        for field in TEMPLATE_FIELDS:
            body = getattr(template, field)
            if not body:
                continue
            errors.extend(find_syntax_issues(body, field))
            paths.extend((field, path) for path in referenced_paths(body))

        missing_fields = [
            name for name in template.required_fields if _lookup(data, name) is _MISSING
        ]
        for name in missing_fields:
            warnings.append(f"Required field '{name}' is missing from sample data")

        unresolved: Set[str] = set()
        for field, path in paths:
            if path not in unresolved and _lookup(data, path) is _MISSING:
                unresolved.add(path)
                warnings.append(f"Placeholder '{path}' in {field} has no sample value")

        used_roots = {path.split(".")[0] for _, path in paths}
        unused_fields = sorted(key for key in data if key not in used_roots)

        if not template.text and not template.html:
            warnings.append("Template has neither a text nor an HTML body")

        return TemplateValidationResult(
            is_valid=not errors,
            errors=errors,
            warnings=warnings,
            missing_fields=missing_fields,
            unused_fields=unused_fields,
        )

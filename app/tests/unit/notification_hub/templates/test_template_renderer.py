"""Unit tests for TemplateRenderer and placeholder substitution."""

import pytest

from notification_hub.errors import TemplateNotFoundError
from notification_hub.templates import InMemoryTemplateStore, TemplateRenderer, substitute
from notification_hub.templates.renderer import find_syntax_issues


@pytest.mark.unit
class TestSubstitute:
    """Tests for substitute()."""

    def test_nested_paths(self):
        data = {"user": {"first_name": "John"}, "items": [{"name": "Mug"}]}

        rendered = substitute("Hi {{ user.first_name }}, {{ items.0.name }}", data)

        assert rendered == "Hi John, Mug"

    def test_unresolved_placeholder_kept_verbatim(self):
        rendered = substitute("Hi {{ user.last_name }}!", {"user": {}})

        assert rendered == "Hi {{ user.last_name }}!"

    @pytest.mark.parametrize(
        "template,expected",
        [
            ("{{ name | upcase }}", "JOHN"),
            ("{{ name | downcase }}", "john"),
            ("{{ word | capitalize }}", "Hello"),
            ("{{ padded | strip }}", "x"),
            ("{{ html | escape }}", "&lt;b&gt;"),
            ("{{ total | currency }}", "$1,234.50"),
        ],
    )
    def test_filters(self, template, expected):
        data = {
            "name": "John",
            "word": "hello",
            "padded": "  x  ",
            "html": "<b>",
            "total": 1234.5,
        }

        assert substitute(template, data) == expected

    def test_unknown_filter_kept_verbatim(self):
        assert substitute("{{ name | shout }}", {"name": "x"}) == "{{ name | shout }}"

    def test_escape_html_mode(self):
        rendered = substitute("<p>{{ name }}</p>", {"name": "<script>"}, escape_html=True)

        assert rendered == "<p>&lt;script&gt;</p>"

    def test_none_value_renders_empty(self):
        assert substitute("[{{ note }}]", {"note": None}) == "[]"

    def test_missing_root_keeps_full_path(self):
        assert substitute("Hi {{ user.first_name }}", {}) == "Hi {{ user.first_name }}"

    def test_missing_list_item_keeps_index_path(self):
        rendered = substitute("{{ items.5.name }}", {"items": [{"name": "Mug"}]})

        assert rendered == "{{ items.5.name }}"

    def test_filter_on_missing_value_is_kept(self):
        rendered = substitute("{{ user.nickname | upcase }}", {"user": {"name": "x"}})

        assert rendered == "{{ user.nickname | upcase }}"

    def test_malformed_body_returned_unchanged(self):
        assert substitute("Hello {{ name", {"name": "x"}) == "Hello {{ name"

    def test_internal_attributes_are_not_exposed(self):
        rendered = substitute("{{ user.__class__ }}", {"user": {"name": "x"}})

        assert rendered == "{{ user.__class__ }}"

    def test_text_bodies_are_not_escaped(self):
        assert substitute("{{ name }}", {"name": "<b>"}) == "<b>"


@pytest.mark.unit
class TestResolveTemplate:
    """Tests for language fallback."""

    def test_exact_language(self, renderer):
        template = renderer.resolve_template("welcome", "fr-FR")

        assert template.language == "fr-FR"

    def test_falls_back_to_default_language(self, renderer):
        """Test an absent language returns default-language content."""
        content = renderer.render(
            "email_verification",
            {"user": {"first_name": "John"}, "verification_url": "https://x"},
            "de-DE",
        )

        assert content.language == "en-US"
        assert "John" in content.text

    def test_falls_back_to_first_available_language(self, template_factory):
        store = InMemoryTemplateStore()
        store.create_or_update(template_factory(key="only", language="fr-FR"))
        store.create_or_update(template_factory(key="only", language="es-ES"))
        renderer = TemplateRenderer(store, default_language="en-US")

        template = renderer.resolve_template("only", "de-DE")

        assert template.language == "es-ES"

    def test_inactive_templates_are_ignored(self, template_factory):
        store = InMemoryTemplateStore()
        store.create_or_update(template_factory(key="off", is_active=False))
        renderer = TemplateRenderer(store)

        with pytest.raises(TemplateNotFoundError):
            renderer.resolve_template("off", "en-US")

    def test_missing_template_raises(self, renderer):
        with pytest.raises(TemplateNotFoundError) as exc_info:
            renderer.render("does_not_exist", {}, "en-US")

        assert exc_info.value.template_key == "does_not_exist"


@pytest.mark.unit
class TestRender:
    """Tests for render()."""

    def test_welcome_renders_all_fields(self, renderer):
        content = renderer.render(
            "welcome",
            {"user": {"first_name": "John"}, "company_name": "Acme"},
            "en-US",
        )

        assert content.subject == "Welcome to Acme"
        assert content.text.startswith("Welcome John!")
        assert content.sms == "Welcome to Acme, John!"
        assert content.push_title == "Welcome!"
        assert "John" in content.push_body
        assert content.template_key == "welcome"

    def test_html_values_are_escaped(self, renderer):
        content = renderer.render(
            "welcome", {"user": {"first_name": "<b>J</b>"}, "company_name": "A"}
        )

        assert "&lt;b&gt;J&lt;/b&gt;" in content.html
        assert "<b>J</b>" in content.text

    def test_channel_fields_fall_back(self, template_factory):
        """Test sms and push fall back to text and subject when empty."""
        store = InMemoryTemplateStore()
        store.create_or_update(template_factory())
        renderer = TemplateRenderer(store)

        content = renderer.render("greeting", {"name": "Ann"})

        assert content.sms == "Hi Ann"
        assert content.push_title == "Hello Ann"
        assert content.push_body == "Hi Ann"

    def test_currency_filter_in_packaged_template(self, renderer):
        content = renderer.render(
            "order_confirmation",
            {"user": {"first_name": "John"}, "order": {"number": "A-1", "total": 99}},
        )

        assert "Total: $99.00" in content.text


@pytest.mark.unit
class TestPreviewAndValidate:
    """Tests for preview() and validate()."""

    def test_preview_uses_sample_data(self, renderer):
        preview = renderer.preview("welcome", language="fr-FR")

        assert "Jean" in preview.text
        assert preview.push == "Bienvenue ! - Bonjour Jean, votre compte est prêt."

    def test_validate_packaged_template_is_valid(self, renderer):
        template = renderer.resolve_template("welcome", "en-US")

        result = renderer.validate(template)

        assert result.is_valid
        assert result.errors == []
        assert result.missing_fields == []

    def test_validate_reports_syntax_errors(self, template_factory, renderer):
        template = template_factory(
            subject="Hello {{ name", text="Bye {{ name | shout }}", sms="Oops }}"
        )

        result = renderer.validate(template, {"name": "x"})

        assert not result.is_valid
        by_field = {issue.field: issue.message for issue in result.errors}
        assert set(by_field) == {"subject", "text", "sms"}
        assert "shout" in by_field["text"]
        assert by_field["sms"] == "Unexpected '}}' without matching '{{'"

    def test_validate_reports_empty_placeholder(self, template_factory, renderer):
        template = template_factory(text="Hi {{ }}")

        result = renderer.validate(template, {"name": "x"})

        assert not result.is_valid
        assert result.errors[0].field == "text"

    def test_validate_warns_on_missing_and_unused_data(self, template_factory, renderer):
        template = template_factory(required_fields=["name", "email"])

        result = renderer.validate(template, {"name": "x", "extra": 1})

        assert result.is_valid
        assert result.missing_fields == ["email"]
        assert result.unused_fields == ["extra"]
        assert any("email" in warning for warning in result.warnings)

    def test_find_syntax_issues_reports_line(self):
        issues = find_syntax_issues("line one\nline two {{ name", "text")

        assert len(issues) == 1
        assert issues[0].line == 2
        assert issues[0].field == "text"

    def test_find_syntax_issues_stray_delimiter_line(self):
        issues = find_syntax_issues("ok\n{{ name }}\nbad }}", "html")

        assert [issue.line for issue in issues] == [3]

    def test_find_syntax_issues_clean_body(self):
        assert find_syntax_issues("Hi {{ user.first_name | upcase }}", "text") == []

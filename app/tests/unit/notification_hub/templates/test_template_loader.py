"""Unit tests for YAMLTemplateLoader."""

import pytest

from notification_hub.templates import InMemoryTemplateStore, YAMLTemplateLoader


@pytest.mark.unit
class TestPackagedTemplates:
    """Tests for the templates shipped with the package."""

    def test_default_templates_cover_both_languages(self):
        templates = YAMLTemplateLoader().load()

        ids = {(t.key, t.language) for t in templates}
        for key in ("welcome", "email_verification", "password_reset", "order_confirmation"):
            assert (key, "en-US") in ids
            assert (key, "fr-FR") in ids

    def test_load_single_language(self):
        templates = YAMLTemplateLoader().load(language="fr-FR")

        assert templates
        assert {t.language for t in templates} == {"fr-FR"}

    def test_load_into_store(self):
        store = InMemoryTemplateStore()

        loaded = YAMLTemplateLoader().load_into(store)

        assert loaded == len(store.list_all())
        assert store.get("welcome", "en-US").category == "onboarding"


@pytest.mark.unit
class TestCustomDirectory:
    """Tests for loading from a caller-supplied directory."""

    def test_key_and_language_from_filename(self, tmp_path):
        (tmp_path / "reminder.en-US.yml").write_text(
            'subject: "Reminder"\ntext: "Don\'t forget {{ item }}"\n',
            encoding="utf-8",
        )

        templates = YAMLTemplateLoader(tmp_path).load()

        assert len(templates) == 1
        assert templates[0].key == "reminder"
        assert templates[0].language == "en-US"
        assert templates[0].text == "Don't forget {{ item }}"

    def test_body_values_win_over_filename(self, tmp_path):
        (tmp_path / "anything.yml").write_text(
            "key: custom\nlanguage: fr-FR\nsubject: Salut\n", encoding="utf-8"
        )

        template = YAMLTemplateLoader(tmp_path).load()[0]

        assert (template.key, template.language) == ("custom", "fr-FR")

    def test_parse_error_raises_value_error(self, tmp_path):
        (tmp_path / "broken.en-US.yml").write_text(
            "subject: [unclosed\n", encoding="utf-8"
        )

        with pytest.raises(ValueError, match="Failed to parse"):
            YAMLTemplateLoader(tmp_path).load()

    def test_non_mapping_raises_value_error(self, tmp_path):
        (tmp_path / "list.en-US.yml").write_text("- a\n- b\n", encoding="utf-8")

        with pytest.raises(ValueError, match="must contain a mapping"):
            YAMLTemplateLoader(tmp_path).load()

    def test_missing_language_raises_value_error(self, tmp_path):
        (tmp_path / "nolang.yml").write_text("subject: Hi\n", encoding="utf-8")

        with pytest.raises(ValueError, match="Invalid template"):
            YAMLTemplateLoader(tmp_path).load()

    def test_missing_directory_raises(self, tmp_path):
        with pytest.raises(ValueError, match="not found"):
            YAMLTemplateLoader(tmp_path / "nope")

    def test_load_into_respects_overwrite(self, tmp_path, template_factory):
        (tmp_path / "greeting.en-US.yml").write_text(
            "subject: From file\n", encoding="utf-8"
        )
        store = InMemoryTemplateStore([template_factory()])
        loader = YAMLTemplateLoader(tmp_path)

        assert loader.load_into(store) == 0
        assert store.get("greeting", "en-US").subject == "Hello {{ name }}"

        assert loader.load_into(store, overwrite=True) == 1
        assert store.get("greeting", "en-US").subject == "From file"

"""Tests for CLI settings loading."""

import pytest
import yaml

from bibfilter.cli.config import Config, load_config


class TestConfigFromFile:
    def test_valid_yaml(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text(yaml.safe_dump({"case_insensitive": False}))

        assert Config.from_file(path) == {"case_insensitive": False}

    def test_empty_file(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("")

        assert Config.from_file(path) == {}

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("key: [unclosed")

        with pytest.raises(ValueError, match="Invalid YAML"):
            Config.from_file(path)

    def test_non_mapping(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("- a\n- b\n")

        with pytest.raises(ValueError, match="must contain a mapping"):
            Config.from_file(path)


class TestLoadConfig:
    """Test settings precedence."""

    def test_no_files(self):
        assert load_config() == {}

    def test_user_settings_file(self, tmp_path):
        path = tmp_path / "xdg-config" / "bibfilter" / "config.yaml"
        path.parent.mkdir(parents=True)
        path.write_text("search_fields: [title]\nexport_dir: out\n")

        assert load_config() == {"search_fields": ["title"], "export_dir": "out"}

    def test_extra_file_wins(self, tmp_path):
        user = tmp_path / "xdg-config" / "bibfilter" / "config.yaml"
        user.parent.mkdir(parents=True)
        user.write_text("case_insensitive: true\nexport_dir: out\n")
        extra = tmp_path / "extra.yaml"
        extra.write_text("case_insensitive: false\n")

        settings = load_config(extra)

        assert settings == {"case_insensitive": False, "export_dir": "out"}

    def test_environment_overrides(self, tmp_path, monkeypatch):
        extra = tmp_path / "extra.yaml"
        extra.write_text("query_config: from-file.json\n")
        monkeypatch.setenv("BIBFILTER_QUERY_CONFIG", "from-env.json")
        monkeypatch.setenv("BIBFILTER_CASE_SENSITIVE", "yes")

        settings = load_config(extra)

        assert settings["query_config"] == "from-env.json"
        assert settings["case_insensitive"] is False

    def test_case_sensitive_env_false(self, monkeypatch):
        monkeypatch.setenv("BIBFILTER_CASE_SENSITIVE", "0")

        assert load_config() == {"case_insensitive": True}


def test_later_files_replace_earlier_keys(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / ".bibfilter.yaml").write_text("search_fields: [title, abstract]\n")
    (tmp_path / "bibfilter.yaml").write_text("search_fields: [keywords]\n")

    assert load_config() == {"search_fields": ["keywords"]}

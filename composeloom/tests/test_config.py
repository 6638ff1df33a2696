"""Tests for migration settings loading."""

import pytest

from composeloom.core.config import MigrationSettings, load_settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for var in ("COMPOSELOOM_CONFIG", "COMPOSELOOM_MODE", "COMPOSELOOM_ADVISORY_TAG", "COMPOSELOOM_HOOK_PREFIX"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)


class TestDefaults:
    def test_defaults(self):
        settings = load_settings()
        assert settings == MigrationSettings()
        assert settings.mode == "composable"
        assert settings.advisory_tag == "composeloom"
        assert settings.annotate_params is True

    def test_invalid_mode(self):
        with pytest.raises(ValueError):
            MigrationSettings(mode="class")


class TestYamlFile:
    def test_cwd_file_flat(self, tmp_path):
        (tmp_path / "composeloom.yaml").write_text("mode: sfc\nadvisory_tag: migrate\n")
        settings = load_settings()
        assert settings.mode == "sfc"
        assert settings.advisory_tag == "migrate"

    def test_explicit_file_nested(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("composeloom:\n  hook_prefix: use\n  annotate_params: false\n")
        settings = load_settings(str(path))
        assert settings.annotate_params is False

    def test_unknown_key(self, tmp_path):
        (tmp_path / "composeloom.yaml").write_text("indent: 4\n")
        with pytest.raises(ValueError, match="indent"):
            load_settings()

    def test_not_a_mapping(self, tmp_path):
        (tmp_path / "composeloom.yaml").write_text("- sfc\n")
        with pytest.raises(ValueError):
            load_settings()

    def test_missing_explicit_file_uses_defaults(self, tmp_path):
        settings = load_settings(str(tmp_path / "absent.yaml"))
        assert settings == MigrationSettings()


class TestOverrides:
    def test_env_wins_over_file(self, tmp_path, monkeypatch):
        (tmp_path / "composeloom.yaml").write_text("mode: composable\n")
        monkeypatch.setenv("COMPOSELOOM_MODE", "sfc")
        assert load_settings().mode == "sfc"

    def test_config_path_from_env(self, tmp_path, monkeypatch):
        path = tmp_path / "other.yaml"
        path.write_text("advisory_tag: todo\n")
        monkeypatch.setenv("COMPOSELOOM_CONFIG", str(path))
        assert load_settings().advisory_tag == "todo"

    def test_explicit_override_wins(self, monkeypatch):
        monkeypatch.setenv("COMPOSELOOM_MODE", "sfc")
        assert load_settings(mode="composable").mode == "composable"

    def test_none_override_ignored(self):
        assert load_settings(mode=None).mode == "composable"

    def test_bool_coercion(self, tmp_path):
        (tmp_path / "composeloom.yaml").write_text("annotate_params: 'no'\n")
        assert load_settings().annotate_params is False

    def test_invalid_env_mode(self, monkeypatch):
        monkeypatch.setenv("COMPOSELOOM_MODE", "vapor")
        with pytest.raises(ValueError):
            load_settings()

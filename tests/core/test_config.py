"""
Tests for settings resolution.
"""

from pathlib import Path

import pytest

from govm.core.config import (
    DEFAULT_INDEX_URL,
    Settings,
    default_config_path,
    load_settings,
    load_yaml_config,
)
from govm.core.exceptions import ConfigurationError


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "install_root: /opt/golang\n"
        "download_timeout: 120\n"
        "download_retries: 5\n"
        "gopath: ~/work/go\n"
        "silent: yes\n"
    )
    return path


class TestLoadYamlConfig:
    """Test YAML loading."""

    def test_missing_optional_file(self, tmp_path):
        assert load_yaml_config(tmp_path / "missing.yaml") == {}

    def test_missing_required_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            load_yaml_config(tmp_path / "missing.yaml", required=True)

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_yaml_config(path) == {}

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("install_root: [unclosed\n")
        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            load_yaml_config(path)

    def test_non_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigurationError, match="expected a mapping"):
            load_yaml_config(path)


class TestLoadSettings:
    """Test settings precedence."""

    def test_defaults(self, isolated_home):
        settings = load_settings(environ={})

        assert settings.install_root == Path("/usr/local")
        assert settings.index_url == DEFAULT_INDEX_URL
        assert settings.download_timeout == 300
        assert settings.download_retries == 3
        assert settings.gopath == isolated_home / "go"
        assert settings.gobin == isolated_home / "go" / "bin"
        assert settings.silent is False

    def test_config_file(self, isolated_home, config_file):
        settings = load_settings(config_file=config_file, environ={})

        assert settings.install_root == Path("/opt/golang")
        assert settings.download_timeout == 120
        assert settings.download_retries == 5
        assert settings.gopath == isolated_home / "work" / "go"
        assert settings.silent is True

    def test_default_config_path_is_used(self, isolated_home):
        path = default_config_path()
        path.parent.mkdir(parents=True)
        path.write_text("install_root: /srv/go\n")

        assert load_settings(environ={}).install_root == Path("/srv/go")

    def test_govm_config_env(self, isolated_home, config_file):
        settings = load_settings(environ={"GOVM_CONFIG": str(config_file)})
        assert settings.install_root == Path("/opt/golang")

    def test_govm_config_env_missing_file(self, isolated_home, tmp_path):
        with pytest.raises(ConfigurationError):
            load_settings(environ={"GOVM_CONFIG": str(tmp_path / "nope.yaml")})

    def test_environment_overrides_file(self, isolated_home, config_file):
        environ = {
            "GOVM_INSTALL_ROOT": "/env/root",
            "GOVM_SILENT": "0",
            "GOPATH": "/env/gopath",
        }
        settings = load_settings(config_file=config_file, environ=environ)

        assert settings.install_root == Path("/env/root")
        assert settings.silent is False
        assert settings.gopath == Path("/env/gopath")

    def test_overrides_win(self, isolated_home, config_file):
        settings = load_settings(
            config_file=config_file,
            environ={"GOVM_INSTALL_ROOT": "/env/root"},
            install_root=Path("/flag/root"),
            silent=None,
        )

        assert settings.install_root == Path("/flag/root")
        assert settings.silent is True

    def test_unknown_key_ignored(self, isolated_home, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("mirror: https://example.com\n")

        assert load_settings(config_file=path, environ={}) == Settings()

    def test_invalid_integer(self, isolated_home, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("download_timeout: soon\n")

        with pytest.raises(ConfigurationError, match="download_timeout"):
            load_settings(config_file=path, environ={})

    def test_unknown_override(self, isolated_home):
        with pytest.raises(ConfigurationError, match="Unknown setting"):
            load_settings(environ={}, mirror="x")

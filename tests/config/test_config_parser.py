"""
Unit tests for layered configuration loading.
"""

from pathlib import Path

import pytest

from godotsetup.config.parser import (
    SetupConfig,
    inputs_from_environment,
    load_config,
    load_yaml_file,
    parse_bool,
)
from godotsetup.core.exceptions import ConfigError


class TestParseBool:
    """Test parse_bool function."""

    @pytest.mark.parametrize("value", ["true", "True", " yes ", "1", True])
    def test_true(self, value):
        assert parse_bool(value, "cache") is True

    @pytest.mark.parametrize("value", ["false", "FALSE", "no", "0", False])
    def test_false(self, value):
        assert parse_bool(value, "cache") is False

    def test_invalid(self):
        with pytest.raises(ConfigError, match="'use-dotnet' must be a boolean"):
            parse_bool("maybe", "use_dotnet")


class TestSetupConfig:
    """Test SetupConfig defaults and helpers."""

    def test_defaults(self):
        config = SetupConfig()

        assert config.path == "godot"
        assert config.downloads_path == "godot_downloads"
        assert config.bin_path == "godot_bin"
        assert config.cache is True
        assert config.use_dotnet is False
        assert config.include_templates is False
        assert config.url_scheme == "releases"
        assert config.legacy_url_before is None

    def test_resolve_dir_relative(self):
        home = Path("/home/ci")
        assert SetupConfig().resolve_dir("godot", home) == home / "godot"

    def test_resolve_dir_absolute(self, temp_dir):
        assert SetupConfig().resolve_dir(str(temp_dir), Path("/home/ci")) == temp_dir


class TestLoadYamlFile:
    """Test load_yaml_file function."""

    def test_missing_optional(self, temp_dir):
        assert load_yaml_file(temp_dir / "godotsetup.yaml") == {}

    def test_missing_required(self, temp_dir):
        with pytest.raises(ConfigError, match="not found"):
            load_yaml_file(temp_dir / "godotsetup.yaml", required=True)

    def test_invalid_yaml(self, temp_dir):
        config_file = temp_dir / "godotsetup.yaml"
        config_file.write_text("version: [4.2\n")

        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_yaml_file(config_file)

    def test_not_a_mapping(self, temp_dir):
        config_file = temp_dir / "godotsetup.yaml"
        config_file.write_text("- 4.2.1\n")

        with pytest.raises(ConfigError, match="mapping"):
            load_yaml_file(config_file)

    def test_empty_file(self, temp_dir):
        config_file = temp_dir / "godotsetup.yaml"
        config_file.write_text("")

        assert load_yaml_file(config_file) == {}


class TestInputsFromEnvironment:
    """Test INPUT_* environment variable collection."""

    def test_hyphenated_names(self):
        environ = {
            "INPUT_VERSION": "4.2.1",
            "INPUT_USE-DOTNET": "true",
            "INPUT_DOWNLOADS-PATH": "dl",
        }

        assert inputs_from_environment(environ) == {
            "version": "4.2.1",
            "use_dotnet": "true",
            "downloads_path": "dl",
        }

    def test_underscore_names_and_blank_values(self):
        environ = {"INPUT_BIN_PATH": "tools/bin", "INPUT_CUSTOM-URL": "  "}

        assert inputs_from_environment(environ) == {"bin_path": "tools/bin"}


class TestLoadConfig:
    """Test load_config layering."""

    def test_yaml_layer(self, temp_dir):
        (temp_dir / "godotsetup.yaml").write_text(
            "version: 4.2.1\nuse-dotnet: true\ninclude-templates: yes\n"
        )

        config = load_config(project_root=temp_dir)

        assert config.version == "4.2.1"
        assert config.use_dotnet is True
        assert config.include_templates is True

    def test_precedence(self, temp_dir):
        config_file = temp_dir / "custom.yaml"
        config_file.write_text("version: 4.0.0\npath: from-yaml\nbin-path: yaml-bin\n")
        environ = {"INPUT_VERSION": "4.1.0", "INPUT_PATH": "from-env"}

        config = load_config(
            config_file=config_file,
            environ=environ,
            overrides={"version": "4.2.1", "bin_path": None},
        )

        assert config.version == "4.2.1"
        assert config.path == "from-env"
        assert config.bin_path == "yaml-bin"

    def test_whitespace_removed(self):
        config = load_config(environ={"INPUT_VERSION": " 4.2.1 \n", "INPUT_PATH": "my godot"})

        assert config.version == "4.2.1"
        assert config.path == "mygodot"

    def test_explicit_config_must_exist(self, temp_dir):
        with pytest.raises(ConfigError, match="not found"):
            load_config(config_file=temp_dir / "missing.yaml")

    def test_unknown_key(self, temp_dir):
        (temp_dir / "godotsetup.yaml").write_text("version: 4.2.1\nchannel: beta\n")

        with pytest.raises(ConfigError, match="Unknown configuration key"):
            load_config(project_root=temp_dir)

    def test_version_required(self):
        with pytest.raises(ConfigError, match="Missing required input: version"):
            load_config(environ={})

    def test_custom_url_without_version(self):
        config = load_config(environ={"INPUT_CUSTOM-URL": "https://example.com/g.zip"})

        assert config.uses_custom_build

    def test_invalid_url_scheme(self):
        with pytest.raises(ConfigError, match="Invalid url-scheme"):
            load_config(overrides={"version": "4.2.1", "url_scheme": "mirror"})

    def test_invalid_boolean_from_environment(self):
        with pytest.raises(ConfigError, match="'cache' must be a boolean"):
            load_config(environ={"INPUT_VERSION": "4.2.1", "INPUT_CACHE": "sometimes"})

    def test_empty_cache_dir_is_default(self):
        config = load_config(overrides={"version": "4.2.1", "cache_dir": ""})

        assert config.cache_dir is None

"""
Unit tests for configuration loading.
"""

import pytest
import yaml

from docexpand.config import (
    CONFIG_FILENAME,
    DEFAULT_CONFIG,
    VERSION_ENV_VAR,
    Config,
    deep_merge,
    load_config,
    load_yaml_file,
)


@pytest.fixture(autouse=True)
def clear_version_env(monkeypatch):
    """Keep the environment override out of unrelated tests."""
    monkeypatch.delenv(VERSION_ENV_VAR, raising=False)


def write_config(directory, content):
    (directory / CONFIG_FILENAME).write_text(content, encoding="utf-8")
    return directory


# ============================================================================
# Merge Tests
# ============================================================================

class TestDeepMerge:
    """Test nested dictionary merging."""
    
    def test_nested_override(self):
        base = {"tabs": {"container_tag": "CodeTabs", "fallback_language": "text"}}
        merged = deep_merge(base, {"tabs": {"container_tag": "Tabs"}})
        
        assert merged == {"tabs": {"container_tag": "Tabs", "fallback_language": "text"}}
        assert base["tabs"]["container_tag"] == "CodeTabs"
    
    def test_non_dict_replaces(self):
        assert deep_merge({"a": {"b": 1}}, {"a": [1, 2]}) == {"a": [1, 2]}


# ============================================================================
# Loading Tests
# ============================================================================

class TestLoadConfig:
    """Test loading configuration files."""
    
    def test_defaults_when_file_missing(self, tmp_path):
        """Test built-in defaults without a config file."""
        config = load_config(tmp_path)
        
        assert config["placeholders"]["scope"] == "all"
        assert config["placeholders"]["values"] == {}
        assert config["tabs"]["container_tag"] == "CodeTabs"
        assert config["processing"]["max_workers"] == 4
    
    def test_file_values_are_merged(self, tmp_path):
        """Test file values override defaults without dropping others."""
        write_config(tmp_path, (
            "placeholders:\n"
            "  values:\n"
            "    VERSION: \"3.5.0\"\n"
            "    SCALA_VERSION: 2.12\n"
            "  scope: prose\n"
        ))
        config = load_config(tmp_path)
        
        assert config["placeholders"]["values"] == {"VERSION": "3.5.0", "SCALA_VERSION": "2.12"}
        assert config["placeholders"]["scope"] == "prose"
        assert config["tabs"]["fallback_language"] == "text"
    
    def test_defaults_are_not_mutated(self, tmp_path):
        write_config(tmp_path, "placeholders:\n  values:\n    VERSION: \"1.0\"\n")
        load_config(tmp_path)
        
        assert DEFAULT_CONFIG["placeholders"]["values"] == {}
    
    def test_environment_override(self, tmp_path, monkeypatch):
        """Test DOCEXPAND_VERSION overrides the file's VERSION."""
        write_config(tmp_path, "placeholders:\n  values:\n    VERSION: \"3.4.0\"\n")
        monkeypatch.setenv(VERSION_ENV_VAR, "3.5.0")
        
        assert load_config(tmp_path)["placeholders"]["values"]["VERSION"] == "3.5.0"
    
    def test_explicit_overrides_win(self, tmp_path, monkeypatch):
        """Test explicit overrides take precedence over the environment."""
        monkeypatch.setenv(VERSION_ENV_VAR, "3.4.0")
        config = load_config(tmp_path, {"placeholders": {"values": {"VERSION": "3.5.0"}}})
        
        assert config["placeholders"]["values"]["VERSION"] == "3.5.0"
    
    def test_empty_file(self, tmp_path):
        write_config(tmp_path, "")
        
        assert load_config(tmp_path)["placeholders"]["scope"] == "all"
    
    def test_non_mapping_file(self, tmp_path):
        path = write_config(tmp_path, "- a\n- b\n") / CONFIG_FILENAME
        
        with pytest.raises(ValueError):
            load_yaml_file(path)
    
    def test_invalid_yaml(self, tmp_path):
        write_config(tmp_path, "placeholders: [unclosed\n")
        
        with pytest.raises(yaml.YAMLError):
            load_config(tmp_path)


# ============================================================================
# Validation Tests
# ============================================================================

class TestValidation:
    """Test configuration validation."""
    
    def test_multi_line_placeholder_value(self, tmp_path):
        """Test multi-line values are rejected before any processing."""
        with pytest.raises(ValueError, match="single line"):
            load_config(tmp_path, {"placeholders": {"values": {"VERSION": "3.5.0\n3.6.0"}}})
    
    def test_missing_placeholder_value(self, tmp_path):
        with pytest.raises(ValueError, match="no value"):
            load_config(tmp_path, {"placeholders": {"values": {"VERSION": None}}})
    
    def test_invalid_scope(self, tmp_path):
        with pytest.raises(ValueError, match="scope"):
            load_config(tmp_path, {"placeholders": {"scope": "code"}})
    
    def test_fallback_must_be_allowed(self, tmp_path):
        with pytest.raises(ValueError, match="fallback_language"):
            load_config(tmp_path, {"tabs": {"fallback_language": "rust"}})
    
    @pytest.mark.parametrize("workers", [0, -1, "four"])
    def test_invalid_workers(self, tmp_path, workers):
        with pytest.raises(ValueError, match="max_workers"):
            load_config(tmp_path, {"processing": {"max_workers": workers}})


# ============================================================================
# Config Manager Tests
# ============================================================================

class TestConfigManager:
    """Test the lazy Config wrapper."""
    
    def test_get_nested_value(self, tmp_path):
        config = Config(tmp_path)
        
        assert config.get("tabs", "container_tag") == "CodeTabs"
        assert config.get("tabs", "missing", default="x") == "x"
    
    def test_placeholders(self, tmp_path):
        config = Config(tmp_path, overrides={"placeholders": {"values": {"VERSION": "3.5.0"}}})
        
        assert config.placeholders == {"VERSION": "3.5.0"}
    
    def test_reload(self, tmp_path):
        """Test reload picks up file changes."""
        config = Config(tmp_path)
        assert config.placeholders == {}
        
        write_config(tmp_path, "placeholders:\n  values:\n    VERSION: \"3.5.0\"\n")
        assert config.placeholders == {}
        
        config.reload()
        assert config.placeholders == {"VERSION": "3.5.0"}

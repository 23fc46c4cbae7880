"""
Configuration loading and validation for the docexpand package.

Loads a YAML configuration file with sensible defaults and supports
environment variable overrides.
"""

import copy
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml


CONFIG_FILENAME = "docexpand.yaml"

# Environment variable that overrides the VERSION placeholder
VERSION_ENV_VAR = "DOCEXPAND_VERSION"

VALID_SCOPES = ("all", "prose")

# Default configuration values (fallback if file not found)
DEFAULT_CONFIG = {
    "placeholders": {
        "values": {},
        "scope": "all",
    },
    "tabs": {
        "container_tag": "CodeTabs",
        "allowed_languages": ["python", "scala", "java", "bash", "sql", "xml", "text"],
        "fallback_language": "text",
        "aliases": {
            "py": "python",
            "python3": "python",
            "sh": "bash",
            "shell": "bash",
            "console": "bash",
            "txt": "text",
            "plaintext": "text",
        },
    },
    "references": {
        "document_extensions": [".md", ".mdx"],
        "ignore_targets": [],
    },
    "corpus": {
        "patterns": ["*.md", "*.mdx"],
    },
    "processing": {
        "max_workers": 4,
    },
}


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """
    Deep merge two dictionaries, with override taking precedence.

    Args:
        base: Base dictionary
        override: Override dictionary (takes precedence)

    Returns:
        Merged dictionary
    """
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_yaml_file(file_path: Path) -> Dict[str, Any]:
    """
    Load a YAML file and return its contents as a dictionary.

    Args:
        file_path: Path to YAML file

    Returns:
        Dictionary with YAML contents

    Raises:
        FileNotFoundError: If file doesn't exist
        yaml.YAMLError: If file is not valid YAML
        ValueError: If the top level of the file is not a mapping
    """
    if not file_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {file_path}")

    with open(file_path, "r", encoding="utf-8") as f:
        config = yaml.safe_load(f)

    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ValueError(f"Configuration file must contain a mapping: {file_path}")
    return config


def validate_config(config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Validate a merged configuration dictionary.

    Placeholder values are coerced to strings and must fit on a single line,
    so line numbers stay identical between raw and substituted text.

    Args:
        config: Merged configuration

    Returns:
        The same configuration, with placeholder values normalized to strings

    Raises:
        ValueError: If any setting is invalid
    """
    placeholders = config["placeholders"]
    values = placeholders.get("values") or {}
    if not isinstance(values, dict):
        raise ValueError("placeholders.values must be a mapping of name to value")

    normalized = {}
    for name, value in values.items():
        if value is None:
            raise ValueError(f"Placeholder '{name}' has no value")
        text = str(value)
        if "\n" in text or "\r" in text:
            raise ValueError(f"Placeholder '{name}' value must be a single line")
        normalized[str(name)] = text
    placeholders["values"] = normalized

    if placeholders.get("scope") not in VALID_SCOPES:
        raise ValueError(
            f"Invalid placeholders.scope: {placeholders.get('scope')}. Must be one of {list(VALID_SCOPES)}"
        )

    tabs = config["tabs"]
    allowed = tabs.get("allowed_languages") or []
    if tabs.get("fallback_language") not in allowed:
        raise ValueError("tabs.fallback_language must be one of tabs.allowed_languages")

    workers = config["processing"].get("max_workers")
    if not isinstance(workers, int) or workers < 1:
        raise ValueError(f"processing.max_workers must be a positive integer, got {workers!r}")

    return config


def load_config(
    config_dir: Optional[Path] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Load configuration from YAML file with fallback to defaults.

    Precedence (lowest to highest): built-in defaults, config file,
    DOCEXPAND_VERSION environment variable, explicit overrides.

    Args:
        config_dir: Directory containing docexpand.yaml (default: ./config)
        overrides: Optional nested dictionary merged last (e.g. CLI flags)

    Returns:
        Validated configuration dictionary

    Example:
        >>> config = load_config(Path("config"))
        >>> config["placeholders"]["scope"]
        'all'
    """
    if config_dir is None:
        config_dir = Path("config")
    else:
        config_dir = Path(config_dir)

    config_path = config_dir / CONFIG_FILENAME

    # Try to load from file, fall back to defaults
    try:
        user_config = load_yaml_file(config_path)
        config = deep_merge(copy.deepcopy(DEFAULT_CONFIG), user_config)
    except FileNotFoundError:
        config = copy.deepcopy(DEFAULT_CONFIG)

    env_version = os.environ.get(VERSION_ENV_VAR)
    if env_version:
        config["placeholders"]["values"] = dict(config["placeholders"].get("values") or {})
        config["placeholders"]["values"]["VERSION"] = env_version

    if overrides:
        config = deep_merge(config, overrides)

    return validate_config(config)


class Config:
    """
    Configuration manager for docexpand.

    Provides lazy access to the merged configuration.
    """

    def __init__(
        self,
        config_dir: Optional[Path] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize configuration manager.

        Args:
            config_dir: Directory containing config files (default: ./config)
            overrides: Optional nested overrides applied on top of the file
        """
        self.config_dir = Path(config_dir) if config_dir else Path("config")
        self.overrides = overrides or {}
        self._config: Optional[Dict[str, Any]] = None

    @property
    def data(self) -> Dict[str, Any]:
        """Get the merged configuration (lazy load)."""
        if self._config is None:
            self._config = load_config(self.config_dir, self.overrides)
        return self._config

    @property
    def placeholders(self) -> Dict[str, str]:
        """Placeholder name to substitution value."""
        return dict(self.data["placeholders"]["values"])

    def reload(self) -> None:
        """Reload configuration from disk."""
        self._config = None

    def get(self, *keys: str, default: Any = None) -> Any:
        """
        Get a nested configuration value by key path.

        Args:
            *keys: Keys to traverse (e.g., "tabs", "container_tag")
            default: Default value if key path not found

        Returns:
            Configuration value or default

        Example:
            >>> config = Config()
            >>> config.get("tabs", "container_tag")
            'CodeTabs'
        """
        value = self.data
        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

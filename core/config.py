"""
Configuration Management - YAML-based configuration with environment overrides
=============================================================================

This module handles all configuration aspects including:
- Loading from YAML files
- Environment variable overrides
- Default values
- Configuration validation
"""

import os
import yaml
from pathlib import Path
from typing import Any, Dict, Optional, List
from dataclasses import dataclass, field, asdict

from .exceptions import ConfigError


CANDIDATE_STRATEGIES = ("narrow", "complete")


@dataclass
class RulesConfig:
    """
    Rule corpus configuration.

    Controls where rule documents are read from, how an empty tree
    is seeded, and how query candidates are narrowed.
    """
    # Document tree (empty = <config_dir>/rules)
    rules_dir: str = ""
    suffixes: List[str] = field(default_factory=lambda: [".json", ".yaml", ".yml"])

    # Seeding
    default_document: str = "data.json"
    write_default: bool = True

    # Query behaviour: "narrow" intersects the two smallest buckets,
    # "complete" always unions every bucket the input touches
    candidate_strategy: str = "narrow"

    def validate(self) -> None:
        """Validate rules configuration."""
        if self.candidate_strategy not in CANDIDATE_STRATEGIES:
            raise ConfigError(
                f"Invalid candidate_strategy: {self.candidate_strategy}",
                {"allowed": list(CANDIDATE_STRATEGIES)}
            )

        if not self.suffixes:
            raise ConfigError("At least one rule document suffix is required")

        for suffix in self.suffixes:
            if not suffix.startswith("."):
                raise ConfigError(f"Document suffix must start with '.', got {suffix!r}")

        if not self.default_document or Path(self.default_document).name != self.default_document:
            raise ConfigError(f"default_document must be a plain file name, got {self.default_document!r}")


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"
    json_format: bool = False
    console_output: bool = True

    def validate(self) -> None:
        """Validate logging configuration."""
        if self.level.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ConfigError(f"Invalid log level: {self.level}")


@dataclass
class UIConfig:
    """
    Web service configuration.
    """
    web_host: str = "127.0.0.1"
    web_port: int = 8080
    web_debug: bool = False

    def validate(self) -> None:
        """Validate UI configuration."""
        if self.web_port < 1 or self.web_port > 65535:
            raise ConfigError(f"Invalid web port: {self.web_port}")


@dataclass
class Config:
    """
    Main configuration container.

    Aggregates all configuration sections into a single object
    and provides methods for loading, saving, and validating.
    """
    app_name: str = "Rule Responder"
    debug: bool = False

    rules: RulesConfig = field(default_factory=RulesConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    ui: UIConfig = field(default_factory=UIConfig)

    # Paths (set at runtime)
    config_dir: str = ""
    log_dir: str = ""

    @property
    def rules_path(self) -> Path:
        """Resolved rule document root."""
        if self.rules.rules_dir:
            return Path(self.rules.rules_dir).expanduser()
        return Path(self.config_dir) / "rules"

    def validate(self) -> None:
        """
        Validate all configuration sections.

        Raises:
            ConfigError: If any configuration section is invalid
        """
        self.rules.validate()
        self.logging.validate()
        self.ui.validate()

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            "app_name": self.app_name,
            "debug": self.debug,
            "rules": asdict(self.rules),
            "logging": asdict(self.logging),
            "ui": asdict(self.ui),
        }


def get_default_config_dir() -> Path:
    """
    Get the default configuration directory path.

    Returns:
        Path to the configuration directory
    """
    if "RULE_RESPONDER_CONFIG_DIR" in os.environ:
        return Path(os.environ["RULE_RESPONDER_CONFIG_DIR"])

    if "XDG_CONFIG_HOME" in os.environ:
        return Path(os.environ["XDG_CONFIG_HOME"]) / "rule-responder"

    home = Path.home()
    config_home = home / ".config"

    if config_home.exists():
        return config_home / "rule-responder"

    return home / ".rule-responder"


def load_config(config_path: Optional[str] = None, load_env: bool = True) -> Config:
    """
    Load configuration from YAML file with environment variable overrides.

    This function loads configuration in the following order:
    1. Default values from dataclass
    2. Values from YAML file
    3. Environment variable overrides

    Args:
        config_path: Path to configuration file (optional)
        load_env: Whether to load environment variable overrides

    Returns:
        Config object with loaded values

    Raises:
        ConfigError: If configuration is invalid or cannot be loaded
    """
    config = Config()

    config.config_dir = str(get_default_config_dir())
    config.log_dir = str(Path(config.config_dir) / "logs")

    if config_path:
        yaml_path = Path(config_path)
    else:
        yaml_path = Path(config.config_dir) / "config.yaml"

    if yaml_path.exists():
        try:
            with open(yaml_path, "r", encoding="utf-8") as f:
                yaml_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Failed to parse config file: {e}", {"path": str(yaml_path)})
        except IOError as e:
            raise ConfigError(f"Failed to read config file: {e}", {"path": str(yaml_path)})

        if not isinstance(yaml_config, dict):
            raise ConfigError("Config file must contain a mapping", {"path": str(yaml_path)})

        _apply_yaml_config(config, yaml_config)

    if load_env:
        _apply_env_overrides(config)

    config.validate()

    return config


def _apply_yaml_config(config: Config, yaml_config: Dict[str, Any]) -> None:
    """
    Apply YAML configuration values to Config object.

    Unknown keys are ignored.

    Args:
        config: Config object to update
        yaml_config: Dictionary of configuration values from YAML
    """
    for key in ("app_name", "debug", "config_dir", "log_dir"):
        if key in yaml_config:
            setattr(config, key, yaml_config[key])

    for section in ("rules", "logging", "ui"):
        values = yaml_config.get(section)
        if not values:
            continue
        if not isinstance(values, dict):
            raise ConfigError(f"Config section '{section}' must be a mapping")

        section_obj = getattr(config, section)
        for key, value in values.items():
            if hasattr(section_obj, key):
                setattr(section_obj, key, value)


def _apply_env_overrides(config: Config) -> None:
    """
    Apply environment variable overrides to Config object.

    Environment variables follow the pattern: RULE_RESPONDER_SECTION_KEY
    For example: RULE_RESPONDER_RULES_DIR, RULE_RESPONDER_LOG_LEVEL

    Args:
        config: Config object to update
    """
    env_mappings = {
        "RULE_RESPONDER_DEBUG": (None, "debug", bool),

        "RULE_RESPONDER_RULES_DIR": ("rules", "rules_dir"),
        "RULE_RESPONDER_RULES_WRITE_DEFAULT": ("rules", "write_default", bool),
        "RULE_RESPONDER_RULES_CANDIDATE_STRATEGY": ("rules", "candidate_strategy"),

        "RULE_RESPONDER_LOG_LEVEL": ("logging", "level"),
        "RULE_RESPONDER_LOG_JSON": ("logging", "json_format", bool),

        "RULE_RESPONDER_UI_WEB_HOST": ("ui", "web_host"),
        "RULE_RESPONDER_UI_WEB_PORT": ("ui", "web_port", int),
    }

    for env_var, mapping in env_mappings.items():
        value = os.environ.get(env_var)
        if value is None:
            continue

        section = mapping[0]
        key = mapping[1]
        converter = mapping[2] if len(mapping) > 2 else str

        target = config if section is None else getattr(config, section)

        if converter == bool:
            converted = value.lower() in ("true", "1", "yes", "on")
        else:
            try:
                converted = converter(value)
            except ValueError:
                raise ConfigError(f"Invalid value for {env_var}: {value!r}")

        setattr(target, key, converted)


def save_config(config: Config, config_path: Optional[str] = None) -> None:
    """
    Save configuration to YAML file.

    Args:
        config: Config object to save
        config_path: Path to save configuration (optional)

    Raises:
        ConfigError: If configuration cannot be saved
    """
    if config_path:
        yaml_path = Path(config_path)
    else:
        yaml_path = Path(config.config_dir) / "config.yaml"

    try:
        yaml_path.parent.mkdir(parents=True, exist_ok=True)
        with open(yaml_path, "w", encoding="utf-8") as f:
            yaml.dump(config.to_dict(), f, default_flow_style=False, sort_keys=False)
    except IOError as e:
        raise ConfigError(f"Failed to save config file: {e}", {"path": str(yaml_path)})

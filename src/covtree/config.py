"""Configuration system for covtree.

Provides layered configuration with precedence:
1. CLI flags (highest)
2. Environment variables
3. Explicit config file (--config or COVTREE_CONFIG)
4. Global config (~/.covtree_config.json)
5. Hardcoded defaults (lowest)
"""

from __future__ import annotations

import copy
import json
import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

from babel import Locale, UnknownLocaleError

from covtree.constants import (
    COMBINED_REPORT_NAME,
    DEFAULT_LOCALE,
    DEFAULT_PERCENTAGE_PATTERN,
    DEFAULT_RATIONAL_LIMIT,
)

logger = logging.getLogger(__name__)

# Environment variable names
ENV_CONFIG = "COVTREE_CONFIG"
ENV_LOCALE = "COVTREE_LOCALE"
ENV_PERCENTAGE_PATTERN = "COVTREE_PERCENTAGE_PATTERN"
ENV_RATIONAL_LIMIT = "COVTREE_RATIONAL_LIMIT"
ENV_GROUP_NAME = "COVTREE_GROUP_NAME"

# Deprecated env vars (backward compatibility)
ENV_LOCALE_DEPRECATED = "COVTREE_DEFAULT_LOCALE"


class ConfigValidationError(Exception):
    """Raised when configuration validation fails."""

    pass


class ConfigLoadError(Exception):
    """Raised when configuration file cannot be loaded."""

    pass


@dataclass
class CovtreeConfig:
    """Main configuration container."""

    locale: str = DEFAULT_LOCALE
    percentage_pattern: str = DEFAULT_PERCENTAGE_PATTERN
    rational_limit: int = DEFAULT_RATIONAL_LIMIT
    group_name: str = COMBINED_REPORT_NAME

    def validate(self) -> None:
        """Validate configuration values."""
        for name in ("locale", "percentage_pattern", "group_name"):
            value = getattr(self, name)
            if not isinstance(value, str):
                raise ConfigValidationError(
                    f"{name} must be a string, got {type(value).__name__}"
                )
        if isinstance(self.rational_limit, bool) or not isinstance(self.rational_limit, int):
            raise ConfigValidationError(
                f"rational_limit must be an integer, got {self.rational_limit!r}"
            )
        try:
            Locale.parse(self.locale)
        except (UnknownLocaleError, ValueError) as e:
            raise ConfigValidationError(f"Invalid locale '{self.locale}': {e}")
        if "%" not in self.percentage_pattern:
            raise ConfigValidationError(
                f"percentage_pattern must contain '%', got '{self.percentage_pattern}'"
            )
        if self.rational_limit <= 0:
            raise ConfigValidationError(
                f"rational_limit must be positive, got {self.rational_limit}"
            )
        if not self.group_name.strip():
            raise ConfigValidationError("group_name must not be blank")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "locale": self.locale,
            "percentage_pattern": self.percentage_pattern,
            "rational_limit": self.rational_limit,
            "group_name": self.group_name,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any], strict: bool = False) -> "CovtreeConfig":
        """Create from dictionary."""
        if strict:
            known_fields = {f.name for f in fields(cls)}
            unknown = {
                key for key in data if not key.startswith("_comment")
            } - known_fields
            if unknown:
                raise ConfigValidationError(
                    f"Unknown fields in config: {', '.join(sorted(unknown))}"
                )

        return cls(
            locale=data.get("locale", DEFAULT_LOCALE),
            percentage_pattern=data.get("percentage_pattern", DEFAULT_PERCENTAGE_PATTERN),
            rational_limit=data.get("rational_limit", DEFAULT_RATIONAL_LIMIT),
            group_name=data.get("group_name", COMBINED_REPORT_NAME),
        )


def get_global_config_path() -> Path:
    """Get path to global config file."""
    return Path.home() / ".covtree_config.json"


def load_config_file(path: Path, strict: bool = False) -> CovtreeConfig:
    """Load configuration from a JSON file.

    Args:
        path: Path to the config file
        strict: If True, fail on unknown fields

    Returns:
        CovtreeConfig instance (defaults if the file does not exist)

    Raises:
        ConfigLoadError: If file cannot be read or parsed
        ConfigValidationError: If strict=True and unknown fields found
    """
    if not path.exists():
        return CovtreeConfig()

    try:
        content = path.read_text()
    except PermissionError as e:
        raise ConfigLoadError(f"Permission denied reading {path}: {e}")
    except OSError as e:
        raise ConfigLoadError(f"Error reading {path}: {e}")

    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise ConfigLoadError(f"Invalid JSON in {path}: {e}")

    if not isinstance(data, dict):
        raise ConfigLoadError(f"Config in {path} must be a JSON object")

    logger.debug("Loaded config from %s", path)
    return CovtreeConfig.from_dict(data, strict=strict)


def merge_configs(*configs: CovtreeConfig) -> CovtreeConfig:
    """Merge multiple configs with later configs taking precedence.

    Values equal to the hardcoded defaults in later configs do NOT
    override earlier values, so partial configs layer properly.
    """
    if not configs:
        return CovtreeConfig()

    defaults = CovtreeConfig()
    result = copy.deepcopy(configs[0])

    for config in configs[1:]:
        for f in fields(CovtreeConfig):
            value = getattr(config, f.name)
            if value != getattr(defaults, f.name):
                setattr(result, f.name, value)

    return result


def apply_env_overrides(config: CovtreeConfig) -> CovtreeConfig:
    """Apply environment variable overrides to config.

    Raises:
        ConfigValidationError: If an env var value is invalid
    """
    result = copy.deepcopy(config)

    deprecated_locale = os.environ.get(ENV_LOCALE_DEPRECATED)
    if deprecated_locale and not os.environ.get(ENV_LOCALE):
        logger.warning(
            "%s is deprecated. Use %s instead.", ENV_LOCALE_DEPRECATED, ENV_LOCALE
        )
        result.locale = deprecated_locale

    if locale := os.environ.get(ENV_LOCALE):
        result.locale = locale

    if pattern := os.environ.get(ENV_PERCENTAGE_PATTERN):
        result.percentage_pattern = pattern

    if group_name := os.environ.get(ENV_GROUP_NAME):
        result.group_name = group_name

    if limit_str := os.environ.get(ENV_RATIONAL_LIMIT):
        try:
            result.rational_limit = int(limit_str)
        except ValueError:
            raise ConfigValidationError(
                f"{ENV_RATIONAL_LIMIT} must be an integer, got '{limit_str}'"
            )

    return result


def get_config(config_path: Path | None = None) -> CovtreeConfig:
    """Load and merge configuration from all sources.

    Loads in order (later sources override earlier):
    1. Hardcoded defaults
    2. Global config (~/.covtree_config.json)
    3. Explicit config file (argument, else COVTREE_CONFIG)
    4. Environment variables

    Returns:
        Merged and validated configuration
    """
    base_config = CovtreeConfig()
    global_config = load_config_file(get_global_config_path())

    explicit_config = CovtreeConfig()
    if config_path is None and (env_path := os.environ.get(ENV_CONFIG)):
        config_path = Path(env_path)
    if config_path is not None:
        if not config_path.exists():
            raise ConfigLoadError(f"Config file not found: {config_path}")
        explicit_config = load_config_file(config_path)

    merged = apply_env_overrides(merge_configs(base_config, global_config, explicit_config))
    merged.validate()
    return merged


def generate_config_template() -> dict[str, Any]:
    """Generate a config template dictionary."""
    return {
        "locale": DEFAULT_LOCALE,
        "_comment_locale": "Locale for formatted percentages (e.g. 'en_US', 'de_DE')",
        "percentage_pattern": DEFAULT_PERCENTAGE_PATTERN,
        "_comment_percentage_pattern": "CLDR number pattern for percentages",
        "rational_limit": DEFAULT_RATIONAL_LIMIT,
        "_comment_rational_limit": "Largest numerator/denominator kept exact in deltas",
        "group_name": COMBINED_REPORT_NAME,
        "_comment_group_name": "Name of the node grouping modules with different names",
    }

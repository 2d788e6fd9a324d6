"""
Configuration loader for the sitemap writer.
Handles environment variables and YAML defaults configuration.
"""

import os
from pathlib import Path
from typing import Dict, Any, Optional
from dataclasses import dataclass, field
import yaml
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / "config" / "sitemap.yaml"


@dataclass
class WriterConfig:
    """Main sitemap writer configuration."""
    # Base URL used to resolve route-style locations
    base_url: Optional[str] = None

    # IANA zone name for timestamp conversion; None means host local time
    timezone: Optional[str] = None

    # Logging
    log_level: str = "INFO"

    # Encoder-level default options (from YAML "defaults")
    default_options: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def load(cls, config_path: Optional[str] = None) -> "WriterConfig":
        """Load configuration from environment and YAML file."""
        base_url = os.getenv("SITEMAP_BASE_URL")
        timezone = os.getenv("SITEMAP_TIMEZONE")
        log_level = os.getenv("LOG_LEVEL", "INFO")

        if config_path is None:
            config_path = os.getenv("SITEMAP_CONFIG")
        config_path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH

        default_options: Dict[str, Any] = {}

        if config_path.exists():
            with open(config_path, "r", encoding="utf-8") as f:
                yaml_config = yaml.safe_load(f) or {}

            # Environment wins over the file
            base_url = base_url or yaml_config.get("base_url")
            timezone = timezone or yaml_config.get("timezone")

            defaults = yaml_config.get("defaults") or {}
            if not isinstance(defaults, dict):
                raise ValueError(f"'defaults' in {config_path} must be a mapping")
            default_options = dict(defaults)

        return cls(
            base_url=base_url,
            timezone=timezone,
            log_level=log_level,
            default_options=default_options,
        )


# Global config instance
_config: Optional[WriterConfig] = None


def get_config(config_path: Optional[str] = None) -> WriterConfig:
    """Get or create the global config instance."""
    global _config
    if _config is None:
        _config = WriterConfig.load(config_path)
    return _config


def reload_config(config_path: Optional[str] = None) -> WriterConfig:
    """Force reload the configuration."""
    global _config
    _config = WriterConfig.load(config_path)
    return _config

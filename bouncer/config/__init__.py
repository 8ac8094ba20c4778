# ABOUTME: Configuration module exports
# ABOUTME: YAML-backed scenarios, strategies and runtime settings

from .config_manager import ConfigManager

__all__ = ["ConfigManager"]

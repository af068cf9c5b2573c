"""Configuration module for storyarch."""

from storyarch.config.settings import LoggingConfig, RegistryConfig, load_config

__all__ = ["LoggingConfig", "RegistryConfig", "load_config"]

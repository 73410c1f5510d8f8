"""Application configuration."""

from footy.config.settings import AppConfig, get_config

__all__ = ["AppConfig", "get_config"]

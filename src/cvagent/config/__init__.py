"""Configuration management using pydantic-settings."""

from cvagent.config.settings import AppSettings, get_settings

__all__ = ["AppSettings", "get_settings"]

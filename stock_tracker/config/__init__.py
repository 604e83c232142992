"""Configuration package for runtime settings, logging and startup validation."""

from .logging_setup import logging_configure
from .settings import AppSettings, SettingsLoadError, config_load_database_url, config_load_settings

__all__ = ["AppSettings", "SettingsLoadError", "config_load_settings", "config_load_database_url", "logging_configure"]

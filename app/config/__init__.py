"""Configuration module for the identity sync service."""
from .settings import AppConfig, load_settings

__all__ = ["AppConfig", "load_settings"]

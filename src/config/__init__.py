"""Configuration - settings, logging and the source registry."""

from .settings import Settings, settings
from .source_registry import SourceRegistry, RegistryError

__all__ = ["Settings", "settings", "SourceRegistry", "RegistryError"]

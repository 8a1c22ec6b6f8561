"""
Centralized configuration for the researcher search proxy

This package contains:
- Settings: configuration manager with environment variable support
- Configuration dataclasses for every component
"""

from .settings import (
    settings,
    Settings,
    ResearcherConfig,
    ServerConfig,
    SearchConfig,
    CacheConfig,
    ContentExtractionConfig,
    DEFAULT_USER_AGENT,
)

__all__ = [
    "settings",
    "Settings",
    "ResearcherConfig",
    "ServerConfig",
    "SearchConfig",
    "CacheConfig",
    "ContentExtractionConfig",
    "DEFAULT_USER_AGENT",
]

# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Configuration package.

This package provides centralized configuration management:
- Settings: Pydantic-based settings loaded from environment variables
- Document loader: reads YAML or JSON content files

Example:
    >>> from curriculum_sync.core.config import get_settings
    >>> settings = get_settings()
    >>> print(settings.environment)
    'development'
"""

from curriculum_sync.core.config.settings import (
    ContentSettings,
    DatabaseSettings,
    Settings,
    clear_settings_cache,
    get_settings,
)
from curriculum_sync.core.config.yaml_loader import YAMLLoadError, load_document

__all__ = [
    # Settings
    "Settings",
    "get_settings",
    "clear_settings_cache",
    # Subsettings
    "DatabaseSettings",
    "ContentSettings",
    # Content documents
    "load_document",
    "YAMLLoadError",
]

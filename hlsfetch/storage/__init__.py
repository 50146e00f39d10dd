"""
Storage Layer.

This package handles loading and writing the INI configuration file.
"""

from .config_manager import ConfigManager

__all__ = ["ConfigManager"]

"""
Utility modules for the crawler.
"""

from .config import Config, ConfigManager, load_config, default_config

__all__ = ['Config', 'ConfigManager', 'load_config', 'default_config']

"""
Configuration management for the crawler.
"""

import yaml
import logging
from pathlib import Path
from typing import Optional
from dataclasses import dataclass, field


@dataclass
class CrawlerConfig:
    """Configuration for crawler behavior."""
    num_workers: int = 4
    request_timeout: int = 30
    user_agent: str = "depthcrawl/1.0"
    completion_poll_interval: float = 0.5
    chunk_size: int = 8192
    stats_interval: float = 30.0


@dataclass
class StorageConfig:
    """Configuration for artifact output."""
    text_directory: str = "text"
    media_directory: str = "contents"


@dataclass
class LoggingConfig:
    """Configuration for logging."""
    level: str = "INFO"
    file: Optional[str] = None
    format: str = "[%(asctime)s] [%(levelname)s] %(message)s"
    datefmt: str = "%Y-%m-%d %H:%M:%S"
    json: bool = False


@dataclass
class MonitoringConfig:
    """Configuration for monitoring."""
    prometheus_port: int = 8000
    metrics_enabled: bool = False


@dataclass
class Config:
    """Main configuration class."""
    crawler: CrawlerConfig = field(default_factory=CrawlerConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    monitoring: MonitoringConfig = field(default_factory=MonitoringConfig)


class ConfigManager:
    """Manages configuration loading and validation."""

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = Path(config_path) if config_path else None
        self._config: Optional[Config] = None

    def load_config(self) -> Config:
        """Load configuration from YAML file, or defaults if no path was given."""
        if self.config_path is None:
            config_data = {}
        else:
            if not self.config_path.exists():
                raise FileNotFoundError(f"Configuration file not found: {self.config_path}")

            with open(self.config_path, 'r') as file:
                config_data = yaml.safe_load(file) or {}

        if not isinstance(config_data, dict):
            raise ValueError("Configuration file must contain a mapping")

        self._config = Config(
            crawler=CrawlerConfig(**(config_data.get('crawler') or {})),
            storage=StorageConfig(**(config_data.get('storage') or {})),
            logging=LoggingConfig(**(config_data.get('logging') or {})),
            monitoring=MonitoringConfig(**(config_data.get('monitoring') or {}))
        )

        self._validate_config()
        return self._config

    def _validate_config(self):
        """Validate configuration values."""
        if not self._config:
            raise ValueError("Configuration not loaded")

        if self._config.crawler.num_workers < 1:
            raise ValueError("num_workers must be at least 1")

        if self._config.crawler.request_timeout <= 0:
            raise ValueError("request_timeout must be positive")

        if self._config.crawler.completion_poll_interval <= 0:
            raise ValueError("completion_poll_interval must be positive")

        if self._config.crawler.chunk_size < 1:
            raise ValueError("chunk_size must be at least 1")

        if self._config.crawler.stats_interval <= 0:
            raise ValueError("stats_interval must be positive")

        storage = self._config.storage
        if Path(storage.text_directory).resolve() == Path(storage.media_directory).resolve():
            raise ValueError("text_directory and media_directory must differ")

        logging.getLogger(__name__).debug("Configuration validation passed")


def load_config(config_path: Optional[str] = None) -> Config:
    """Load configuration from file."""
    return ConfigManager(config_path).load_config()


def default_config() -> Config:
    """Configuration with every value at its default."""
    return ConfigManager().load_config()


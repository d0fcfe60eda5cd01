"""Configuration loading."""
from pathlib import Path
from typing import List, Optional, Dict, Any
import os
import logging
import yaml
from dotenv import load_dotenv

logger = logging.getLogger(__name__)


def load_seed_data(path: Path) -> Dict[str, List[Dict[str, Any]]]:
    """Load seed jobs and candidates from a YAML file.

    Args:
        path: Path to the seed file
    Returns:
        Dict with ``jobs`` and ``candidates`` lists
    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file is not a mapping of lists
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Seed file not found: {path}")
    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError("Seed file must contain a mapping with 'jobs' and 'candidates'")

    seed = {}
    for key in ('jobs', 'candidates'):
        items = data.get(key) or []
        if not isinstance(items, list):
            raise ValueError(f"'{key}' in seed file must be a list")
        seed[key] = items
    return seed


class Config:
    """Configuration manager with environment variable and .env file support."""

    def __init__(self, env_file: Optional[str] = None):
        """Initialize configuration.

        Args:
            env_file: Optional path to .env file
        """
        # Load .env file if it exists (fallback for local development)
        if env_file and os.path.exists(env_file):
            load_dotenv(env_file)
            logger.info(f"Loaded configuration from {env_file}")
        elif os.path.exists(".env"):
            load_dotenv(".env")
            logger.info("Loaded configuration from .env file")
        else:
            logger.debug("No .env file found, using environment variables only")

    def get(self, key: str, default: Any = None, required: bool = False) -> Any:
        """Get configuration value.

        Raises:
            ValueError: If required key is missing
        """
        value = os.getenv(key, default)

        if required and value is None:
            raise ValueError(f"Required configuration key '{key}' is missing")

        return value

    def get_bool(self, key: str, default: bool = False) -> bool:
        value = self.get(key, str(default).lower())
        return str(value).lower() in ('true', '1', 'yes', 'on')

    def get_int(self, key: str, default: int = 0) -> int:
        """Get integer configuration value, falling back to the default when invalid."""
        value = self.get(key, str(default))
        try:
            return int(value)
        except (ValueError, TypeError):
            logger.warning(f"Invalid integer value for {key}: {value}, using default {default}")
            return default

    def get_database_config(self) -> Dict[str, Any]:
        return {
            'url': self.get('DATABASE_URL', 'sqlite:///jobportal.db'),
            'echo': self.get_bool('DATABASE_ECHO', False),
        }

    def get_web_config(self) -> Dict[str, Any]:
        return {
            'host': self.get('WEB_HOST', '127.0.0.1'),
            'port': self.get_int('WEB_PORT', 5000),
            'debug': self.get_bool('WEB_DEBUG', False),
        }

    def get_pagination_config(self) -> Dict[str, int]:
        """Get page size limits for list endpoints."""
        default_limit = self.get_int('DEFAULT_PAGE_SIZE', 20)
        max_limit = self.get_int('MAX_PAGE_SIZE', 100)
        if default_limit < 1:
            logger.warning(f"DEFAULT_PAGE_SIZE must be positive, got {default_limit}; using 20")
            default_limit = 20
        if max_limit < default_limit:
            logger.warning(f"MAX_PAGE_SIZE {max_limit} is below DEFAULT_PAGE_SIZE, raising it")
            max_limit = default_limit
        return {
            'default_limit': default_limit,
            'max_limit': max_limit,
        }

    def get_logging_config(self) -> Dict[str, Any]:
        level_name = str(self.get('LOG_LEVEL', 'INFO')).upper()
        level = logging.getLevelName(level_name)
        if not isinstance(level, int):
            logger.warning(f"Unknown LOG_LEVEL {level_name}, using INFO")
            level = logging.INFO
        return {'level': level}

    def get_all_config(self) -> Dict[str, Any]:
        return {
            'database': self.get_database_config(),
            'web': self.get_web_config(),
            'pagination': self.get_pagination_config(),
            'logging': self.get_logging_config(),
        }

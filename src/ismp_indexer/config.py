"""
Configuration management for the ISMP transaction indexer core.

Loads logging settings from environment variables with sensible defaults.
The attached chain and downstream services are service settings and live in
``ismp_indexer.api.config.Settings``.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env file from project root
_project_root = Path(__file__).parent.parent.parent
_env_file = _project_root / '.env'
if _env_file.exists():
    load_dotenv(_env_file)


class Config:
    """Configuration settings loaded from environment."""

    # Logging
    LOG_LEVEL: str = os.getenv('LOG_LEVEL', 'INFO')
    LOG_JSON_OUTPUT: bool = os.getenv('LOG_JSON_OUTPUT', 'false').lower() in ('1', 'true', 'yes')


# Singleton config instance
config = Config()

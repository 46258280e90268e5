"""
Configuration adapters - Load AppConfig from files and the environment.
"""

from .env_provider import ENV_PREFIX, EnvironmentConfigProvider, parse_env_file
from .file_provider import CONFIG_FILE_NAMES, FileConfigProvider


__all__ = [
    "CONFIG_FILE_NAMES",
    "ENV_PREFIX",
    "EnvironmentConfigProvider",
    "FileConfigProvider",
    "parse_env_file",
]

"""
Utility functions for Django settings configuration.

This module provides environment-specific configuration loading functionality
using python-decouple for managing environment variables across different
deployment environments.
"""

from pathlib import Path

from decouple import Config, RepositoryEnv
from decouple import config as default_config

ENV_FILES = {
    "development": ".env.dev",
    "production": ".env.production",
    "test": ".env.test",
}


def load_environment_config(environment):
    """
    Load environment-specific configuration from the appropriate .env file.

    Args:
        environment (str): The target environment ('development', 'production', 'test')

    Returns:
        Config: A decouple config callable reading from the environment's .env
                file, or the default decouple config when the file is absent
    """
    env_file_name = ENV_FILES.get(environment, ".env")
    env_file_path = Path(__file__).resolve().parent.parent.parent.parent / env_file_name

    if env_file_path.exists():
        print(f"✓ Loading environment: {environment} from {env_file_name}")
        return Config(RepositoryEnv(env_file_path))

    print(f"✗ Warning: {env_file_name} not found, using default config")
    return default_config

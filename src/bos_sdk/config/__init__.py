"""
Configuration management for BOS Python SDK

This module provides the bucket client configuration and its loaders.
"""

from .client_config import (
    BOS_HOST,
    ClientConfig,
    load_config_from_dict,
    load_config_from_json,
    load_config_from_file,
    load_config_from_env,
)

__all__ = [
    'BOS_HOST',
    'ClientConfig',
    'load_config_from_dict',
    'load_config_from_json',
    'load_config_from_file',
    'load_config_from_env',
]

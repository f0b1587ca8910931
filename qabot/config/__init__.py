"""
qabot config: load from env.

Load from env: load_app_config().
"""
from qabot.config.app import AppConfig, load_app_config

__all__ = [
    "AppConfig",
    "load_app_config",
]

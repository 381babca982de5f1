"""
Configuration loading for godotsetup.
"""

from .parser import SetupConfig, load_config, parse_bool

__all__ = ["SetupConfig", "load_config", "parse_bool"]

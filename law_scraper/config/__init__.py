"""
Configuration module for the notice source.

Provides:
- YAML config loading with validation
- Environment variable substitution
"""

from .loader import ConfigLoader, load_source, substitute_env_vars

__all__ = ["ConfigLoader", "load_source", "substitute_env_vars"]

"""
Utility modules for the marketplace API.
"""

from .config import Config
from .logging_config import setup_logging

__all__ = ["Config", "setup_logging"]

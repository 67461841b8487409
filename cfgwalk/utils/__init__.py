"""
Utilities Module
================

Contains utility functions and helper classes.
"""

from .logger import parse_size, setup_logging

__all__ = [
    'parse_size',
    'setup_logging',
]

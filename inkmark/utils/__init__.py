"""
Utility functions and helpers.
"""
from .log_setup import configure_logging

__all__ = ['configure_logging']

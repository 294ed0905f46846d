"""Logging configuration and merge-log sinks for tsmerge."""
from .helpers import get_logger, setup_base_logger

__all__ = ['get_logger', 'setup_base_logger']

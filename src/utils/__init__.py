"""Shared utilities: logging setup."""

from src.utils.logger import setup_logger

__all__ = ["setup_logger"]

"""Concurrency management for webdistill."""

from .manager import ConcurrencyManager

__all__ = ["ConcurrencyManager"]

"""Core orchestration for webdistill."""

from .distiller import Distiller, distill_blocking

__all__ = ["Distiller", "distill_blocking"]

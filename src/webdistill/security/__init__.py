"""Security validation for webdistill."""

from .url_validator import UrlValidationResult, UrlValidator

__all__ = ["UrlValidator", "UrlValidationResult"]

"""Validation of caller-supplied source URLs."""

from __future__ import annotations

import ipaddress
import logging
from dataclasses import dataclass
from urllib.parse import urlparse

from ..errors import ValidationError

logger = logging.getLogger(__name__)


@dataclass
class UrlValidationResult:
    """Result of URL validation."""

    is_valid: bool
    rejection_reason: str | None = None

    @staticmethod
    def valid() -> UrlValidationResult:
        return UrlValidationResult(is_valid=True)

    @staticmethod
    def invalid(reason: str) -> UrlValidationResult:
        return UrlValidationResult(is_valid=False, rejection_reason=reason)


class UrlValidator:
    """
    Checks that a source URL is absolute, http(s), and optionally public.

    The service fetches whatever a caller hands it, so a hosted deployment
    keeps ``block_private_ips`` on to stop requests into its own network.
    A local deployment may turn it off to read pages on the LAN.

    Example:
        validator = UrlValidator()
        result = validator.validate("https://example.com/page")
        if not result.is_valid:
            print(f"Rejected: {result.rejection_reason}")
    """

    ALLOWED_SCHEMES = frozenset({"http", "https"})
    INTERNAL_SUFFIXES = (".internal", ".local", ".localhost", ".localdomain")
    LOCALHOST_NAMES = frozenset({"localhost", "localhost.localdomain"})

    def __init__(self, block_private_ips: bool = True) -> None:
        self.block_private_ips = block_private_ips

    def validate(self, url: str) -> UrlValidationResult:
        if not isinstance(url, str) or not url.strip():
            return UrlValidationResult.invalid("URL is required")

        try:
            parsed = urlparse(url.strip())
            hostname = (parsed.hostname or "").lower()
        except ValueError:
            return UrlValidationResult.invalid("Invalid URL format")

        if parsed.scheme not in self.ALLOWED_SCHEMES:
            return UrlValidationResult.invalid("URL must be an absolute http(s) URL")

        if not hostname:
            return UrlValidationResult.invalid("URL has no domain")

        if not self.block_private_ips:
            return UrlValidationResult.valid()

        if hostname in self.LOCALHOST_NAMES:
            return UrlValidationResult.invalid("Localhost URLs not allowed")

        if hostname.endswith(self.INTERNAL_SUFFIXES):
            return UrlValidationResult.invalid(f"Internal domain '{hostname}' not allowed")

        return self._check_ip_address(hostname) or UrlValidationResult.valid()

    def _check_ip_address(self, hostname: str) -> UrlValidationResult | None:
        """Return a rejection if ``hostname`` is a non-public IP literal."""
        try:
            ip = ipaddress.ip_address(hostname)
        except ValueError:
            # A domain name, not an IP literal
            return None

        if ip.is_loopback:
            return UrlValidationResult.invalid(f"Loopback IP address '{hostname}' not allowed")
        if ip.is_link_local:
            return UrlValidationResult.invalid(f"Link-local IP address '{hostname}' not allowed")
        if ip.is_private or ip.is_reserved:
            return UrlValidationResult.invalid(f"Private IP address '{hostname}' not allowed")
        return None

    def ensure_valid(self, url: str) -> str:
        """
        Validate ``url`` and return it stripped.

        Raises:
            ValidationError: The URL is missing, relative, non-http(s), or blocked
        """
        result = self.validate(url)
        if not result.is_valid:
            logger.debug(f"Rejected URL {url!r}: {result.rejection_reason}")
            raise ValidationError(result.rejection_reason or "Invalid URL")
        return url.strip()

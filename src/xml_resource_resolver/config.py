"""Environment-driven configuration for building resolvers.

Recognized variables:
        ``XML_RESOLVER_LOCAL_PATH``  Cache root. Unset selects the default
                                     install-relative directory; an empty value
                                     disables caching.
        ``XML_RESOLVER_TIMEOUT``     Download timeout in seconds (default 30).
        ``XML_RESOLVER_LOG_LEVEL``   Logging level name used by the CLI.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from .downloader import DEFAULT_TIMEOUT, HttpxDownloader
from .resolver import XmlResolver


@dataclass
class ResolverSettings:
    """Settings container for :class:`~xml_resource_resolver.resolver.XmlResolver`.

    Attributes:
        local_path: Cache root; ``None`` means the default location and ``""``
            disables caching.
        timeout: Download timeout in seconds.
        log_level: Python logging level name.
    """

    local_path: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "ResolverSettings":
        """Create settings from environment variables."""
        timeout = os.getenv("XML_RESOLVER_TIMEOUT")
        return cls(
            local_path=os.getenv("XML_RESOLVER_LOCAL_PATH"),
            timeout=float(timeout) if timeout else DEFAULT_TIMEOUT,
            log_level=os.getenv("XML_RESOLVER_LOG_LEVEL", "INFO").upper(),
        )

    def create_resolver(self) -> XmlResolver:
        return XmlResolver(self.local_path, HttpxDownloader(timeout=self.timeout))

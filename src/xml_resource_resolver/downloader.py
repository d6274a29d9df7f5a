"""Byte transfer from a remote reference into the local cache.

The resolver and retrievers never talk to the network themselves; they hand a
source URL and a destination path to a *downloader*. Any object with a
``download(source, destination)`` method satisfies the contract, which keeps
tests free of network access and lets callers plug in proxies, authenticated
sessions, or offline mirrors.

The default implementation wraps an :class:`httpx.Client`:

        from xml_resource_resolver.downloader import HttpxDownloader

        with HttpxDownloader(timeout=10.0) as downloader:
                downloader.download(
                        "http://www.sat.gob.mx/sitio_internet/cfd/3/cfdv33.xsd",
                        "/tmp/cache/cfdv33.xsd",
                )

Notes:
* Content is written to a sibling temporary file and renamed on success, so a
    failed transfer never leaves a truncated document at the destination.
* Failures always raise :class:`DownloadError`; the downloader never returns
    silently without producing the file.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional, Protocol, Union, runtime_checkable

import httpx

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0

PathLike = Union[str, "os.PathLike[str]"]


class DownloadError(RuntimeError):
    """Raised when a remote resource cannot be stored at its destination."""

    def __init__(self, source: str, destination: PathLike, reason: str) -> None:
        self.source = source
        self.destination = str(destination)
        self.reason = reason
        super().__init__(f"Unable to download {source} to {self.destination}: {reason}")


@runtime_checkable
class Downloader(Protocol):
    """Contract for anything able to copy a remote resource to a local file."""

    def download(self, source: str, destination: PathLike) -> None:
        ...


class HttpxDownloader:
    """Download resources over HTTP(S) with a shared :class:`httpx.Client`.

    Args:
        timeout: Per-request timeout in seconds.
        client: Pre-configured client (custom transport, proxies, headers).
            When given, the caller owns its lifecycle and :meth:`close` leaves
            it open. Otherwise a client is created on the first download and
            released by :meth:`close`.
    """

    def __init__(
        self, timeout: float = DEFAULT_TIMEOUT, client: Optional[httpx.Client] = None
    ) -> None:
        self.timeout = timeout
        self._owns_client = client is None
        self._client = client

    @property
    def client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(timeout=self.timeout, follow_redirects=True)
        return self._client

    def __enter__(self) -> "HttpxDownloader":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_client and self._client is not None:
            self._client.close()
            self._client = None

    def download(self, source: str, destination: PathLike) -> None:
        """Fetch ``source`` and write its body to ``destination``.

        Parent directories are created as needed.

        Raises:
            DownloadError: On transport errors, HTTP error statuses, or when
                the destination cannot be written.
        """
        target = Path(destination)
        partial = target.with_name(target.name + ".part")
        logger.info(f"Downloading {source} to {target}")

        try:
            response = self.client.get(source)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(f"Failed to download {source}: HTTP {e.response.status_code}")
            raise DownloadError(source, target, f"HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            logger.error(f"Failed to download {source}: {e}")
            raise DownloadError(source, target, str(e) or type(e).__name__) from e

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            partial.write_bytes(response.content)
            os.replace(partial, target)
        except OSError as e:
            partial.unlink(missing_ok=True)
            logger.error(f"Failed to write {target}: {e}")
            raise DownloadError(source, target, str(e)) from e

        logger.debug(f"Stored {len(response.content)} bytes at {target}")

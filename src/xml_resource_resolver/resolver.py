"""Resolve remote XSD/XSLT references to locally cached files.

:class:`XmlResolver` is the entry point used by XML tooling that needs a
filesystem path for a schema or transform published on the web. The first
request for a resource downloads it (and everything it imports) below the
resolver's local path; later requests are served from disk with no network
access.

Resolution steps:
        1. Without a local path the resource is returned untouched.
        2. The kind comes from the caller (``kind="xsd"``) or from the
            resource extension (``.xsd`` / ``.xslt``, case-insensitive).
        3. The retriever registered for that kind computes the local path.
        4. The resource is retrieved only if that path does not exist yet.

Example:
        from xml_resource_resolver import XmlResolver

        resolver = XmlResolver("/tmp/cache/")
        path = resolver.resolve("http://example.com/schema.xsd")
        # /tmp/cache/example.com/schema.xsd

        passthrough = XmlResolver("")
        passthrough.resolve("http://example.com/schema.xsd")
        # 'http://example.com/schema.xsd'

Notes:
* An explicit ``kind`` is trusted as given, even when it disagrees with the
    resource extension.
* Errors from the downloader propagate unchanged; nothing is retried.
"""

from __future__ import annotations

import logging
import os
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, Mapping, Optional, Union

from .downloader import Downloader, HttpxDownloader
from .retrievers import XmlRetriever, XsdRetriever, XsltRetriever

logger = logging.getLogger(__name__)

RetrieverFactory = Callable[[str, Downloader], XmlRetriever]


class ResourceKind(str, Enum):
    """Kinds of XML resources the resolver knows how to classify."""

    XSD = "XSD"
    XSLT = "XSLT"
    UNKNOWN = ""


DEFAULT_RETRIEVERS: Dict[str, RetrieverFactory] = {
    ResourceKind.XSD.value: XsdRetriever,
    ResourceKind.XSLT.value: XsltRetriever,
}


class UnsupportedResourceError(RuntimeError):
    """Raised when no retriever is registered for the requested kind."""

    def __init__(self, kind: str, resource: str) -> None:
        self.kind = kind
        self.resource = resource
        super().__init__(f"Unable to handle the resource (Type: {kind}) {resource}")


def default_local_path() -> str:
    """Cache directory used when none is configured.

    Lives under the user cache (``~/.cache/xml-resource-resolver/resources/``)
    so it stays writable regardless of where the package is installed. The
    directory is not created here.
    """
    return os.path.join(
        str(Path.home() / ".cache" / "xml-resource-resolver" / "resources"), ""
    )


def default_downloader() -> Downloader:
    """Downloader used when none is configured."""
    return HttpxDownloader()


def _has_extension(resource: str, extension: str) -> bool:
    suffix = "." + extension
    if len(suffix) > len(resource):
        return False
    return resource.lower().endswith(suffix)


def obtain_type_from_url(url: str) -> ResourceKind:
    """Classify ``url`` by its trailing extension."""
    if _has_extension(url, "xsd"):
        return ResourceKind.XSD
    if _has_extension(url, "xslt"):
        return ResourceKind.XSLT
    return ResourceKind.UNKNOWN


class XmlResolver:
    """Map remote XML resources to local cached copies.

    Args:
        local_path: Cache root. ``None`` selects :func:`default_local_path`;
            an empty string disables caching so :meth:`resolve` returns its
            input unchanged.
        downloader: Transfer capability shared by all retrievers. ``None``
            selects :func:`default_downloader`.
        retrievers: Upper-case kind name to retriever factory mapping;
            defaults to :data:`DEFAULT_RETRIEVERS`. Supply a mapping with
            extra keys (e.g. ``"WSDL"``) to add kinds.
    """

    def __init__(
        self,
        local_path: Optional[Union[str, "os.PathLike[str]"]] = None,
        downloader: Optional[Downloader] = None,
        retrievers: Optional[Mapping[str, RetrieverFactory]] = None,
    ) -> None:
        self._local_path = ""
        self._downloader: Downloader
        self.retrievers: Dict[str, RetrieverFactory] = dict(
            DEFAULT_RETRIEVERS if retrievers is None else retrievers
        )
        self.set_local_path(local_path)
        self.set_downloader(downloader)

    def set_local_path(
        self, local_path: Optional[Union[str, "os.PathLike[str]"]] = None
    ) -> None:
        """Set the cache root (not checked for existence)."""
        if local_path is None:
            local_path = default_local_path()
        self._local_path = os.fspath(local_path)

    def get_local_path(self) -> str:
        return self._local_path

    def has_local_path(self) -> bool:
        return self._local_path != ""

    def set_downloader(self, downloader: Optional[Downloader] = None) -> None:
        if downloader is None:
            downloader = default_downloader()
        self._downloader = downloader

    def get_downloader(self) -> Downloader:
        return self._downloader

    def obtain_type_from_url(self, url: str) -> ResourceKind:
        return obtain_type_from_url(url)

    def new_retriever(self, kind: str) -> Optional[XmlRetriever]:
        """Build the retriever registered for ``kind``, or ``None``."""
        factory = self.retrievers.get(kind)
        if factory is None:
            return None
        return factory(self._local_path, self._downloader)

    def build_path(self, resource: str, kind: str = "") -> str:
        """Return where ``resource`` would be cached, without any I/O.

        Raises:
            UnsupportedResourceError: If no retriever handles the kind.
        """
        if not self.has_local_path():
            return resource
        _, retriever = self._select(resource, kind)
        return retriever.build_path(resource)

    def resolve(self, resource: str, kind: str = "") -> str:
        """Return a local path for ``resource``, downloading it if missing.

        Args:
            resource: Remote reference (URL) of an XSD or XSLT document.
            kind: Explicit kind (``"xsd"``, ``"XSLT"``...). Overrides the
                extension of ``resource`` when not empty.

        Returns:
            The local path, or ``resource`` itself when caching is disabled.

        Raises:
            UnsupportedResourceError: If no retriever handles the kind.
            DownloadError: Propagated from the downloader.
        """
        if not self.has_local_path():
            return resource

        resolved_kind, retriever = self._select(resource, kind)
        local = retriever.build_path(resource)
        if os.path.exists(local):
            logger.debug(f"Cache hit for {resource}: {local}")
            return local

        logger.info(f"Retrieving {resolved_kind} resource {resource}")
        retriever.retrieve(resource)
        return local

    def _select(self, resource: str, kind: str):
        resolved_kind = kind.upper() if kind else self.obtain_type_from_url(resource).value
        retriever = self.new_retriever(resolved_kind)
        if retriever is None:
            logger.error(f"Unsupported resource kind {resolved_kind!r} for {resource}")
            raise UnsupportedResourceError(resolved_kind, resource)
        return resolved_kind, retriever

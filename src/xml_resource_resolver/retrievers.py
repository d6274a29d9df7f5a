"""Per-kind strategies that mirror remote XML documents into a local tree.

A retriever owns two decisions for one kind of document:

* **Where** a remote reference lives on disk (:meth:`XmlRetriever.build_path`).
    The mapping is deterministic and purely lexical:
    ``http://host/some/dir/file.xsd`` -> ``<base_path>/host/some/dir/file.xsd``.
* **What** must be fetched so the local copy is usable offline
    (:meth:`XmlRetriever.retrieve`). Schemas and transforms reference further
    documents (``xs:import``/``xs:include``, ``xsl:import``/``xsl:include``);
    those are fetched recursively and the references inside the cached copy
    are rewritten to relative local paths.

Example:
        from xml_resource_resolver.downloader import HttpxDownloader
        from xml_resource_resolver.retrievers import XsdRetriever

        retriever = XsdRetriever("/tmp/cache", HttpxDownloader())
        local = retriever.retrieve("http://www.sat.gob.mx/sitio_internet/cfd/3/cfdv33.xsd")
        print(local)                        # /tmp/cache/www.sat.gob.mx/sitio_internet/cfd/3/cfdv33.xsd
        print(retriever.retrieved_files())  # every document pulled in by the import graph

Notes:
* References are rewritten on the raw bytes rather than re-serialized through
    ElementTree, so namespace prefixes (which XSD QName attribute values depend
    on) are preserved exactly.
* The history of a ``retrieve`` call guards against import cycles; a document
    is downloaded at most once per call.
"""

from __future__ import annotations

import hashlib
import logging
import os
import posixpath
import re
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Dict, List, Set, Tuple
from urllib.parse import urljoin, urlsplit
from xml.sax.saxutils import escape

from .downloader import Downloader

logger = logging.getLogger(__name__)

XS_NS = "http://www.w3.org/2001/XMLSchema"
XSL_NS = "http://www.w3.org/1999/XSL/Transform"


class RetrieveError(RuntimeError):
    """Raised when a downloaded resource is not a usable XML document."""


class XmlRetriever:
    """Base retriever; subclasses declare which elements carry references.

    Attributes:
        namespace: Namespace URI of the referencing elements.
        reference_tags: Local names of the referencing elements.
        location_attribute: Attribute holding the referenced location.
    """

    namespace: str = ""
    reference_tags: Tuple[str, ...] = ()
    location_attribute: str = ""

    def __init__(self, base_path: str, downloader: Downloader) -> None:
        self.base_path = str(base_path)
        self.downloader = downloader
        self._history: Dict[str, str] = {}
        self._created: Set[str] = set()

    def build_path(self, url: str) -> str:
        """Return the cache location for ``url`` without touching the disk.

        A query string is folded into the file name as a short digest
        (``x.xslt?v=1`` -> ``x.<sha1[:8]>.xslt``) so distinct queries never
        share a cache file.

        Raises:
            ValueError: If ``url`` has no host or path, or its path would
                escape the base directory.
        """
        parts = urlsplit(url)
        host = parts.hostname
        relative = posixpath.normpath(parts.path.lstrip("/")) if parts.path else ""
        if not host or relative in ("", "."):
            raise ValueError(f"Invalid URL: {url}")
        if relative == ".." or relative.startswith("../"):
            raise ValueError(f"URL path escapes the local path: {url}")
        segments = relative.split("/")
        if parts.query:
            digest = hashlib.sha1(parts.query.encode("utf-8")).hexdigest()[:8]
            stem, suffix = posixpath.splitext(segments[-1])
            segments[-1] = f"{stem}.{digest}{suffix}"
        return os.path.join(self.base_path, host, *segments)

    def download(self, url: str) -> str:
        """Download a single document (no references followed).

        Returns:
            The local path of the stored document.

        Raises:
            RetrieveError: If the stored content does not parse as XML; the
                file is removed first.
        """
        local = self.build_path(url)
        self.downloader.download(url, local)
        try:
            ET.parse(local)
        except ET.ParseError as e:
            Path(local).unlink(missing_ok=True)
            logger.error(f"Discarded {local}: not an XML document ({e})")
            raise RetrieveError(f"The resource {url} is not a valid XML document") from e
        return local

    def retrieve(self, url: str) -> str:
        """Download ``url`` and every document it references, recursively.

        On failure every file first written by this call is removed, so a
        partially retrieved document is never left behind in the cache.
        """
        self._history = {}
        self._created = set()
        try:
            return self._retrieve(url)
        except Exception:
            for local in self._created:
                Path(local).unlink(missing_ok=True)
                logger.debug(f"Removed incomplete {local}")
            raise

    def retrieved_files(self) -> Dict[str, str]:
        """Map of remote URL to local path for the last :meth:`retrieve`."""
        return dict(self._history)

    def find_locations(self, root: ET.Element) -> List[str]:
        """Collect referenced locations in document order, without duplicates."""
        tags = {f"{{{self.namespace}}}{name}" for name in self.reference_tags}
        locations: List[str] = []
        for element in root.iter():
            if element.tag not in tags:
                continue
            location = (element.get(self.location_attribute) or "").strip()
            if location and location not in locations:
                locations.append(location)
        return locations

    def _retrieve(self, url: str) -> str:
        target = self.build_path(url)
        if not os.path.exists(target):
            self._created.add(target)
        local = self.download(url)
        self._history[url] = local

        raw = Path(local).read_bytes()
        replacements: Dict[str, str] = {}
        for location in self.find_locations(ET.fromstring(raw)):
            child_url = urljoin(url, location)
            child_local = self._history.get(child_url)
            if child_local is None:
                logger.debug(f"{url} references {child_url}")
                child_local = self._retrieve(child_url)
            relative = os.path.relpath(child_local, os.path.dirname(local))
            relative = relative.replace(os.sep, "/")
            if relative != location:
                replacements[location] = relative

        if replacements:
            Path(local).write_bytes(self._rewrite(raw, replacements))
        return local

    def _rewrite(self, raw: bytes, replacements: Dict[str, str]) -> bytes:
        attribute = re.escape(self.location_attribute.encode("ascii"))
        for old, new in replacements.items():
            new_value = escape(new).encode("utf-8")
            for form in {escape(old, {'"': "&quot;"}), escape(old)}:
                pattern = re.compile(
                    rb"(\b" + attribute + rb"\s*=\s*)([\"'])"
                    + re.escape(form.encode("utf-8")) + rb"\2"
                )
                raw = pattern.sub(
                    lambda m: m.group(1) + m.group(2) + new_value + m.group(2), raw
                )
        return raw


class XsdRetriever(XmlRetriever):
    """Retrieve XML Schema documents with their imports and includes."""

    namespace = XS_NS
    reference_tags = ("import", "include", "redefine", "override")
    location_attribute = "schemaLocation"


class XsltRetriever(XmlRetriever):
    """Retrieve XSL Transform documents with their imports and includes."""

    namespace = XSL_NS
    reference_tags = ("import", "include")
    location_attribute = "href"

"""XML Resource Resolver
=======================

Resolve remote **XML Schema** (``.xsd``) and **XSL Transform** (``.xslt``)
references to local files, downloading and caching them on first access.

Key capabilities
----------------
- Classify a resource by extension or by an explicit caller-supplied kind.
- Deterministic cache layout (``<local_path>/<host>/<url path>``).
- Recursive retrieval of ``xs:import``/``xs:include`` and
  ``xsl:import``/``xsl:include`` references, rewritten to relative local paths.
- Pluggable downloader (default: :class:`~xml_resource_resolver.downloader.HttpxDownloader`).

Minimal quick start
-------------------
>>> from xml_resource_resolver import XmlResolver
>>> resolver = XmlResolver("/tmp/cache/")
>>> resolver.resolve("http://www.sat.gob.mx/sitio_internet/cfd/3/cfdv33.xsd")
'/tmp/cache/www.sat.gob.mx/sitio_internet/cfd/3/cfdv33.xsd'
"""

__version__ = "0.1.0"

from .downloader import Downloader, DownloadError, HttpxDownloader
from .resolver import (
    ResourceKind,
    UnsupportedResourceError,
    XmlResolver,
    default_downloader,
    default_local_path,
    obtain_type_from_url,
)
from .retrievers import RetrieveError, XsdRetriever, XsltRetriever

__all__ = [
    "XmlResolver",
    "ResourceKind",
    "UnsupportedResourceError",
    "obtain_type_from_url",
    "default_local_path",
    "default_downloader",
    "Downloader",
    "DownloadError",
    "HttpxDownloader",
    "RetrieveError",
    "XsdRetriever",
    "XsltRetriever",
]

"""Shared fixtures: an in-memory downloader serving canned documents."""

from pathlib import Path
from typing import Dict, List, Tuple

import pytest

from xml_resource_resolver.downloader import DownloadError


class FakeDownloader:
    """Serve documents from a dict and record every transfer."""

    def __init__(self, documents: Dict[str, str]):
        self.documents = documents
        self.calls: List[Tuple[str, str]] = []

    def download(self, source, destination):
        self.calls.append((source, str(destination)))
        if source not in self.documents:
            raise DownloadError(source, destination, "HTTP 404")
        target = Path(destination)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.documents[source], encoding="utf-8")


SIMPLE_XSD = """<?xml version="1.0" encoding="UTF-8"?>
<xs:schema xmlns:xs="http://www.w3.org/2001/XMLSchema">
  <xs:element name="Comprobante" type="xs:string"/>
</xs:schema>
"""

SIMPLE_XSLT = """<?xml version="1.0" encoding="UTF-8"?>
<xsl:stylesheet version="2.0" xmlns:xsl="http://www.w3.org/1999/XSL/Transform">
  <xsl:output method="text"/>
</xsl:stylesheet>
"""


@pytest.fixture
def fake_downloader():
    return FakeDownloader(
        {
            "http://example.com/schema.xsd": SIMPLE_XSD,
            "http://example.com/SCHEMA.XSD": SIMPLE_XSD,
            "http://example.com/cadena.xslt": SIMPLE_XSLT,
            "http://example.com/schema.txt": SIMPLE_XSD,
        }
    )


@pytest.fixture
def cache_dir(tmp_path):
    return str(tmp_path / "cache") + "/"

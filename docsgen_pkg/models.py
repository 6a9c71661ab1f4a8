"""Data models shared by the converter, localizer and crawler."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class LinkReference:
    """A cross-document link discovered while converting a document.

    suggested_slug comes from the anchor text, not from the registry.
    """

    document_id: str
    suggested_slug: str


@dataclass
class ConversionResult:
    """Markdown produced for one document plus what was discovered in it."""

    markdown: str
    links: List[LinkReference] = field(default_factory=list)
    images: List[str] = field(default_factory=list)
    title: Optional[str] = None


@dataclass
class OutputPage:
    """A page written to the output tree."""

    document_id: str
    path: str
    slug: Optional[str] = None

"""
Slug helpers for Docsgen.

Slugs are derived from link anchor text and reserved per document id for the
lifetime of a crawl. The first reservation for a document id is final.
"""

import re

SLUG_PATTERN = re.compile(r'[^a-z0-9]+')


def slugify(text):
    """Lowercase text and collapse every run of non-alphanumerics into one dash.

    An empty string is a valid result; callers fall back to the raw document id.
    """
    if not text:
        return ''
    return SLUG_PATTERN.sub('-', text.strip().lower()).strip('-')


class SlugRegistry:
    """Maps document ids to assigned slugs and tracks every slug in use."""

    def __init__(self):
        self._by_document = {}
        self._used = set()

    def __contains__(self, document_id):
        return document_id in self._by_document

    def __len__(self):
        return len(self._by_document)

    def slug_for(self, document_id):
        """Return the slug assigned to a document, or None."""
        return self._by_document.get(document_id)

    def is_used(self, slug):
        return slug in self._used

    def reserve(self, document_id, base_slug):
        """Assign a unique slug to document_id, probing base, base-2, base-3, ...

        Repeated calls for the same document return the first assignment no
        matter what base_slug they pass.
        """
        existing = self._by_document.get(document_id)
        if existing is not None:
            return existing

        base = base_slug or document_id
        candidate = base
        suffix = 2
        while candidate in self._used:
            candidate = f"{base}-{suffix}"
            suffix += 1

        self._used.add(candidate)
        self._by_document[document_id] = candidate
        return candidate

    def items(self):
        return self._by_document.items()


def reserve(registry, document_id, base_slug):
    """Reserve a slug for document_id in registry."""
    return registry.reserve(document_id, base_slug)

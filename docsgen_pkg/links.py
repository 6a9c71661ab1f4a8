"""
Document-link grammar.

A document link is an absolute http(s) URL on one of the configured document
hosts whose path reads ``/document/[u/<n>/]d/<id>[/...]``. The id is the
leading run of ``[A-Za-z0-9_-]`` characters of the segment after ``d``.
"""

import re
from typing import Callable, Iterable, List, Optional
from urllib.parse import urlparse

from .models import LinkReference
from .slugs import slugify

DEFAULT_DOC_HOSTS = ('docs.google.com',)
PAGE_PREFIX = 'p'

DOCUMENT_ID_PATTERN = re.compile(r'[A-Za-z0-9_-]+')

# [text](url "optional title"), but not ![alt](src)
MARKDOWN_LINK_PATTERN = re.compile(
    r'(?<!!)\[(?P<text>[^\]]+)\]\(\s*(?P<url>[^)\s]+)(?P<rest>[^)]*)\)'
)


def internal_href(slug: str) -> str:
    """Public path of a non-root page."""
    return f"/{PAGE_PREFIX}/{slug}/"


def default_link_href(document_id: str, suggested_slug: str) -> str:
    return internal_href(suggested_slug)


class DocLinkMatcher:
    """Recognizes links to documents of the supported kind and extracts their id."""

    def __init__(self, hosts: Optional[Iterable[str]] = None):
        self.hosts = {h.strip().lower() for h in (hosts or DEFAULT_DOC_HOSTS) if h and h.strip()}

    def match(self, url: str) -> Optional[str]:
        """Return the document id referenced by url, or None."""
        if not url:
            return None
        try:
            parsed = urlparse(url.strip())
        except ValueError:
            return None

        if parsed.scheme.lower() not in ('http', 'https'):
            return None
        if (parsed.hostname or '').lower() not in self.hosts:
            return None

        segments = parsed.path.split('/')[1:]
        if not segments or segments[0].lower() != 'document':
            return None

        index = 1
        if (len(segments) > index + 1 and segments[index].lower() == 'u'
                and segments[index + 1].isdigit()):
            index += 2

        if len(segments) <= index + 1 or segments[index].lower() != 'd':
            return None

        found = DOCUMENT_ID_PATTERN.match(segments[index + 1])
        if not found:
            return None
        return found.group(0)

    def reference(self, url: str, anchor_text: str) -> Optional[LinkReference]:
        """Build a LinkReference for url, or None when url is not a document link."""
        document_id = self.match(url)
        if document_id is None:
            return None
        return LinkReference(document_id, slugify(anchor_text) or document_id)


def rewrite_markdown_links(markdown: str, matcher: DocLinkMatcher,
                           links: List[LinkReference],
                           link_href: Callable[[str, str], str] = default_link_href) -> str:
    """Rewrite literal markdown links that still point at documents.

    Every rewritten link is appended to links.
    """
    def replace(found):
        text = found.group('text')
        reference = matcher.reference(found.group('url'), text)
        if reference is None:
            return found.group(0)
        links.append(reference)
        href = link_href(reference.document_id, reference.suggested_slug)
        return f"[{text}]({href}{found.group('rest')})"

    return MARKDOWN_LINK_PATTERN.sub(replace, markdown)

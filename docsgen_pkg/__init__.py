"""
Docsgen - publish a graph of linked documents as a static site.

Docsgen crawls documents breadth-first from a root document, converts each one
to HTML through Markdown, gives every linked document a stable slug under
/p/<slug>/, and copies inline and remote images into a content-addressed store.
"""

__version__ = "1.0.0"

from .core import Docsgen, Frontier
from .converter import DocumentConverter
from .assets import AssetLocalizer, ImageCache
from .slugs import SlugRegistry, slugify, reserve
from .client import DocsClient, DocumentFetchError

__all__ = [
    'Docsgen', 'Frontier', 'DocumentConverter', 'AssetLocalizer', 'ImageCache',
    'SlugRegistry', 'slugify', 'reserve', 'DocsClient', 'DocumentFetchError',
]

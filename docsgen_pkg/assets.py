"""
Image localization into a content-addressed store.

Remote images and inline data URIs found in a Markdown or HTML fragment are
written to ``<output>/static/images/<sha256[:16]><ext>`` and the fragment is
rewritten to point at the local copy. Every failure here is soft: the
original source stays in place.
"""

import base64
import binascii
import hashlib
import html
import logging
import os
import re
from urllib.parse import unquote, unquote_to_bytes, urlparse

from .url_validator import SafeRequestor

logger = logging.getLogger('docsgen.assets')

STATIC_PREFIX = '/static/'
IMAGES_URL_PREFIX = '/static/images/'
HASH_PREFIX_LENGTH = 16
FALLBACK_EXTENSION = '.bin'

MEDIA_TYPE_EXTENSIONS = {
    'image/png': '.png',
    'image/jpeg': '.jpg',
    'image/jpg': '.jpg',
    'image/pjpeg': '.jpg',
    'image/gif': '.gif',
    'image/webp': '.webp',
    'image/svg+xml': '.svg',
    'image/bmp': '.bmp',
    'image/tiff': '.tiff',
    'image/x-icon': '.ico',
    'image/vnd.microsoft.icon': '.ico',
    'image/avif': '.avif',
}

URL_EXTENSIONS = {
    '.png': '.png',
    '.jpg': '.jpg',
    '.jpeg': '.jpg',
    '.gif': '.gif',
    '.webp': '.webp',
    '.svg': '.svg',
    '.bmp': '.bmp',
    '.tif': '.tiff',
    '.tiff': '.tiff',
    '.ico': '.ico',
    '.avif': '.avif',
}

MARKDOWN_IMAGE_PATTERN = re.compile(r'(!\[[^\]]*\]\(\s*)([^)\s]+)([^)]*\))')
HTML_IMAGE_PATTERN = re.compile(r'(<img\b[^>]*?\bsrc\s*=\s*)(["\'])(.*?)\2', re.IGNORECASE | re.DOTALL)


def extension_for_media_type(media_type):
    """Map a declared media type to a file extension, or None."""
    if not media_type:
        return None
    return MEDIA_TYPE_EXTENSIONS.get(media_type.split(';')[0].strip().lower())


def extension_for_url(url):
    """Map the file extension of a URL path to a known image extension, or None."""
    try:
        path = urlparse(url).path
    except ValueError:
        return None
    return URL_EXTENSIONS.get(os.path.splitext(path)[1].lower())


def content_hash(data):
    return hashlib.sha256(data).hexdigest()[:HASH_PREFIX_LENGTH]


def decode_data_uri(uri):
    """Decode a ``data:`` URI into (media_type, bytes).

    Raises ValueError when the URI is malformed or the payload does not decode.
    """
    if not uri[:5].lower() == 'data:':
        raise ValueError("Not a data URI")
    header, sep, payload = uri[5:].partition(',')
    if not sep:
        raise ValueError("Data URI has no payload separator")

    params = header.split(';')
    media_type = params[0].strip().lower() or 'text/plain'
    is_base64 = any(p.strip().lower() == 'base64' for p in params[1:])

    if is_base64:
        compact = ''.join(unquote(payload).split())
        try:
            data = base64.b64decode(compact, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ValueError(f"Invalid base64 payload: {e}")
    else:
        data = unquote_to_bytes(payload)

    if not data:
        raise ValueError("Data URI payload is empty")
    return media_type, data


class ImageCache:
    """Per-run map from image source key to local public path.

    A value of None records a source that failed to localize.
    """

    def __init__(self):
        self._entries = {}

    def __contains__(self, key):
        return key in self._entries

    def __len__(self):
        return len(self._entries)

    def get(self, key):
        return self._entries.get(key)

    def set(self, key, local_path):
        self._entries[key] = local_path


class AssetLocalizer:
    def __init__(self, images_dir, requestor=None, cache=None, url_prefix=IMAGES_URL_PREFIX):
        self.images_dir = images_dir
        self.requestor = requestor or SafeRequestor()
        self.cache = cache if cache is not None else ImageCache()
        self.url_prefix = url_prefix
        self.images_written = 0
        self.images_reused = 0

    def localize(self, fragment):
        """Rewrite image sources in a Markdown or HTML fragment to local paths."""
        if not fragment:
            return fragment

        def replace_markdown(found):
            source = found.group(2)
            localized = self.localize_source(source)
            if localized == source:
                return found.group(0)
            return f"{found.group(1)}{localized}{found.group(3)}"

        def replace_html(found):
            source = html.unescape(found.group(3))
            localized = self.localize_source(source)
            if localized == source:
                return found.group(0)
            quote = found.group(2)
            return f"{found.group(1)}{quote}{html.escape(localized, quote=True)}{quote}"

        fragment = MARKDOWN_IMAGE_PATTERN.sub(replace_markdown, fragment)
        return HTML_IMAGE_PATTERN.sub(replace_html, fragment)

    def localize_source(self, source):
        """Return the local public path for an image source, or the source itself."""
        source = source.strip()
        if not source or source.startswith(STATIC_PREFIX):
            return source

        if source[:5].lower() == 'data:':
            return self._localize_data_uri(source) or source

        scheme = source.split(':', 1)[0].lower() if ':' in source else ''
        if scheme in ('http', 'https'):
            return self._localize_remote(source) or source
        return source

    def _localize_data_uri(self, uri):
        key = 'data:' + hashlib.sha256(uri.encode('utf-8')).hexdigest()
        if key in self.cache:
            if self.cache.get(key):
                self.images_reused += 1
            return self.cache.get(key)

        try:
            media_type, data = decode_data_uri(uri)
        except ValueError as e:
            logger.warning(f"Leaving undecodable inline image in place: {e}")
            self.cache.set(key, None)
            return None

        local_path = self.store(data, extension_for_media_type(media_type) or FALLBACK_EXTENSION)
        self.cache.set(key, local_path)
        return local_path

    def _localize_remote(self, url):
        if url in self.cache:
            if self.cache.get(url):
                self.images_reused += 1
            return self.cache.get(url)

        success, result = self.requestor.safe_get(url)
        if not success:
            logger.warning(f"Failed to download image {url}: {result}")
            self.cache.set(url, None)
            return None

        content_type = result.headers.get('Content-Type', '')
        extension = (extension_for_media_type(content_type)
                     or extension_for_url(url)
                     or FALLBACK_EXTENSION)
        local_path = self.store(result.content, extension)
        self.cache.set(url, local_path)
        return local_path

    def store(self, data, extension):
        """Write data under its content hash; an existing file is never rewritten.

        Returns the public path, or None when the file could not be written.
        """
        filename = content_hash(data) + extension
        file_path = os.path.join(self.images_dir, filename)

        if os.path.exists(file_path):
            self.images_reused += 1
            logger.debug(f"Image already stored: {filename}")
            return self.url_prefix + filename

        try:
            os.makedirs(self.images_dir, exist_ok=True)
            with open(file_path, 'wb') as image_file:
                image_file.write(data)
        except (IOError, OSError, PermissionError) as e:
            logger.error(f"Failed to write image {file_path}: {e}")
            return None

        self.images_written += 1
        logger.debug(f"Stored image: {filename}")
        return self.url_prefix + filename

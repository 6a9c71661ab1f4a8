"""
Client for the remote document service.

Fetches document JSON by id and file metadata. The caller supplies an OAuth
access token; obtaining one is outside this package.
"""

import logging
from datetime import datetime

import requests

logger = logging.getLogger('docsgen.client')

DOCS_API = 'https://docs.googleapis.com/v1/documents/{document_id}'
DRIVE_API = 'https://www.googleapis.com/drive/v3/files/{file_id}?fields=createdTime,modifiedTime,name'
USER_AGENT = 'docsgen/1.0.0'


class DocumentFetchError(Exception):
    """A document could not be retrieved. Fatal for a crawl."""


def format_display_date(value):
    """Format a date as e.g. 'March 5, 2024'."""
    return f"{value:%B} {value.day}, {value.year}"


def parse_rfc3339(value):
    """Parse an RFC 3339 timestamp, or return None."""
    if not isinstance(value, str) or not value:
        return None
    normalized = value.strip()
    if normalized.endswith(('Z', 'z')):
        normalized = normalized[:-1] + '+00:00'
    try:
        return datetime.fromisoformat(normalized)
    except ValueError:
        # fromisoformat on older interpreters rejects fractional seconds that
        # are not 3 or 6 digits long
        head, dot, tail = normalized.partition('.')
        if not dot:
            return None
        digits = ''.join(ch for ch in tail if ch.isdigit())
        zone = tail[len(digits):]
        try:
            return datetime.fromisoformat(f"{head}.{digits[:6].ljust(6, '0')}{zone}")
        except ValueError:
            return None


class DocsClient:
    def __init__(self, access_token, session=None, docs_api=DOCS_API, drive_api=DRIVE_API, timeout=30):
        if not access_token:
            raise ValueError("An access token is required")
        self.session = session or requests.Session()
        self.session.headers.update({
            'Authorization': f'Bearer {access_token}',
            'User-Agent': USER_AGENT,
        })
        self.docs_api = docs_api
        self.drive_api = drive_api
        self.timeout = timeout

    def fetch_document(self, document_id):
        """Fetch a document's JSON. Raises DocumentFetchError on any failure."""
        url = self.docs_api.format(document_id=document_id)
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise DocumentFetchError(f"docs fetch error for {document_id}: {e}") from e

        if not response.ok:
            raise DocumentFetchError(
                f"docs fetch error for {document_id}: {response.status_code} {response.text}"
            )
        try:
            return response.json()
        except ValueError as e:
            raise DocumentFetchError(f"docs fetch error for {document_id}: invalid JSON ({e})") from e

    def fetch_created_time(self, file_id):
        """Return the file's creation date formatted for display, or None."""
        url = self.drive_api.format(file_id=file_id)
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise DocumentFetchError(f"metadata fetch error for {file_id}: {e}") from e

        if not response.ok:
            logger.debug(f"No metadata for {file_id}: HTTP {response.status_code}")
            return None
        try:
            metadata = response.json()
        except ValueError:
            return None

        created = parse_rfc3339(metadata.get('createdTime') if isinstance(metadata, dict) else None)
        if created is None:
            return None
        return format_display_date(created)

    def close(self):
        self.session.close()

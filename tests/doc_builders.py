"""Builders for document JSON used across the tests."""

import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from docsgen_pkg.client import DocumentFetchError

DOC_HOST = 'docs.example.com'


def doc_url(document_id, user=None, tail='edit'):
    user_part = f'u/{user}/' if user is not None else ''
    return f'https://{DOC_HOST}/document/{user_part}d/{document_id}/{tail}'


def text_run(content, url=None):
    run = {'content': content}
    if url is not None:
        run['textStyle'] = {'link': {'url': url}}
    return {'textRun': run}


def image_element(object_id):
    return {'inlineObjectElement': {'inlineObjectId': object_id}}


def paragraph(*elements, style=None, bullet=False):
    par = {'elements': list(elements)}
    if style is not None:
        par['paragraphStyle'] = {'namedStyleType': style}
    if bullet:
        par['bullet'] = {'listId': 'list-1'}
    return {'paragraph': par}


def document(*blocks, inline_objects=None, title=None):
    doc = {'body': {'content': list(blocks)}}
    if inline_objects is not None:
        doc['inlineObjects'] = inline_objects
    if title is not None:
        doc['title'] = title
    return doc


def inline_image(content_uri):
    return {
        'inlineObjectProperties': {
            'embeddedObject': {'imageProperties': {'contentUri': content_uri}}
        }
    }


def linking_document(*targets):
    """A document whose paragraphs each link to (anchor_text, document_id)."""
    return document(*[
        paragraph(text_run(anchor, doc_url(target)), text_run('\n'))
        for anchor, target in targets
    ])


class FakeClient:
    """In-memory stand-in for DocsClient."""

    def __init__(self, documents=None, created=None):
        self.documents = dict(documents or {})
        self.created = dict(created or {})
        self.fetched = []

    def fetch_document(self, document_id):
        self.fetched.append(document_id)
        if document_id not in self.documents:
            raise DocumentFetchError(f"docs fetch error for {document_id}: 404")
        return self.documents[document_id]

    def fetch_created_time(self, file_id):
        return self.created.get(file_id)

"""
Document to Markdown/HTML conversion.

Walks the paragraph blocks of a structured document, emits Markdown for
headings, bullets, text runs and inline images, and collects the links to
other documents it finds along the way.
"""

import logging

import mistune

from .links import DocLinkMatcher, default_link_href, rewrite_markdown_links
from .models import ConversionResult

logger = logging.getLogger('docsgen.converter')

HEADING_PREFIXES = {
    'HEADING_1': '# ',
    'HEADING_2': '## ',
    'HEADING_3': '### ',
}
BULLET_PREFIX = '* '

# Inline images may be embedded as data URIs; let them through the renderer.
ALLOWED_DATA_PROTOCOLS = ('data:image/',)


def _field(obj, key):
    """Return obj[key] when obj is a mapping, else None."""
    if isinstance(obj, dict):
        return obj.get(key)
    return None


class DocumentConverter:
    def __init__(self, doc_hosts=None):
        self.matcher = DocLinkMatcher(doc_hosts)
        self.markdown_parser = self.create_markdown_parser()

    def create_markdown_parser(self):
        """Create a Mistune markdown parser with a custom renderer."""
        class CustomRenderer(mistune.HTMLRenderer):
            def __init__(self):
                super().__init__(escape=False, allow_harmful_protocols=ALLOWED_DATA_PROTOCOLS)
            def block_code(self, code, info=None):
                escaped_code = mistune.escape(code)
                return '<pre style="white-space: pre-wrap;"><code>{}</code></pre>'.format(escaped_code)
        return mistune.create_markdown(
            renderer=CustomRenderer(),
            plugins=['table', 'footnotes', 'strikethrough']
        )

    def render_html(self, markdown_text):
        """Convert markdown text to HTML."""
        return self.markdown_parser(markdown_text)

    def convert(self, document, link_href=None):
        """Convert a document to Markdown.

        link_href(document_id, suggested_slug) produces the href written for a
        matched document link; by default it is ``/p/<suggested_slug>/``.
        """
        link_href = link_href or default_link_href
        result = ConversionResult(markdown='')
        parts = []

        inline_objects = _field(document, 'inlineObjects') or {}
        content = _field(_field(document, 'body'), 'content')
        if not isinstance(content, list):
            logger.debug("Document has no body content")
            content = []

        for element in content:
            paragraph = _field(element, 'paragraph')
            if paragraph is None:
                continue
            self.process_paragraph(paragraph, inline_objects, parts, result, link_href)

        markdown_text = ''.join(parts)
        # Links typed as literal markdown never went through the textRun link field.
        result.markdown = rewrite_markdown_links(markdown_text, self.matcher, result.links, link_href)
        if result.title is None:
            title = _field(document, 'title')
            result.title = title if isinstance(title, str) and title else None
        return result

    def to_html(self, document, link_href=None):
        """Convert a document straight to HTML; returns (html, links)."""
        result = self.convert(document, link_href)
        return self.render_html(result.markdown), result.links

    def paragraph_prefix(self, paragraph):
        """Markdown prefix for a paragraph: bullet, heading level or nothing."""
        if _field(paragraph, 'bullet') is not None:
            return BULLET_PREFIX
        style = _field(_field(paragraph, 'paragraphStyle'), 'namedStyleType')
        return HEADING_PREFIXES.get(style, '')

    def process_paragraph(self, paragraph, inline_objects, parts, result, link_href):
        prefix = self.paragraph_prefix(paragraph)
        parts.append(prefix)

        text = []
        plain = []
        elements = _field(paragraph, 'elements')
        for element in elements if isinstance(elements, list) else []:
            text_run = _field(element, 'textRun')
            if text_run is not None:
                text.append(self.process_text_run(text_run, result, link_href))
                content = _field(text_run, 'content')
                plain.append(content if isinstance(content, str) else '')
                continue
            inline_object = _field(element, 'inlineObjectElement')
            if inline_object is not None:
                text.append(self.process_inline_object(inline_object, inline_objects, result))

        emitted = ''.join(text)
        heading_text = ''.join(plain).strip()
        if result.title is None and prefix.startswith('#') and heading_text:
            result.title = heading_text
        parts.append(emitted)
        parts.append('\n')

    def process_text_run(self, text_run, result, link_href):
        text = _field(text_run, 'content')
        if not isinstance(text, str):
            text = ''
        url = _field(_field(_field(text_run, 'textStyle'), 'link'), 'url')
        if not isinstance(url, str) or not url:
            return text

        anchor = text.strip()
        reference = self.matcher.reference(url, anchor)
        if reference is None:
            return f"[{anchor}]({url})"

        result.links.append(reference)
        return f"[{anchor}]({link_href(reference.document_id, reference.suggested_slug)})"

    def process_inline_object(self, inline_object, inline_objects, result):
        object_id = _field(inline_object, 'inlineObjectId')
        if not object_id:
            return ''
        properties = _field(_field(inline_objects, object_id), 'inlineObjectProperties')
        image_properties = _field(_field(properties, 'embeddedObject'), 'imageProperties')
        uri = _field(image_properties, 'contentUri')
        if not isinstance(uri, str) or not uri:
            logger.debug(f"Dropping inline object {object_id}: no content URI")
            return ''
        result.images.append(uri)
        return f"\n![image]({uri})\n"

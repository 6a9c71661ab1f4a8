"""Tests for slug generation and reservation."""

import os
import re

import pytest

import sys
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from docsgen_pkg.slugs import SlugRegistry, reserve, slugify

SLUG_SHAPE = re.compile(r'^([a-z0-9]+(-[a-z0-9]+)*)?$')

SAMPLE_TEXT = [
    'My Page',
    '  Leading and trailing  ',
    'Hello, World!!!',
    '---dashes---',
    'Crème brûlée recipes',
    'Q&A / FAQ',
    'already-a-slug',
    'UPPER_case_Words 2024',
    '!!!',
    '',
    '日本語',
    'a--b__c  d',
]


class TestSlugify:
    """Test cases for slugify."""

    @pytest.mark.parametrize('text, expected', [
        ('My Page', 'my-page'),
        ('Hello, World!!!', 'hello-world'),
        ('  spaced   out  ', 'spaced-out'),
        ('Q&A / FAQ', 'q-a-faq'),
        ('UPPER_case_Words 2024', 'upper-case-words-2024'),
        ('Crème', 'cr-me'),
        ('!!!', ''),
        ('', ''),
    ])
    def test_slugify_examples(self, text, expected):
        """Test slugify with sample text."""
        assert slugify(text) == expected

    def test_slugify_none_is_empty(self):
        """Test slugify with None."""
        assert slugify(None) == ''

    @pytest.mark.parametrize('text', SAMPLE_TEXT)
    def test_slugify_is_idempotent(self, text):
        """Test that slugify is idempotent."""
        once = slugify(text)
        assert slugify(once) == once

    @pytest.mark.parametrize('text', SAMPLE_TEXT)
    def test_slugify_output_shape(self, text):
        """Test the character set of slugify output."""
        result = slugify(text)
        assert SLUG_SHAPE.match(result)
        assert not result.startswith('-')
        assert not result.endswith('-')
        assert '--' not in result


class TestSlugRegistry:
    """Test cases for slug reservation."""

    def test_reserve_returns_base_when_free(self):
        """Test reserving a free slug."""
        registry = SlugRegistry()
        assert registry.reserve('doc-a', 'my-page') == 'my-page'
        assert 'doc-a' in registry
        assert registry.is_used('my-page')

    def test_reserve_is_idempotent_per_document(self):
        """Test that the first reservation for a document is final."""
        registry = SlugRegistry()
        first = registry.reserve('doc-a', 'my-page')
        assert registry.reserve('doc-a', 'other-name') == first
        assert registry.reserve('doc-a', '') == first
        assert not registry.is_used('other-name')
        assert len(registry) == 1

    def test_colliding_documents_get_suffixes(self):
        """Test numbered suffixes for colliding documents."""
        registry = SlugRegistry()
        assert registry.reserve('doc-a', 'intro') == 'intro'
        assert registry.reserve('doc-b', 'intro') == 'intro-2'
        assert registry.reserve('doc-c', 'intro') == 'intro-3'

    def test_suffix_skips_slugs_taken_directly(self):
        """Test that suffix probing skips taken slugs."""
        registry = SlugRegistry()
        registry.reserve('doc-a', 'intro')
        registry.reserve('doc-b', 'intro-2')
        assert registry.reserve('doc-c', 'intro') == 'intro-3'

    def test_empty_base_falls_back_to_document_id(self):
        """Test the document id fallback for an empty base."""
        registry = SlugRegistry()
        assert registry.reserve('AbC123', '') == 'AbC123'

    def test_slug_for_unknown_document(self):
        """Test slug_for with an unknown document."""
        assert SlugRegistry().slug_for('missing') is None

    def test_module_level_reserve(self):
        """Test the module-level reserve helper."""
        registry = SlugRegistry()
        assert reserve(registry, 'doc-a', 'page') == 'page'
        assert reserve(registry, 'doc-b', 'page') == 'page-2'
        assert registry.slug_for('doc-b') == 'page-2'
        assert dict(registry.items()) == {'doc-a': 'page', 'doc-b': 'page-2'}

"""Test configuration and fixtures for Docsgen tests."""

import pytest
import tempfile
import shutil
from pathlib import Path
from unittest.mock import Mock

from doc_builders import FakeClient


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    temp_dir = tempfile.mkdtemp()
    yield temp_dir
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def mock_output_dir(temp_dir):
    """Path of a not-yet-created output directory."""
    return str(Path(temp_dir) / 'dist')


@pytest.fixture
def mock_static_dir(temp_dir):
    """Create a static directory with a stylesheet."""
    static_dir = Path(temp_dir) / 'static'
    static_dir.mkdir()
    (static_dir / 'style.css').write_text('body { margin: 0; }')
    return str(static_dir)


@pytest.fixture
def mock_templates_dir(temp_dir):
    """Create a minimal page template."""
    templates_dir = Path(temp_dir) / 'templates'
    templates_dir.mkdir()
    (templates_dir / 'page.html').write_text(
        "<html><head><title>{{ title }}</title></head>"
        "<body>{{ nav }}<main>{{ content }}</main><footer>{{ last_updated }}</footer></body></html>"
    )
    return str(templates_dir)


@pytest.fixture
def mock_session():
    """Create a mock requests session."""
    session = Mock()
    session.headers = {}
    return session


@pytest.fixture
def fake_client():
    return FakeClient()


@pytest.fixture
def sample_image_data():
    """Sample image data for testing."""
    # Minimal PNG image (1x1 pixel)
    png_data = b'\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01\x08\x02\x00\x00\x00\x90wS\xde\x00\x00\x00\tpHYs\x00\x00\x0b\x13\x00\x00\x0b\x13\x01\x00\x9a\x9c\x18\x00\x00\x00\nIDATx\x9cc\xf8\x00\x00\x00\x01\x00\x01\x00\x00\x00\x00IEND\xaeB`\x82'
    return png_data

"""
Pytest Configuration and Fixtures

This module provides shared fixtures for all tests.
"""
import base64
import json
import os
import sys
import pytest

# Add backend to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from article_store import create_app
from article_store.extensions import db
from article_store.config import TestingConfig
from article_store.store.registry import get_stores


def _make_app(base_dir, backend):
    return create_app(TestingConfig, overrides={
        'FILE_DB_BASE': str(base_dir),
        'STORE_BACKEND': backend,
    })


@pytest.fixture(scope='function')
def base_dir(tmp_path):
    """Empty data directory for one test."""
    path = tmp_path / 'filedb'
    path.mkdir()
    return path


@pytest.fixture(scope='function', params=['sqlite', 'file'])
def backend(request):
    """Run a test once per store backend."""
    return request.param


@pytest.fixture(scope='function')
def app(base_dir):
    """Create a SQLite-backed application for testing."""
    app = _make_app(base_dir, 'sqlite')

    with app.app_context():
        yield app
        db.session.remove()
        db.engine.dispose()


@pytest.fixture(scope='function')
def any_app(base_dir, backend):
    """Application for the backend selected by the ``backend`` fixture."""
    app = _make_app(base_dir, backend)

    with app.app_context():
        yield app
        db.session.remove()
        db.engine.dispose()


@pytest.fixture(scope='function')
def make_app(base_dir):
    """Factory for apps over the shared base directory (restart scenarios)."""
    created = []

    def factory(backend='sqlite'):
        app = _make_app(base_dir, backend)
        created.append(app)
        return app

    yield factory

    for app in created:
        with app.app_context():
            db.session.remove()
            db.engine.dispose()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def stores(any_app):
    """Store bundle of the parametrized backend."""
    return get_stores()


def b64(data: bytes) -> str:
    return base64.b64encode(data).decode('ascii')


@pytest.fixture
def sample_info_data():
    """Sample account info for testing."""
    return {
        'fakeid': 'MzA5MDAwMDAwMA==',
        'nickname': 'Test Account',
        'round_head_img': 'https://example.com/avatar.jpg',
        'completed': False,
        'count': 1,
        'articles': 3,
        'total_count': 120,
    }


def make_article(fakeid, aid, create_time, **extra):
    article = {
        'fakeid': fakeid,
        'aid': aid,
        'link': f'https://mp.example.com/s/{aid}',
        'create_time': create_time,
        'title': f'Article {aid}',
    }
    article.update(extra)
    return article


def make_publish_page(*batches, total_count=10):
    """Publish page with ``publish_info`` encoded as a JSON string, like upstream."""
    return {
        'total_count': total_count,
        'publish_list': [
            {'publish_type': 101, 'publish_info': json.dumps({'appmsgex': list(batch)})}
            for batch in batches
        ],
    }


@pytest.fixture
def sample_publish_page():
    """Two batches: one with two articles, one with a single article."""
    fakeid = 'MzA5MDAwMDAwMA=='
    return make_publish_page(
        [make_article(fakeid, '100_1', 1700000100), make_article(fakeid, '100_2', 1700000100)],
        [make_article(fakeid, '200_1', 1700000200)],
        total_count=42,
    )


@pytest.fixture
def sample_html_data():
    """Sample html snapshot payload."""
    return {
        'fakeid': 'MzA5MDAwMDAwMA==',
        'url': 'https://mp.example.com/s/100_1',
        'title': 'Article 100_1',
        'commentID': '2247483650',
        'file_base64': b64(b'<html><body>hello</body></html>'),
        'file_type': 'text/html',
    }

"""
Shared fixtures for the Smart Blocks tests.

Run with: pytest tests/ -v
Install with: pip install -e ".[dev]"
"""

import os
import shutil
import tempfile
from urllib.parse import urlsplit

import pytest
import requests
from requests.adapters import BaseAdapter
from requests.structures import CaseInsensitiveDict
from flask import Flask

from smartblocks import SmartBlocks
from smartblocks.client import BlockCollection

API_BASE = 'http://blocks.test/api/blocks'


class FlaskTestAdapter(BaseAdapter):
    """requests transport that hands every request to a Flask test client"""

    def __init__(self, app):
        super().__init__()
        self.client = app.test_client()
        self.sent = []

    def send(self, request, **kwargs):
        parts = urlsplit(request.url)
        path = parts.path + (f"?{parts.query}" if parts.query else '')
        self.sent.append((request.method, path))

        result = self.client.open(
            path,
            method=request.method,
            data=request.body,
            headers=dict(request.headers),
        )

        response = requests.Response()
        response.status_code = result.status_code
        response.headers = CaseInsensitiveDict(result.headers)
        response._content = result.get_data()
        response.encoding = 'utf-8'
        response.url = request.url
        response.request = request
        return response

    def close(self):
        pass


class DownAdapter(BaseAdapter):
    """requests transport for a server that cannot be reached"""

    def send(self, request, **kwargs):
        raise requests.ConnectionError(f"Connection refused: {request.url}")

    def close(self):
        pass


def make_app(db_dir):
    app = Flask(__name__)
    app.config["TESTING"] = True
    app.config["SECRET_KEY"] = "test-secret"
    app.config["DB_DIR"] = db_dir
    app.config["BLOCKS_DB"] = os.path.join(db_dir, "blocks.db")
    app.config["LOGS_DB"] = os.path.join(db_dir, "app_logs.db")
    SmartBlocks(app)
    return app


@pytest.fixture
def tmp_db_dir():
    """Create a temporary directory for test databases, cleaned up after."""
    d = tempfile.mkdtemp(prefix="smartblocks-test-")
    yield d
    shutil.rmtree(d, ignore_errors=True)


@pytest.fixture
def app(tmp_db_dir):
    """Flask app with the blocks API registered on a throwaway database."""
    return make_app(tmp_db_dir)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def adapter(app):
    return FlaskTestAdapter(app)


@pytest.fixture
def store(adapter):
    """BlockCollection talking to the test app through requests."""
    session = requests.Session()
    session.mount('http://blocks.test', adapter)
    collection = BlockCollection(base_url=API_BASE, session=session)
    yield collection
    collection.close()
    session.close()


@pytest.fixture
def offline_store():
    """BlockCollection whose server is unreachable."""
    session = requests.Session()
    session.mount('http://blocks.test', DownAdapter())
    collection = BlockCollection(base_url=API_BASE, session=session)
    yield collection
    session.close()


def _block_payload(**overrides):
    payload = {
        'title': 'Figma',
        'description': 'Collaborative interface design',
        'url': 'https://figma.com',
        'color': 'bg-purple-500',
        'category': 'Technology',
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def block_payload():
    """Builder for a valid create payload with optional overrides."""
    return _block_payload


@pytest.fixture
def make_block(client):
    """Create a block through the API and return it."""
    def _make(**overrides):
        response = client.post("/api/blocks", json=_block_payload(**overrides))
        assert response.status_code == 201, response.get_json()
        return response.get_json()['data']
    return _make

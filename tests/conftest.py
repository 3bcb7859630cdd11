"""
Shared fixtures for the Folioboard test-suite.
Run with: pytest -v

NOTE: pytest is listed under extras_require["dev"] in setup.py.
Install with: pip install -e ".[dev]"
"""

import os
import shutil
import tempfile

import pytest
from flask import Flask

from folioboard import Folioboard
from folioboard.core.config import Config
from folioboard.gateway import InMemoryGateway, UploadFile

ADMIN_EMAIL = 'admin@example.com'
ADMIN_PASSWORD = 'correct-horse'


@pytest.fixture
def tmp_db_dir():
    """Create a temporary directory for test databases, cleaned up after."""
    d = tempfile.mkdtemp(prefix="folioboard-test-")
    yield d
    shutil.rmtree(d, ignore_errors=True)


@pytest.fixture(autouse=True)
def log_db(tmp_db_dir, monkeypatch):
    """Keep the persistent log out of the working directory."""
    path = os.path.join(tmp_db_dir, "app_logs.db")
    monkeypatch.setattr(Config, "LOG_DB", path)
    return path


@pytest.fixture
def gateway():
    return InMemoryGateway(users={ADMIN_EMAIL: ADMIN_PASSWORD})


@pytest.fixture
def make_file():
    """Factory for in-memory image uploads."""
    def _make(name="shot.png", content=b"\x89PNG\r\n\x1a\nfake", content_type="image/png"):
        return UploadFile(name, content, content_type)
    return _make


@pytest.fixture
def app(tmp_db_dir, log_db):
    """Flask app with Folioboard on the in-memory backend."""
    app = Flask(__name__)
    app.config["TESTING"] = True
    app.config["SECRET_KEY"] = "test-secret"
    app.config["LOG_DB"] = log_db
    app.config["GATEWAY_BACKEND"] = "memory"
    app.config["MEMORY_GATEWAY_USERS"] = {ADMIN_EMAIL: ADMIN_PASSWORD}
    Folioboard(app)
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def store_gateway(app):
    """Gateway sharing the app's in-memory store, for seeding rows."""
    return app.extensions["folioboard"].public_gateway


@pytest.fixture
def credentials():
    return ADMIN_EMAIL, ADMIN_PASSWORD

"""Fixtures for the REST API tests.

``api`` is a FastAPI ``TestClient`` over an app built on the parametrised
``storage`` fixture, so every HTTP test runs against both backends.
"""
import pytest
from fastapi.testclient import TestClient

from interface.web.app import create_app


@pytest.fixture
def app(storage):
    return create_app(storage)


@pytest.fixture
def api(app):
    """TestClient over the app."""
    with TestClient(app) as client:
        yield client

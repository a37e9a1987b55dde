"""Shared fixtures."""

import httpx
import pytest
from gateway.model import ModelManager
from gateway.server import create_app


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def mm():
    return ModelManager()


@pytest.fixture
def app(mm):
    """A fresh app with its own task store."""
    return create_app(mm=mm)


@pytest.fixture
def client(app):
    """In-process async test client."""
    transport = httpx.ASGITransport(app=app)  # type: ignore[arg-type]
    return httpx.AsyncClient(transport=transport, base_url="http://test")

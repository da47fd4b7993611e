"""Shared test fixtures."""

import os

# Settings require a signing secret; set one before any src import
os.environ.setdefault("JWT_SECRET", "test-secret-do-not-use-in-production")

import pytest
from httpx import ASGITransport, AsyncClient

from src.main import app


@pytest.fixture
async def client() -> AsyncClient:
    """Async HTTP client for testing FastAPI endpoints."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

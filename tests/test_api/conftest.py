"""Pytest configuration for API tests."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from bearos.api.routes import rejection_handler, router
from bearos.api.websocket import websocket_manager
from bearos.engine import Rejection
from bearos.services.table_service import table_service


@pytest.fixture
def test_app():
    """Create a test FastAPI app without lifespan dependencies."""
    app = FastAPI()
    app.add_exception_handler(Rejection, rejection_handler)
    app.include_router(router)
    return app


@pytest.fixture
def client(test_app):
    """Create a test client over a clean, in-memory table service."""
    table_service.tables.clear()
    table_service._locks.clear()
    table_service.set_services(None, None)
    table_service.auto_clear = False
    table_service.add_listener(websocket_manager.broadcast_state)
    websocket_manager.active_connections.clear()
    with TestClient(test_app, raise_server_exceptions=False) as client:
        yield client


@pytest.fixture
def table_id(client):
    """A table owned by alice with bob seated."""
    response = client.post("/tables", json={"player_name": "alice"})
    table_id = response.json()["table_id"]
    client.post(f"/tables/{table_id}/join", json={"player_name": "bob"})
    return table_id

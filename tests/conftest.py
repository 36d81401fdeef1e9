from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from api import create_app
from models import storage

PASSWORD = "Abcd1234"


@pytest.fixture
def app():
    app = create_app("testing")
    yield app
    storage.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def app_ctx(app):
    with app.app_context():
        yield app


@pytest.fixture
def manager(app_ctx):
    return app_ctx.extensions["session_manager"]


@pytest.fixture
def user_service(app_ctx):
    return app_ctx.extensions["user_service"]


@pytest.fixture
def registered(manager):
    """A freshly registered user (AuthResult)."""
    return manager.register("a@x.com", PASSWORD, "Ada", "Lovelace")


def register_via_api(client, email="a@x.com", password=PASSWORD):
    resp = client.post(
        "/api/v1/auth/register",
        json={"email": email, "password": password, "first_name": "Ada", "last_name": "Lovelace"},
    )
    assert resp.status_code == 201, resp.get_json()
    return resp.get_json()["data"]


def bearer(access_token: str) -> dict:
    return {"Authorization": f"Bearer {access_token}"}

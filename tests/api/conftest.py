"""API test fixtures: TestClient over in-memory services scoped to a test studio."""

import pytest
from starlette.testclient import TestClient

from api.app import build_services, create_app
from core.config import FinanceConfig
from utils.timezone import today_in

STUDIO_HEADER = {"X-Studio-ID": "00000000-0000-0000-0000-000000000001"}
OTHER_STUDIO_HEADER = {"X-Studio-ID": "00000000-0000-0000-0000-000000000002"}
CLIENT_ID = "00000000-0000-0000-0000-0000000000c1"


# =============================================================================
# SERVICES & APP
# =============================================================================


@pytest.fixture
def config():
    return FinanceConfig(timezone="UTC")


@pytest.fixture
def services(config):
    return build_services(config)


@pytest.fixture
def app(services, config):
    return create_app(services, config)


# =============================================================================
# CLIENT FIXTURES
# =============================================================================


@pytest.fixture
def client(app):
    """Test client sending the primary studio's header."""
    c = TestClient(app, raise_server_exceptions=False)
    c.headers.update(STUDIO_HEADER)
    return c


@pytest.fixture
def anonymous_client(app):
    """Test client without a studio header."""
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def other_studio_client(app):
    c = TestClient(app, raise_server_exceptions=False)
    c.headers.update(OTHER_STUDIO_HEADER)
    return c


# =============================================================================
# HELPERS
# =============================================================================


@pytest.fixture
def invoice_payload():
    """Factory for create-invoice data."""
    return _invoice_payload


def _invoice_payload(**overrides) -> dict:
    # 450.00 subtotal, 20% tax, 540.00 total
    payload = {
        "client_id": CLIENT_ID,
        "issue_date": "2026-01-10",
        "due_date": "2026-02-09",
        "line_items": [
            {"description": "Portrait session", "quantity": 1, "unit_price_cents": 30000},
            {"description": "Prints", "quantity": 3, "unit_price_cents": 5000},
        ],
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def act(client):
    """POST /api/actions and return the response."""

    def _act(domain: str, action: str, data: dict | None = None):
        return client.post(
            "/api/actions",
            json={"domain": domain, "action": action, "data": data or {}},
        )

    return _act


@pytest.fixture
def create_invoice(act):
    """Create an invoice through the API and return its JSON."""

    def _create(**overrides) -> dict:
        resp = act("invoice", "create", _invoice_payload(**overrides))
        assert resp.status_code == 200, resp.text
        return resp.json()["data"]

    return _create


@pytest.fixture
def sent_invoice(act, create_invoice):
    invoice = create_invoice()
    resp = act("invoice", "send", {"id": invoice["id"]})
    assert resp.status_code == 200, resp.text
    return resp.json()["data"]


@pytest.fixture
def today(config):
    return today_in(config.timezone)

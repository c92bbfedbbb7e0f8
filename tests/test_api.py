from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from agency.errors import BackendError
from agency.pricing.config import PriceConfig
from agency.search.orchestrator import SearchOrchestrator
from agency.state.store import SessionStore
from agency.ticketing.booking import HoldResult
from agency.ticketing.pnr import PNRLookup
from agency.types import CustomerSegment
from main import api, app


class StubCarrier:
    def __init__(self, code, backend, quotes):
        self.code = code
        self.backend = backend
        self.quotes = quotes

    async def search(self, req, direct_only=True):
        return [q for q in self.quotes if not direct_only or q.outbound.stops == 0]


def _configs(segment):
    segment = CustomerSegment(segment)
    if segment == CustomerSegment.PAGE:
        return PriceConfig.from_row({"one_way_fee": 30000}, segment)
    if segment == CustomerSegment.CUSTOM:
        return PriceConfig.from_row({"one_way_fee": 10000, "round_trip_fee_vna": 40000}, segment)
    return PriceConfig.zero(segment)


@pytest.fixture
def client(make_quote):
    store = MagicMock()
    store.get_config.side_effect = _configs
    store.loaded = True
    api.state.price_configs = store
    api.state.sessions = SessionStore(ttl_seconds=600)
    api.state.orchestrator = SearchOrchestrator(
        StubCarrier("VJ", "VietJet", [make_quote(carrier="VJ", fare=600_000)]),
        StubCarrier("VNA", "Vietnam Airlines", [make_quote(stops=1, fare=900_000), make_quote(carrier="OZ", stops=1, fare=800_000)]),
    )
    api.state.booking = MagicMock()
    api.state.reprice = MagicMock()
    api.state.pnr = MagicMock()
    api.state.mail = MagicMock()
    api.state.lowfare = MagicMock()
    return TestClient(app)


def test_health(client):
    assert client.get("/health").json()["status"] == "healthy"


def test_detailed_health(client):
    r = client.get("/health/detailed")
    assert r.status_code == 200
    assert set(r.json()["checks"]) == {"sessions", "price_configs"}


def test_price_config_endpoint(client):
    assert client.get("/price-configs/page").json()["one_way_fee"] == 30000
    assert client.get("/price-configs/vip").status_code == 404


def test_quote_price_endpoint(client, make_quote):
    body = {"quote": make_quote(fare=1_000_000).model_dump(mode="json"), "trip_type": "OW", "segment": "page"}
    data = client.post("/quotes/price", json=body).json()
    assert data["final_price"] == 1_030_000
    assert data["display_price"] == "1.030.000"


def test_search_persists_staff_state(client):
    r = client.post("/search", headers={"x-staff-id": "staff-7"},
                    json={"departure": "ICN", "arrival": "HAN", "departure_date": "2026-04-24"})
    assert r.status_code == 200
    data = r.json()
    assert data["results"]["VJ"]["flight_type"] == "direct"
    assert data["results"]["VNA"]["flight_type"] == "connecting"
    assert data["state"]["status"] == {"VJ": "success", "VNA": "success"}
    assert [p["quote"]["outbound"]["carrier"] for p in data["view"]["others"]] == ["OZ"]

    saved = client.get("/sessions/staff-7/state").json()
    assert saved["state"]["has_searched"] is True
    assert saved["view"]["notice"] is not None


def test_search_rejects_invalid_request(client):
    r = client.post("/search", json={"departure": "ICN", "arrival": "ICN", "departure_date": "2026-04-24"})
    assert r.status_code == 400


def test_state_actions(client):
    r = client.post("/sessions/staff-1/state", json={"type": "select_segment", "payload": {"segment": "page"}})
    assert r.json()["state"]["segment"] == "page"
    r = client.post("/sessions/staff-1/state", json={"type": "set_airline_filter", "payload": {"airline": "XX"}})
    assert r.status_code == 400
    assert "error" in r.json()


def test_backend_error_maps_to_502(client, make_quote):
    client_state = api.state.booking
    client_state.hold_vietjet = AsyncMock(side_effect=BackendError("booking", "HTTP error! status: 500", 500))
    body = {
        "quote": make_quote(carrier="VJ", booking_key="K").model_dump(mode="json"),
        "passengers": [{"last_name": "kim", "first_name": "min"}],
    }
    r = client.post("/bookings/vj", json=body)
    assert r.status_code == 502
    assert r.json()["backend"] == "booking"


def test_hold_vna(client, make_quote):
    api.state.booking.hold_vietnam_airlines = AsyncMock(return_value=HoldResult(success=True, code="XYZ789"))
    body = {
        "quote": make_quote().model_dump(mode="json"),
        "passengers": [{"last_name": "kim", "first_name": "min"}],
        "fare_type": "ADT",
    }
    r = client.post("/bookings/vna", json=body)
    assert r.json() == {"success": True, "code": "XYZ789", "deadline": None, "message": None}


def test_pnr_routes(client):
    api.state.pnr.list_files = AsyncMock(return_value=["https://cdn.example.test/a.png"])
    api.state.pnr.lookup = AsyncMock(return_value=PNRLookup(pnr="ABC123", carrier="VJ", found=False))

    files = client.get("/pnr/abc123/files").json()
    assert files == {"pnr": "ABC123", "files": ["https://cdn.example.test/a.png"]}
    assert client.get("/pnr/VJ/ABC123").status_code == 404
    api.state.pnr.lookup.assert_awaited_once_with("VJ", "ABC123")


def test_reprice_check_without_valid_pnrs(client):
    api.state.reprice.check_many = AsyncMock(return_value=[])
    assert client.post("/reprice/check", json={"pnrs": "12"}).status_code == 400


def test_email_ticket_returns_typo_warning(client):
    api.state.mail.queue = AsyncMock(return_value=True)
    r = client.post("/tickets/email", json={
        "email": "an@gmial.com", "customer_name": "An", "pnrs": "ABC123", "confirm_non_gmail": True,
    })
    assert r.json()["queued"] is True
    assert r.json()["warning"]


def test_custom_edit_keeps_stored_custom_row(client, make_quote):
    client.post("/sessions/staff-2/state", json={"type": "select_segment", "payload": {"segment": "custom"}})
    r = client.post("/sessions/staff-2/state",
                    json={"type": "update_custom_config", "payload": {"patch": {"one_way_fee": 20000}}})
    custom = r.json()["state"]["custom_config"]
    assert custom["one_way_fee"] == 20000
    assert custom["groups"]["flag"]["round_trip_fee"] == 40000

    # quoting the custom segment uses the staff member's edited copy
    body = {"quote": make_quote(fare=1_000_000).model_dump(mode="json"), "trip_type": "OW", "segment": "custom"}
    priced = client.post("/quotes/price", json=body, headers={"x-staff-id": "staff-2"}).json()
    assert priced["final_price"] == 1_020_000
    assert client.post("/quotes/price", json=body).json()["final_price"] == 1_010_000


def test_payload_cannot_override_action_type(client):
    r = client.post("/sessions/staff-4/state",
                    json={"type": "select_segment", "payload": {"type": "logout", "segment": "live"}})
    assert r.status_code == 200
    assert r.json()["state"]["segment"] == "live"

import pytest

from agency.errors import ValidationError
from agency.pricing.config import PriceConfig
from agency.state.reducer import NO_BUDGET_FLIGHTS_MESSAGE, SearchState, reduce
from agency.types import CarrierGroup, CarrierSearchResult, CustomerSegment, SearchRequest

REQ = SearchRequest(departure="ICN", arrival="HAN", departure_date="2026-04-24")


def _started(state=None, req=REQ):
    return reduce(state, {"type": "search_started", "request": req})


def test_select_segment():
    state = reduce(None, {"type": "select_segment", "segment": "live"})
    assert state.segment == CustomerSegment.LIVE
    with pytest.raises(ValidationError):
        reduce(state, {"type": "select_segment", "segment": "vip"})


def test_reduce_does_not_mutate_input():
    before = SearchState()
    after = reduce(before, {"type": "set_airline_filter", "airline": "VJ"})
    assert before.airline_filter == "all"
    assert after.airline_filter == "VJ"


def test_search_started_resets_results(make_quote):
    state = SearchState(vietjet=[make_quote(carrier="VJ")], messages=["old"])
    state = _started(state)
    assert state.has_searched
    assert state.vietjet == [] and state.messages == []
    assert state.status == {"VJ": "pending", "VNA": "pending"}
    assert state.is_loading
    assert not state.vietjet_domestic_error


def test_search_started_accepts_plain_dict():
    state = reduce(None, {"type": "search_started",
                          "request": {"departure": "HAN", "arrival": "SGN", "departure_date": "2026-04-24"}})
    assert state.request.departure == "HAN"
    assert state.vietjet_domestic_error


def test_budget_results(make_quote):
    state = _started()
    ok = reduce(state, {"type": "carrier_result",
                        "result": CarrierSearchResult(carrier="VJ", status_code=200,
                                                      quotes=[make_quote(carrier="VJ")], flight_type="direct")})
    assert ok.status["VJ"] == "success"
    assert len(ok.vietjet) == 1
    assert ok.is_loading  # flag carrier still pending

    none = reduce(state, {"type": "carrier_result",
                          "result": CarrierSearchResult(carrier="VJ", status_code=404, error="x")})
    assert none.status["VJ"] == "no_flights"
    assert none.messages == [NO_BUDGET_FLIGHTS_MESSAGE]

    failed = reduce(state, {"type": "carrier_result",
                            "result": {"carrier": "VJ", "status_code": 500, "error": "Lỗi API VietJet"}})
    assert failed.status["VJ"] == "error"
    assert failed.messages == [NO_BUDGET_FLIGHTS_MESSAGE]


def test_budget_domestic_error():
    state = _started(req=SearchRequest(departure="HAN", arrival="SGN", departure_date="2026-04-24"))
    state = reduce(state, {"type": "carrier_result",
                           "result": CarrierSearchResult(carrier="VJ", status_code=503, is_domestic_error=True)})
    assert state.status["VJ"] == "domestic_error"
    assert state.vietjet_domestic_error
    assert state.messages == []


def test_flag_result_preselects_flight_type(make_quote):
    state = _started()
    with_direct = reduce(state, {"type": "carrier_result", "result": CarrierSearchResult(
        carrier="VNA", status_code=200, quotes=[make_quote(stops=1), make_quote(stops=0)])})
    assert with_direct.flight_type_filter == "direct"
    assert with_direct.status["VNA"] == "success"

    connecting_only = reduce(state, {"type": "carrier_result", "result": CarrierSearchResult(
        carrier="VNA", status_code=200, quotes=[make_quote(stops=1)])})
    assert connecting_only.flight_type_filter == "all"


def test_loading_stops_after_both_carriers(make_quote):
    state = _started()
    state = reduce(state, {"type": "carrier_result",
                           "result": CarrierSearchResult(carrier="VNA", status_code=404, error="x")})
    state = reduce(state, {"type": "carrier_result",
                           "result": CarrierSearchResult(carrier="VJ", status_code=200,
                                                         quotes=[make_quote(carrier="VJ")])})
    assert not state.is_loading
    assert state.status == {"VJ": "success", "VNA": "no_flights"}


def test_filters_are_validated():
    state = reduce(None, {"type": "set_flight_type_filter", "flight_type": "connecting"})
    assert state.flight_type_filter == "connecting"
    with pytest.raises(ValidationError):
        reduce(state, {"type": "set_flight_type_filter", "flight_type": "nonstop"})
    with pytest.raises(ValidationError):
        reduce(state, {"type": "set_airline_filter", "airline": "KE"})


def test_update_custom_config():
    state = reduce(None, {"type": "update_custom_config", "patch": {"round_trip_fee_vietjet": 40000}})
    state = reduce(state, {"type": "update_custom_config", "patch": {"one_way_fee": 15000}})
    assert state.custom_config.segment == CustomerSegment.CUSTOM
    assert state.custom_config.one_way_fee == 15000
    assert state.custom_config.for_group(CarrierGroup.BUDGET).round_trip_fee == 40000


def test_first_custom_edit_starts_from_stored_row():
    stored = PriceConfig.from_row({"one_way_fee": 10000, "round_trip_fee_vna": 40000}, CustomerSegment.CUSTOM)
    state = reduce(None, {"type": "update_custom_config", "base": stored, "patch": {"one_way_fee": 20000}})
    assert state.custom_config.one_way_fee == 20000
    assert state.custom_config.for_group(CarrierGroup.FLAG).round_trip_fee == 40000

    # later edits build on the session copy, not on the stored row
    state = reduce(state, {"type": "update_custom_config", "base": PriceConfig.zero(CustomerSegment.CUSTOM),
                           "patch": {"round_trip_fee_vietjet": 5000}})
    assert state.custom_config.one_way_fee == 20000
    assert state.custom_config.for_group(CarrierGroup.FLAG).round_trip_fee == 40000


def test_unknown_action():
    with pytest.raises(ValidationError):
        reduce(None, {"type": "logout"})


def test_state_survives_json_round_trip(make_quote):
    state = reduce(_started(), {"type": "update_custom_config", "patch": {"one_way_fee": 1}})
    state = reduce(state, {"type": "carrier_result", "result": CarrierSearchResult(
        carrier="VNA", status_code=200, quotes=[make_quote(stops=0)])})
    assert SearchState.model_validate(state.model_dump(mode="json")) == state

"""Per-staff search screen state and its single update function.

Every change goes through `reduce(state, action)`, which returns a new
SearchState and never mutates its input. Actions are plain dicts with a
"type" key, so they can arrive over HTTP unchanged.
"""

from typing import Any, Dict, List, Literal, Mapping, Optional
from pydantic import BaseModel, Field

from agency.classify.classifier import FlightTypeFilter, default_flight_type
from agency.data.airports import should_skip_budget_carrier
from agency.errors import ValidationError
from agency.obs.logger import log_event
from agency.pricing.config import PriceConfig
from agency.types import CarrierSearchResult, CustomerSegment, FlightQuote, SearchRequest

CarrierStatus = Literal["idle", "pending", "success", "no_flights", "error", "domestic_error"]
AirlineFilter = Literal["all", "VJ", "VNA"]

AIRLINE_FILTERS = ("all", "VJ", "VNA")
FLIGHT_TYPE_FILTERS = ("all", "direct", "connecting")

NO_BUDGET_FLIGHTS_MESSAGE = "Không có chuyến bay VietJet"


def _idle() -> Dict[str, CarrierStatus]:
    return {"VJ": "idle", "VNA": "idle"}


class SearchState(BaseModel):
    segment: Optional[CustomerSegment] = None
    custom_config: Optional[PriceConfig] = None
    request: Optional[SearchRequest] = None
    has_searched: bool = False
    vietjet: List[FlightQuote] = Field(default_factory=list)
    vietnam_airlines: List[FlightQuote] = Field(default_factory=list)
    status: Dict[str, CarrierStatus] = Field(default_factory=_idle)
    messages: List[str] = Field(default_factory=list)
    vietjet_domestic_error: bool = False
    airline_filter: AirlineFilter = "all"
    flight_type_filter: FlightTypeFilter = "all"

    @property
    def is_loading(self) -> bool:
        return any(s == "pending" for s in self.status.values())


def _select_segment(state: SearchState, payload: Mapping[str, Any]) -> SearchState:
    try:
        segment = CustomerSegment(payload.get("segment"))
    except ValueError as e:
        raise ValidationError(f"Unknown customer segment: {payload.get('segment')}") from e
    return state.model_copy(update={"segment": segment})


def _search_started(state: SearchState, payload: Mapping[str, Any]) -> SearchState:
    request = payload.get("request")
    if not isinstance(request, SearchRequest):
        request = SearchRequest.model_validate(request or {})
    return state.model_copy(update={
        "request": request,
        "has_searched": True,
        "vietjet": [],
        "vietnam_airlines": [],
        "status": {"VJ": "pending", "VNA": "pending"},
        "messages": [],
        "vietjet_domestic_error": should_skip_budget_carrier(request.departure, request.arrival),
    })


def _budget_result(state: SearchState, result: CarrierSearchResult) -> SearchState:
    status = dict(state.status)
    if result.is_domestic_error:
        status["VJ"] = "domestic_error"
        return state.model_copy(update={"status": status, "vietjet_domestic_error": True})
    if result.status_code == 200 and result.quotes:
        status["VJ"] = "success"
        return state.model_copy(update={"status": status, "vietjet": list(result.quotes)})

    status["VJ"] = "no_flights" if result.status_code == 404 else "error"
    return state.model_copy(update={
        "status": status,
        "messages": state.messages + [NO_BUDGET_FLIGHTS_MESSAGE],
    })


def _flag_result(state: SearchState, result: CarrierSearchResult) -> SearchState:
    status = dict(state.status)
    if result.status_code == 200 and result.quotes:
        status["VNA"] = "success"
        return state.model_copy(update={
            "status": status,
            "vietnam_airlines": list(result.quotes),
            "flight_type_filter": default_flight_type(result.quotes),
        })
    status["VNA"] = "no_flights" if result.status_code == 404 else "error"
    return state.model_copy(update={"status": status, "vietnam_airlines": []})


def _carrier_result(state: SearchState, payload: Mapping[str, Any]) -> SearchState:
    result = payload.get("result")
    if not isinstance(result, CarrierSearchResult):
        result = CarrierSearchResult.model_validate(result or {})
    if result.carrier == "VJ":
        return _budget_result(state, result)
    return _flag_result(state, result)


def _set_airline_filter(state: SearchState, payload: Mapping[str, Any]) -> SearchState:
    value = payload.get("airline")
    if value not in AIRLINE_FILTERS:
        raise ValidationError(f"Unknown airline filter: {value}")
    return state.model_copy(update={"airline_filter": value})


def _set_flight_type_filter(state: SearchState, payload: Mapping[str, Any]) -> SearchState:
    value = payload.get("flight_type")
    if value not in FLIGHT_TYPE_FILTERS:
        raise ValidationError(f"Unknown flight type filter: {value}")
    return state.model_copy(update={"flight_type_filter": value})


def _update_custom_config(state: SearchState, payload: Mapping[str, Any]) -> SearchState:
    # The first edit starts from the stored custom row, supplied as "base"
    base = state.custom_config
    if base is None:
        stored = payload.get("base")
        if stored is None:
            base = PriceConfig.zero(CustomerSegment.CUSTOM)
        elif isinstance(stored, PriceConfig):
            base = stored
        else:
            base = PriceConfig.model_validate(stored)
        base = base.model_copy(update={"segment": CustomerSegment.CUSTOM})
    return state.model_copy(update={"custom_config": base.with_updates(payload.get("patch") or {})})


_HANDLERS = {
    "select_segment": _select_segment,
    "search_started": _search_started,
    "carrier_result": _carrier_result,
    "set_airline_filter": _set_airline_filter,
    "set_flight_type_filter": _set_flight_type_filter,
    "update_custom_config": _update_custom_config,
}


def reduce(state: Optional[SearchState], action: Mapping[str, Any]) -> SearchState:
    state = state or SearchState()
    kind = action.get("type")
    handler = _HANDLERS.get(kind)
    if handler is None:
        raise ValidationError(f"Unknown action: {kind}")
    new_state = handler(state, action)
    log_event("state_reduced", action=kind, vj=new_state.status["VJ"], vna=new_state.status["VNA"])
    return new_state

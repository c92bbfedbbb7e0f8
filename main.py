from dataclasses import asdict
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional
from fastapi import FastAPI, Header, HTTPException, Request
from fastapi.responses import JSONResponse
from dotenv import load_dotenv
from pydantic import BaseModel, Field

from agency.config import settings
from agency.backends.vietjet import VietJetClient
from agency.backends.vietnam_airlines import VietnamAirlinesClient
from agency.data.airports import search_airports
from agency.errors import BackendError, ValidationError
from agency.infrastructure.health import HealthChecker, RequestValidator
from agency.lowfare import LowFareClient
from agency.obs.logger import log_event
from agency.obs.metrics import get_metrics_snapshot
from agency.obs.middleware import ObservabilityMiddleware
from agency.pricing.store import PriceConfigStore
from agency.search.orchestrator import SearchOrchestrator
from agency.state.redis_store import RedisSessionStore
from agency.state.reducer import SearchState, reduce
from agency.state.store import SessionStore
from agency.state.view import build_results_view, price_quote
from agency.ticketing.booking import BookingClient, Passenger, VnaFareType
from agency.ticketing.email import EmailTicketClient, EmailTicketRequest, gmail_typo_warning
from agency.ticketing.pnr import PNRClient
from agency.ticketing.reprice import RepriceClient, RepriceFareType
from agency.types import CarrierSearchResult, CustomerSegment, FlightQuote, SearchRequest, TripType

load_dotenv()


@asynccontextmanager
async def lifespan(app: FastAPI):
    log_event("startup", env=settings.APP_ENV)

    app.state.price_configs = PriceConfigStore()
    await app.state.price_configs.load()

    app.state.vietjet = VietJetClient()
    app.state.vietnam_airlines = VietnamAirlinesClient()
    app.state.orchestrator = SearchOrchestrator(app.state.vietjet, app.state.vietnam_airlines)
    app.state.booking = BookingClient()
    app.state.reprice = RepriceClient()
    app.state.pnr = PNRClient()
    app.state.mail = EmailTicketClient()
    app.state.lowfare = LowFareClient()

    if settings.SESSION_STORE == "redis":
        app.state.sessions = RedisSessionStore()
    else:
        app.state.sessions = SessionStore(settings.REDIS_TTL_SECONDS)

    yield

    log_event("shutdown")
    for name in ("vietjet", "vietnam_airlines", "booking", "reprice", "pnr", "mail", "lowfare",
                 "price_configs"):
        await getattr(app.state, name).aclose()


api = FastAPI(
    title="Travel Agency Fare Desk",
    version="1.0.0",
    lifespan=lifespan
)


class PriceQuoteBody(BaseModel):
    quote: FlightQuote
    trip_type: TripType = TripType.ONE_WAY
    segment: Optional[CustomerSegment] = None


class VietJetHoldBody(BaseModel):
    quote: FlightQuote
    trip_type: TripType = TripType.ONE_WAY
    passengers: List[Passenger]
    phone: Optional[str] = None


class VnaHoldBody(BaseModel):
    quote: FlightQuote
    trip_type: TripType = TripType.ONE_WAY
    passengers: List[Passenger]
    fare_type: VnaFareType = "VFR"


class RepriceCheckBody(BaseModel):
    pnrs: str


class RepriceBody(BaseModel):
    fare_types: Dict[str, RepriceFareType]


class LowFareBody(BaseModel):
    departure: str
    arrival: str
    trip_type: TripType = TripType.ONE_WAY
    departure_date: str
    return_date: str = ""


class StateAction(BaseModel):
    type: str
    payload: Dict[str, Any] = Field(default_factory=dict)


@api.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse({"error": str(exc)}, status_code=400)


@api.exception_handler(BackendError)
async def backend_error_handler(request: Request, exc: BackendError):
    log_event("backend_error_response", level="ERROR", backend=exc.backend, error=exc.message)
    return JSONResponse({"error": exc.message, "backend": exc.backend}, status_code=502)


def _load_state(request: Request, staff_id: Optional[str]) -> SearchState:
    if not staff_id:
        return SearchState()
    raw = request.app.state.sessions.get(staff_id)
    return SearchState.model_validate(raw) if raw else SearchState()


def _save_state(request: Request, staff_id: Optional[str], state: SearchState) -> None:
    if staff_id:
        request.app.state.sessions.set(staff_id, state.model_dump(mode="json"))


def _segment_config(request: Request, state: SearchState, segment: Optional[CustomerSegment]):
    if segment is None:
        return None
    if segment == CustomerSegment.CUSTOM and state.custom_config is not None:
        return state.custom_config
    return request.app.state.price_configs.get_config(segment)


def _active_config(request: Request, state: SearchState):
    return _segment_config(request, state, state.segment)


def _state_response(request: Request, state: SearchState) -> Dict[str, Any]:
    view = build_results_view(state, _active_config(request, state))
    return {
        "state": state.model_dump(mode="json"),
        "view": view.model_dump(mode="json"),
    }


@api.get("/")
async def root():
    return {
        "service": "fare-desk",
        "version": "1.0.0",
        "status": "running",
    }


@api.get("/health")
async def health():
    return {"status": "healthy", "service": "fare-desk"}


@api.get("/health/detailed")
async def detailed_health(request: Request):
    health_checker = HealthChecker()

    def check_sessions():
        sessions = getattr(request.app.state, "sessions", None)
        return sessions is not None and sessions.ping()

    def check_price_configs():
        store = getattr(request.app.state, "price_configs", None)
        return bool(store and store.loaded)

    health_checker.register_check("sessions", check_sessions)
    health_checker.register_check("price_configs", check_price_configs)

    results = await health_checker.run_checks()
    status_code = 200 if results["status"] == "healthy" else 503
    return JSONResponse(results, status_code=status_code)


@api.get("/metrics")
async def metrics():
    return get_metrics_snapshot()


@api.get("/airports")
async def airports(q: str = "", limit: int = 10):
    return [asdict(a) for a in search_airports(q, limit)]


@api.get("/price-configs/{segment}")
async def price_config(request: Request, segment: str):
    try:
        seg = CustomerSegment(segment)
    except ValueError:
        raise HTTPException(status_code=404, detail=f"Unknown segment: {segment}")
    return request.app.state.price_configs.get_config(seg).model_dump(mode="json")


@api.post("/quotes/price")
async def quote_price(request: Request, body: PriceQuoteBody, x_staff_id: Optional[str] = Header(None)):
    config = _segment_config(request, _load_state(request, x_staff_id), body.segment)
    return price_quote(body.quote, body.trip_type, config).model_dump(mode="json")


@api.post("/search")
async def search(request: Request, body: SearchRequest, x_staff_id: Optional[str] = Header(None)):
    valid, error = RequestValidator.validate_search_params(body)
    if not valid:
        raise HTTPException(status_code=400, detail=error)

    current = {"state": reduce(_load_state(request, x_staff_id),
                               {"type": "search_started", "request": body})}
    _save_state(request, x_staff_id, current["state"])

    # Results are folded into the staff state as each carrier answers
    def on_result(result: CarrierSearchResult) -> None:
        current["state"] = reduce(current["state"], {"type": "carrier_result", "result": result})
        _save_state(request, x_staff_id, current["state"])

    results = await request.app.state.orchestrator.search_all(body, on_result, on_result)
    response = _state_response(request, current["state"])
    response["results"] = {k: v.model_dump(mode="json") for k, v in results.items()}
    return response


@api.post("/bookings/vj")
async def hold_vietjet(request: Request, body: VietJetHoldBody):
    result = await request.app.state.booking.hold_vietjet(
        body.quote, body.trip_type, body.passengers, body.phone)
    return result.model_dump()


@api.post("/bookings/vna")
async def hold_vna(request: Request, body: VnaHoldBody):
    result = await request.app.state.booking.hold_vietnam_airlines(
        body.quote, body.trip_type, body.passengers, body.fare_type)
    return result.model_dump()


@api.post("/reprice/check")
async def reprice_check(request: Request, body: RepriceCheckBody):
    results = await request.app.state.reprice.check_many(body.pnrs)
    if not results:
        raise ValidationError("Không tìm thấy mã PNR hợp lệ (6 ký tự)")
    return [r.model_dump() for r in results]


@api.post("/reprice")
async def reprice(request: Request, body: RepriceBody):
    results = await request.app.state.reprice.reprice_many(body.fare_types)
    return [r.model_dump() for r in results]


# Declared before /pnr/{carrier}/{pnr} so ".../files" is not read as a PNR
@api.get("/pnr/{pnr}/files")
async def pnr_files(request: Request, pnr: str):
    return {"pnr": pnr.upper(), "files": await request.app.state.pnr.list_files(pnr)}


@api.get("/pnr/{carrier}/{pnr}")
async def pnr_lookup(request: Request, carrier: str, pnr: str):
    result = await request.app.state.pnr.lookup(carrier, pnr)
    if not result.found:
        return JSONResponse(result.model_dump(), status_code=404)
    return result.model_dump()


@api.post("/tickets/email")
async def email_ticket(request: Request, body: EmailTicketRequest):
    queued = await request.app.state.mail.queue(body)
    return {"queued": queued, "warning": gmail_typo_warning(body.email)}


@api.post("/lowfare")
async def lowfare(request: Request, body: LowFareBody):
    calendar = await request.app.state.lowfare.calendar(
        body.departure, body.arrival, body.trip_type, body.departure_date, body.return_date)
    return calendar.model_dump()


@api.get("/sessions/{staff_id}/state")
async def get_state(request: Request, staff_id: str):
    return _state_response(request, _load_state(request, staff_id))


@api.post("/sessions/{staff_id}/state")
async def post_action(request: Request, staff_id: str, action: StateAction):
    state = _load_state(request, staff_id)
    payload = {**action.payload, "type": action.type}
    if action.type == "update_custom_config" and state.custom_config is None:
        payload["base"] = request.app.state.price_configs.get_config(CustomerSegment.CUSTOM)
    state = reduce(state, payload)
    _save_state(request, staff_id, state)
    return _state_response(request, state)


app = ObservabilityMiddleware(api)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8001,
        reload=True,
        log_level="info"
    )

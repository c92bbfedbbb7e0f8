"""Concurrent two-backend fare search.

Both backends are queried at the same time. Each follows the same policy:
ask for direct flights, and only if none come back ask again allowing
connections. Every outcome, including failures, is delivered as a
CarrierSearchResult through that carrier's callback; callbacks arrive in
whatever order the backends answer.
"""

import asyncio
import inspect
from typing import Any, Awaitable, Callable, Dict, Optional, Union

from agency.backends.vietjet import VietJetClient
from agency.backends.vietnam_airlines import VietnamAirlinesClient
from agency.data.airports import should_skip_budget_carrier
from agency.errors import BackendError
from agency.obs.logger import log_event
from agency.obs.metrics import inc_counter
from agency.types import CarrierSearchResult, SearchRequest

ResultCallback = Callable[[CarrierSearchResult], Union[None, Awaitable[None]]]

BUDGET_DOMESTIC_ERROR = "VIETJET CHƯA CẬP NHẬT CÁC CHUYẾN BAY NỘI ĐỊA"


async def _deliver(callback: Optional[ResultCallback], result: CarrierSearchResult) -> None:
    if callback is None:
        return
    ret = callback(result)
    if inspect.isawaitable(ret):
        await ret


class SearchOrchestrator:
    def __init__(self, vietjet: VietJetClient, vietnam_airlines: VietnamAirlinesClient):
        self.vietjet = vietjet
        self.vietnam_airlines = vietnam_airlines

    async def search_all(self, req: SearchRequest,
                         on_vietjet: Optional[ResultCallback] = None,
                         on_vietnam_airlines: Optional[ResultCallback] = None) -> Dict[str, CarrierSearchResult]:
        log_event("search_started", departure=req.departure, arrival=req.arrival,
                  trip_type=req.trip_type.value, departure_date=req.departure_date)
        vj, vna = await asyncio.gather(
            self._search_budget(req, on_vietjet),
            self._search_with_fallback(self.vietnam_airlines, req, on_vietnam_airlines),
        )
        return {"VJ": vj, "VNA": vna}

    async def _search_budget(self, req: SearchRequest,
                             callback: Optional[ResultCallback]) -> CarrierSearchResult:
        if should_skip_budget_carrier(req.departure, req.arrival):
            log_event("carrier_skipped", backend=self.vietjet.backend,
                      departure=req.departure, arrival=req.arrival)
            result = CarrierSearchResult(
                carrier="VJ",
                status_code=503,
                error=BUDGET_DOMESTIC_ERROR,
                is_domestic_error=True,
            )
            await _deliver(callback, result)
            return result
        return await self._search_with_fallback(self.vietjet, req, callback)

    async def _search_with_fallback(self, client: Any, req: SearchRequest,
                                    callback: Optional[ResultCallback]) -> CarrierSearchResult:
        carrier = client.code
        try:
            quotes = await client.search(req, direct_only=True)
            if quotes:
                result = CarrierSearchResult(carrier=carrier, status_code=200,
                                             quotes=quotes, flight_type="direct")
            else:
                log_event("carrier_fallback_connecting", backend=client.backend)
                quotes = await client.search(req, direct_only=False)
                if quotes:
                    result = CarrierSearchResult(carrier=carrier, status_code=200,
                                                 quotes=quotes, flight_type="connecting")
                else:
                    result = CarrierSearchResult(carrier=carrier, status_code=404,
                                                 error=f"Không có chuyến bay {client.backend}")
        except BackendError as e:
            log_event("carrier_search_failed", level="ERROR", backend=client.backend, error=str(e))
            result = CarrierSearchResult(carrier=carrier, status_code=500,
                                         error=f"Lỗi API {client.backend}")

        inc_counter("carrier_search_total", {"carrier": carrier, "status": str(result.status_code)})
        await _deliver(callback, result)
        return result

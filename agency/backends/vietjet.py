from typing import Any, Dict, List

from agency.backends.base import GatewayClient
from agency.backends.transform import from_vietjet
from agency.classify.classifier import is_direct
from agency.obs.logger import log_event
from agency.types import FlightQuote, SearchRequest, TripType


class VietJetClient(GatewayClient):
    """Budget-carrier fare search."""

    backend = "VietJet"
    code = "VJ"

    def build_request(self, req: SearchRequest) -> Dict[str, Any]:
        body = {
            "dep0": req.departure,
            "arr0": req.arrival,
            "depdate0": req.departure_date,
            "adt": str(req.adults),
            "chd": str(req.children),
            "inf": str(req.infants),
            "sochieu": req.trip_type.value,
        }
        if req.trip_type == TripType.ROUND_TRIP and req.return_date:
            body["depdate1"] = req.return_date
        return body

    async def search(self, req: SearchRequest, direct_only: bool = True) -> List[FlightQuote]:
        data = await self._post("/vj/check-ve-v2", self.build_request(req))
        quotes = from_vietjet((data or {}).get("body"))
        # The endpoint has no direct-only switch; filter here
        if direct_only:
            quotes = [q for q in quotes if is_direct(q)]
        log_event("carrier_search", backend=self.backend, direct_only=direct_only,
                  count=len(quotes))
        return quotes

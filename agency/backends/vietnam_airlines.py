from typing import Any, Dict, List, Optional

from agency.backends.base import GatewayClient
from agency.backends.transform import from_vietnam_airlines
from agency.obs.logger import log_event
from agency.types import FlightQuote, SearchRequest, TripType

# activedVia: "0" = non-stop only, "0,1,2" = up to two stops
VIA_DIRECT = "0"
VIA_ANY = "0,1,2"


class VietnamAirlinesClient(GatewayClient):
    """Flag-carrier fare search (also returns Korean partner carriers)."""

    backend = "Vietnam Airlines"
    code = "VNA"

    def build_request(self, req: SearchRequest, direct_only: bool = True,
                      overrides: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        body = {
            "dep0": req.departure,
            "arr0": req.arrival,
            "depdate0": req.departure_date,
            "activedVia": VIA_DIRECT if direct_only else VIA_ANY,
            "activedIDT": "ADT,VFR",
            "adt": str(req.adults),
            "chd": str(req.children),
            "inf": str(req.infants),
            "page": "1",
            "sochieu": req.trip_type.value,
            "filterTimeSlideMin0": "5",
            "filterTimeSlideMax0": "2355",
            "filterTimeSlideMin1": "5",
            "filterTimeSlideMax1": "2355",
            "session_key": "",
        }
        if req.trip_type == TripType.ROUND_TRIP and req.return_date:
            body["depdate1"] = req.return_date
        if overrides:
            body.update(overrides)
        return body

    async def search(self, req: SearchRequest, direct_only: bool = True) -> List[FlightQuote]:
        data = await self._post("/vna/check-ve-v3", self.build_request(req, direct_only)) or {}

        # A null body means the backend session was not warm yet: retry once
        # with the session key it handed back and all via options enabled.
        if data.get("body") in (None, "null"):
            log_event("carrier_search_retry", backend=self.backend, reason="null body")
            overrides = {"session_key": data.get("session_key") or "", "activedVia": VIA_ANY}
            data = await self._post("/vna/check-ve-v3",
                                    self.build_request(req, direct_only, overrides)) or {}

        quotes = from_vietnam_airlines(data.get("body"))
        log_event("carrier_search", backend=self.backend, direct_only=direct_only,
                  count=len(quotes))
        return quotes

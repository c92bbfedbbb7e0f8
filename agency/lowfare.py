"""Cheapest-fare-per-day calendar from the budget carrier."""

from typing import List, Optional
from pydantic import BaseModel, Field

from agency.backends.base import GatewayClient
from agency.errors import BackendError, ValidationError
from agency.obs.logger import log_event
from agency.types import TripType


class LowFareDay(BaseModel):
    date: str
    base_fare: int
    fare_class: str = ""


class LowFareCalendar(BaseModel):
    status_code: str
    message: str = ""
    outbound: List[LowFareDay] = Field(default_factory=list)
    inbound: List[LowFareDay] = Field(default_factory=list)

    def cheapest(self, direction: str = "outbound") -> Optional[LowFareDay]:
        days = [d for d in getattr(self, direction) if d.base_fare > 0]
        return min(days, key=lambda d: d.base_fare) if days else None


def _days(raw) -> List[LowFareDay]:
    out = []
    for d in raw if isinstance(raw, list) else []:
        if not isinstance(d, dict) or not d.get("ngày"):
            continue
        try:
            fare = int(float(d.get("giá_vé_gốc") or 0))
        except (TypeError, ValueError):
            fare = 0
        out.append(LowFareDay(date=str(d["ngày"]), base_fare=fare, fare_class=str(d.get("loại_vé") or "")))
    return out


class LowFareClient(GatewayClient):
    backend = "VietJet lowfare"

    async def calendar(self, departure: str, arrival: str, trip_type: TripType,
                       departure_date: str, return_date: str = "") -> LowFareCalendar:
        if not departure or not arrival or not departure_date:
            raise ValidationError("departure, arrival and departure_date are required")
        body = {
            "departure": departure,
            "arrival": arrival,
            "sochieu": trip_type.value,
            "departure_date": departure_date,
            "return_date": return_date if trip_type == TripType.ROUND_TRIP else "",
        }
        try:
            data = await self._post("/vj/lowfare-v2", body)
        except BackendError as e:
            log_event("lowfare_failed", level="WARNING", error=e.message)
            return LowFareCalendar(status_code="500", message="Lỗi kết nối API")

        data = data if isinstance(data, dict) else {}
        days = data.get("body") if isinstance(data.get("body"), dict) else {}
        return LowFareCalendar(
            status_code=str(data.get("status_code") or "200"),
            message=str(data.get("message") or ""),
            outbound=_days(days.get("chiều_đi")),
            inbound=_days(days.get("chiều_về")),
        )

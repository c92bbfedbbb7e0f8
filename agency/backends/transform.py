"""Raw backend JSON -> internal FlightQuote.

The two airline backends describe the same itinerary with slightly different
keys: VietJet uses spaced direction keys ("chiều đi"), Vietnam Airlines uses
underscored ones ("chiều_đi"). Each backend gets its own adapter; nothing
downstream of this module looks at raw keys.
"""

import re
from typing import Any, Dict, List, Optional

from agency.obs.logger import log_event
from agency.types import FareInfo, FlightLeg, FlightQuote

VJ_OUTBOUND_KEYS = ("chiều đi", "chiều_đi")
VJ_INBOUND_KEYS = ("chiều về", "chiều_về")
VNA_OUTBOUND_KEY = "chiều_đi"
VNA_INBOUND_KEY = "chiều_về"
FARE_KEY = "thông_tin_chung"
_GROUPED_RE = re.compile(r"^\d{1,3}([.,]\d{3})+$")


def to_int(value: Any) -> int:
    # "1.234.000" and "1,234,000" both occur in fare fields
    if value is None:
        return 0
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return int(value)
    s = str(value).strip()
    if _GROUPED_RE.match(s):
        return int(s.replace(".", "").replace(",", ""))
    try:
        return int(float(s))
    except (ValueError, OverflowError):
        return 0


def parse_stops(value: Any) -> Optional[int]:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None


def leg_from_raw(raw: Dict[str, Any]) -> FlightLeg:
    stop_airports = [
        str(raw[k]).strip() for k in ("điểm_dừng_1", "điểm_dừng_2")
        if raw.get(k) and str(raw[k]).strip()
    ]
    booking_key = raw.get("BookingKey") or None
    return FlightLeg(
        carrier=str(raw.get("hãng") or ""),
        flight_id=str(raw.get("id") or ""),
        origin=str(raw.get("nơi_đi") or ""),
        destination=str(raw.get("nơi_đến") or ""),
        departure_time=str(raw.get("giờ_cất_cánh") or ""),
        departure_date=str(raw.get("ngày_cất_cánh") or ""),
        arrival_time=str(raw.get("giờ_hạ_cánh") or ""),
        arrival_date=str(raw.get("ngày_hạ_cánh") or ""),
        duration=str(raw.get("thời_gian_bay") or ""),
        layover=str(raw.get("thời_gian_chờ") or ""),
        stops=parse_stops(raw.get("số_điểm_dừng")),
        stop_airports=stop_airports,
        fare_class=str(raw.get("loại_vé") or ""),
        booking_key=str(booking_key) if booking_key else None,
    )


def fare_from_raw(raw: Dict[str, Any]) -> FareInfo:
    return FareInfo(
        fare=to_int(raw.get("giá_vé")),
        base_fare=to_int(raw.get("giá_vé_gốc")),
        fuel_surcharge=to_int(raw.get("phí_nhiên_liệu")),
        tax_fee=to_int(raw.get("thuế_phí_công_cộng")),
        seats_remaining=to_int(raw.get("số_ghế_còn")),
        baggage_tag=str(raw.get("hành_lý_vna") or ""),
    )


def _first(raw: Dict[str, Any], keys) -> Optional[Dict[str, Any]]:
    for k in keys:
        if isinstance(raw.get(k), dict):
            return raw[k]
    return None


def _build(backend: str, outbound: Optional[Dict[str, Any]], inbound: Optional[Dict[str, Any]],
           fare: Any) -> Optional[FlightQuote]:
    if outbound is None or not isinstance(fare, dict):
        log_event("quote_skipped", level="WARNING", backend=backend,
                  reason="missing outbound leg or fare block")
        return None
    return FlightQuote(
        outbound=leg_from_raw(outbound),
        inbound=leg_from_raw(inbound) if inbound else None,
        fare=fare_from_raw(fare),
    )


def from_vietjet(body: Any) -> List[FlightQuote]:
    items = []
    for raw in body if isinstance(body, list) else []:
        if not isinstance(raw, dict):
            continue
        # Older VietJet payloads already used underscored keys
        quote = _build("VietJet", _first(raw, VJ_OUTBOUND_KEYS), _first(raw, VJ_INBOUND_KEYS),
                       raw.get(FARE_KEY))
        if quote:
            items.append(quote)
    return items


def from_vietnam_airlines(body: Any) -> List[FlightQuote]:
    items = []
    for raw in body if isinstance(body, list) else []:
        if not isinstance(raw, dict):
            continue
        quote = _build("Vietnam Airlines", _first(raw, (VNA_OUTBOUND_KEY,)),
                       _first(raw, (VNA_INBOUND_KEY,)), raw.get(FARE_KEY))
        if quote:
            items.append(quote)
    return items

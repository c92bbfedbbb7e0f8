from typing import List, Optional

from agency.classify.carriers import (
    BAGGAGE_LARGE,
    BAGGAGE_STANDARD,
    BUDGET_CARRIER,
    BUDGET_CARRIER_CODE,
    FLAG_CARRIER,
    FLAG_CARRIER_CODE,
    carrier_info,
)
from agency.pricing.engine import format_price
from agency.types import FlightLeg, FlightQuote

# VietJet fare classes sold as plain economy; every other class is Deluxe
_VJ_ECO_CLASSES = {"ECO", "L", "T", "H"}


def short_date(date_str: str) -> str:
    """'24/04/2026' -> '24/04'."""
    parts = (date_str or "").split("/")
    if len(parts) < 2:
        return date_str or ""
    return f"{parts[0]}/{parts[1]}"


def ticket_class_display(fare_class: str, carrier: str) -> str:
    if carrier != BUDGET_CARRIER_CODE:
        return fare_class
    return "ECO" if fare_class in _VJ_ECO_CLASSES else "DELUXE"


def ticket_class_summary(quote: FlightQuote) -> str:
    out_class = ticket_class_display(quote.outbound.fare_class, quote.carrier)
    if quote.inbound:
        in_class = ticket_class_display(quote.inbound.fare_class, quote.carrier)
        return f"Khứ hồi: {out_class}-{in_class}"
    return f"Một chiều: {out_class}"


def flight_path(leg: FlightLeg) -> str:
    if leg.stops == 1 and leg.stop_airports:
        return f"{leg.origin} → {leg.stop_airports[0]} → {leg.destination}"
    return f"{leg.origin} → {leg.destination}"


def _leg_lines(leg: FlightLeg) -> List[str]:
    if leg.stops == 1 and leg.stop_airports:
        via = leg.stop_airports[0]
        return [
            f"{leg.origin}-{via} {leg.departure_time} ngày {short_date(leg.departure_date)}",
            f"{via}-{leg.destination} {leg.arrival_time} ngày {short_date(leg.arrival_date)}",
        ]
    return [f"{leg.origin}-{leg.destination} {leg.departure_time} ngày {short_date(leg.departure_date)}"]


def baggage_line(quote: FlightQuote, final_price: int) -> str:
    price = f"giá vé = {format_price(final_price)}w"
    carrier = quote.carrier
    tag = quote.fare.baggage_tag

    if carrier == FLAG_CARRIER_CODE and tag in (BAGGAGE_LARGE, BAGGAGE_STANDARD):
        checked = "46kg" if tag == BAGGAGE_LARGE else FLAG_CARRIER.checked
        return f"{FLAG_CARRIER.name} {FLAG_CARRIER.carry_on} xách tay, {checked} ký gửi, {price}"
    if carrier == BUDGET_CARRIER_CODE:
        return (f"{BUDGET_CARRIER.name} {BUDGET_CARRIER.carry_on} xách tay, "
                f"{BUDGET_CARRIER.checked} ký gửi, {price}")

    info = carrier_info(carrier)
    if info is None or carrier == FLAG_CARRIER_CODE:
        # Undeclared carrier, or a flag fare without a known fare family
        return f"{carrier} 10kg xách tay, {price}"
    checked = f", {info.checked} ký gửi" if info.checked else ", ký gửi tuỳ gói"
    return f"{info.name} {info.carry_on} xách tay{checked}, {price}"


def copy_template(quote: FlightQuote, final_price: int) -> str:
    """Text the staff paste to the customer: itinerary lines, then baggage and price."""
    lines: List[str] = []
    outbound, inbound = quote.outbound, quote.inbound

    if outbound.stops == 1:
        lines += _leg_lines(outbound)
        if inbound and inbound.stops == 1:
            lines += _leg_lines(inbound)
    else:
        lines += _leg_lines(outbound)
        if inbound:
            lines.append(f"{inbound.origin}-{inbound.destination} {inbound.departure_time} "
                         f"ngày {short_date(inbound.departure_date)}")

    lines.append(baggage_line(quote, final_price))
    return "\n".join(lines)


def fare_breakdown(quote: FlightQuote, issuing_fee: Optional[int]) -> List[str]:
    rows = [
        f"Giá gốc: {format_price(quote.fare.base_fare)} KRW",
        f"Phí nhiên liệu: {format_price(quote.fare.fuel_surcharge)} KRW",
    ]
    if issuing_fee is not None:
        rows.append(f"Phí xuất vé: {format_price(issuing_fee)} KRW")
    return rows

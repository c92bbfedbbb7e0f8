"""Direct/connecting classification and display ordering of quotes.

Only stop counts 0 and 1 carry meaning. Anything else (2+ stops, or a value
the backend adapter could not parse) is neither direct nor connecting and is
reported with stop_class "unknown".
"""

from typing import List, Literal, Optional, Sequence, Tuple

from agency.classify.carriers import (
    BAGGAGE_LARGE,
    BAGGAGE_STANDARD,
    BUDGET_CARRIER_CODE,
    FLAG_CARRIER_CODE,
    carrier_group,
)
from agency.types import CarrierGroup, Classification, FlightQuote

FlightTypeFilter = Literal["all", "direct", "connecting"]

DIRECT_LABEL = "Bay thẳng"
CONNECTING_LABEL = "Nối chuyến"


def is_direct(quote: FlightQuote) -> bool:
    if quote.outbound.stops != 0:
        return False
    return quote.inbound is None or quote.inbound.stops == 0


def is_connecting(quote: FlightQuote) -> bool:
    if quote.outbound.stops == 1:
        return True
    return quote.inbound is not None and quote.inbound.stops == 1


def classify(quote: FlightQuote) -> Classification:
    direct = is_direct(quote)
    connecting = is_connecting(quote)
    if direct:
        stop_class = "direct"
    elif connecting:
        stop_class = "connecting"
    else:
        stop_class = "unknown"
    return Classification(
        is_direct=direct,
        is_connecting=connecting,
        stop_class=stop_class,
        carrier_group=carrier_group(quote.carrier),
        flight_type_label=DIRECT_LABEL if direct else CONNECTING_LABEL,
    )


def baggage_priority(tag: str) -> int:
    if tag == BAGGAGE_LARGE:
        return 1
    if tag == BAGGAGE_STANDARD:
        return 2
    return 3


def sort_for_display(quotes: Sequence[FlightQuote], group: CarrierGroup) -> List[FlightQuote]:
    """Stable display ordering.

    Flag carrier: direct first, then VFR before ADT before other fare
    families, then ascending raw fare. Everything else: ascending raw fare.
    """
    if group == CarrierGroup.FLAG:
        return sorted(quotes, key=lambda q: (
            0 if is_direct(q) else 1,
            baggage_priority(q.fare.baggage_tag),
            q.fare.fare,
        ))
    return sorted(quotes, key=lambda q: q.fare.fare)


def filter_by_flight_type(quotes: Sequence[FlightQuote], flight_type: FlightTypeFilter) -> List[FlightQuote]:
    if flight_type == "direct":
        return [q for q in quotes if is_direct(q)]
    if flight_type == "connecting":
        return [q for q in quotes if not is_direct(q)]
    return list(quotes)


def split_flag_backend_results(quotes: Sequence[FlightQuote]) -> Tuple[List[FlightQuote], List[FlightQuote]]:
    """Separate flag-carrier quotes from partner-carrier quotes.

    The flag-carrier backend returns partner fares too; partners are the
    ones whose code is neither the flag nor the budget carrier.
    """
    flag, others = [], []
    for q in quotes:
        if q.carrier == FLAG_CARRIER_CODE:
            flag.append(q)
        elif q.carrier and q.carrier != BUDGET_CARRIER_CODE:
            others.append(q)
    return flag, others


def other_carrier_quotes(quotes: Sequence[FlightQuote]) -> List[FlightQuote]:
    _, others = split_flag_backend_results(quotes)
    return sort_for_display(others, CarrierGroup.OTHER)


def cheapest_other(quotes: Sequence[FlightQuote]) -> Optional[FlightQuote]:
    others = other_carrier_quotes(quotes)
    return others[0] if others else None


def has_direct(quotes: Sequence[FlightQuote]) -> bool:
    return any(is_direct(q) for q in quotes)


def default_flight_type(quotes: Sequence[FlightQuote]) -> FlightTypeFilter:
    """Flight-type filter to preselect once flag-carrier results arrive."""
    return "direct" if has_direct(quotes) else "all"

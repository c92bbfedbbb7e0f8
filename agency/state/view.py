"""Derived, priced results for the current search state.

Nothing here is stored: the view is recomputed from SearchState and the
active PriceConfig every time it is asked for.
"""

from typing import List, Optional
from pydantic import BaseModel, Field

from agency.classify.carriers import display_name
from agency.classify.classifier import (
    classify,
    filter_by_flight_type,
    is_direct,
    other_carrier_quotes,
    sort_for_display,
    split_flag_backend_results,
)
from agency.formatters.copy_text import copy_template, fare_breakdown, ticket_class_summary
from agency.pricing.config import PriceConfig
from agency.pricing.engine import compute_final_price, format_price, issuing_fee
from agency.state.reducer import SearchState
from agency.types import CarrierGroup, Classification, FlightQuote, TripType

NO_DIRECT_NOTICE = "KHÔNG CÓ CHUYẾN BAY THẲNG, THAM KHẢO GIÁ CHUYẾN BAY NỐI CHUYẾN"


class PricedQuote(BaseModel):
    quote: FlightQuote
    classification: Classification
    carrier_name: str
    final_price: int
    display_price: str
    ticket_class: str
    breakdown: List[str] = Field(default_factory=list)
    copy_text: Optional[str] = None


class ResultsView(BaseModel):
    vietjet: List[PricedQuote] = Field(default_factory=list)
    vietnam_airlines: List[PricedQuote] = Field(default_factory=list)
    others: List[PricedQuote] = Field(default_factory=list)
    cheapest_other: Optional[PricedQuote] = None
    notice: Optional[str] = None
    messages: List[str] = Field(default_factory=list)
    is_loading: bool = False
    total: int = 0


def price_quote(quote: FlightQuote, trip_type: TripType, config: Optional[PriceConfig]) -> PricedQuote:
    c = classify(quote)
    final = compute_final_price(quote.fare.fare, trip_type, c.carrier_group, config)
    fee = issuing_fee(trip_type, c.carrier_group, config) if config is not None else None
    return PricedQuote(
        quote=quote,
        classification=c,
        carrier_name=display_name(quote.carrier),
        final_price=final,
        display_price=format_price(final),
        ticket_class=ticket_class_summary(quote),
        breakdown=fare_breakdown(quote, fee),
        # connecting itineraries are quoted by hand
        copy_text=copy_template(quote, final) if c.is_direct and not c.is_connecting else None,
    )


def build_results_view(state: SearchState, config: Optional[PriceConfig]) -> ResultsView:
    trip_type = state.request.trip_type if state.request else TripType.ONE_WAY
    airline = state.airline_filter

    def priced(quotes: List[FlightQuote]) -> List[PricedQuote]:
        return [price_quote(q, trip_type, config) for q in quotes]

    # the flight-type filter only applies to the flag carrier
    budget: List[FlightQuote] = []
    if airline in ("all", "VJ"):
        budget = sort_for_display(state.vietjet, CarrierGroup.BUDGET)

    flag_all, _ = split_flag_backend_results(state.vietnam_airlines)
    flag: List[FlightQuote] = []
    if airline in ("all", "VNA"):
        flag = sort_for_display(filter_by_flight_type(flag_all, state.flight_type_filter), CarrierGroup.FLAG)

    others: List[FlightQuote] = []
    if airline in ("all", "VNA"):
        others = other_carrier_quotes(state.vietnam_airlines)

    notice = None
    if (airline != "VJ" and state.flight_type_filter == "all" and flag_all
            and not any(is_direct(q) for q in flag_all)):
        notice = NO_DIRECT_NOTICE

    others_priced = priced(others)
    return ResultsView(
        vietjet=priced(budget),
        vietnam_airlines=priced(flag),
        others=others_priced,
        cheapest_other=others_priced[0] if others_priced else None,
        notice=notice,
        messages=list(state.messages),
        is_loading=state.is_loading,
        total=len(budget) + len(flag),
    )

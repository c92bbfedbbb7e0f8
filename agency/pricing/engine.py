"""Fare adjustment: raw airline fare -> customer-facing price.

Pure functions only. Thresholds are always compared against the unrounded raw
fare; rounding to the nearest 100 is a display concern (`round_for_display`).
"""

import math
from typing import Optional, Sequence

from agency.pricing.config import DiscountTier, PriceConfig
from agency.types import CarrierGroup, TripType


def match_tier(raw_fare: int, tiers: Sequence[DiscountTier]) -> Optional[DiscountTier]:
    """Highest tier whose threshold is set and strictly exceeded, else None."""
    for tier in reversed(tiers):
        if tier.threshold > 0 and raw_fare > tier.threshold:
            return tier
    return None


def compute_final_price(raw_fare: int, trip_type: TripType,
                        carrier_group: CarrierGroup,
                        config: Optional[PriceConfig]) -> int:
    if config is None:
        return raw_fare

    pricing = config.for_group(carrier_group)
    final_price = raw_fare

    if trip_type == TripType.ONE_WAY:
        final_price += config.one_way_fee
    else:
        final_price += pricing.round_trip_fee

    tier = match_tier(raw_fare, pricing.tiers)
    if tier is not None:
        final_price -= tier.discount_for(trip_type)

    # No clamping: a misconfigured discount may drive the price negative
    return final_price


def issuing_fee(trip_type: TripType, carrier_group: CarrierGroup,
                config: Optional[PriceConfig]) -> int:
    """The flat fee part of the final price, shown in the fare breakdown."""
    if config is None:
        return 0
    if trip_type == TripType.ONE_WAY:
        return config.one_way_fee
    return config.for_group(carrier_group).round_trip_fee


def round_for_display(price: int) -> int:
    # halves round up (1950 -> 2000, -1950 -> -1900)
    return int(math.floor(price / 100 + 0.5)) * 100


def format_price(price: int) -> str:
    """Round to the nearest 100 and group thousands with dots: 1.950.000"""
    return f"{round_for_display(price):,}".replace(",", ".")

"""Price configuration model for one customer segment.

The hosted table stores one flat row per segment with 49 numeric columns
(`vna_threshold_3`, `vietjet_discount_rt_5`, ...). Rows are mapped once, at the
ingestion boundary, into an indexed list of tiers per carrier group so the
pricing engine never builds column names.
"""

from typing import Any, Dict, List, Mapping, Optional
from pydantic import BaseModel, Field

from agency.types import CarrierGroup, CustomerSegment, TripType

TIER_COUNT = 5

# Column prefix used by the hosted table for each carrier group
COLUMN_PREFIX: Dict[CarrierGroup, str] = {
    CarrierGroup.FLAG: "vna",
    CarrierGroup.BUDGET: "vietjet",
    CarrierGroup.OTHER: "other",
}


def _num(value: Any) -> int:
    if value is None or isinstance(value, bool):
        return 0
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return 0


class DiscountTier(BaseModel):
    threshold: int = 0
    discount_one_way: int = 0
    discount_round_trip: int = 0

    def discount_for(self, trip_type: TripType) -> int:
        if trip_type == TripType.ONE_WAY:
            return self.discount_one_way
        return self.discount_round_trip


def _empty_tiers() -> List[DiscountTier]:
    return [DiscountTier() for _ in range(TIER_COUNT)]


class CarrierPricing(BaseModel):
    round_trip_fee: int = 0
    # tiers[0] is tier 1 (lowest threshold), tiers[4] is tier 5
    tiers: List[DiscountTier] = Field(default_factory=_empty_tiers)


def _empty_groups() -> Dict[CarrierGroup, CarrierPricing]:
    return {group: CarrierPricing() for group in CarrierGroup}


class PriceConfig(BaseModel):
    segment: CustomerSegment
    one_way_fee: int = 0
    groups: Dict[CarrierGroup, CarrierPricing] = Field(default_factory=_empty_groups)

    def for_group(self, group: CarrierGroup) -> CarrierPricing:
        return self.groups.get(group) or CarrierPricing()

    @classmethod
    def zero(cls, segment: CustomerSegment) -> "PriceConfig":
        return cls(segment=segment)

    @classmethod
    def from_row(cls, row: Optional[Mapping[str, Any]], segment: CustomerSegment) -> "PriceConfig":
        """Build a config from a table row; every missing column becomes 0."""
        row = row or {}
        groups: Dict[CarrierGroup, CarrierPricing] = {}
        for group, prefix in COLUMN_PREFIX.items():
            tiers = [
                DiscountTier(
                    threshold=_num(row.get(f"{prefix}_threshold_{i}")),
                    discount_one_way=_num(row.get(f"{prefix}_discount_ow_{i}")),
                    discount_round_trip=_num(row.get(f"{prefix}_discount_rt_{i}")),
                )
                for i in range(1, TIER_COUNT + 1)
            ]
            groups[group] = CarrierPricing(
                round_trip_fee=_num(row.get(f"round_trip_fee_{prefix}")),
                tiers=tiers,
            )
        return cls(segment=segment, one_way_fee=_num(row.get("one_way_fee")), groups=groups)

    def to_row(self) -> Dict[str, Any]:
        row: Dict[str, Any] = {
            "customer_mode": self.segment.value,
            "one_way_fee": self.one_way_fee,
        }
        for group, prefix in COLUMN_PREFIX.items():
            pricing = self.for_group(group)
            row[f"round_trip_fee_{prefix}"] = pricing.round_trip_fee
            for i, tier in enumerate(pricing.tiers, start=1):
                row[f"{prefix}_threshold_{i}"] = tier.threshold
                row[f"{prefix}_discount_ow_{i}"] = tier.discount_one_way
                row[f"{prefix}_discount_rt_{i}"] = tier.discount_round_trip
        return row

    def with_updates(self, patch: Mapping[str, Any]) -> "PriceConfig":
        """Return a copy with row-style columns overridden by `patch`."""
        return PriceConfig.from_row({**self.to_row(), **dict(patch)}, self.segment)

"""Fixed carrier-code table.

Not configurable at runtime. The flag-carrier backend also returns fares of
Korean partner carriers; those fall into the OTHER group and are keyed here
for display names and baggage allowance.
"""

from dataclasses import dataclass
from typing import Dict, Optional

from agency.types import CarrierGroup

FLAG_CARRIER_CODE = "VNA"
BUDGET_CARRIER_CODE = "VJ"

# Flag-carrier fare families, in display priority order
BAGGAGE_LARGE = "VFR"     # 46kg checked
BAGGAGE_STANDARD = "ADT"  # 23kg checked


@dataclass(frozen=True)
class CarrierInfo:
    code: str
    short_name: str
    name: str
    carry_on: str = "10kg"
    checked: Optional[str] = None  # None: depends on the fare bundle


FLAG_CARRIER = CarrierInfo(FLAG_CARRIER_CODE, "VNA", "VNairlines", "10kg", "23kg")
BUDGET_CARRIER = CarrierInfo(BUDGET_CARRIER_CODE, "VJ", "Vietjet", "7kg", "20kg")

PARTNER_CARRIERS: Dict[str, CarrierInfo] = {
    "7C": CarrierInfo("7C", "Jeju", "Jeju Air", "10kg", "15kg"),
    "YP": CarrierInfo("YP", "Premia", "Premia Air", "10kg", "23kg"),
    "LJ": CarrierInfo("LJ", "Jin Air", "Jin Air", "10kg", "15kg"),
    "TW": CarrierInfo("TW", "Tway", "Tway Air", "10kg"),
    "KE": CarrierInfo("KE", "Korean Air", "Korean Air", "10kg", "23kg"),
    "OZ": CarrierInfo("OZ", "Asiana", "Asiana Airlines", "10kg", "23kg"),
    "RS": CarrierInfo("RS", "Air Seoul", "Air Seoul", "10kg", "15kg"),
    "BX": CarrierInfo("BX", "Air Busan", "Air Busan", "10kg", "15kg"),
}


def carrier_group(code: Optional[str]) -> CarrierGroup:
    if code == FLAG_CARRIER_CODE:
        return CarrierGroup.FLAG
    if code == BUDGET_CARRIER_CODE:
        return CarrierGroup.BUDGET
    return CarrierGroup.OTHER


def carrier_info(code: Optional[str]) -> Optional[CarrierInfo]:
    if code == FLAG_CARRIER_CODE:
        return FLAG_CARRIER
    if code == BUDGET_CARRIER_CODE:
        return BUDGET_CARRIER
    return PARTNER_CARRIERS.get(code or "")


def display_name(code: Optional[str]) -> str:
    """Short label for result lists; unknown codes are shown as-is."""
    info = carrier_info(code)
    return info.short_name if info else (code or "")

from dataclasses import dataclass
from typing import List, Optional


@dataclass(frozen=True)
class Airport:
    code: str
    name: str
    city: str
    country: str


AIRPORTS: List[Airport] = [
    # Korea
    Airport("ICN", "Incheon International Airport", "Seoul", "Korea"),
    Airport("GMP", "Gimpo International Airport", "Seoul", "Korea"),
    Airport("PUS", "Busan Gimhae International Airport", "Busan", "Korea"),
    Airport("CJU", "Jeju International Airport", "Jeju", "Korea"),
    Airport("TAE", "Daegu International Airport", "Daegu", "Korea"),
    # Vietnam
    Airport("HAN", "Noi Bai International Airport", "Hanoi", "Vietnam"),
    Airport("SGN", "Tan Son Nhat International Airport", "Ho Chi Minh City", "Vietnam"),
    Airport("DAD", "Da Nang International Airport", "Da Nang", "Vietnam"),
    Airport("HPH", "Cat Bi International Airport", "Hai Phong", "Vietnam"),
    Airport("CXR", "Cam Ranh International Airport", "Nha Trang", "Vietnam"),
    Airport("HUI", "Phu Bai International Airport", "Hue", "Vietnam"),
    Airport("VDH", "Dong Hoi Airport", "Dong Hoi", "Vietnam"),
    Airport("TBB", "Tuy Hoa Airport", "Tuy Hoa", "Vietnam"),
    Airport("UIH", "Phu Cat Airport", "Quy Nhon", "Vietnam"),
    Airport("DLI", "Lien Khuong Airport", "Dalat", "Vietnam"),
]

# Airports the budget-carrier backend has fares for
BUDGET_CARRIER_AIRPORTS = frozenset({"ICN", "PUS", "TAE"})


def find_airport(code: str) -> Optional[Airport]:
    code = (code or "").strip().upper()
    for a in AIRPORTS:
        if a.code == code:
            return a
    return None


def search_airports(query: str, limit: int = 10) -> List[Airport]:
    """Match on code, city or airport name (case-insensitive)."""
    q = (query or "").strip().lower()
    if not q:
        return AIRPORTS[:limit]
    hits = [a for a in AIRPORTS
            if q in a.code.lower() or q in a.city.lower() or q in a.name.lower()]
    return hits[:limit]


def should_skip_budget_carrier(departure: str, arrival: str) -> bool:
    """True when neither end of the route is served by the budget backend."""
    return departure not in BUDGET_CARRIER_AIRPORTS and arrival not in BUDGET_CARRIER_AIRPORTS

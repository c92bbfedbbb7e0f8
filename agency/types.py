from enum import Enum
from pydantic import BaseModel, Field
from typing import Optional, List, Literal


class TripType(str, Enum):
    ONE_WAY = "OW"
    ROUND_TRIP = "RT"


class CarrierGroup(str, Enum):
    FLAG = "flag"      # Vietnam Airlines
    BUDGET = "budget"  # VietJet
    OTHER = "other"    # partner carriers returned by the flag-carrier backend


class CustomerSegment(str, Enum):
    PAGE = "page"
    LIVE = "live"
    CUSTOM = "custom"


StopClass = Literal["direct", "connecting", "unknown"]


class FlightLeg(BaseModel):
    carrier: str
    flight_id: str = ""
    origin: str
    destination: str
    departure_time: str = ""   # HH:MM
    departure_date: str = ""   # DD/MM/YYYY
    arrival_time: str = ""
    arrival_date: str = ""
    duration: str = ""
    layover: str = ""
    stops: Optional[int] = None  # None when the backend sent something unparseable
    stop_airports: List[str] = Field(default_factory=list)
    fare_class: str = ""
    booking_key: Optional[str] = None


class FareInfo(BaseModel):
    fare: int                  # raw fare quoted by the airline
    base_fare: int = 0         # original, pre-fee fare
    fuel_surcharge: int = 0
    tax_fee: int = 0
    seats_remaining: int = 0
    baggage_tag: str = ""      # flag-carrier fare family: VFR, ADT, ...


class FlightQuote(BaseModel):
    outbound: FlightLeg
    inbound: Optional[FlightLeg] = None
    fare: FareInfo

    @property
    def carrier(self) -> str:
        # Inbound is assumed to share the outbound carrier
        return self.outbound.carrier


class Classification(BaseModel):
    is_direct: bool
    is_connecting: bool
    stop_class: StopClass
    carrier_group: CarrierGroup
    flight_type_label: Literal["Bay thẳng", "Nối chuyến"]


class SearchRequest(BaseModel):
    departure: str
    arrival: str
    departure_date: str
    return_date: Optional[str] = None
    trip_type: TripType = TripType.ONE_WAY
    adults: int = 1
    children: int = 0
    infants: int = 0


class CarrierSearchResult(BaseModel):
    carrier: Literal["VJ", "VNA"]
    status_code: int
    quotes: List[FlightQuote] = Field(default_factory=list)
    flight_type: Optional[Literal["direct", "connecting"]] = None
    error: Optional[str] = None
    is_domestic_error: bool = False

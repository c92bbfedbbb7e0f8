"""Hold (reserve without paying) a quoted itinerary.

VietJet holds are committed with the opaque booking keys from the search
result; Vietnam Airlines holds are committed by flight date/time and a list
of GDS-style passenger names.
"""

from typing import Dict, List, Literal, Optional
from pydantic import BaseModel

from agency.backends.base import GatewayClient
from agency.errors import ValidationError
from agency.obs.logger import log_event
from agency.types import FlightQuote, TripType

Gender = Literal["nam", "nữ"]
PaxType = Literal["người_lớn", "trẻ_em"]
VnaFareType = Literal["VFR", "ADT", "STU"]

_MONTHS = ["JAN", "FEB", "MAR", "APR", "MAY", "JUN",
           "JUL", "AUG", "SEP", "OCT", "NOV", "DEC"]


class PassengerInfo(BaseModel):
    last_name: str
    first_name: str
    passport: str = "B12345678"
    gender: Gender = "nam"
    nationality: str = "VN"


class Passenger(PassengerInfo):
    pax_type: PaxType = "người_lớn"
    infant: Optional[PassengerInfo] = None


class HoldResult(BaseModel):
    success: bool
    code: Optional[str] = None       # hold code / PNR
    deadline: Optional[str] = None   # payment deadline, VietJet only
    message: Optional[str] = None


def check_passenger_count(passengers: List[Passenger], max_seats: int) -> None:
    if not passengers:
        raise ValidationError("Phải có ít nhất 1 hành khách")
    if max_seats and len(passengers) > max_seats:
        raise ValidationError(f"Số lượng khách không được vượt quá {max_seats} ghế còn lại")


def format_last_name(name: str) -> str:
    words = name.strip().split()
    if not words:
        return ""
    if len(words) > 1:
        raise ValidationError("Họ chỉ được phép có 1 từ (ví dụ: Tran)")
    return words[0].capitalize()


def format_first_name(name: str) -> str:
    return " ".join(w.capitalize() for w in name.strip().split())


def _vj_info(p: PassengerInfo) -> Dict[str, str]:
    last, first = format_last_name(p.last_name), format_first_name(p.first_name)
    if not last or not first or not p.passport:
        raise ValidationError("Vui lòng điền đầy đủ thông tin hành khách")
    return {
        "Họ": last,
        "Tên": first,
        "Hộ_chiếu": p.passport,
        "Giới_tính": p.gender,
        "Quốc_tịch": p.nationality,
    }


def build_vietjet_passenger_list(passengers: List[Passenger]) -> Dict[str, List[Dict[str, str]]]:
    ds_khach: Dict[str, List[Dict[str, str]]] = {"người_lớn": [], "trẻ_em": [], "em_bé": []}
    for p in passengers:
        ds_khach[p.pax_type].append(_vj_info(p))
        if p.infant:
            ds_khach["em_bé"].append(_vj_info(p.infant))
    return ds_khach


def normalize_phone(phone: Optional[str]) -> Optional[str]:
    phone = (phone or "").strip()
    if not phone:
        return None
    return phone if phone.startswith("0") else "0" + phone


def gds_date(date_str: str) -> str:
    """'24/04/2026' -> '24APR'."""
    try:
        day, month = date_str.split("/")[:2]
        return f"{day}{_MONTHS[int(month) - 1]}"
    except (ValueError, IndexError) as e:
        raise ValidationError(f"Ngày bay không hợp lệ: {date_str}") from e


def gds_name(p: Passenger) -> str:
    """'NGUYEN/VAN AN MR(ADT)', with '(INFLAST/FIRST MSTR)' appended for a lap infant."""
    last = p.last_name.strip().upper()
    first = " ".join(p.first_name.strip().upper().split())
    if not last or not first:
        raise ValidationError("Vui lòng điền đầy đủ thông tin hành khách")
    if p.pax_type == "trẻ_em":
        title = "MSTR" if p.gender == "nam" else "MISS"
    else:
        title = "MR" if p.gender == "nam" else "MS"
    age = "ADT" if p.pax_type == "người_lớn" else "CHD"
    name = f"{last}/{first} {title}({age})"

    inf = p.infant
    if inf and (inf.last_name.strip() or inf.first_name.strip()):
        inf_last = inf.last_name.strip().upper()
        inf_first = " ".join(inf.first_name.strip().upper().split())
        if not inf_last or not inf_first:
            raise ValidationError("Vui lòng điền đầy đủ thông tin trẻ sơ sinh")
        inf_title = "MSTR" if inf.gender == "nam" else "MISS"
        name += f"(INF{inf_last}/{inf_first} {inf_title})"
    return name


class BookingClient(GatewayClient):
    backend = "booking"

    def build_vietjet_hold(self, quote: FlightQuote, trip_type: TripType,
                           passengers: List[Passenger], phone: Optional[str] = None) -> Dict:
        check_passenger_count(passengers, quote.fare.seats_remaining)
        if not quote.outbound.booking_key:
            raise ValidationError("Missing booking key on the selected fare")
        body = {
            "ds_khach": build_vietjet_passenger_list(passengers),
            "bookingkey": quote.outbound.booking_key,
            "bookingkeychieuve": (quote.inbound.booking_key or "") if (
                trip_type == TripType.ROUND_TRIP and quote.inbound) else "",
            "sochieu": trip_type.value,
            "sanbaydi": quote.outbound.origin,
        }
        phone = normalize_phone(phone)
        if phone:
            body["phonekakao"] = phone
        return body

    def build_vna_hold(self, quote: FlightQuote, trip_type: TripType,
                       passengers: List[Passenger], fare_type: VnaFareType = "VFR") -> List[tuple]:
        check_passenger_count(passengers, quote.fare.seats_remaining)
        out = quote.outbound
        params = [
            ("dep", out.origin),
            ("arr", out.destination),
            ("depdate", gds_date(out.departure_date)),
            ("deptime", out.departure_time.replace(":", "")),
        ]
        inb = quote.inbound
        if trip_type == TripType.ROUND_TRIP and inb and inb.departure_date and inb.departure_time:
            params.append(("arrdate", gds_date(inb.departure_date)))
            params.append(("arrtime", inb.departure_time.replace(":", "")))
        params.append(("doituong", fare_type))
        # The hold endpoint expects passengers last-to-first
        for p in reversed(passengers):
            params.append(("hanhkhach", gds_name(p)))
        return params

    async def hold_vietjet(self, quote: FlightQuote, trip_type: TripType,
                           passengers: List[Passenger], phone: Optional[str] = None) -> HoldResult:
        body = self.build_vietjet_hold(quote, trip_type, passengers, phone)
        data = await self._post("/vj/booking", body) or {}
        code = data.get("mã_giữ_vé")
        if code:
            log_event("hold_created", carrier="VJ", pax=len(passengers))
            return HoldResult(success=True, code=code, deadline=data.get("hạn_thanh_toán"))
        log_event("hold_rejected", level="WARNING", carrier="VJ", message=data.get("mess"))
        return HoldResult(success=False, message=data.get("mess") or "Không thể giữ vé. Vui lòng thử lại.")

    async def hold_vietnam_airlines(self, quote: FlightQuote, trip_type: TripType,
                                    passengers: List[Passenger],
                                    fare_type: VnaFareType = "VFR") -> HoldResult:
        params = self.build_vna_hold(quote, trip_type, passengers, fare_type)
        data = await self._post("/giuveVNAlive", params=params) or {}
        if data.get("status") == "OK" and data.get("pnr"):
            log_event("hold_created", carrier="VNA", pax=len(passengers))
            return HoldResult(success=True, code=data["pnr"])
        log_event("hold_rejected", level="WARNING", carrier="VNA", message=data.get("message"))
        return HoldResult(success=False, message=data.get("message") or "Không thể giữ vé. Vui lòng thử lại.")

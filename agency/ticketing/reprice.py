"""Reprice held Vietnam Airlines PNRs.

Two steps per PNR: `check` pulls the currently stored price (and guesses the
fare type from it), `reprice` asks the GDS to requote under a fare type and
returns both price texts for comparison.
"""

import json
import re
from typing import Dict, List, Literal, Optional
from pydantic import BaseModel, Field

from agency.backends.base import GatewayClient
from agency.errors import BackendError
from agency.obs.logger import log_event

RepriceFareType = Literal["VFR", "ADT", "STU"]

_GRAND_TOTAL_MARKER = "GRAND TOTAL KRW"
_GRAND_TOTAL_RE = re.compile(r"GRAND TOTAL KRW\s+(\d+)", re.IGNORECASE)
_GRAND_TOTAL_PAX_RE = re.compile(r"\d+\.\s*([A-Z/\s]+?\([A-Z/0-9]+\))", re.IGNORECASE)
_LINE_RE = re.compile(r"^\s*\d+\s+\.?\d+\s*I?\s+([\w/\s()+\-]+?)\s+KRW\s+(\d+)")


class PassengerPrice(BaseModel):
    name: str
    price: int


class PassengerPriceChange(BaseModel):
    name: str
    old_price: int
    new_price: int


class PriceComparison(BaseModel):
    old_total: int
    new_total: int
    passengers: List[PassengerPriceChange] = Field(default_factory=list)


class PNRCheckResult(BaseModel):
    pnr: str
    success: bool
    original_prices: List[PassengerPrice] = Field(default_factory=list)
    fare_type: Optional[RepriceFareType] = None
    error: Optional[str] = None


class RepriceResult(BaseModel):
    pnr: str
    success: bool
    fare_type: RepriceFareType
    comparison: Optional[PriceComparison] = None
    error: Optional[str] = None


def parse_pnr_list(text: str, separators: str = r"[\s,;]+") -> List[str]:
    """Split operator input into unique 6-character PNRs, order preserved."""
    seen: Dict[str, None] = {}
    for token in re.split(separators, text or ""):
        token = token.strip().upper()
        if len(token) == 6:
            seen.setdefault(token, None)
    return list(seen)


def parse_price_text(price_text: str) -> List[PassengerPrice]:
    """Parse a GDS price display into per-passenger prices.

    A 'GRAND TOTAL KRW n' display lists passengers by number and carries a
    single total, which every listed passenger is given. Otherwise each line
    of the form '1  .1 I NAME/FIRST MR(ADT)  KRW 123400' is one passenger.
    """
    text = price_text or ""
    if _GRAND_TOTAL_MARKER in text.upper():
        total = _GRAND_TOTAL_RE.search(text)
        amount = int(total.group(1)) if total else 0
        return [PassengerPrice(name=m.group(1).strip(), price=amount)
                for m in _GRAND_TOTAL_PAX_RE.finditer(text)]

    out = []
    for line in text.split("\n"):
        m = _LINE_RE.match(line)
        if m:
            out.append(PassengerPrice(name=m.group(1).strip(), price=int(m.group(2))))
    return out


def compare_prices(old_text: str, new_text: str) -> PriceComparison:
    old = parse_price_text(old_text)
    new = parse_price_text(new_text)
    new_by_name = {}
    for p in new:
        new_by_name.setdefault(p.name, p.price)
    return PriceComparison(
        old_total=sum(p.price for p in old),
        new_total=sum(p.price for p in new),
        passengers=[
            PassengerPriceChange(name=p.name, old_price=p.price, new_price=new_by_name.get(p.name, 0))
            for p in old
        ],
    )


def detect_fare_type(price_text: str) -> RepriceFareType:
    return "STU" if "RSTU" in (price_text or "") else "VFR"


class RepriceClient(GatewayClient):
    backend = "reprice"

    async def check(self, pnr: str) -> PNRCheckResult:
        try:
            data = await self._get("/beginReprice", params={"pnr": pnr}) or {}
        except BackendError as e:
            return PNRCheckResult(pnr=pnr, success=False, error=f"Lỗi kết nối: {e.message}")

        cryptic = (((data.get("model") or {}).get("output") or {})
                   .get("crypticResponse") or {}).get("response") or ""
        price_text = data.get("pricegoc")
        if f"IGNORED - {pnr}" in cryptic and price_text:
            return PNRCheckResult(
                pnr=pnr,
                success=True,
                original_prices=parse_price_text(price_text),
                fare_type=detect_fare_type(price_text),
            )
        log_event("reprice_check_failed", level="WARNING", pnr=pnr)
        return PNRCheckResult(pnr=pnr, success=False, error="Kiểm tra PNR thất bại")

    async def reprice(self, pnr: str, fare_type: RepriceFareType = "VFR") -> RepriceResult:
        try:
            data = await self._get("/reprice", params={"pnr": pnr, "doituong": fare_type}) or {}
        except BackendError as e:
            return RepriceResult(pnr=pnr, success=False, fare_type=fare_type,
                                 error=f"Lỗi kết nối: {e.message}")

        completed = "TRANSACTION COMPLETE" in json.dumps(data, ensure_ascii=False).upper()
        if completed and data.get("pricegoc") and data.get("pricemoi"):
            comparison = compare_prices(data["pricegoc"], data["pricemoi"])
            log_event("repriced", pnr=pnr, fare_type=fare_type,
                      old_total=comparison.old_total, new_total=comparison.new_total)
            return RepriceResult(pnr=pnr, success=True, fare_type=fare_type, comparison=comparison)
        log_event("reprice_failed", level="WARNING", pnr=pnr, fare_type=fare_type)
        return RepriceResult(pnr=pnr, success=False, fare_type=fare_type, error="Reprice thất bại")

    async def check_many(self, pnr_input: str) -> List[PNRCheckResult]:
        # Sequential: the GDS session behind the gateway handles one PNR at a time
        return [await self.check(pnr) for pnr in parse_pnr_list(pnr_input)]

    async def reprice_many(self, fare_types: Dict[str, RepriceFareType]) -> List[RepriceResult]:
        return [await self.reprice(pnr, fare_type) for pnr, fare_type in fare_types.items()]

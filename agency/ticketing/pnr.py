from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field

from agency.backends.base import GatewayClient
from agency.errors import ValidationError
from agency.obs.logger import log_event


class PNRLookup(BaseModel):
    pnr: str
    carrier: str
    found: bool
    paid: Optional[bool] = None
    total: Optional[int] = None
    currency: Optional[str] = None
    payment_deadline: Optional[str] = None
    detail: Dict[str, Any] = Field(default_factory=dict)  # booking as the gateway returned it


def clean_pnr(pnr: str) -> str:
    pnr = (pnr or "").strip().upper()
    if not pnr:
        raise ValidationError("Vui lòng nhập mã PNR")
    return pnr


def _lookup(pnr: str, carrier: str, data: Any) -> PNRLookup:
    if not isinstance(data, dict) or data.get("status") != "OK":
        log_event("pnr_not_found", level="WARNING", carrier=carrier, pnr=pnr)
        return PNRLookup(pnr=pnr, carrier=carrier, found=False)
    total = data.get("tongbillgiagoc")
    return PNRLookup(
        pnr=data.get("pnr") or pnr,
        carrier=carrier,
        found=True,
        paid=data.get("paymentstatus"),
        total=round(total) if isinstance(total, (int, float)) else None,
        currency=data.get("currency") or ("KRW" if carrier == "VNA" else None),
        payment_deadline=data.get("hanthanhtoan"),
        detail=data,
    )


class PNRClient(GatewayClient):
    backend = "pnr"

    async def lookup_vietjet(self, pnr: str) -> PNRLookup:
        pnr = clean_pnr(pnr)
        return _lookup(pnr, "VJ", await self._post("/vj/checkpnr", params={"pnr": pnr}))

    async def lookup_vietnam_airlines(self, pnr: str) -> PNRLookup:
        pnr = clean_pnr(pnr)
        return _lookup(pnr, "VNA", await self._get("/checkvechoVNA", params={"pnr": pnr}))

    async def lookup(self, carrier: str, pnr: str) -> PNRLookup:
        carrier = (carrier or "").upper()
        if carrier == "VJ":
            return await self.lookup_vietjet(pnr)
        if carrier == "VNA":
            return await self.lookup_vietnam_airlines(pnr)
        raise ValidationError(f"Unsupported carrier: {carrier}")

    async def list_files(self, pnr: str) -> List[str]:
        """URLs of the ticket images stored for a PNR."""
        pnr = clean_pnr(pnr)
        data = await self._get(f"/list-pnr/{pnr}")
        files = data.get("files") if isinstance(data, dict) else None
        if not isinstance(files, list):
            return []
        return [str(f) for f in files]

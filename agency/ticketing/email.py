"""Queue e-ticket emails through the agency's mail proxy."""

import re
from typing import Dict, List, Literal, Optional
from pydantic import BaseModel

from agency.backends.base import GatewayClient
from agency.errors import ValidationError
from agency.obs.logger import log_event

GMAIL_SUFFIX = "@gmail.com"

# Ticket template sent with the email
TYPE_LABELS: Dict[int, str] = {
    3: "Cơ bản",
    1: "IT FARE",
    2: "FULL",
    0: "Ghi chú",
}


class EmailTicketRequest(BaseModel):
    email: str
    customer_name: str
    salutation: str = "bạn"
    phone: str = ""
    pnrs: str                     # free text, one or more PNRs
    send_together: bool = True    # one email for all passengers, or one per passenger
    ticket_type: Literal[0, 1, 2, 3] = 0
    confirm_non_gmail: bool = False


def parse_pnrs(text: str) -> List[str]:
    tokens = re.split(r"[\s\-;]+", (text or "").upper())
    return [t.strip() for t in tokens if len(t.strip()) == 6]


def gmail_typo_warning(email: str) -> Optional[str]:
    """Warn when the address almost, but not quite, ends in @gmail.com."""
    tail = (email or "")[-len(GMAIL_SUFFIX):].lower()
    matches = sum(1 for a, b in zip(tail, GMAIL_SUFFIX) if a == b)
    if matches >= 7 and tail != GMAIL_SUFFIX:
        return f"Có phải bạn định nhập '{GMAIL_SUFFIX}' không?"
    return None


def type_label(ticket_type: int) -> str:
    return TYPE_LABELS.get(ticket_type, TYPE_LABELS[0])


class EmailTicketClient(GatewayClient):
    backend = "mail"

    def build_body(self, req: EmailTicketRequest) -> Dict:
        if not req.email or not req.customer_name or not req.salutation or not req.pnrs:
            raise ValidationError("Vui lòng điền đầy đủ thông tin bắt buộc")
        pnrs = parse_pnrs(req.pnrs)
        if not pnrs:
            raise ValidationError("Vui lòng nhập ít nhất một mã PNR hợp lệ (6 ký tự)")
        if not req.email.lower().endswith(GMAIL_SUFFIX) and not req.confirm_non_gmail:
            raise ValidationError(f"Địa chỉ email không có dạng ...{GMAIL_SUFFIX}, vui lòng xác nhận lại")
        return {
            "khachHang": [{
                "pnrs": pnrs,
                "email": req.email,
                "tenKhach": req.customer_name,
                "xungHo": req.salutation,
                "sdt": req.phone,
                "guiChung": req.send_together,
                "banner": "",
                "type": req.ticket_type,
            }]
        }

    async def queue(self, req: EmailTicketRequest) -> bool:
        """Returns True once the proxy has accepted the email into its queue."""
        body = self.build_body(req)
        data = await self._post("/proxy-gas", body)
        ok = isinstance(data, dict) and data.get("status") == "success"
        log_event("ticket_email_queued" if ok else "ticket_email_rejected",
                  level="INFO" if ok else "WARNING",
                  email=req.email, pnrs=len(body["khachHang"][0]["pnrs"]),
                  template=type_label(req.ticket_type))
        return ok

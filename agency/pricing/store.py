import httpx
from typing import Any, Dict, List, Optional

from agency.config import settings
from agency.obs.logger import log_event
from agency.obs.metrics import inc_counter
from agency.pricing.config import PriceConfig
from agency.types import CustomerSegment


class PriceConfigStore:
    """Session-lifetime view of the hosted `price_configs` table.

    Rows are read once through the PostgREST endpoint of the hosted database.
    Reads never fail from the caller's point of view: a missing table, a
    missing row or a partial row all come back as zero-valued fields. The stored
    `custom` row is only the starting point for a staff member's edits, which
    live in that staff member's session state.
    """

    def __init__(self, url: str = None, api_key: str = None, table: str = None,
                 http: Optional[httpx.AsyncClient] = None):
        self.url = (url if url is not None else settings.SUPABASE_URL).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.SUPABASE_ANON_KEY
        self.table = table or settings.PRICE_CONFIG_TABLE
        self._http = http or httpx.AsyncClient(http2=True)
        self._rows: Dict[CustomerSegment, Dict[str, Any]] = {}
        self.loaded = False

    async def _fetch_rows(self) -> List[Dict[str, Any]]:
        r = await self._http.get(
            f"{self.url}/rest/v1/{self.table}",
            params={"select": "*"},
            headers={
                "apikey": self.api_key,
                "Authorization": f"Bearer {self.api_key}",
                "Accept": "application/json",
            },
        )
        r.raise_for_status()
        data = r.json()
        return data if isinstance(data, list) else []

    async def load(self) -> Dict[CustomerSegment, PriceConfig]:
        self._rows = {}
        if not self.url:
            log_event("price_config_source_missing", level="WARNING")
        else:
            try:
                rows = await self._fetch_rows()
            except (httpx.HTTPError, ValueError) as e:
                inc_counter("price_config_fetch_failed_total")
                log_event("price_config_fetch_failed", level="ERROR",
                          error=f"{type(e).__name__}: {e}")
                rows = []
            for row in rows:
                mode = row.get("customer_mode") if isinstance(row, dict) else None
                try:
                    segment = CustomerSegment(mode)
                except ValueError:
                    log_event("price_config_unknown_mode", level="WARNING", customer_mode=mode)
                    continue
                self._rows[segment] = row
            log_event("price_configs_loaded", segments=sorted(s.value for s in self._rows))
        self.loaded = True
        return {segment: self.get_config(segment) for segment in CustomerSegment}

    def get_config(self, segment: CustomerSegment) -> PriceConfig:
        segment = CustomerSegment(segment)
        return PriceConfig.from_row(self._rows.get(segment), segment)

    async def aclose(self) -> None:
        await self._http.aclose()

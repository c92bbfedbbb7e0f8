import httpx
import time
from typing import Any, Dict, Optional

from agency.config import settings
from agency.errors import BackendError
from agency.obs.logger import log_event
from agency.obs.metrics import inc_counter, record_timing


class GatewayClient:
    """Shared plumbing for the agency's ticketing gateway endpoints.

    One persistent async HTTP client per backend. No explicit timeout or
    retry is configured here; the transport defaults apply.
    """

    backend = "gateway"

    def __init__(self, base_url: str = None, http: Optional[httpx.AsyncClient] = None):
        self.base_url = (base_url or settings.BACKEND_BASE_URL).rstrip("/")
        self._http = http or httpx.AsyncClient(http2=True)

    async def _request(self, method: str, path: str, *,
                       json: Optional[Dict[str, Any]] = None,
                       params: Any = None) -> Any:
        url = f"{self.base_url}{path}"
        start = time.monotonic()
        try:
            r = await self._http.request(
                method,
                url,
                json=json,
                params=params,
                headers={"accept": "application/json"},
            )
        except httpx.HTTPError as e:
            inc_counter("backend_errors_total", {"backend": self.backend, "kind": "transport"})
            log_event("backend_error", level="ERROR", backend=self.backend, path=path,
                      error=f"{type(e).__name__}: {e}")
            raise BackendError(self.backend, f"{type(e).__name__}: {e}") from e

        elapsed_ms = (time.monotonic() - start) * 1000.0
        record_timing("backend_latency_ms", elapsed_ms, {"backend": self.backend})

        if not (200 <= r.status_code < 300):
            inc_counter("backend_errors_total", {"backend": self.backend, "kind": "http"})
            log_event("backend_error", level="ERROR", backend=self.backend, path=path,
                      status=r.status_code)
            raise BackendError(self.backend, f"HTTP error! status: {r.status_code}", r.status_code)

        try:
            data = r.json()
        except ValueError as e:
            log_event("backend_error", level="ERROR", backend=self.backend, path=path,
                      error="invalid JSON")
            raise BackendError(self.backend, "invalid JSON response", r.status_code) from e

        log_event("backend_call", backend=self.backend, path=path, status=r.status_code,
                  ms_total=round(elapsed_ms, 2))
        return data

    async def _post(self, path: str, body: Optional[Dict[str, Any]] = None, params: Any = None) -> Any:
        return await self._request("POST", path, json=body, params=params)

    async def _get(self, path: str, params: Any = None) -> Any:
        return await self._request("GET", path, params=params)

    async def aclose(self) -> None:
        await self._http.aclose()

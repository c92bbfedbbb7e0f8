import asyncio
import time
from typing import Dict, Optional, Callable
from datetime import datetime

from agency.data.airports import find_airport
from agency.types import SearchRequest, TripType


class HealthChecker:
    def __init__(self):
        self.checks = {}
        self.last_check_time = {}
        self.check_results = {}

    def register_check(self, name: str, check_func: Callable, interval_seconds: int = 30):
        self.checks[name] = {
            "func": check_func,
            "interval": interval_seconds
        }

    async def run_checks(self) -> Dict:
        results = {}
        tasks = []

        for name, check_info in self.checks.items():
            last_time = self.last_check_time.get(name, 0)
            if time.time() - last_time >= check_info["interval"]:
                tasks.append(self._run_single_check(name, check_info["func"]))

        if tasks:
            for name, result in await asyncio.gather(*tasks):
                results[name] = result
                self.check_results[name] = result
                self.last_check_time[name] = time.time()

        # Cached results for checks still inside their interval
        for name in self.checks:
            if name not in results:
                results[name] = self.check_results.get(name, {"status": "unknown"})

        all_healthy = all(
            r.get("status") == "healthy"
            for r in results.values()
            if r.get("status") != "unknown"
        )

        return {
            "status": "healthy" if all_healthy else "unhealthy",
            "checks": results,
            "timestamp": datetime.now().isoformat()
        }

    async def _run_single_check(self, name: str, check_func: Callable) -> tuple[str, Dict]:
        try:
            start = time.time()
            if asyncio.iscoroutinefunction(check_func):
                result = await check_func()
            else:
                result = check_func()

            duration = time.time() - start
            return name, {
                "status": "healthy" if result else "unhealthy",
                "duration_ms": int(duration * 1000),
                "timestamp": datetime.now().isoformat()
            }
        except Exception as e:
            # A failing probe is reported, never raised
            return name, {
                "status": "unhealthy",
                "error": str(e),
                "timestamp": datetime.now().isoformat()
            }


class RequestValidator:
    @staticmethod
    def validate_search_params(req: SearchRequest) -> tuple[bool, Optional[str]]:
        for field in ("departure", "arrival", "departure_date"):
            if not getattr(req, field):
                return False, f"Missing required field: {field}"

        for field in ("departure", "arrival"):
            if find_airport(getattr(req, field)) is None:
                return False, f"Unknown airport: {getattr(req, field)}"
        if req.departure == req.arrival:
            return False, "Departure and arrival must differ"

        # Dates are ISO (YYYY-MM-DD) on the way in
        try:
            dep = datetime.fromisoformat(req.departure_date)
            if req.trip_type == TripType.ROUND_TRIP:
                if not req.return_date:
                    return False, "Missing required field: return_date"
                if datetime.fromisoformat(req.return_date) < dep:
                    return False, "Return date is before departure date"
        except ValueError:
            return False, "Invalid date format"

        if req.adults < 1 or req.adults + req.children > 9:
            return False, "Invalid passenger count"
        if req.children < 0 or req.infants < 0 or req.infants > req.adults:
            return False, "Invalid passenger count"

        return True, None

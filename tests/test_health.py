from agency.infrastructure.health import HealthChecker, RequestValidator
from agency.types import SearchRequest, TripType


def _req(**kw):
    base = {"departure": "ICN", "arrival": "HAN", "departure_date": "2026-04-24"}
    base.update(kw)
    return SearchRequest(**base)


def test_valid_one_way():
    assert RequestValidator.validate_search_params(_req()) == (True, None)


def test_round_trip_needs_ordered_return_date():
    ok, err = RequestValidator.validate_search_params(_req(trip_type=TripType.ROUND_TRIP))
    assert not ok and "return_date" in err

    ok, err = RequestValidator.validate_search_params(
        _req(trip_type=TripType.ROUND_TRIP, return_date="2026-04-20"))
    assert not ok and "before" in err

    assert RequestValidator.validate_search_params(
        _req(trip_type=TripType.ROUND_TRIP, return_date="2026-05-01"))[0]


def test_rejects_unknown_or_same_airport():
    assert RequestValidator.validate_search_params(_req(arrival="ZZZ"))[1] == "Unknown airport: ZZZ"
    assert not RequestValidator.validate_search_params(_req(arrival="ICN"))[0]


def test_rejects_bad_dates():
    assert RequestValidator.validate_search_params(_req(departure_date="24/04/2026"))[1] == "Invalid date format"


def test_passenger_counts():
    assert not RequestValidator.validate_search_params(_req(adults=0))[0]
    assert not RequestValidator.validate_search_params(_req(adults=5, children=5))[0]
    assert not RequestValidator.validate_search_params(_req(adults=1, infants=2))[0]
    assert RequestValidator.validate_search_params(_req(adults=2, children=1, infants=2))[0]


async def test_health_checker_reports_failures():
    checker = HealthChecker()
    checker.register_check("sessions", lambda: True)

    def broken():
        raise RuntimeError("redis down")

    checker.register_check("price_configs", broken)
    results = await checker.run_checks()

    assert results["status"] == "unhealthy"
    assert results["checks"]["sessions"]["status"] == "healthy"
    assert results["checks"]["price_configs"]["error"] == "redis down"


async def test_health_checker_caches_within_interval():
    calls = []

    async def probe():
        calls.append(1)
        return True

    checker = HealthChecker()
    checker.register_check("sessions", probe, interval_seconds=60)
    await checker.run_checks()
    results = await checker.run_checks()

    assert len(calls) == 1
    assert results["checks"]["sessions"]["status"] == "healthy"

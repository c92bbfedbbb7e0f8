import os
import sys
import asyncio
import inspect

import pytest

# Ensure project root is on sys.path so `import agency` works in tests
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from agency.obs.metrics import reset_metrics  # noqa: E402
from agency.types import FareInfo, FlightLeg, FlightQuote  # noqa: E402


def pytest_pyfunc_call(pyfuncitem):
    """Allow running async tests without pytest-asyncio.

    If the test function is a coroutine, run it in a fresh event loop.
    """
    testfunction = pyfuncitem.obj
    if inspect.iscoroutinefunction(testfunction):
        funcargs = pyfuncitem.funcargs
        sig = inspect.signature(testfunction)
        # Filter only the parameters that the test function expects
        allowed = {name: funcargs[name] for name in sig.parameters.keys() if name in funcargs}
        asyncio.run(testfunction(**allowed))
        return True
    return None


@pytest.fixture(autouse=True)
def _fresh_metrics():
    reset_metrics()
    yield


def _leg(carrier, origin, destination, stops, stop_airports=None, fare_class="ECO",
         booking_key=None, departure_date="24/04/2026", departure_time="10:30"):
    return FlightLeg(
        carrier=carrier,
        flight_id=f"{carrier}123",
        origin=origin,
        destination=destination,
        departure_time=departure_time,
        departure_date=departure_date,
        arrival_time="13:40",
        arrival_date=departure_date,
        stops=stops,
        stop_airports=stop_airports or [],
        fare_class=fare_class,
        booking_key=booking_key,
    )


@pytest.fixture
def make_quote():
    """Factory for FlightQuote; pass inbound_stops to get a round trip."""

    def _make(carrier="VNA", fare=1_000_000, stops=0, inbound_stops=None,
              baggage_tag="", fare_class="ECO", stop_airports=None,
              booking_key=None, inbound_booking_key=None, seats=9,
              origin="ICN", destination="HAN"):
        outbound = _leg(carrier, origin, destination, stops, stop_airports, fare_class, booking_key)
        inbound = None
        if inbound_stops is not None or inbound_booking_key is not None:
            inbound = _leg(carrier, destination, origin, inbound_stops, None, fare_class,
                           inbound_booking_key, departure_date="01/05/2026", departure_time="23:55")
        return FlightQuote(
            outbound=outbound,
            inbound=inbound,
            fare=FareInfo(
                fare=fare,
                base_fare=fare - 200_000,
                fuel_surcharge=150_000,
                tax_fee=50_000,
                seats_remaining=seats,
                baggage_tag=baggage_tag,
            ),
        )

    return _make

from agency.backends.transform import fare_from_raw, from_vietjet, from_vietnam_airlines, parse_stops, to_int


def _raw_leg(carrier="VJ", stops="0", **extra):
    leg = {
        "hãng": carrier,
        "id": f"{carrier}960",
        "nơi_đi": "ICN",
        "nơi_đến": "HAN",
        "giờ_cất_cánh": "10:30",
        "ngày_cất_cánh": "24/04/2026",
        "giờ_hạ_cánh": "13:40",
        "ngày_hạ_cánh": "24/04/2026",
        "thời_gian_bay": "5h10m",
        "thời_gian_chờ": "",
        "số_điểm_dừng": stops,
        "điểm_dừng_1": "",
        "điểm_dừng_2": "",
        "loại_vé": "ECO",
    }
    leg.update(extra)
    return leg


FARE = {
    "giá_vé": "1.250.000",
    "giá_vé_gốc": 1050000,
    "phí_nhiên_liệu": "150,000",
    "thuế_phí_công_cộng": 50000,
    "số_ghế_còn": "7",
    "hành_lý_vna": "VFR",
}


def test_to_int_handles_grouped_strings():
    assert to_int("1.250.000") == 1250000
    assert to_int("150,000") == 150000
    assert to_int("1234000.0") == 1234000
    assert to_int("980000") == 980000
    assert to_int(980000.0) == 980000
    assert to_int(None) == 0
    assert to_int("n/a") == 0


def test_decimal_fare_string_is_not_scaled():
    fare = fare_from_raw({"giá_vé": "1234000.0", "phí_nhiên_liệu": "150.000"})
    assert fare.fare == 1234000
    assert fare.fuel_surcharge == 150000


def test_parse_stops():
    assert parse_stops("0") == 0
    assert parse_stops(1) == 1
    assert parse_stops("") is None
    assert parse_stops(None) is None


def test_vietjet_spaced_keys():
    body = [{
        "chiều đi": _raw_leg(BookingKey="KEY-OUT"),
        "chiều về": _raw_leg(stops="1", **{"nơi_đi": "HAN", "nơi_đến": "ICN", "điểm_dừng_1": "SGN"}),
        "thông_tin_chung": FARE,
    }]
    [q] = from_vietjet(body)
    assert q.carrier == "VJ"
    assert q.outbound.stops == 0
    assert q.outbound.booking_key == "KEY-OUT"
    assert q.inbound.stops == 1
    assert q.inbound.stop_airports == ["SGN"]
    assert q.fare.fare == 1250000
    assert q.fare.fuel_surcharge == 150000
    assert q.fare.seats_remaining == 7


def test_vietjet_accepts_underscored_keys():
    [q] = from_vietjet([{"chiều_đi": _raw_leg(), "thông_tin_chung": FARE}])
    assert q.inbound is None
    assert q.outbound.origin == "ICN"


def test_vietnam_airlines_underscored_keys():
    body = [{"chiều_đi": _raw_leg(carrier="VNA", stops="1", **{"điểm_dừng_1": "HAN"}), "thông_tin_chung": FARE}]
    [q] = from_vietnam_airlines(body)
    assert q.carrier == "VNA"
    assert q.fare.baggage_tag == "VFR"
    assert q.outbound.stops == 1


def test_vietnam_airlines_ignores_spaced_keys():
    assert from_vietnam_airlines([{"chiều đi": _raw_leg(), "thông_tin_chung": FARE}]) == []


def test_malformed_items_are_skipped(capsys):
    body = [
        {"chiều_đi": _raw_leg()},            # no fare block
        "garbage",
        {"chiều_đi": _raw_leg(stops="x"), "thông_tin_chung": FARE},
    ]
    quotes = from_vietjet(body)
    assert len(quotes) == 1
    assert quotes[0].outbound.stops is None
    assert "quote_skipped" in capsys.readouterr().out


def test_non_list_body_gives_no_quotes():
    assert from_vietjet(None) == []
    assert from_vietnam_airlines({"error": "x"}) == []

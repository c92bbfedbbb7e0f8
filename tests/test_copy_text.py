from agency.formatters.copy_text import (
    baggage_line,
    copy_template,
    fare_breakdown,
    flight_path,
    short_date,
    ticket_class_display,
    ticket_class_summary,
)


def test_short_date():
    assert short_date("24/04/2026") == "24/04"
    assert short_date("") == ""


def test_vietjet_ticket_classes():
    assert ticket_class_display("ECO", "VJ") == "ECO"
    assert ticket_class_display("T", "VJ") == "ECO"
    assert ticket_class_display("SKYBOSS", "VJ") == "DELUXE"
    assert ticket_class_display("SKYBOSS", "VNA") == "SKYBOSS"


def test_ticket_class_summary(make_quote):
    assert ticket_class_summary(make_quote(carrier="VJ", fare_class="H")) == "Một chiều: ECO"
    rt = make_quote(carrier="VJ", fare_class="Z", inbound_stops=0)
    assert ticket_class_summary(rt) == "Khứ hồi: DELUXE-DELUXE"


def test_direct_one_way_template(make_quote):
    quote = make_quote(carrier="VNA", baggage_tag="ADT")
    assert copy_template(quote, 1_950_049) == (
        "ICN-HAN 10:30 ngày 24/04\n"
        "VNairlines 10kg xách tay, 23kg ký gửi, giá vé = 1.950.000w"
    )


def test_round_trip_template_lists_return_leg(make_quote):
    quote = make_quote(carrier="VJ", inbound_stops=0)
    assert copy_template(quote, 2_000_000) == (
        "ICN-HAN 10:30 ngày 24/04\n"
        "HAN-ICN 23:55 ngày 01/05\n"
        "Vietjet 7kg xách tay, 20kg ký gửi, giá vé = 2.000.000w"
    )


def test_connecting_leg_is_split_at_the_stop(make_quote):
    quote = make_quote(carrier="VNA", stops=1, stop_airports=["SGN"], baggage_tag="VFR")
    lines = copy_template(quote, 1_000_000).split("\n")
    assert lines[0] == "ICN-SGN 10:30 ngày 24/04"
    assert lines[1] == "SGN-HAN 13:40 ngày 24/04"
    assert lines[2] == "VNairlines 10kg xách tay, 46kg ký gửi, giá vé = 1.000.000w"
    assert flight_path(quote.outbound) == "ICN → SGN → HAN"


def test_partner_and_unknown_baggage_lines(make_quote):
    assert baggage_line(make_quote(carrier="OZ"), 900_000) == (
        "Asiana Airlines 10kg xách tay, 23kg ký gửi, giá vé = 900.000w")
    assert baggage_line(make_quote(carrier="TW"), 900_000) == (
        "Tway Air 10kg xách tay, ký gửi tuỳ gói, giá vé = 900.000w")
    assert baggage_line(make_quote(carrier="ZZ"), 900_000) == "ZZ 10kg xách tay, giá vé = 900.000w"
    # flag fare without a known fare family
    assert baggage_line(make_quote(carrier="VNA", baggage_tag=""), 900_000) == (
        "VNA 10kg xách tay, giá vé = 900.000w")


def test_fare_breakdown(make_quote):
    quote = make_quote(fare=1_000_000)
    assert fare_breakdown(quote, 30_000) == [
        "Giá gốc: 800.000 KRW",
        "Phí nhiên liệu: 150.000 KRW",
        "Phí xuất vé: 30.000 KRW",
    ]
    assert len(fare_breakdown(quote, None)) == 2

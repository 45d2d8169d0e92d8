from decimal import Decimal

import pytest

from ngosite.services.payments import PaymentService


@pytest.mark.parametrize(
    "amount,expected",
    [
        (500, "500.00"),
        ("1500.5", "1500.50"),
        (Decimal("0.005"), "0.01"),
        (0, None),
        (-5, None),
        ("abc", None),
        ("NaN", None),
        ("Infinity", None),
        ("0.004", None),
        ("0.005", "0.01"),
        (None, None),
        (True, None),
    ],
)
def test_format_amount(amount, expected):
    assert PaymentService.format_amount(amount) == expected


def test_build_payment_uri_with_amount():
    uri = PaymentService.build_payment_uri("duaf@upi", "DUAF Trust", "inr", Decimal("500"))
    assert uri == "upi://pay?pa=duaf@upi&pn=DUAF%20Trust&cu=INR&am=500.00"


def test_build_payment_uri_without_amount():
    uri = PaymentService.build_payment_uri("duaf@upi", "DUAF")
    assert uri == "upi://pay?pa=duaf@upi&pn=DUAF&cu=INR"
    assert "am=" not in uri


def test_build_payment_uri_needs_handle():
    assert PaymentService.build_payment_uri(None, "DUAF", "INR", 500) is None
    assert PaymentService.build_payment_uri("   ", "DUAF", "INR", 500) is None


def test_qr_svg_is_inline_markup():
    svg = PaymentService.qr_svg("upi://pay?pa=duaf@upi&pn=DUAF&cu=INR&am=500.00")
    assert svg.lstrip().startswith("<svg")
    assert "<?xml" not in svg
    assert PaymentService.qr_svg(None) is None
    assert PaymentService.qr_svg("") is None

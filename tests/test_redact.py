from __future__ import annotations

import pytest

from pyvisitors._redact import is_sensitive, redact_for_log, redact_record


def test_redact_record_masks_visitor_secrets() -> None:
    record = {
        "ip": "1.1.1.1",
        "FullName": "X",
        "Otp": "9999",
        "pin": "0000",
        "PhoneCode": "4321",
        "nested": {"Authorization": "Bearer abc"},
    }

    redacted = redact_record(record)

    assert redacted == {
        "ip": "1.1.1.1",
        "FullName": "X",
        "Otp": "<redacted>",
        "pin": "<redacted>",
        "PhoneCode": "<redacted>",
        "nested": {"Authorization": "<redacted>"},
    }
    assert record["Otp"] == "9999"


def test_payments_keep_only_last_four_card_digits() -> None:
    record = {
        "ip": "1.1.1.1",
        "payments": [
            {"CardNumber": "4111 1111 1111 1234", "card_holder": "X Y", "cvv": "123", "expiryDate": "12/29", "amount": 10},
            {"card-number": "5500000000000004", "Card_Expiry": "01/30"},
        ],
    }

    redacted = redact_for_log(record)

    assert redacted["payments"] == [
        {"CardNumber": "<redacted:1234>", "card_holder": "X Y", "cvv": "<redacted>", "expiryDate": "<redacted>", "amount": 10},
        {"card-number": "<redacted:0004>", "Card_Expiry": "<redacted>"},
    ]


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("CardNumber", True),
        ("card_number", True),
        ("CARD-CVV", True),
        ("cardHolder", False),
        ("phone_code", True),
        ("FullName", False),
        ("ip", False),
    ],
)
def test_field_names_are_matched_case_and_separator_insensitively(name: str, expected: bool) -> None:
    assert is_sensitive(name) is expected


def test_short_card_values_are_fully_masked() -> None:
    assert redact_record({"cardNumber": "4111"}) == {"cardNumber": "<redacted>"}


def test_empty_sensitive_values_are_left_as_is() -> None:
    assert redact_record({"otp": "", "pin": None}) == {"otp": "", "pin": None}


def test_redact_for_log_truncates_long_strings() -> None:
    redacted = redact_for_log({"value": "x" * 600}, max_string=10)
    assert redacted["value"].startswith("x" * 10)
    assert "<truncated>" in redacted["value"]


def test_redact_for_log_walks_batches_of_records() -> None:
    batch = ({"ip": "a", "pin": "1"}, 7, None)
    assert redact_for_log(batch) == [{"ip": "a", "pin": "<redacted>"}, 7, None]

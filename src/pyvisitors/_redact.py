"""Redaction of visitor records for debug logs.

Visitor records routinely carry card data, one-time codes and PINs, both
at the top level (``newOtp``, ``newPin``) and inside the ``payments`` list.
Field names arrive in mixed styles (``CardNumber``, ``card_number``,
``card-number``), so matching is done on a folded form of the name.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

_REDACTED = "<redacted>"
_MAX_DEPTH = 8

_SENSITIVE_FIELDS: frozenset[str] = frozenset(
    {
        "password",
        "token",
        "authorization",
        "cookie",
        "cvv",
        "cvc",
        "expiry",
        "expirydate",
        "pin",
        "otp",
        "code",
        "phonecode",
    }
)

#: Any field starting with this (after folding) is card data.
_CARD_PREFIX = "card"


def _fold(name: str) -> str:
    return "".join(ch for ch in name.lower() if ch.isalnum())


def is_sensitive(name: str) -> bool:
    """Whether a visitor record field must never reach the logs."""
    folded = _fold(name)
    if folded in _SENSITIVE_FIELDS:
        return True
    # Cardholder names stay readable.
    return folded.startswith(_CARD_PREFIX) and folded not in {"cardholder", "cardholdername"}


def _mask(name: str, value: Any) -> str:
    # Card numbers keep their last four digits.
    digits = "".join(ch for ch in str(value) if ch.isdigit())
    if _fold(name) in {"cardnumber", "cardno", "card"} and len(digits) >= 12:
        return f"<redacted:{digits[-4:]}>"
    return _REDACTED


def redact_record(record: Mapping[str, Any], *, max_string: int = 512, _depth: int = 0) -> dict[str, Any]:
    """Return a copy of a visitor record with sensitive fields masked.

    The ``payments`` list (and any other nested record) is walked with the
    same rules.
    """
    redacted: dict[str, Any] = {}
    for raw_name, value in record.items():
        name = str(raw_name)
        if is_sensitive(name) and value not in (None, ""):
            redacted[name] = _mask(name, value)
        else:
            redacted[name] = redact_for_log(value, max_string=max_string, _depth=_depth + 1)
    return redacted


def redact_for_log(value: Any, *, max_string: int = 512, _depth: int = 0) -> Any:
    """Return a copy of a wire payload that is safe to log."""
    if _depth > _MAX_DEPTH:
        return "<max-depth>"
    if isinstance(value, Mapping):
        return redact_record(value, max_string=max_string, _depth=_depth)
    if isinstance(value, (list, tuple)):
        return [redact_for_log(item, max_string=max_string, _depth=_depth + 1) for item in value]
    if isinstance(value, str) and len(value) > max_string:
        return f"{value[:max_string]}…<truncated>"
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return repr(value)

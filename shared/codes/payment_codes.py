"""
Payment specific codes.
"""
from __future__ import annotations

from enum import IntEnum


class PaymentCode(IntEnum):
    # Generic success
    SUCCESS = 0

    # Local errors, raised before or without any gateway IO (6xxxx)
    INVALID_ARGUMENT = 60000
    ENCODE_ERROR = 60001
    DECODE_ERROR = 60002
    SIGNATURE_ERROR = 60003
    DECRYPT_ERROR = 60004

    # Transport / gateway errors (61xxx)
    TRANSPORT_ERROR = 61000
    GATEWAY_RETURN_FAIL = 61001
    GATEWAY_BUSINESS_FAIL = 61002

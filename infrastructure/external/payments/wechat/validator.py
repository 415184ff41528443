"""
Two-layer status check shared by responses and callbacks.

``return_code`` (transport layer) is checked first; ``result_code``
(business layer) only once the first passed.
"""
from __future__ import annotations

from enum import Enum
from typing import Mapping

from infrastructure.external.payments.exceptions import (
    PaymentBusinessError,
    PaymentReturnError,
)
from infrastructure.external.payments.wechat.codec import FAIL, SUCCESS


class ResponseOutcome(str, Enum):
    SUCCESS = "success"
    RETURN_FAIL = "return_fail"
    BUSINESS_FAIL = "business_fail"


def check_return(fields: Mapping[str, str]) -> None:
    code = fields.get("return_code")
    if code == SUCCESS:
        return
    if code == FAIL:
        raise PaymentReturnError(fields.get("return_msg") or "", return_code=code)
    raise PaymentReturnError(f"unknown return code: {code!r}", return_code=code)


def check_result(fields: Mapping[str, str]) -> None:
    code = fields.get("result_code")
    if code == SUCCESS:
        return
    if code == FAIL:
        raise PaymentBusinessError(fields.get("err_code"), fields.get("err_code_des"), result_code=code)
    raise PaymentBusinessError(
        fields.get("err_code"),
        fields.get("err_code_des"),
        result_code=code,
        message=f"unknown result code: {code!r}",
    )


def validate_response(fields: Mapping[str, str]) -> None:
    check_return(fields)
    check_result(fields)


def classify(fields: Mapping[str, str]) -> ResponseOutcome:
    try:
        validate_response(fields)
    except PaymentReturnError:
        return ResponseOutcome.RETURN_FAIL
    except PaymentBusinessError:
        return ResponseOutcome.BUSINESS_FAIL
    return ResponseOutcome.SUCCESS

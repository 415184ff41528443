"""
Request parameter assembly.

Each builder validates its request in one pass and emits the parameter
mapping that is then signed and encoded unchanged.
"""
from __future__ import annotations

import secrets
import string
from datetime import datetime
from typing import Any, Optional

from application.dtos.payments import (
    Credentials,
    OutTradeRef,
    RefundRequest,
    TransactionRef,
    UnifiedOrderRequest,
)
from infrastructure.external.payments.exceptions import PaymentInvalidArgumentError
from infrastructure.external.payments.wechat.signer import SIGN_TYPE_MD5, SIGN_TYPES

NONCE_ALPHABET = string.ascii_letters + string.digits
NONCE_LENGTH = 32
TIME_FORMAT = "%Y%m%d%H%M%S"
TRADE_TYPE_JSAPI = "JSAPI"


def nonce_str(length: int = NONCE_LENGTH) -> str:
    return "".join(secrets.choice(NONCE_ALPHABET) for _ in range(length))


def require(field: str, value: Any) -> str:
    s = "" if value is None else str(value)
    if not s:
        raise PaymentInvalidArgumentError(field)
    return s


def _require_positive(field: str, value: int) -> str:
    if not isinstance(value, int) or value <= 0:
        raise PaymentInvalidArgumentError(field, f"{field} must be a positive integer")
    return str(value)


def _format_time(value: datetime | str | None) -> Optional[str]:
    if isinstance(value, datetime):
        return value.strftime(TIME_FORMAT)
    return value


def _sign_type(requested: Optional[str], default: str) -> str:
    st = requested or default or SIGN_TYPE_MD5
    if st not in SIGN_TYPES:
        raise PaymentInvalidArgumentError("sign_type", f"unsupported sign_type: {st!r}")
    return st


def _common(creds: Credentials, nonce: Optional[str], sign_type: str) -> dict[str, Any]:
    if nonce is not None and len(nonce) > NONCE_LENGTH:
        raise PaymentInvalidArgumentError("nonce_str", f"nonce_str must be at most {NONCE_LENGTH} characters")
    return {
        "appid": require("app_id", creds.app_id),
        "mch_id": require("mch_id", creds.mch_id),
        "nonce_str": nonce or nonce_str(),
        "sign_type": sign_type,
    }


def unified_order_params(creds: Credentials, req: UnifiedOrderRequest, *, default_sign_type: str = SIGN_TYPE_MD5) -> dict[str, Any]:
    data = _common(creds, req.nonce_str, _sign_type(req.sign_type, default_sign_type))
    data.update(
        body=require("body", req.body),
        out_trade_no=require("out_trade_no", req.out_trade_no),
        total_fee=_require_positive("total_fee", req.total_fee),
        spbill_create_ip=require("spbill_create_ip", req.spbill_create_ip),
        notify_url=require("notify_url", req.notify_url),
        openid=require("open_id", req.openid),
        trade_type=TRADE_TYPE_JSAPI,
        device_info=req.device_info,
        detail=req.detail,
        attach=req.attach,
        fee_type=req.fee_type,
        time_start=_format_time(req.time_start),
        time_expire=_format_time(req.time_expire),
        goods_tag=req.goods_tag,
        limit_pay=req.limit_pay,
    )
    return data


def refund_params(creds: Credentials, req: RefundRequest, *, default_sign_type: str = SIGN_TYPE_MD5) -> dict[str, Any]:
    data = _common(creds, req.nonce_str, _sign_type(req.sign_type, default_sign_type))

    trade = req.trade
    if isinstance(trade, TransactionRef):
        data["transaction_id"] = require("transaction_id", trade.transaction_id)
    elif isinstance(trade, OutTradeRef):
        data["out_trade_no"] = require("out_trade_no", trade.out_trade_no)
    else:
        raise PaymentInvalidArgumentError("transaction_id", "one of transaction_id / out_trade_no is required")

    data.update(
        out_refund_no=require("out_refund_no", req.out_refund_no),
        total_fee=_require_positive("total_fee", req.total_fee),
        refund_fee=_require_positive("refund_fee", req.refund_fee),
        refund_fee_type=req.refund_fee_type,
        refund_desc=req.refund_desc,
        refund_account=req.refund_account,
        notify_url=req.notify_url,
    )
    if req.refund_fee > req.total_fee:
        raise PaymentInvalidArgumentError("refund_fee", "refund_fee must not exceed total_fee")
    return data

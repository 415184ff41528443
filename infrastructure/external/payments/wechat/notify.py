"""
Asynchronous callback parsing (paid / refunded).

Paid callbacks are authenticated by re-signing the decoded fields with the
merchant key. Refund callbacks carry their result AES-encrypted in
``req_info``, which only a holder of the key can produce.
"""
from __future__ import annotations

from typing import Type, TypeVar

from pydantic import BaseModel, ValidationError

from application.dtos.payments import PaidNotify, RefundedNotify, RefundedReqInfo
from core.logging_config import get_logger
from infrastructure.external.payments.exceptions import (
    PaymentDecodeError,
    PaymentInvalidArgumentError,
    PaymentSignatureError,
)
from infrastructure.external.payments.wechat.codec import decode_envelope
from infrastructure.external.payments.wechat.crypto import decrypt_req_info
from infrastructure.external.payments.wechat.signer import SIGN_TYPE_MD5, SIGN_TYPES, verify
from infrastructure.external.payments.wechat.validator import check_result, check_return


logger = get_logger(__name__)

M = TypeVar("M", bound=BaseModel)


def build_model(model: Type[M], fields: dict[str, str]) -> M:
    """Map a decoded envelope onto its result model; bad field types are a decode failure."""
    try:
        return model.from_fields(fields)  # type: ignore[attr-defined]
    except ValidationError as exc:
        raise PaymentDecodeError(f"unexpected field values in {model.__name__}: {exc}") from exc


def verify_signature(fields: dict[str, str], api_key: str) -> None:
    sign_type = fields.get("sign_type") or SIGN_TYPE_MD5
    if sign_type not in SIGN_TYPES:
        raise PaymentSignatureError(f"unsupported sign_type in callback: {sign_type!r}")
    if not verify(fields, api_key, sign_type):
        raise PaymentSignatureError("callback signature mismatch")


def parse_paid_notify(body: bytes, api_key: str) -> PaidNotify:
    if not api_key:
        raise PaymentInvalidArgumentError("api_key")
    fields = decode_envelope(body)
    check_return(fields)
    verify_signature(fields, api_key)
    check_result(fields)
    ntf = build_model(PaidNotify, fields)
    logger.info(
        "wechat_paid_notify_parsed",
        provider="wechat",
        out_trade_no=ntf.out_trade_no,
        transaction_id=ntf.transaction_id,
        total_fee=ntf.total_fee,
    )
    return ntf


def parse_refunded_notify(body: bytes, api_key: str) -> RefundedNotify:
    if not api_key:
        raise PaymentInvalidArgumentError("api_key")
    fields = decode_envelope(body)
    # Business fields are inside req_info; only the transport layer is visible here
    check_return(fields)

    req_info = fields.get("req_info")
    if not req_info:
        raise PaymentDecodeError("refund callback carries no req_info")
    plaintext = decrypt_req_info(req_info, api_key)
    inner = build_model(RefundedReqInfo, decode_envelope(plaintext))

    rtf = build_model(RefundedNotify, fields)
    rtf.refund_info = inner
    logger.info(
        "wechat_refunded_notify_parsed",
        provider="wechat",
        out_trade_no=inner.out_trade_no,
        out_refund_no=inner.out_refund_no,
        refund_status=inner.refund_status,
    )
    return rtf

"""
WeChat Pay v2 (XML) adapter.

Features used:
- Request signing with the merchant API key (MD5 / HMAC-SHA256)
- JSAPI unified order and front-end pay parameters
- Refund over the mutually authenticated endpoint
- Paid / refunded callback parsing (signature check, AES-256-ECB decryption)
"""
from __future__ import annotations

import ssl
import time
from typing import Optional

import httpx
from pydantic import SecretStr

from application.dtos.payments import (
    Credentials,
    FrontPayParams,
    PaidNotify,
    RefundedNotify,
    RefundRequest,
    RefundResult,
    UnifiedOrderRequest,
    UnifiedOrderResult,
)
from core.settings import WechatSettings, payment_settings
from infrastructure.external.payments.base import BasePaymentClient
from infrastructure.external.payments.exceptions import (
    PaymentDecodeError,
    PaymentInvalidArgumentError,
)
from infrastructure.external.payments.wechat import notify, params
from infrastructure.external.payments.wechat.codec import decode_envelope, encode_envelope, sign_envelope
from infrastructure.external.payments.wechat.notify import build_model
from infrastructure.external.payments.wechat.signer import SIGN_TYPE_MD5, sign
from infrastructure.external.payments.wechat.validator import validate_response


UNIFIED_ORDER_PATH = "/pay/unifiedorder"
REFUND_PATH = "/secapi/pay/refund"


def load_client_identity(cert_path: str, key_path: Optional[str] = None) -> ssl.SSLContext:
    """Build an SSL context presenting the merchant certificate (apiclient_cert.pem / apiclient_key.pem)."""
    ctx = ssl.create_default_context()
    try:
        ctx.load_cert_chain(certfile=cert_path, keyfile=key_path)
    except (OSError, ssl.SSLError) as exc:
        raise PaymentInvalidArgumentError("tls_cert", f"cannot load merchant client identity: {exc}") from exc
    return ctx


def build_front_pay_params(result: UnifiedOrderResult, api_key: str, timestamp: int) -> FrontPayParams:
    """Re-sign the derived mapping the paying client passes to the JSAPI bridge."""
    app_id = params.require("appid", result.app_id)
    nonce = params.require("nonce_str", result.nonce_str)
    prepay_id = params.require("prepay_id", result.prepay_id)
    package = f"prepay_id={prepay_id}"
    pay_sign = sign(
        {
            "appId": app_id,
            "timeStamp": str(timestamp),
            "nonceStr": nonce,
            "package": package,
            "signType": SIGN_TYPE_MD5,
        },
        api_key,
        SIGN_TYPE_MD5,
    )
    return FrontPayParams(
        timestamp=timestamp,
        nonce_str=nonce,
        package=package,
        sign_type=SIGN_TYPE_MD5,
        pay_sign=pay_sign,
    )


class WechatPayClient(BasePaymentClient):
    provider = "wechat"

    def __init__(
        self,
        credentials: Credentials,
        *,
        base_url: Optional[str] = None,
        sign_type: str = SIGN_TYPE_MD5,
        tls_cert: Optional[str] = None,
        tls_key: Optional[str] = None,
        ssl_context: Optional[ssl.SSLContext] = None,
        timeouts: Optional[dict[str, float]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if ssl_context is None and tls_cert:
            ssl_context = load_client_identity(tls_cert, tls_key)
        super().__init__(
            base_url=base_url or payment_settings.wechat.base_url,
            timeouts=timeouts or payment_settings.timeouts.model_dump(),
            ssl_context=ssl_context,
            transport=transport,
        )
        self.credentials = credentials
        self.sign_type = sign_type

    @classmethod
    def from_settings(cls, cfg: Optional[WechatSettings] = None, **kwargs) -> "WechatPayClient":
        cfg = cfg or payment_settings.wechat
        creds = Credentials(
            app_id=cfg.app_id or "",
            mch_id=cfg.mch_id or "",
            api_key=cfg.api_key or SecretStr(""),
        )
        return cls(
            creds,
            base_url=cfg.base_url,
            sign_type=cfg.sign_type,
            tls_cert=cfg.tls_cert,
            tls_key=cfg.tls_key,
            **kwargs,
        )

    @property
    def _api_key(self) -> str:
        key = self.credentials.api_key.get_secret_value()
        if not key:
            raise PaymentInvalidArgumentError("api_key")
        return key

    async def _call(
        self,
        path: str,
        data: dict,
        *,
        mtls: bool = False,
        timeout: Optional[float] = None,
    ) -> dict[str, str]:
        signed = sign_envelope(data, self._api_key, data["sign_type"])
        raw = await self._post_xml(path, encode_envelope(signed), mtls=mtls, timeout=timeout)
        fields = decode_envelope(raw)
        self._log(
            "gateway_response",
            path=path,
            return_code=fields.get("return_code"),
            result_code=fields.get("result_code"),
            err_code=fields.get("err_code"),
        )
        validate_response(fields)
        return fields

    async def unified_order(self, req: UnifiedOrderRequest, *, timeout: Optional[float] = None) -> UnifiedOrderResult:
        data = params.unified_order_params(self.credentials, req, default_sign_type=self.sign_type)
        self._log("unified_order_request", out_trade_no=req.out_trade_no, total_fee=req.total_fee)
        fields = await self._call(UNIFIED_ORDER_PATH, data, timeout=timeout)
        result = build_model(UnifiedOrderResult, fields)
        if not result.prepay_id:
            raise PaymentDecodeError("unified order response carries no prepay_id")
        self._log("unified_order_created", out_trade_no=req.out_trade_no, prepay_id=result.prepay_id)
        return result

    def front_pay_params(self, result: UnifiedOrderResult, timestamp: Optional[int] = None) -> FrontPayParams:
        ts = int(time.time()) if timestamp is None else timestamp
        return build_front_pay_params(result, self._api_key, ts)

    async def refund(self, req: RefundRequest, *, timeout: Optional[float] = None) -> RefundResult:
        data = params.refund_params(self.credentials, req, default_sign_type=self.sign_type)
        if not self.has_client_identity:
            raise PaymentInvalidArgumentError("tls_cert", "refund requires the merchant TLS client certificate")
        self._log("refund_request", out_refund_no=req.out_refund_no, refund_fee=req.refund_fee)
        fields = await self._call(REFUND_PATH, data, mtls=True, timeout=timeout)
        result = build_model(RefundResult, fields)
        self._log("refund_accepted", out_refund_no=req.out_refund_no, refund_id=result.refund_id)
        return result

    def parse_paid_notify(self, body: bytes) -> PaidNotify:
        return notify.parse_paid_notify(body, self._api_key)

    def parse_refunded_notify(self, body: bytes) -> RefundedNotify:
        return notify.parse_refunded_notify(body, self._api_key)

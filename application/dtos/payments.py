"""
Payment DTOs (Pydantic v2) used at application boundaries.

Request models do not enforce presence: required fields are checked in one
pass when the parameter mapping is built, each missing field surfacing as its
own invalid-argument error before any IO.
"""
from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, Literal, Optional, Union
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, IPvAnyAddress, SecretStr, field_validator

SignType = Literal["MD5", "HMAC-SHA256"]


class Credentials(BaseModel):
    """Merchant credentials; immutable once configured."""

    app_id: str = ""
    mch_id: str = ""
    api_key: SecretStr = SecretStr("")

    model_config = ConfigDict(frozen=True)


class UnifiedOrderRequest(BaseModel):
    body: str = ""
    out_trade_no: str = ""
    total_fee: int = 0  # minor units (fen)
    spbill_create_ip: Union[IPvAnyAddress, str] = ""
    notify_url: str = ""
    openid: str = Field(default="", validation_alias=AliasChoices("openid", "open_id"))
    nonce_str: Optional[str] = None
    sign_type: Optional[SignType] = None

    device_info: Optional[str] = None
    detail: Optional[str] = None
    attach: Optional[str] = None
    fee_type: Optional[str] = None
    time_start: Optional[Union[datetime, str]] = None  # yyyyMMddHHmmss
    time_expire: Optional[Union[datetime, str]] = None
    goods_tag: Optional[str] = None
    limit_pay: Optional[str] = None

    @field_validator("fee_type")
    @classmethod
    def _upper_currency(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        u = v.upper()
        if len(u) != 3 or not u.isalpha():
            raise ValueError("fee_type must be ISO-4217 alpha-3")
        return u


class TransactionRef(BaseModel):
    """Refund by the gateway's transaction id."""

    kind: Literal["transaction_id"] = "transaction_id"
    transaction_id: str


class OutTradeRef(BaseModel):
    """Refund by the merchant's order number."""

    kind: Literal["out_trade_no"] = "out_trade_no"
    out_trade_no: str


TradeRef = Annotated[Union[TransactionRef, OutTradeRef], Field(discriminator="kind")]


class RefundRequest(BaseModel):
    trade: Optional[TradeRef] = None
    out_refund_no: str = ""
    total_fee: int = 0
    refund_fee: int = 0
    nonce_str: Optional[str] = None
    sign_type: Optional[SignType] = None

    refund_fee_type: Optional[str] = None
    refund_desc: Optional[str] = None
    # REFUND_SOURCE_UNSETTLED_FUNDS (default) / REFUND_SOURCE_RECHARGE_FUNDS
    refund_account: Optional[str] = None
    notify_url: Optional[str] = None


class GatewayResult(BaseModel):
    """Fields common to every response envelope."""

    return_code: str
    return_msg: Optional[str] = None
    result_code: Optional[str] = None
    err_code: Optional[str] = None
    err_code_des: Optional[str] = None

    app_id: Optional[str] = Field(default=None, alias="appid")
    mch_id: Optional[str] = None
    nonce_str: Optional[str] = None
    sign: Optional[str] = None
    sign_type: Optional[str] = None

    raw: dict[str, str] = Field(default_factory=dict, repr=False)

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @classmethod
    def from_fields(cls, fields: dict[str, str]):
        return cls.model_validate({**fields, "raw": dict(fields)})


class UnifiedOrderResult(GatewayResult):
    device_info: Optional[str] = None
    trade_type: Optional[str] = None
    prepay_id: Optional[str] = None
    code_url: Optional[str] = None


class RefundResult(GatewayResult):
    transaction_id: Optional[str] = None
    out_trade_no: Optional[str] = None
    out_refund_no: Optional[str] = None
    refund_id: Optional[str] = None
    refund_fee: Optional[int] = None
    settlement_refund_fee: Optional[int] = None
    total_fee: Optional[int] = None
    settlement_total_fee: Optional[int] = None
    fee_type: Optional[str] = None
    cash_fee: Optional[int] = None
    cash_fee_type: Optional[str] = None
    cash_refund_fee: Optional[int] = None


class FrontPayParams(BaseModel):
    """Parameters handed to the paying client; key casing is load-bearing."""

    timestamp: int = Field(serialization_alias="timeStamp")
    nonce_str: str = Field(serialization_alias="nonceStr")
    package: str
    sign_type: str = Field(serialization_alias="signType")
    pay_sign: str = Field(serialization_alias="paySign")

    def to_client(self) -> dict[str, Any]:
        data = self.model_dump(by_alias=True)
        data["timeStamp"] = str(self.timestamp)
        return data


class PaidNotify(GatewayResult):
    device_info: Optional[str] = None
    openid: Optional[str] = None
    is_subscribe: Optional[str] = None
    trade_type: Optional[str] = None
    bank_type: Optional[str] = None
    total_fee: Optional[int] = None
    settlement_total_fee: Optional[int] = None
    fee_type: Optional[str] = None
    cash_fee: Optional[int] = None
    cash_fee_type: Optional[str] = None
    transaction_id: Optional[str] = None
    out_trade_no: Optional[str] = None
    attach: Optional[str] = None
    time_end: Optional[str] = None  # yyyyMMddHHmmss


class RefundedReqInfo(BaseModel):
    transaction_id: Optional[str] = None
    out_trade_no: Optional[str] = None
    refund_id: Optional[str] = None
    out_refund_no: Optional[str] = None
    total_fee: Optional[int] = None
    settlement_total_fee: Optional[int] = None
    refund_fee: Optional[int] = None
    settlement_refund_fee: Optional[int] = None
    # SUCCESS / CHANGE / REFUNDCLOSE
    refund_status: Optional[str] = None
    success_time: Optional[str] = None
    refund_recv_accout: Optional[str] = None
    refund_account: Optional[str] = None
    refund_request_source: Optional[str] = None

    raw: dict[str, str] = Field(default_factory=dict, repr=False)

    model_config = ConfigDict(extra="ignore")

    @classmethod
    def from_fields(cls, fields: dict[str, str]) -> "RefundedReqInfo":
        return cls.model_validate({**fields, "raw": dict(fields)})


class RefundedNotify(GatewayResult):
    req_info: Optional[str] = Field(default=None, repr=False)
    refund_info: Optional[RefundedReqInfo] = None

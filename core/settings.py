"""
Payment-related settings using pydantic-settings v2 with nested env keys.

This module is isolated so core.config.Settings stays application-level only.
Example env::

    WECHAT__APP_ID=wx123
    WECHAT__MCH_ID=1900000109
    WECHAT__API_KEY=...
    WECHAT__TLS_CERT=/etc/wechat/apiclient_cert.pem
    WECHAT__TLS_KEY=/etc/wechat/apiclient_key.pem
"""
from __future__ import annotations

from typing import Literal, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import BaseModel, Field, SecretStr


DEFAULT_GATEWAY = "https://api.mch.weixin.qq.com"


class PaymentTimeouts(BaseModel):
    connect: float = 1.0
    read: float = 3.0
    write: float = 3.0
    total: float = 5.0


class WechatSettings(BaseModel):
    app_id: Optional[str] = None
    mch_id: Optional[str] = None
    api_key: Optional[SecretStr] = None
    # Merchant client identity, required by the refund endpoint only
    tls_cert: Optional[str] = None
    tls_key: Optional[str] = None
    base_url: str = DEFAULT_GATEWAY
    sign_type: Literal["MD5", "HMAC-SHA256"] = "MD5"


class PaymentSettings(BaseSettings):
    default_provider: str = Field(default="wechat", validation_alias="PAYMENT__DEFAULT_PROVIDER")
    timeouts: PaymentTimeouts = Field(default_factory=PaymentTimeouts)
    wechat: WechatSettings = Field(default_factory=WechatSettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="allow",
        env_nested_delimiter="__",
    )


payment_settings = PaymentSettings()

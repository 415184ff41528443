"""Pytest bootstrap configuration.

Shared fixtures for the gateway tests: merchant credentials, a client wired
to an in-process httpx.MockTransport, and an AES helper that produces refund
callback payloads the way the provider does.
"""
import base64
import hashlib
import ssl

import httpx
import pytest
from Crypto.Cipher import AES
from Crypto.Util.Padding import pad
from pydantic import SecretStr

from application.dtos.payments import Credentials


API_KEY = "abc"


@pytest.fixture
def creds() -> Credentials:
    return Credentials(app_id="wx1", mch_id="100", api_key=SecretStr(API_KEY))


@pytest.fixture
def make_client(creds):
    """Build a WechatPayClient whose requests are answered by ``handler``."""
    from infrastructure.external.payments.wechatpay_client import WechatPayClient

    def _make(handler, *, with_identity: bool = False, **kwargs):
        return WechatPayClient(
            kwargs.pop("credentials", creds),
            transport=httpx.MockTransport(handler),
            ssl_context=ssl.create_default_context() if with_identity else None,
            **kwargs,
        )

    return _make


@pytest.fixture
def encrypt_req_info():
    def _encrypt(plaintext: bytes, api_key: str = API_KEY) -> str:
        key = hashlib.md5(api_key.encode("utf-8")).hexdigest().encode("ascii")
        cipher = AES.new(key, AES.MODE_ECB)
        return base64.b64encode(cipher.encrypt(pad(plaintext, AES.block_size))).decode("ascii")

    return _encrypt

import base64
import hashlib

import pytest
from Crypto.Cipher import AES

from infrastructure.external.payments.exceptions import PaymentDecodeError, PaymentDecryptError
from infrastructure.external.payments.wechat.crypto import decrypt_req_info, derive_key


def test_derive_key_is_hex_md5():
    key = derive_key("abc")
    assert key == hashlib.md5(b"abc").hexdigest().encode("ascii")
    assert len(key) == 32


@pytest.mark.parametrize(
    "plaintext",
    [
        b"<xml><out_trade_no>T1</out_trade_no><refund_status>SUCCESS</refund_status></xml>",
        b"x" * 16,
        "中文".encode("utf-8"),
    ],
)
def test_decrypt_roundtrip(plaintext, encrypt_req_info):
    assert decrypt_req_info(encrypt_req_info(plaintext, "abc"), "abc") == plaintext


def test_decrypt_accepts_bytes(encrypt_req_info):
    blob = encrypt_req_info(b"hello", "abc").encode("ascii")
    assert decrypt_req_info(blob, "abc") == b"hello"


def test_bad_base64_is_decode_failure():
    with pytest.raises(PaymentDecodeError):
        decrypt_req_info("***not base64***", "abc")


@pytest.mark.parametrize("raw", [b"", b"short", b"x" * 17])
def test_bad_length_is_decrypt_failure(raw):
    with pytest.raises(PaymentDecryptError) as ei:
        decrypt_req_info(base64.b64encode(raw).decode(), "abc")
    assert ei.value.kind == "decrypt-fail"


def test_bad_padding_is_decrypt_failure():
    # A block whose last byte is 0 never carries valid PKCS#7 padding
    cipher = AES.new(derive_key("abc"), AES.MODE_ECB)
    blob = base64.b64encode(cipher.encrypt(b"A" * 15 + b"\x00")).decode()
    with pytest.raises(PaymentDecryptError):
        decrypt_req_info(blob, "abc")

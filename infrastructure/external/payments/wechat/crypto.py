"""
Decryption of the refund callback ``req_info`` payload.

key = lowercase hex of MD5(api_key), used as a 32 byte AES-256 key;
cipher = AES-ECB with PKCS#7 padding over the base64-decoded payload.
"""
from __future__ import annotations

import base64
import binascii
import hashlib

from Crypto.Cipher import AES
from Crypto.Util.Padding import unpad

from infrastructure.external.payments.exceptions import PaymentDecodeError, PaymentDecryptError


def derive_key(api_key: str) -> bytes:
    return hashlib.md5(api_key.encode("utf-8")).hexdigest().encode("ascii")


def decrypt_req_info(ciphertext_b64: str | bytes, api_key: str) -> bytes:
    try:
        raw = base64.b64decode(ciphertext_b64, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise PaymentDecodeError(f"req_info is not valid base64: {exc}") from exc

    if not raw or len(raw) % AES.block_size:
        raise PaymentDecryptError(f"ciphertext length {len(raw)} is not a positive multiple of {AES.block_size}")

    cipher = AES.new(derive_key(api_key), AES.MODE_ECB)
    try:
        return unpad(cipher.decrypt(raw), AES.block_size, style="pkcs7")
    except ValueError as exc:
        raise PaymentDecryptError(f"bad padding: {exc}") from exc

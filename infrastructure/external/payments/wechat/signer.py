"""
Signature over a flat parameter mapping (v2 XML protocol).

The string to sign is ``k1=v1&k2=v2&...&key=<secret>`` over the non-empty
entries sorted by key, ``sign`` excluded. The digest is MD5 or HMAC-SHA256
keyed by the secret, rendered as uppercase hex.
"""
from __future__ import annotations

import hashlib
import hmac
from typing import Literal, Mapping

from infrastructure.external.payments.exceptions import PaymentInvalidArgumentError

SignType = Literal["MD5", "HMAC-SHA256"]

SIGN_TYPE_MD5 = "MD5"
SIGN_TYPE_HMAC_SHA256 = "HMAC-SHA256"
SIGN_TYPES = (SIGN_TYPE_MD5, SIGN_TYPE_HMAC_SHA256)

SIGN_FIELD = "sign"


def canonical_items(params: Mapping[str, str]) -> list[tuple[str, str]]:
    return sorted(
        (k, v) for k, v in params.items() if k != SIGN_FIELD and v not in (None, "")
    )


def string_to_sign(params: Mapping[str, str], key: str) -> str:
    joined = "&".join(f"{k}={v}" for k, v in canonical_items(params))
    return f"{joined}&key={key}"


def sign(params: Mapping[str, str], key: str, sign_type: str = SIGN_TYPE_MD5) -> str:
    """Compute the uppercase hex signature of ``params``; the input is not mutated."""
    payload = string_to_sign(params, key).encode("utf-8")
    if sign_type == SIGN_TYPE_MD5:
        return hashlib.md5(payload).hexdigest().upper()
    if sign_type == SIGN_TYPE_HMAC_SHA256:
        return hmac.new(key.encode("utf-8"), payload, hashlib.sha256).hexdigest().upper()
    raise PaymentInvalidArgumentError("sign_type", f"unsupported sign_type: {sign_type!r}")


def verify(params: Mapping[str, str], key: str, sign_type: str = SIGN_TYPE_MD5) -> bool:
    """True when ``params['sign']`` matches the signature recomputed over ``params``."""
    provided = params.get(SIGN_FIELD) or ""
    if not provided:
        return False
    expected = sign(params, key, sign_type)
    return hmac.compare_digest(provided.upper().encode("utf-8"), expected.encode("ascii"))

"""
XML envelope codec: flat ``<xml><field>value</field>...</xml>`` bodies.

Empty values are dropped before signing and before encoding, so the signed
set and the transmitted set are always the same mapping.
"""
from __future__ import annotations

from typing import Any, Mapping

import xmltodict
from xml.parsers.expat import ExpatError

from infrastructure.external.payments.exceptions import PaymentDecodeError, PaymentEncodeError
from infrastructure.external.payments.wechat.signer import SIGN_FIELD, sign

ROOT = "xml"

SUCCESS = "SUCCESS"
FAIL = "FAIL"


def compact(params: Mapping[str, Any]) -> dict[str, str]:
    """Drop empty values and stringify the rest (ints for money, etc.)."""
    out: dict[str, str] = {}
    for k, v in params.items():
        if v is None:
            continue
        s = v if isinstance(v, str) else str(v)
        if s == "":
            continue
        out[k] = s
    return out


def sign_envelope(params: Mapping[str, Any], key: str, sign_type: str) -> dict[str, str]:
    """Return a compacted copy of ``params`` carrying its own ``sign``."""
    fields = compact(params)
    fields.pop(SIGN_FIELD, None)
    fields[SIGN_FIELD] = sign(fields, key, sign_type)
    return fields


def encode_envelope(params: Mapping[str, Any]) -> bytes:
    fields = compact(params)
    try:
        doc = xmltodict.unparse({ROOT: fields}, full_document=False)
    except (ValueError, TypeError) as exc:
        raise PaymentEncodeError(f"cannot encode envelope: {exc}") from exc
    return doc.encode("utf-8")


def decode_envelope(data: bytes | str) -> dict[str, str]:
    """Decode an envelope into a flat mapping.

    Unknown children, whitespace between elements and CDATA are tolerated.
    Text values are kept verbatim since they feed signature checks; empty
    elements decode as absent keys.
    """
    if isinstance(data, str):
        data = data.encode("utf-8")
    if not data or not data.strip():
        raise PaymentDecodeError("empty envelope")
    try:
        doc = xmltodict.parse(data, strip_whitespace=False, disable_entities=True)
    except (ExpatError, ValueError) as exc:
        raise PaymentDecodeError(f"malformed xml: {exc}") from exc

    if not isinstance(doc, dict) or list(doc.keys()) != [ROOT]:
        raise PaymentDecodeError(f"root element must be <{ROOT}>")
    body = doc[ROOT]
    if body is None:
        return {}
    if not isinstance(body, dict):
        # <xml>text</xml> carries no fields
        return {}

    fields: dict[str, str] = {}
    for k, v in body.items():
        if k.startswith("@") or k == "#text":
            continue
        if isinstance(v, list):
            raise PaymentDecodeError(f"repeated element <{k}>")
        if isinstance(v, dict):
            raise PaymentDecodeError(f"nested element <{k}> in flat envelope")
        if v:
            fields[k] = v
    return fields


def notify_reply(ok: bool = True, message: str = "OK") -> bytes:
    """Acknowledgement body the merchant sends back for a callback."""
    return encode_envelope({"return_code": SUCCESS if ok else FAIL, "return_msg": message})

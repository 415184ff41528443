import base64

import pytest

from infrastructure.external.payments.exceptions import (
    PaymentBusinessError,
    PaymentDecodeError,
    PaymentDecryptError,
    PaymentReturnError,
    PaymentSignatureError,
)
from infrastructure.external.payments.wechat.codec import encode_envelope, sign_envelope
from infrastructure.external.payments.wechat.notify import parse_paid_notify, parse_refunded_notify


PAID_FIELDS = {
    "return_code": "SUCCESS",
    "result_code": "SUCCESS",
    "appid": "wx1",
    "mch_id": "100",
    "nonce_str": "n0nce",
    "openid": "OID",
    "trade_type": "JSAPI",
    "bank_type": "CMC",
    "total_fee": "100",
    "cash_fee": "100",
    "fee_type": "CNY",
    "transaction_id": "4200000001",
    "out_trade_no": "T1",
    "time_end": "20240102030405",
}


def _paid_body(fields=None, key="abc", sign_type="MD5") -> bytes:
    return encode_envelope(sign_envelope(fields or PAID_FIELDS, key, sign_type))


def test_paid_notify_authenticates():
    ntf = parse_paid_notify(_paid_body(), "abc")
    assert ntf.out_trade_no == "T1"
    assert ntf.total_fee == 100
    assert ntf.app_id == "wx1"
    assert ntf.raw["bank_type"] == "CMC"


def test_paid_notify_hmac_sign_type():
    fields = {**PAID_FIELDS, "sign_type": "HMAC-SHA256"}
    ntf = parse_paid_notify(_paid_body(fields, sign_type="HMAC-SHA256"), "abc")
    assert ntf.transaction_id == "4200000001"


def test_paid_notify_tampered_total_fee():
    body = _paid_body().replace(b"<total_fee>100</total_fee>", b"<total_fee>1</total_fee>")
    with pytest.raises(PaymentSignatureError) as ei:
        parse_paid_notify(body, "abc")
    assert ei.value.kind == "signature-fail"


def test_paid_notify_wrong_key():
    with pytest.raises(PaymentSignatureError):
        parse_paid_notify(_paid_body(key="other"), "abc")


def test_paid_notify_unsigned():
    with pytest.raises(PaymentSignatureError):
        parse_paid_notify(encode_envelope(PAID_FIELDS), "abc")


def test_paid_notify_return_fail():
    body = b"<xml><return_code>FAIL</return_code><return_msg>boom</return_msg></xml>"
    with pytest.raises(PaymentReturnError) as ei:
        parse_paid_notify(body, "abc")
    assert ei.value.return_msg == "boom"


def test_paid_notify_business_fail():
    fields = {**PAID_FIELDS, "result_code": "FAIL", "err_code": "SYSTEMERROR", "err_code_des": "系统错误"}
    with pytest.raises(PaymentBusinessError):
        parse_paid_notify(_paid_body(fields), "abc")


def test_paid_notify_empty_body():
    with pytest.raises(PaymentDecodeError):
        parse_paid_notify(b"", "abc")


def test_refunded_notify_decrypts(encrypt_req_info):
    inner = b"<xml><out_trade_no>T1</out_trade_no><refund_status>SUCCESS</refund_status></xml>"
    body = encode_envelope(
        {
            "return_code": "SUCCESS",
            "appid": "wx1",
            "mch_id": "100",
            "nonce_str": "n1",
            "req_info": encrypt_req_info(inner, "abc"),
        }
    )
    ntf = parse_refunded_notify(body, "abc")
    assert ntf.refund_info is not None
    assert ntf.refund_info.out_trade_no == "T1"
    assert ntf.refund_info.refund_status == "SUCCESS"
    assert ntf.mch_id == "100"


def test_refunded_notify_full_payload(encrypt_req_info):
    inner = (
        "<xml><transaction_id>4200001</transaction_id><out_trade_no>T1</out_trade_no>"
        "<refund_id>50000001</refund_id><out_refund_no>R1</out_refund_no>"
        "<total_fee>100</total_fee><refund_fee>40</refund_fee>"
        "<settlement_refund_fee>40</settlement_refund_fee><refund_status>SUCCESS</refund_status>"
        "<success_time>2024-01-02 03:04:05</success_time>"
        "<refund_recv_accout>支付用户零钱</refund_recv_accout>"
        "<refund_account>REFUND_SOURCE_RECHARGE_FUNDS</refund_account>"
        "<refund_request_source>API</refund_request_source></xml>"
    ).encode("utf-8")
    body = encode_envelope({"return_code": "SUCCESS", "req_info": encrypt_req_info(inner)})
    info = parse_refunded_notify(body, "abc").refund_info
    assert info.refund_fee == 40
    assert info.refund_recv_accout == "支付用户零钱"
    assert info.success_time == "2024-01-02 03:04:05"


def test_refunded_notify_return_fail_is_not_decrypted():
    body = b"<xml><return_code>FAIL</return_code><return_msg>bad</return_msg><req_info>!!</req_info></xml>"
    with pytest.raises(PaymentReturnError):
        parse_refunded_notify(body, "abc")


def test_refunded_notify_missing_req_info():
    with pytest.raises(PaymentDecodeError):
        parse_refunded_notify(b"<xml><return_code>SUCCESS</return_code></xml>", "abc")


def test_refunded_notify_truncated_ciphertext(encrypt_req_info):
    blob = encrypt_req_info(b"<xml><a>1</a></xml>")
    truncated = base64.b64encode(base64.b64decode(blob)[:-1]).decode()
    body = encode_envelope({"return_code": "SUCCESS", "req_info": truncated})
    with pytest.raises(PaymentDecryptError):
        parse_refunded_notify(body, "abc")


def test_paid_notify_non_ascii_sign():
    body = encode_envelope({**PAID_FIELDS, "sign": "签名"})
    with pytest.raises(PaymentSignatureError):
        parse_paid_notify(body, "abc")

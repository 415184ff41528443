"""
Exceptions for the payment gateway mapped to unified BusinessException variants.

Every error carries a stable ``kind`` so callers can branch on it without
matching class names.
"""
from __future__ import annotations

from typing import Optional
from domain.common.exceptions import BusinessException
from shared.codes.payment_codes import PaymentCode


class PaymentError(BusinessException):
    kind: str = "payment-error"
    code: PaymentCode = PaymentCode.TRANSPORT_ERROR

    def __init__(self, message: str, *, provider: str = "wechat", field: str | None = None, details: Optional[dict] = None):
        full_details = {"provider": provider, "kind": self.kind}
        if details:
            full_details.update(details)
        self.provider = provider
        super().__init__(
            code=type(self).code,
            message=message,
            error_type=type(self).__name__,
            details=full_details,
            field=field,
        )


class PaymentInvalidArgumentError(PaymentError):
    """A required field is missing or a pre-condition fails; raised before any IO."""

    kind = "invalid-argument"
    code = PaymentCode.INVALID_ARGUMENT

    def __init__(self, field: str, message: str | None = None, *, provider: str = "wechat"):
        super().__init__(message or f"{field} must not be empty", provider=provider, field=field)


class PaymentEncodeError(PaymentError):
    kind = "encode-fail"
    code = PaymentCode.ENCODE_ERROR


class PaymentDecodeError(PaymentError):
    kind = "decode-fail"
    code = PaymentCode.DECODE_ERROR


class PaymentTransportError(PaymentError):
    """HTTP status other than 200, network error or deadline exceeded."""

    kind = "transport-fail"
    code = PaymentCode.TRANSPORT_ERROR

    def __init__(self, message: str, *, status_code: int | None = None, provider: str = "wechat"):
        self.status_code = status_code
        super().__init__(message, provider=provider, details={"status_code": status_code})


class PaymentReturnError(PaymentError):
    """``return_code`` is not SUCCESS."""

    kind = "gateway-return-fail"
    code = PaymentCode.GATEWAY_RETURN_FAIL

    def __init__(self, return_msg: str, *, return_code: str | None = None, provider: str = "wechat"):
        self.return_msg = return_msg
        self.return_code = return_code
        super().__init__(return_msg, provider=provider, details={"return_code": return_code})


class PaymentBusinessError(PaymentError):
    """``result_code`` is not SUCCESS."""

    kind = "gateway-business-fail"
    code = PaymentCode.GATEWAY_BUSINESS_FAIL

    def __init__(
        self,
        err_code: str | None,
        err_code_des: str | None,
        *,
        result_code: str | None = None,
        message: str | None = None,
        provider: str = "wechat",
    ):
        self.err_code = err_code
        self.err_code_des = err_code_des
        self.result_code = result_code
        super().__init__(
            message or err_code_des or err_code or "business failure",
            provider=provider,
            details={"err_code": err_code, "err_code_des": err_code_des, "result_code": result_code},
        )


class PaymentSignatureError(PaymentError):
    kind = "signature-fail"
    code = PaymentCode.SIGNATURE_ERROR


class PaymentDecryptError(PaymentError):
    kind = "decrypt-fail"
    code = PaymentCode.DECRYPT_ERROR

"""
Shared codes used across layers (Domain/Infrastructure/API).

Payment-specific codes live under `shared.codes.payment_codes`.
"""
from shared.codes.payment_codes import PaymentCode

__all__ = ["PaymentCode"]

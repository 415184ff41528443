"""
Payment gateway port (application/ports) exposing a replaceable protocol.

Application depends on this Protocol; infrastructure implements adapters.
"""
from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

from application.dtos.payments import (
    FrontPayParams,
    PaidNotify,
    RefundedNotify,
    RefundRequest,
    RefundResult,
    UnifiedOrderRequest,
    UnifiedOrderResult,
)


@runtime_checkable
class PaymentGateway(Protocol):
    """Gateway protocol for the merchant payment provider.

    Network operations are async; callback parsing and front-end parameter
    derivation are pure and synchronous.
    """

    provider: str

    async def unified_order(self, req: UnifiedOrderRequest, *, timeout: Optional[float] = None) -> UnifiedOrderResult: ...

    def front_pay_params(self, result: UnifiedOrderResult, timestamp: Optional[int] = None) -> FrontPayParams: ...

    async def refund(self, req: RefundRequest, *, timeout: Optional[float] = None) -> RefundResult: ...

    def parse_paid_notify(self, body: bytes) -> PaidNotify: ...

    def parse_refunded_notify(self, body: bytes) -> RefundedNotify: ...

    async def aclose(self) -> None: ...

"""
Application service orchestrating payment use-cases.

This class depends only on the application PaymentGateway port and DTOs.
Gateway implementations are provided by infrastructure and must be injected
from the composition root (API/tasks), keeping dependencies one-way.
"""
from __future__ import annotations

from typing import Optional

from application.dtos.payments import (
    FrontPayParams,
    PaidNotify,
    RefundedNotify,
    RefundRequest,
    RefundResult,
    UnifiedOrderRequest,
    UnifiedOrderResult,
)
from application.ports.payment_gateway import PaymentGateway
from core.logging_config import get_logger


logger = get_logger(__name__)


class PaymentService:
    def __init__(self, gateway: PaymentGateway) -> None:
        self.gateway = gateway

    async def create_jsapi_payment(
        self,
        req: UnifiedOrderRequest,
        *,
        timestamp: Optional[int] = None,
        timeout: Optional[float] = None,
    ) -> tuple[UnifiedOrderResult, FrontPayParams]:
        """Place a unified order and derive the parameters for the paying client."""
        logger.info(
            "payment_create_request",
            out_trade_no=req.out_trade_no,
            provider=self.gateway.provider,
            total_fee=req.total_fee,
        )
        result = await self.gateway.unified_order(req, timeout=timeout)
        pay_params = self.gateway.front_pay_params(result, timestamp)
        logger.info(
            "payment_create_response",
            out_trade_no=req.out_trade_no,
            provider=self.gateway.provider,
            prepay_id=result.prepay_id,
        )
        return result, pay_params

    async def refund(self, req: RefundRequest, *, timeout: Optional[float] = None) -> RefundResult:
        logger.info("payment_refund_request", out_refund_no=req.out_refund_no, provider=self.gateway.provider)
        return await self.gateway.refund(req, timeout=timeout)

    def handle_paid_notify(self, body: bytes) -> PaidNotify:
        ntf = self.gateway.parse_paid_notify(body)
        logger.info("payment_paid_notify_handled", provider=self.gateway.provider, out_trade_no=ntf.out_trade_no)
        return ntf

    def handle_refunded_notify(self, body: bytes) -> RefundedNotify:
        ntf = self.gateway.parse_refunded_notify(body)
        info = ntf.refund_info
        logger.info(
            "payment_refunded_notify_handled",
            provider=self.gateway.provider,
            out_refund_no=info.out_refund_no if info else None,
            refund_status=info.refund_status if info else None,
        )
        return ntf

    async def aclose(self) -> None:
        await self.gateway.aclose()

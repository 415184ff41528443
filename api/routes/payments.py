"""
Payments API routes.

Callback ingress for the gateway: the raw body goes to the notify parser and
the provider always receives an XML acknowledgement. Keep this thin: no
protocol details here beyond the reply envelope.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response

from application.services.payment_service import PaymentService
from api.dependencies import get_payment_service
from core.logging_config import get_logger
from infrastructure.external.payments.exceptions import PaymentError
from infrastructure.external.payments.wechat.codec import notify_reply


router = APIRouter(prefix="/payments", tags=["Payments"])
logger = get_logger(__name__)

XML_MEDIA_TYPE = "application/xml"


def _reply(ok: bool, message: str) -> Response:
    # The provider retries until it sees return_code=SUCCESS
    return Response(content=notify_reply(ok, message), media_type=XML_MEDIA_TYPE)


@router.post("/wechat/notify/paid")
async def wechat_paid_notify(request: Request, service: PaymentService = Depends(get_payment_service)):
    raw_body = await request.body()
    try:
        ntf = service.handle_paid_notify(raw_body)
    except PaymentError as exc:
        logger.warning("wechat_paid_notify_rejected", kind=exc.kind, error=exc.message)
        return _reply(False, exc.message)
    logger.info("wechat_paid_notify_received", out_trade_no=ntf.out_trade_no, transaction_id=ntf.transaction_id)
    return _reply(True, "OK")


@router.post("/wechat/notify/refunded")
async def wechat_refunded_notify(request: Request, service: PaymentService = Depends(get_payment_service)):
    raw_body = await request.body()
    try:
        ntf = service.handle_refunded_notify(raw_body)
    except PaymentError as exc:
        logger.warning("wechat_refunded_notify_rejected", kind=exc.kind, error=exc.message)
        return _reply(False, exc.message)
    info = ntf.refund_info
    logger.info(
        "wechat_refunded_notify_received",
        out_refund_no=info.out_refund_no if info else None,
        refund_status=info.refund_status if info else None,
    )
    return _reply(True, "OK")

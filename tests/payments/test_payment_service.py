import pytest

from application.dtos.payments import (
    FrontPayParams,
    OutTradeRef,
    PaidNotify,
    RefundedNotify,
    RefundedReqInfo,
    RefundRequest,
    RefundResult,
    UnifiedOrderRequest,
    UnifiedOrderResult,
)
from application.ports.payment_gateway import PaymentGateway
from application.services.payment_service import PaymentService


class StubGateway:
    provider = "stub"

    def __init__(self) -> None:
        self.closed = False
        self.timeouts: list = []

    async def unified_order(self, req, *, timeout=None):
        self.timeouts.append(timeout)
        return UnifiedOrderResult(return_code="SUCCESS", appid="wx1", nonce_str="srv", prepay_id="WX1")

    def front_pay_params(self, result, timestamp=None):
        return FrontPayParams(
            timestamp=timestamp or 0,
            nonce_str=result.nonce_str,
            package=f"prepay_id={result.prepay_id}",
            sign_type="MD5",
            pay_sign="SIGN",
        )

    async def refund(self, req, *, timeout=None):
        self.timeouts.append(timeout)
        return RefundResult(return_code="SUCCESS", refund_id="re_1")

    def parse_paid_notify(self, body):
        return PaidNotify(return_code="SUCCESS", out_trade_no="T1")

    def parse_refunded_notify(self, body):
        return RefundedNotify(return_code="SUCCESS", refund_info=RefundedReqInfo(out_refund_no="R1"))

    async def aclose(self):
        self.closed = True


def test_stub_satisfies_port():
    assert isinstance(StubGateway(), PaymentGateway)


def test_wechat_client_satisfies_port(make_client):
    assert isinstance(make_client(lambda request: None), PaymentGateway)


@pytest.mark.asyncio
async def test_create_jsapi_payment_returns_front_params():
    gw = StubGateway()
    svc = PaymentService(gateway=gw)
    req = UnifiedOrderRequest(body="b", out_trade_no="T1", total_fee=1)
    result, params = await svc.create_jsapi_payment(req, timestamp=1700000000, timeout=2.5)
    assert result.prepay_id == "WX1"
    assert params.package == "prepay_id=WX1"
    assert params.timestamp == 1700000000
    assert gw.timeouts == [2.5]


@pytest.mark.asyncio
async def test_refund_passes_through():
    svc = PaymentService(gateway=StubGateway())
    res = await svc.refund(RefundRequest(trade=OutTradeRef(out_trade_no="T1"), out_refund_no="R1", total_fee=1, refund_fee=1))
    assert res.refund_id == "re_1"


def test_notify_handlers():
    svc = PaymentService(gateway=StubGateway())
    assert svc.handle_paid_notify(b"<xml/>").out_trade_no == "T1"
    assert svc.handle_refunded_notify(b"<xml/>").refund_info.out_refund_no == "R1"


@pytest.mark.asyncio
async def test_aclose_closes_gateway():
    gw = StubGateway()
    await PaymentService(gateway=gw).aclose()
    assert gw.closed

"""
API依赖项 - 支付网关与应用服务
"""
from functools import lru_cache

from application.ports.payment_gateway import PaymentGateway
from application.services.payment_service import PaymentService
from infrastructure.external.payments import get_payment_gateway


@lru_cache
def get_gateway() -> PaymentGateway:
    """进程内共享的网关实例（凭据只读，可并发使用）"""
    return get_payment_gateway()


async def get_payment_service() -> PaymentService:
    return PaymentService(gateway=get_gateway())

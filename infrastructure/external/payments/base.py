"""
Base payment client implementing shared concerns: http, deadlines, logging.

Concrete providers subclass and implement provider-specific logic. No retries
happen here: whether an operation may be repeated is the caller's decision.
"""
from __future__ import annotations

import asyncio
import ssl
from typing import Any, Optional
from contextlib import asynccontextmanager

import httpx

from core.logging_config import get_logger
from infrastructure.external.payments.exceptions import PaymentTransportError


logger = get_logger(__name__)

XML_CONTENT_TYPE = "application/xml"


class BasePaymentClient:
    provider: str = "base"

    def __init__(
        self,
        *,
        base_url: str,
        timeouts: Optional[dict[str, float]] = None,
        ssl_context: Optional[ssl.SSLContext] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._timeouts_cfg = timeouts or {"connect": 1.0, "read": 3.0, "write": 3.0, "total": 5.0}
        # Client identity for mutually authenticated endpoints
        self._ssl_context = ssl_context
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self._mtls_client: Optional[httpx.AsyncClient] = None

    @property
    def timeouts(self) -> httpx.Timeout:
        return httpx.Timeout(
            connect=self._timeouts_cfg["connect"],
            read=self._timeouts_cfg["read"],
            write=self._timeouts_cfg["write"],
            timeout=self._timeouts_cfg["total"],
        )

    @property
    def has_client_identity(self) -> bool:
        return self._ssl_context is not None

    @asynccontextmanager
    async def client(self, *, mtls: bool = False):
        if mtls:
            if self._mtls_client is None:
                self._mtls_client = httpx.AsyncClient(
                    timeout=self.timeouts, verify=self._ssl_context, transport=self._transport
                )
            yield self._mtls_client
        else:
            if self._client is None:
                self._client = httpx.AsyncClient(timeout=self.timeouts, transport=self._transport)
            # Keep open for reuse; explicit aclose() will close.
            yield self._client

    async def aclose(self) -> None:
        """Close underlying HTTP clients if created."""
        for attr in ("_client", "_mtls_client"):
            c = getattr(self, attr)
            if c is not None:
                try:
                    await c.aclose()
                finally:
                    setattr(self, attr, None)

    async def _post_xml(
        self,
        path: str,
        body: bytes,
        *,
        mtls: bool = False,
        timeout: Optional[float] = None,
    ) -> bytes:
        """POST an XML body and return the raw response body of a 200 reply.

        ``timeout`` is an overall deadline in seconds covering both the write
        and the response read.
        """
        url = f"{self.base_url}{path}"
        async with self.client(mtls=mtls) as c:
            call = c.post(url, content=body, headers={"Content-Type": XML_CONTENT_TYPE})
            try:
                if timeout is not None:
                    resp = await asyncio.wait_for(call, timeout)
                else:
                    resp = await call
            except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
                self._log("gateway_timeout", path=path, timeout=timeout)
                raise PaymentTransportError(f"deadline exceeded calling {path}", provider=self.provider) from exc
            except httpx.HTTPError as exc:
                self._log("gateway_network_error", path=path, error=str(exc))
                raise PaymentTransportError(f"network error calling {path}: {exc}", provider=self.provider) from exc

        if resp.status_code != 200:
            self._log("gateway_http_error", path=path, status_code=resp.status_code)
            raise PaymentTransportError(
                f"gateway returned HTTP {resp.status_code}",
                status_code=resp.status_code,
                provider=self.provider,
            )
        return resp.content

    def _log(self, event: str, **kwargs: Any) -> None:
        logger.info(
            event,
            provider=self.provider,
            **kwargs,
        )

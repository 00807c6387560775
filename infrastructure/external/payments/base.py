"""
Base payment client implementing shared concerns: http, logging, error mapping.

Concrete providers subclass and implement provider-specific payloads. There
is no retry layer: every call is one attempt with a bounded timeout.
"""
from __future__ import annotations

from typing import Any, Optional
from contextlib import asynccontextmanager

import httpx

from core.logging_config import get_logger
from infrastructure.external.payments.exceptions import PaymentProviderError


logger = get_logger(__name__)


class BasePaymentClient:
    provider: str = "base"

    def __init__(
        self,
        *,
        base_url: str,
        headers: Optional[dict[str, str]] = None,
        timeouts: Optional[dict[str, float]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._headers = headers or {}
        self._timeouts_cfg = timeouts or {"connect": 5.0, "read": 15.0, "write": 15.0, "total": 15.0}
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def timeouts(self) -> httpx.Timeout:
        return httpx.Timeout(
            connect=self._timeouts_cfg["connect"],
            read=self._timeouts_cfg["read"],
            write=self._timeouts_cfg["write"],
            timeout=self._timeouts_cfg["total"],
        )

    @asynccontextmanager
    async def client(self):
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                headers=self._headers,
                timeout=self.timeouts,
                transport=self._transport,
            )
        try:
            yield self._client
        finally:
            # Keep open for reuse; explicit aclose() will close.
            ...

    async def aclose(self) -> None:
        """Close underlying HTTP client if created."""
        if self._client is not None:
            try:
                await self._client.aclose()
            finally:
                self._client = None

    async def _request(
        self,
        method: str,
        path: str,
        *,
        json: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> dict[str, Any]:
        """Send one request and return the decoded JSON object.

        Raises:
            PaymentProviderError: non-2xx answer, undecodable body, timeout
                or transport failure
        """
        async with self.client() as http:
            try:
                resp = await http.request(method, path, json=json, headers=headers)
            except httpx.TimeoutException as exc:
                self._log_failure("provider_request_timeout", method, path, error=str(exc))
                raise PaymentProviderError(
                    "Payment provider timed out",
                    provider=self.provider,
                    timeout=True,
                ) from exc
            except httpx.TransportError as exc:
                self._log_failure("provider_request_transport_error", method, path, error=str(exc))
                raise PaymentProviderError(
                    "Payment provider unreachable",
                    provider=self.provider,
                    timeout=True,
                ) from exc

        body = self._decode(resp)
        if not resp.is_success:
            self._log_failure(
                "provider_request_rejected", method, path,
                status_code=resp.status_code, body=body,
            )
            raise PaymentProviderError(
                f"Payment provider answered {resp.status_code}",
                provider=self.provider,
                status_code=resp.status_code,
                body=body,
            )
        if not isinstance(body, dict):
            self._log_failure(
                "provider_response_invalid", method, path,
                status_code=resp.status_code, body=body,
            )
            raise PaymentProviderError(
                "Payment provider returned an unexpected body",
                provider=self.provider,
                status_code=resp.status_code,
                body=body,
            )
        self._log("provider_request_succeeded", method=method, path=path, status_code=resp.status_code)
        return body

    @staticmethod
    def _decode(resp: httpx.Response) -> Any:
        try:
            return resp.json()
        except ValueError:
            return resp.text

    def _log(self, event: str, **kwargs) -> None:
        logger.info(
            event,
            provider=self.provider,
            **kwargs,
        )

    def _log_failure(self, event: str, method: str, path: str, **kwargs) -> None:
        logger.warning(event, provider=self.provider, method=method, path=path, **kwargs)

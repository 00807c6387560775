"""
Request ID middleware
Generates or forwards a trace id and shares it with the logging system via contextvars
"""
import ipaddress
import uuid
from contextvars import ContextVar
from typing import Optional, Sequence

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

import structlog

from core.settings import payment_settings


request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
client_ip_var: ContextVar[Optional[str]] = ContextVar("client_ip", default=None)


def _ip_in(ip: str, entries: Sequence[str]) -> bool:
    try:
        addr = ipaddress.ip_address(ip)
    except ValueError:
        return False
    for entry in entries:
        try:
            if "/" in entry:
                if addr in ipaddress.ip_network(entry, strict=False):
                    return True
            elif addr == ipaddress.ip_address(entry):
                return True
        except ValueError:
            continue
    return False


def resolve_client_ip(request: Request, trusted_proxies: Optional[Sequence[str]] = None) -> str:
    """Socket peer, unless it is a trusted proxy; then the nearest untrusted X-Forwarded-For hop."""
    if trusted_proxies is None:
        trusted_proxies = payment_settings.webhook.trusted_proxies
    peer = request.client.host if request.client else "unknown"
    if not trusted_proxies or not _ip_in(peer, trusted_proxies):
        return peer

    x_forwarded_for = request.headers.get("X-Forwarded-For")
    if x_forwarded_for:
        hops = [hop.strip() for hop in x_forwarded_for.split(",") if hop.strip()]
        for hop in reversed(hops):
            if not _ip_in(hop, trusted_proxies):
                return hop
    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip.strip()
    return peer


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Request ID tracing middleware

    1. takes X-Request-ID from the request or generates one
    2. stores it in contextvars and request.state for logging
    3. echoes it in the response headers
    """

    HEADER_NAME = "X-Request-ID"

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(self.HEADER_NAME) or str(uuid.uuid4())
        client_ip = resolve_client_ip(request)

        request.state.request_id = request_id
        request.state.client_ip = client_ip

        request_id_var.set(request_id)
        client_ip_var.set(client_ip)

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            client_ip=client_ip,
            method=request.method,
            path=request.url.path,
        )

        response = await call_next(request)
        response.headers[self.HEADER_NAME] = request_id
        return response


def get_request_id() -> Optional[str]:
    """request_id of the current request, None outside a request"""
    return request_id_var.get()


def get_client_ip() -> Optional[str]:
    return client_ip_var.get()

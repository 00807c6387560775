"""
Provider failures, mapped onto the opaque GatewayException seen by callers.

Status code and body stay on the exception for logging; they are never put in
``details`` so nothing provider-side leaks into API responses.
"""
from __future__ import annotations

from typing import Any, Optional

from domain.common.exceptions import GatewayException


class PaymentProviderError(GatewayException):
    def __init__(
        self,
        message: str,
        *,
        provider: str,
        status_code: Optional[int] = None,
        body: Any = None,
        timeout: bool = False,
    ):
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code
        self.body = body
        self.timeout = timeout

    @property
    def is_definitive(self) -> bool:
        """True when the provider answered with a refusal (4xx/5xx).

        Timeouts and transport errors are ambiguous: the provider may have
        accepted the request.
        """
        return not self.timeout and self.status_code is not None and self.status_code >= 400


class ProviderCredentialsMissingError(RuntimeError):
    """No access token in configuration or in the secrets file."""

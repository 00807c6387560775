"""Access token resolution for the Mercado Pago client."""
from __future__ import annotations

from pathlib import Path
from typing import Optional

from core.logging_config import get_logger
from core.settings import MercadoPagoSettings, payment_settings
from .exceptions import ProviderCredentialsMissingError


logger = get_logger(__name__)


def resolve_access_token(config: Optional[MercadoPagoSettings] = None) -> str:
    """
    Explicit ``MERCADOPAGO__ACCESS_TOKEN`` first, then the secrets file named
    by ``MERCADOPAGO__ACCESS_TOKEN_FILE``.

    Raises:
        ProviderCredentialsMissingError: neither source yields a token
    """
    config = config or payment_settings.mercadopago
    token = (config.access_token or "").strip()
    if token:
        return token

    if config.access_token_file:
        path = Path(config.access_token_file)
        try:
            token = path.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            token = ""
        except OSError as exc:
            logger.warning("access_token_file_unreadable", path=str(path), error=str(exc))
            token = ""
        if token:
            logger.info("access_token_loaded", source="file")
            return token

    raise ProviderCredentialsMissingError(
        "Mercado Pago access token not configured: set MERCADOPAGO__ACCESS_TOKEN "
        "or provide MERCADOPAGO__ACCESS_TOKEN_FILE"
    )

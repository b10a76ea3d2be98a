"""Shopify webhook verification."""

import base64
import hashlib
import hmac

from b2b_manager.config import get_settings
from b2b_manager.utils.logging import get_logger

logger = get_logger(__name__)


def compute_webhook_hmac(body: bytes, secret: str) -> str:
    """Base64 HMAC-SHA256 of the raw request body, as Shopify sends it."""
    digest = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).digest()
    return base64.b64encode(digest).decode("utf-8")


def verify_webhook(body: bytes, signature: str | None, secret: str | None = None) -> bool:
    """Check the ``X-Shopify-Hmac-Sha256`` header against the body."""
    if not signature:
        logger.warning("webhook_signature_missing")
        return False

    secret = secret or get_settings().shopify_api_secret
    expected = compute_webhook_hmac(body, secret)
    # compare_digest rejects non-ASCII str arguments
    return hmac.compare_digest(expected.encode(), signature.encode())

"""Razorpay checkout signature verification."""

from __future__ import annotations

import hashlib
import hmac
import logging

from django.conf import settings  # type: ignore

logger = logging.getLogger(__name__)


def expected_signature(order_id: str, payment_id: str, secret: str | None = None) -> str:
    """HMAC-SHA256 of ``"{order_id}|{payment_id}"`` keyed by the gateway secret, hex encoded."""
    key = (secret if secret is not None else settings.RAZORPAY_KEY_SECRET).encode()
    message = f"{order_id}|{payment_id}".encode()
    return hmac.new(key, message, hashlib.sha256).hexdigest()


def verify_payment_signature(order_id: str, payment_id: str, signature: str, secret: str | None = None) -> bool:
    if not (order_id and payment_id and signature):
        return False
    key = secret if secret is not None else settings.RAZORPAY_KEY_SECRET
    if not key:
        logger.error("RAZORPAY_KEY_SECRET is not configured; refusing payment %s", payment_id)
        return False
    expected = expected_signature(order_id, payment_id, key)
    return hmac.compare_digest(expected.encode(), signature.encode("utf-8"))

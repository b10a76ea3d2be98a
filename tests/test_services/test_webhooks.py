"""Tests for webhook signature verification."""

from b2b_manager.services.webhooks import compute_webhook_hmac, verify_webhook


def test_webhook_signature() -> None:
    body = b'{"id": 1}'
    signature = compute_webhook_hmac(body, "secret")

    assert verify_webhook(body, signature, secret="secret")
    assert not verify_webhook(body + b" ", signature, secret="secret")
    assert not verify_webhook(body, signature, secret="other")
    assert not verify_webhook(body, None, secret="secret")


def test_non_ascii_signature_is_rejected() -> None:
    assert not verify_webhook(b'{"id": 1}', "ÿÿÿ", secret="secret")
    assert not verify_webhook(b'{"id": 1}', "签名", secret="secret")

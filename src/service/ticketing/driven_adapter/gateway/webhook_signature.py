import hashlib
import hmac


def compute_signature(*, raw_body: bytes, secret: str) -> str:
    return hmac.new(secret.encode(), raw_body, hashlib.sha256).hexdigest()


def is_valid_signature(*, raw_body: bytes, signature: str | None, secret: str) -> bool:
    """Constant-time comparison of the hex HMAC-SHA256 of the exact request bytes"""
    if not signature or not secret:
        return False
    expected = compute_signature(raw_body=raw_body, secret=secret)
    return hmac.compare_digest(expected, signature.strip())

import hashlib
import hmac
from datetime import datetime, timedelta, timezone

from jose import jwt

from app.core.config import settings

ALGO = "HS256"


def create_access_token(subject: str, role: str, expires_minutes: int | None = None) -> str:
    if expires_minutes is None:
        expires_minutes = settings.ACCESS_TOKEN_EXPIRE_MINUTES
    exp = datetime.now(timezone.utc) + timedelta(minutes=expires_minutes)
    payload = {"sub": subject, "role": role, "type": "access", "exp": exp}
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=ALGO)


def decode_token(token: str) -> dict:
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGO])


def sign_payload(body: bytes, secret: str | None = None) -> str:
    secret = settings.PAYMENT_WEBHOOK_SECRET if secret is None else secret
    return "sha256=" + hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()


def verify_payment_signature(body: bytes, signature_header: str | None) -> bool:
    """Verify X-Signature: sha256=<hex> over the raw request body."""
    if not signature_header or not settings.PAYMENT_WEBHOOK_SECRET:
        return False
    return hmac.compare_digest(sign_payload(body), signature_header.strip())

import json
import base64
import hmac
import hashlib
import time

from playtime_monitor.config import SECRET_KEY, ACCESS_TOKEN_EXPIRE_MINUTES

ALGORITHM = "HS256"


def base64_url_encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode()


def base64_url_decode(data: str) -> bytes:
    padding = "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(data + padding)


def _sign(message: bytes) -> bytes:
    return hmac.new(SECRET_KEY.encode(), message, hashlib.sha256).digest()


def create_access_token(data: dict, expire_minutes: int = ACCESS_TOKEN_EXPIRE_MINUTES) -> str:
    header = {"alg": ALGORITHM, "typ": "JWT"}
    payload = data.copy()
    payload["exp"] = int(time.time()) + expire_minutes * 60

    # Encode header & payload
    header_encoded = base64_url_encode(json.dumps(header).encode())
    payload_encoded = base64_url_encode(json.dumps(payload).encode())

    # Signature = HMACSHA256(header + "." + payload)
    message = f"{header_encoded}.{payload_encoded}".encode()
    signature_encoded = base64_url_encode(_sign(message))

    return f"{header_encoded}.{payload_encoded}.{signature_encoded}"


def decode_access_token(token: str) -> dict:
    try:
        header_b64, payload_b64, signature_b64 = token.split(".")
    except ValueError:
        raise ValueError("Invalid token")

    message = f"{header_b64}.{payload_b64}".encode()
    expected_signature = base64_url_encode(_sign(message))

    if not hmac.compare_digest(expected_signature, signature_b64):
        raise ValueError("Invalid signature")

    try:
        payload = json.loads(base64_url_decode(payload_b64))
    except (ValueError, UnicodeDecodeError):
        raise ValueError("Invalid token")

    if int(payload.get("exp", 0)) < int(time.time()):
        raise ValueError("Token expired")

    return payload

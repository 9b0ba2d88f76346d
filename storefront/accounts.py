"""
Identifier, credential and token helpers shared by the mock database and the
reference server, so both paths mint records that look the same.
"""

import base64
import hashlib
import hmac
import json
import secrets
import string
import time
from typing import Optional

from storefront.models import Role

BASE36 = string.digits + string.ascii_lowercase

PBKDF2_ITERATIONS = 120_000


def random_base36(length: int) -> str:
    return "".join(secrets.choice(BASE36) for _ in range(length))


def new_user_id() -> str:
    """e.g. "u-k3j9x0a1b"."""
    return f"u-{random_base36(9)}"


def new_order_id() -> str:
    """e.g. "ORD-8F2KX0QZ"."""
    return f"ORD-{random_base36(8).upper()}"


def new_review_id() -> str:
    return random_base36(9)


def name_from_email(email: str) -> str:
    return email.split("@")[0]


def role_for_email(email: str) -> Role:
    """Demo rule: any address containing "admin" gets the admin role."""
    return Role.ADMIN if "admin" in email.lower() else Role.USER


def hash_password(password: str, salt: Optional[str] = None) -> str:
    """
    Salted PBKDF2-SHA256 hash in the form "<salt>$<hex digest>".

    Plaintext passwords are never stored or compared.
    """
    salt = salt or secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac(
        "sha256", password.encode(), salt.encode(), PBKDF2_ITERATIONS
    )
    return f"{salt}${digest.hex()}"


def verify_password(password: str, stored: Optional[str]) -> bool:
    if not stored or "$" not in stored:
        return False
    salt, _ = stored.split("$", 1)
    return hmac.compare_digest(hash_password(password, salt), stored)


def issue_token(user_id: str) -> str:
    """Opaque demo session token (not a signed JWT)."""
    header = base64.urlsafe_b64encode(b'{"alg":"none","typ":"JWT"}').decode().rstrip("=")
    payload = json.dumps({"id": user_id, "iat": int(time.time() * 1000)})
    body = base64.urlsafe_b64encode(payload.encode()).decode().rstrip("=")
    return f"{header}.{body}.{secrets.token_hex(8)}"

"""
Identity Key Helpers

An invite is scoped by the identity key (brand, email, text for email).
These helpers normalise each part the same way everywhere so that rows
written by different flows still match each other.
"""

import base64
import hashlib
from typing import List


def normalize_brand(brand: str) -> str:
    return str(brand or "").strip().upper()


def normalize_email(email: str) -> str:
    return str(email or "").strip().lower()


def normalize_text(text_for_email: str) -> str:
    return str(text_for_email or "").strip()


def text_key(text_for_email: str) -> str:
    """Case-insensitive comparison key for a position descriptor."""
    return normalize_text(text_for_email).lower()


def email_hash_hex(email: str) -> str:
    key = normalize_email(email)
    if not key:
        return ""
    return hashlib.sha256(key.encode("utf-8")).hexdigest()


def email_hash_base64(email: str) -> str:
    key = normalize_email(email)
    if not key:
        return ""
    return base64.b64encode(hashlib.sha256(key.encode("utf-8")).digest()).decode("ascii")


def email_hash_variants(email: str) -> List[str]:
    """Both encodings some writers persist for the same email digest."""
    return [h for h in (email_hash_hex(email), email_hash_base64(email)) if h]


def mask_email(email: str) -> str:
    value = normalize_email(email)
    if not value:
        return ""
    parts = value.split("@")
    if len(parts) != 2:
        return "***"
    name, domain = parts
    visible = name[:2] if len(name) > 2 else name[:1]
    return f"{visible}***@{domain}"


def mask_token(token: str) -> str:
    if not token:
        return ""
    return token[:8] + "..."

import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file)
else:
    data = dict()


class ApplicationConfig:
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./invites.db")
    DB_CREATE_TABLES = bool(data.get("DB_CREATE_TABLES", True))
    REDIS_URL = data.get("REDIS_URL", "redis://localhost:6379/0")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    API_RELOAD = bool(data.get("API_RELOAD", False))
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")
    ENABLE_LOGGING_MIDDLEWARE = bool(data.get("ENABLE_LOGGING_MIDDLEWARE", 1))
    ENABLE_SENTRY = data.get("ENABLE_SENTRY", 0)
    DSN_SENTRY = data.get("DSN_SENTRY", "")
    SENTRY_ENVIRONMENT = data.get("SENTRY_ENVIRONMENT", "dev")
    ADMIN_API_KEY = data.get("ADMIN_API_KEY", "test-admin-key-12345")

    # Public URL candidates see in emails (no trailing slash)
    PUBLIC_BASE_URL = data.get("PUBLIC_BASE_URL", "http://localhost:8000")

    # Consume lock: "memory" (single process) or "redis" (shared)
    LOCK_BACKEND = data.get("LOCK_BACKEND", "memory")
    LOCK_TIMEOUT_SECONDS = float(data.get("LOCK_TIMEOUT_SECONDS", 10))

    # Signed links
    HMAC_SECRET = data.get("HMAC_SECRET", "")
    LINK_EXPIRY_DAYS = int(data.get("LINK_EXPIRY_DAYS", 7))
    CLOCK_SKEW_SECONDS = int(data.get("CLOCK_SKEW_SECONDS", 300))

    # OTP + access token
    OTP_EXPIRY_MINUTES = int(data.get("OTP_EXPIRY_MINUTES", 10))
    OTP_LENGTH = int(data.get("OTP_LENGTH", 6))
    OTP_MAX_ATTEMPTS = int(data.get("OTP_MAX_ATTEMPTS", 3))
    TOKEN_EXPIRY_HOURS = int(data.get("TOKEN_EXPIRY_HOURS", 48))
    # Per-brand access token lifetime overrides, e.g. {"COSTA": 24}
    BRAND_TOKEN_EXPIRY_HOURS = data.get("BRAND_TOKEN_EXPIRY_HOURS", {})

    # Outbound email; when disabled messages are only logged
    SMTP_ENABLED = bool(data.get("SMTP_ENABLED", False))
    SMTP_HOST = data.get("SMTP_HOST", "localhost")
    SMTP_PORT = int(data.get("SMTP_PORT", 587))
    SMTP_USERNAME = data.get("SMTP_USERNAME", "")
    SMTP_PASSWORD = data.get("SMTP_PASSWORD", "")
    SMTP_USE_TLS = bool(data.get("SMTP_USE_TLS", True))
    SMTP_FROM_EMAIL = data.get("SMTP_FROM_EMAIL", "no-reply@example.com")
    SMTP_FROM_NAME = data.get("SMTP_FROM_NAME", "Crew Life at Sea")

    # Candidate roster: list of {brand, email, text_for_email, booking_url}.
    # Empty roster means every candidate passes the check.
    CANDIDATE_ROSTER = data.get("CANDIDATE_ROSTER", [])
    # Fallback booking links per brand keyed by CL code, e.g. {"ROYAL": {"CL200": "https://..."}}
    BOOKING_LINKS = data.get("BOOKING_LINKS", {})

"""OTP Gateway — configuration loaded from environment."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application-wide settings, loaded from .env or environment variables."""

    # ── Database ──────────────────────────────────────────
    database_url: str = "sqlite+aiosqlite:///./otp_gateway.db"

    # ── Server ────────────────────────────────────────────
    server_host: str = "0.0.0.0"
    server_port: int = 8080

    # ── OTP defaults (seeded into otp_config on cold start) ─
    default_otp_length: int = 6
    default_otp_ttl_seconds: int = 300
    expiration_interval_minutes: int = 1

    # ── Auth ──────────────────────────────────────────────
    token_ttl_minutes: int = 30
    bcrypt_rounds: int = 12
    # When set, ADMIN sign-up must present it in the X-Admin-Secret header
    admin_signup_secret: str = ""

    # ── Email (SMTP) ──────────────────────────────────────
    smtp_host: str = "localhost"
    smtp_port: int = 587
    smtp_username: str = ""
    smtp_password: str = ""
    smtp_start_tls: bool = True
    email_from: str = "no-reply@example.com"

    # ── SMS (SMPP) ────────────────────────────────────────
    smpp_host: str = "localhost"
    smpp_port: int = 2775
    smpp_system_id: str = "smppclient1"
    smpp_password: str = "password"
    smpp_system_type: str = "OTP"
    smpp_source_addr: str = "OTPService"

    # ── Telegram Bot API ──────────────────────────────────
    telegram_api_url: str = "https://api.telegram.org/bot"
    telegram_token: str = ""
    telegram_chat_id: str = ""

    # ── App ───────────────────────────────────────────────
    app_name: str = "OTP Gateway"
    debug: bool = False

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


# Singleton settings instance
settings = Settings()

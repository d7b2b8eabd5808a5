# storefront/core/config.py
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized application settings loaded from environment.

    Required env vars (.env):
      - SUPABASE_URL
      - SUPABASE_KEY (anon key)
      - DATABASE_URL (Supabase Postgres connection string)

    Auth:
      - SUPABASE_JWT_SECRET for legacy HS256 projects, or
      - SUPABASE_JWKS_URL (defaults to the project's published JWKS)

    Payment (VNPay):
      - VNPAY_TMN_CODE, VNPAY_HASH_SECRET, VNPAY_RETURN_URL
    """

    PROJECT_NAME: str = "Storefront API"
    API_V1_STR: str = "/api"
    LOG_LEVEL: str = "INFO"

    # JSON list in .env: ALLOWED_ORIGINS=["http://localhost:3000"]
    ALLOWED_ORIGINS: list[str] = ["http://localhost:3000"]

    # Supabase / DB config
    SUPABASE_URL: str
    SUPABASE_KEY: str
    DATABASE_URL: str

    # JWT verification (backend-side)
    SUPABASE_JWT_SECRET: str | None = None
    SUPABASE_JWT_ALG: str = "HS256"
    SUPABASE_JWKS_URL: str | None = None

    # Service role key bypasses RLS (backend only)
    SUPABASE_SERVICE_ROLE_KEY: str | None = None

    STORAGE_BUCKET: str = "assets"

    # VNPay gateway
    VNPAY_TMN_CODE: str = ""
    VNPAY_HASH_SECRET: str = ""
    VNPAY_PAYMENT_URL: str = "https://sandbox.vnpayment.vn/paymentv2/vpcpay.html"
    VNPAY_RETURN_URL: str = "http://localhost:3000/payment/callback"
    VNPAY_VERSION: str = "2.1.0"
    VNPAY_LOCALE: str = "vn"
    VNPAY_ORDER_TYPE: str = "other"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def jwks_url(self) -> str:
        if self.SUPABASE_JWKS_URL:
            return self.SUPABASE_JWKS_URL
        return self.SUPABASE_URL.rstrip("/") + "/auth/v1/.well-known/jwks.json"


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every import / request.
    """
    return Settings()

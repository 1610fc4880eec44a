"""Storefront Configuration"""

import os
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment"""

    model_config = SettingsConfigDict(
        env_file=os.path.join("config", ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Storefront"
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 5000

    # Pricing
    currency: str = "INR"
    free_shipping_threshold: float = 500.0
    shipping_fee: float = 0.0
    tax_rate: float = 0.18

    # Payment gateway (Razorpay-compatible)
    razorpay_key_id: Optional[str] = None
    razorpay_key_secret: Optional[str] = None
    razorpay_base_url: str = "https://api.razorpay.com/v1"

    # Identity tokens
    auth_secret: str = "change-me"
    auth_algorithm: str = "HS256"
    auth_token_ttl_seconds: int = 3600

    # Uploads
    upload_dir: str = "uploads"
    max_upload_bytes: int = 5 * 1024 * 1024

    # Client side
    api_base_url: str = "http://localhost:5000"
    cart_storage_path: str = os.path.join(".storefront", "local_storage.json")

    @property
    def payment_gateway_configured(self) -> bool:
        """Check if payment gateway credentials are configured"""
        return all([self.razorpay_key_id, self.razorpay_key_secret])


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()

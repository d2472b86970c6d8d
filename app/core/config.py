# app/core/config.py
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    # ─────────── APP ───────────
    app_name: str = "Edition Market"
    environment: str = "dev"
    log_level: str = "INFO"

    # ─────────── API ───────────
    api_prefix: str = "/api/v1"
    request_id_header: str = "X-Request-Id"
    caller_header: str = "X-Caller-Address"

    # ─────────── DATABASE ───────────
    database_url: str = "sqlite+pysqlite:///:memory:"

    # ─────────── ACCOUNTS ───────────
    owner_address: str = "0x" + "0" * 39 + "1"
    market_address: str = "0x" + "0" * 38 + "a1"
    auction_address: str = "0x" + "0" * 38 + "a2"

    # ─────────── REGISTRY ───────────
    token_base_uri: str = "https://ipfs.infura.io/ipfs/"

    # ─────────── AUCTIONS ───────────
    min_bid_amount: int = 10 ** 16  # 0.01 ether

    # ─────────── SELF SERVICE ───────────
    self_service_max_edition_size: int = 100
    self_service_edition_block: int = 100
    self_service_min_price_in_wei: int = 0
    self_service_freeze_window: int = 0  # seconds


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
